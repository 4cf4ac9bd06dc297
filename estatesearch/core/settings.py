"""Estatesearch application settings loaded from environment and ``.env`` files.

Uses :mod:`pydantic_settings` to parse environment variables (and optionally
an ``.env`` file) into a validated settings object.  The field name is the
**lowercase** version of the env-var name (e.g. ``LISTINGS_PATH`` →
``listings_path``).

Only the command-line wrapper reads settings.  The search functions take
plain arguments and never consult the environment.

Typical usage::

    from estatesearch.core.settings import Settings

    settings = Settings()
    records = load_listings(settings.require_listings_path())
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from estatesearch.core.exceptions import ConfigError

__all__ = ["Settings"]

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Central application configuration.

    Values are loaded in priority order:

    1. Actual environment variables (highest priority).
    2. ``.env`` file in the working directory.
    3. Field defaults (lowest priority).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------
    listings_path: str = Field(
        default="",
        description="JSON file holding the listing collection (CLI only).",
    )

    # ------------------------------------------------------------------
    # Search tuning
    # ------------------------------------------------------------------
    suggestion_limit: int = Field(
        default=6,
        ge=1,
        description="Maximum number of autocomplete suggestions returned.",
    )
    price_buffer_ratio: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Half-width of the band around a single typed price (0.1 = ±10%).",
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = Field(default="INFO", description="Logging level.")
    log_format: str = Field(default="text", description="Log format: 'text' or 'json'.")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got {v!r}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, v: str) -> str:
        allowed = {"text", "json"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got {v!r}")
        return v_lower

    # ------------------------------------------------------------------
    # Derived helpers
    # ------------------------------------------------------------------

    def require_listings_path(self, override: str | None = None) -> Path:
        """Return the listings file to load, preferring *override*.

        Raises:
            ConfigError: If neither *override* nor ``LISTINGS_PATH`` is set.
        """
        raw = override or self.listings_path
        if not raw:
            raise ConfigError(
                "No listings file configured; pass --listings or set LISTINGS_PATH."
            )
        return Path(raw).expanduser().resolve()
