"""Estatesearch exception taxonomy.

The search core never raises on malformed listings or filter values: a bad
record degrades to "no match" instead.  Exceptions exist only at the process
boundary (configuration and the listing file loader used by the CLI).

    Hierarchy
    ---------
    EstateSearchError
    ├── ConfigError
    └── DataSourceError

Usage:

    from estatesearch.core.exceptions import DataSourceError

    raise DataSourceError(path, "file is not valid JSON") from exc
"""

from __future__ import annotations

import logging
from pathlib import Path

__all__ = [
    "EstateSearchError",
    "ConfigError",
    "DataSourceError",
]

logger = logging.getLogger(__name__)


class EstateSearchError(Exception):
    """Root exception for all estatesearch errors."""


class ConfigError(EstateSearchError):
    """Raised when the application configuration is invalid or incomplete.

    Examples:
        - No listings file given on the command line or in ``LISTINGS_PATH``.
        - ``PRICE_BUFFER_RATIO`` outside ``[0, 1]``.
    """


class DataSourceError(EstateSearchError):
    """Raised when a listing collection cannot be loaded.

    Covers missing files, undecodable JSON, and payloads that are not a list
    of records.

    Args:
        path: The file that failed to load.
        message: Human-readable error description.
    """

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = str(path)
        super().__init__(f"[{self.path}] {message}")
