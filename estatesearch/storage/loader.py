"""Listing collection loader for the command-line tool.

The search library works on collections the caller already holds in memory.
For the CLI those come from a JSON export of the listing database: either a
top-level array of records or an object with a ``"listings"`` array.

Typical usage::

    from estatesearch.storage.loader import load_listings

    records = load_listings("exports/properties.json")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from estatesearch.core.exceptions import DataSourceError

__all__ = ["load_listings"]

logger = logging.getLogger(__name__)


def load_listings(path: str | Path) -> list[dict[str, Any]]:
    """Read a JSON listing export.

    Non-object entries are kept; the search functions skip them with a
    warning, like any other malformed record.

    Args:
        path: Location of the JSON file (UTF-8).

    Returns:
        The list of raw records.

    Raises:
        DataSourceError: If the file is missing or unreadable, is not UTF-8
            or not valid JSON, or does not hold a list of records.
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DataSourceError(file_path, f"cannot read file: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise DataSourceError(file_path, "not valid UTF-8") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DataSourceError(file_path, f"invalid JSON at line {exc.lineno}: {exc.msg}") from exc

    if isinstance(payload, dict):
        payload = payload.get("listings")
    if not isinstance(payload, list):
        raise DataSourceError(file_path, "expected a JSON array of listings")

    logger.info("Loaded %d listing records from %s", len(payload), file_path)
    return payload
