"""Estatesearch logging configuration.

Call ``configure_logging()`` once at process startup (e.g. in ``__main__``).
Every other module defines its own logger at module scope:

    import logging
    logger = logging.getLogger(__name__)

Each public search entry point runs inside :func:`request_scope`, so every
line logged while serving one search carries the same short request id.
A caller that already has an id (the CLI, a web handler) binds it first and
the entry points reuse it.  Summary lines pass their numbers through
``extra=`` (``query``, ``matched``, ``candidates`` ...); the JSON format
emits them under ``"fields"``.

Supported environment variables (read at call time):
    LOG_LEVEL   DEBUG | INFO | WARNING | ERROR | CRITICAL   (default: INFO)
    LOG_FORMAT  text | json                                 (default: text)
"""

from __future__ import annotations

import json
import logging
import os
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

__all__ = [
    "JsonFormatter",
    "NO_REQUEST",
    "REQUEST_ID_CTX",
    "RequestContextFilter",
    "configure_logging",
    "new_request_id",
    "request_scope",
]

#: Placeholder id outside of any request (imports, tests, library callers
#: that never bind one).
NO_REQUEST = "-"

#: Identifier of the search request being served.
REQUEST_ID_CTX: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST)

logger = logging.getLogger(__name__)

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_FORMATS = ("text", "json")

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# ---------------------------------------------------------------------------
# Request ids
# ---------------------------------------------------------------------------


def new_request_id() -> str:
    """Return a fresh 8-character hex request id."""
    return uuid.uuid4().hex[:8]


@contextmanager
def request_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind a request id for the duration of one search call.

    Without *request_id*, an id bound by an outer scope is kept and a new
    one is generated only when none is bound.  The previous value is
    restored on exit.

    Yields:
        The request id in effect inside the block.
    """
    current = REQUEST_ID_CTX.get()
    if request_id is None and current != NO_REQUEST:
        request_id = current
    token = REQUEST_ID_CTX.set(request_id or new_request_id())
    try:
        yield REQUEST_ID_CTX.get()
    finally:
        REQUEST_ID_CTX.reset(token)


class RequestContextFilter(logging.Filter):
    """Copy the bound request id onto each record as ``record.request_id``."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = REQUEST_ID_CTX.get()
        return True


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def _resolve(value: str | None, env_var: str, default: str, allowed: tuple[str, ...]) -> str:
    resolved = value or os.environ.get(env_var) or default
    resolved = resolved.upper() if allowed is _LEVELS else resolved.lower()
    if resolved not in allowed:
        raise ValueError(f"Unknown {env_var} {resolved!r}. Must be one of: {', '.join(allowed)}")
    return resolved


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    *,
    force: bool = False,
) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Level name; falls back to ``$LOG_LEVEL``, then ``"INFO"``.
        fmt: ``"text"`` or ``"json"``; falls back to ``$LOG_FORMAT``, then
            ``"text"``.
        force: Replace existing root handlers.  Without it, a process that
            already has handlers (e.g. under pytest) only gets its level
            adjusted.

    Raises:
        ValueError: If *level* or *fmt* is not recognised.
    """
    resolved_level = _resolve(level, "LOG_LEVEL", "INFO", _LEVELS)
    resolved_fmt = _resolve(fmt, "LOG_FORMAT", "text", _FORMATS)

    root = logging.getLogger()
    root.setLevel(resolved_level)
    if root.handlers and not force:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RequestContextFilter())
    if resolved_fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=_TEXT_FORMAT, datefmt=_DATE_FORMAT))

    root.handlers.clear()
    root.addHandler(handler)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord has; anything else arrived through ``extra=``.
_RECORD_ATTRS: frozenset[str] = frozenset(vars(logging.makeLogRecord({}))) | {
    "asctime",
    "message",
    "request_id",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per line.

    Example::

        {"ts": "2026-10-19T08:15:02.114+00:00", "level": "INFO",
         "logger": "estatesearch.search.engine", "request_id": "a3f2b1c0",
         "message": "search 'คอนโด' matched 3 of 12 listings",
         "fields": {"query": "คอนโด", "matched": 3, "candidates": 12}}

    ``"fields"`` and ``"exc_info"`` appear only when there is something to
    put in them.  Thai text is written as-is, not ``\\u``-escaped.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", REQUEST_ID_CTX.get()),
            "message": record.getMessage(),
        }
        fields = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}
        if fields:
            payload["fields"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)
