"""Smoke tests — verify the test harness itself is wired up correctly.

These tests assert nothing about search behaviour.  They confirm that:

1. pytest discovers and runs tests in this suite.
2. pytest-asyncio's ``asyncio_mode = "auto"`` setting works.
3. Core estatesearch modules import without errors.
4. ``configure_logging()`` executes without raising.
5. Request ids are bound per call and show up in JSON log lines.
6. The exception taxonomy is importable and the hierarchy is intact.
"""

from __future__ import annotations

import asyncio
import json
import logging

import pytest

from estatesearch.core import (
    ConfigError,
    DataSourceError,
    EstateSearchError,
    JsonFormatter,
    configure_logging,
)
from estatesearch.core.logging_config import NO_REQUEST, REQUEST_ID_CTX, RequestContextFilter, request_scope

logger = logging.getLogger(__name__)


def test_core_imports_succeed() -> None:
    assert configure_logging is not None
    assert JsonFormatter is not None
    assert EstateSearchError is not None


def test_configure_logging_text() -> None:
    configure_logging(level="INFO", fmt="text", force=True)


def test_configure_logging_json() -> None:
    configure_logging(level="DEBUG", fmt="json", force=True)
    # Restore text mode so subsequent test output remains readable.
    configure_logging(level="DEBUG", fmt="text", force=True)


def test_configure_logging_invalid_level() -> None:
    with pytest.raises(ValueError, match="Unknown LOG_LEVEL"):
        configure_logging(level="VERBOSE", force=True)


def test_configure_logging_invalid_format() -> None:
    with pytest.raises(ValueError, match="Unknown LOG_FORMAT"):
        configure_logging(fmt="xml", force=True)


def test_json_formatter_carries_request_id() -> None:
    """The request id bound in the context var is a top-level key."""
    record = logging.LogRecord("estatesearch.test", logging.INFO, __file__, 1, "hello %s", ("คอนโด",), None)
    with request_scope("abc12345"):
        RequestContextFilter().filter(record)
    line = JsonFormatter().format(record)
    payload = json.loads(line)
    assert payload["message"] == "hello คอนโด"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "abc12345"
    assert "fields" not in payload
    assert "คอนโด" in line


def test_json_formatter_groups_extra_fields() -> None:
    record = logging.makeLogRecord(
        {"name": "estatesearch.search.engine", "levelno": logging.INFO, "levelname": "INFO", "msg": "m"}
    )
    record.query = "คอนโด"
    record.matched = 3
    payload = json.loads(JsonFormatter().format(record))
    assert payload["fields"] == {"query": "คอนโด", "matched": 3}
    assert payload["request_id"] == "-"


def test_request_id_defaults_to_dash() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
    RequestContextFilter().filter(record)
    assert record.request_id == "-"


class TestRequestScope:
    def test_binds_fresh_id_and_resets(self) -> None:
        with request_scope() as request_id:
            assert len(request_id) == 8
            assert REQUEST_ID_CTX.get() == request_id
        assert REQUEST_ID_CTX.get() == NO_REQUEST

    def test_nested_scope_keeps_outer_id(self) -> None:
        with request_scope("outer123") as outer:
            with request_scope() as inner:
                assert inner == outer == "outer123"
            assert REQUEST_ID_CTX.get() == "outer123"
        assert REQUEST_ID_CTX.get() == NO_REQUEST

    def test_explicit_id_overrides_and_restores(self) -> None:
        with request_scope("outer123"):
            with request_scope("inner456") as inner:
                assert inner == "inner456"
            assert REQUEST_ID_CTX.get() == "outer123"

    def test_reset_on_error(self) -> None:
        with pytest.raises(RuntimeError), request_scope("boom0001"):
            raise RuntimeError("boom")
        assert REQUEST_ID_CTX.get() == NO_REQUEST


def test_exception_hierarchy() -> None:
    assert issubclass(ConfigError, EstateSearchError)
    assert issubclass(DataSourceError, EstateSearchError)


def test_data_source_error_formats_message() -> None:
    exc = DataSourceError("/tmp/listings.json", "invalid JSON")
    assert exc.path == "/tmp/listings.json"
    assert "/tmp/listings.json" in str(exc)
    assert "invalid JSON" in str(exc)


async def test_async_test_runs() -> None:
    """Confirms pytest-asyncio is operational."""
    await asyncio.sleep(0)
    assert True
