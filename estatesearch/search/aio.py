"""Asyncio wrappers for callers running on an event loop.

Large collections make a search long enough to stall a loop, so these run
the pure functions in the default thread pool via :func:`asyncio.to_thread`.
Results are identical to the synchronous versions.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from estatesearch.search.engine import search_properties
from estatesearch.search.filters import FilterCriteria, filter_properties

__all__ = ["filter_properties_async", "search_properties_async"]

logger = logging.getLogger(__name__)


async def filter_properties_async(
    records: Iterable[Any] | None,
    filters: FilterCriteria | Mapping[str, Any] | None = None,
) -> list[Any]:
    """Run :func:`~estatesearch.search.filters.filter_properties` off the loop."""
    return await asyncio.to_thread(filter_properties, records, filters)


async def search_properties_async(
    records: Iterable[Any] | None,
    keyword: str | None = "",
    filters: FilterCriteria | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> list[Any]:
    """Run :func:`~estatesearch.search.engine.search_properties` off the loop."""
    return await asyncio.to_thread(search_properties, records, keyword, filters, **kwargs)
