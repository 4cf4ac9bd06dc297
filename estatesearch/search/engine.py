"""Search entry points used by the listing pages and the search box.

:func:`search_properties`
    The public property search: available listings only, keyword (or a
    single typed price) first, then the structured filters, then relevance
    order.

:func:`get_property_suggestions`
    Autocomplete for the search box.

:func:`unique_property_types`
    Distinct type codes present in a collection, for filter drop-downs.

These compose the lower-level components; none of them keep state between
calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from estatesearch.core.fields import effective_availability, normalise_text
from estatesearch.core.logging_config import request_scope
from estatesearch.core.models import Availability, Listing
from estatesearch.search.filters import FilterCriteria, ListingFilter, iter_listings
from estatesearch.search.matching import matches_keyword
from estatesearch.search.price import DEFAULT_BUFFER_RATIO, buffered_price_range
from estatesearch.search.scoring import score
from estatesearch.search.tokenizer import tokenize

__all__ = [
    "DEFAULT_SUGGESTION_LIMIT",
    "MIN_SUGGESTION_CHARS",
    "get_property_suggestions",
    "search_properties",
    "unique_property_types",
]

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_LIMIT = 6
MIN_SUGGESTION_CHARS = 2


def _available(records: Iterable[Any] | None) -> list[tuple[Any, Listing]]:
    return [
        (record, listing)
        for record, listing in iter_listings(records)
        if effective_availability(listing) == Availability.AVAILABLE
    ]


def _by_relevance(pairs: list[tuple[Any, Listing]], query: str) -> list[tuple[Any, Listing]]:
    # sorted() is stable: ties keep collection order.
    return sorted(pairs, key=lambda pair: score(pair[1], query), reverse=True)


def search_properties(
    records: Iterable[Any] | None,
    keyword: str | None = "",
    filters: FilterCriteria | Mapping[str, Any] | None = None,
    *,
    buffer_ratio: float = DEFAULT_BUFFER_RATIO,
) -> list[Any]:
    """Search available listings.

    When *keyword* holds a single price figure (``"2.5 ล้าน"``, ``"3m"``,
    ``"2500000"``) the keyword selects listings priced within ±*buffer_ratio*
    of it instead of matching text.  Otherwise every keyword token must
    match.  The structured *filters* are applied on top (their own
    ``keyword`` is ignored here), and a non-empty keyword orders the result
    by :func:`~estatesearch.search.scoring.score`.

    Args:
        records: Listing records (mappings or :class:`Listing` instances).
        keyword: Free-text query.
        filters: Structured criteria, as for
            :func:`~estatesearch.search.filters.filter_properties`.
        buffer_ratio: Half-width of the single-price band.

    Returns:
        The caller's matching records.
    """
    with request_scope():
        q = normalise_text(keyword)
        results = _available(records)
        candidates = len(results)
        mode = "text"

        if q:
            band = buffered_price_range(q, buffer_ratio)
            if band is not None:
                mode = "price"
                logger.debug("Price search %r → [%d, %d]", q, band.min, band.max)
                results = [
                    (record, listing)
                    for record, listing in results
                    if listing.price is not None and band.min <= listing.price <= band.max
                ]
            else:
                tokens = tokenize(q)
                results = [
                    (record, listing) for record, listing in results if matches_keyword(listing, tokens)
                ]

        criteria = FilterCriteria.coerce(filters)
        if not criteria.is_empty:
            gate = ListingFilter(criteria.model_copy(update={"keyword": None}))
            results = [(record, listing) for record, listing in results if gate.check(listing)[0]]

        if q:
            results = _by_relevance(results, q)

        logger.info(
            "search %r matched %d of %d listings",
            q,
            len(results),
            candidates,
            extra={"query": q, "mode": mode, "matched": len(results), "candidates": candidates},
        )
        return [record for record, _ in results]


def get_property_suggestions(
    records: Iterable[Any] | None,
    query: str | None,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[Any]:
    """Return up to *limit* available listings matching *query*, best first.

    Queries shorter than two characters return nothing.
    """
    q = normalise_text(query)
    if len(q) < MIN_SUGGESTION_CHARS or limit <= 0:
        return []
    with request_scope():
        tokens = tokenize(q)
        matched = [
            (record, listing)
            for record, listing in _available(records)
            if matches_keyword(listing, tokens)
        ]
        logger.debug(
            "suggest %r: %d matches, returning %d",
            q,
            len(matched),
            min(len(matched), limit),
            extra={"query": q, "matched": len(matched), "limit": limit},
        )
        return [record for record, _ in _by_relevance(matched, q)[:limit]]


def unique_property_types(records: Iterable[Any] | None) -> list[str]:
    """Return the sorted distinct non-empty type values in *records*."""
    return sorted({listing.type for _, listing in iter_listings(records) if listing.type})
