"""Relevance scoring for keyword search results.

Scores only order results; they never remove one.  Points are additive:

=========================================================  ======
Signal                                                     Points
=========================================================  ======
display id contains / is contained in the query            +1000
  ... and starts with the query or equals it               +500
title contains the query                                   +300
  ... and starts with it                                   +100
tag text contains the query (single-token query: or any    +200
token of it)
description contains the query                             +100
type code or type label contains the query                 +50
each priority keyword in both the query and the listing    +50
available / first-hand                                     +50
=========================================================  ======

For multi-token queries the tag bonus requires the *whole* query to match
the tag text; only single-token queries fall back to per-token matching.
This differs from the all-tokens rule of keyword filtering and is kept
as-is so that short common tokens do not inflate tag scores.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Final

from estatesearch.core.fields import (
    effective_availability,
    effective_condition,
    effective_display_id,
    effective_tags,
    normalise_condition,
    normalise_text,
    tag_text,
)
from estatesearch.core.models import (
    Availability,
    Listing,
    PropertyCondition,
    ScoredListing,
    as_listing,
)
from estatesearch.core.property_types import property_label
from estatesearch.search.filters import iter_listings
from estatesearch.search.tokenizer import tokenize

__all__ = ["PRIORITY_KEYWORDS", "rank_listings", "score", "score_tokens"]

logger = logging.getLogger(__name__)

#: Financial-service phrases with extra weight (debt payoff, debt
#: consolidation, cash back, interest-free, clear obligations).
PRIORITY_KEYWORDS: Final[tuple[str, ...]] = (
    "ปิดหนี้",
    "รวมหนี้",
    "เงินเหลือ",
    "ฟรีดอกเบี้ย",
    "ปิดภาระ",
)

ID_MATCH: Final[int] = 1000
ID_PREFIX_BONUS: Final[int] = 500
TITLE_MATCH: Final[int] = 300
TITLE_PREFIX_BONUS: Final[int] = 100
TAG_MATCH: Final[int] = 200
DESCRIPTION_MATCH: Final[int] = 100
TYPE_MATCH: Final[int] = 50
PRIORITY_KEYWORD_MATCH: Final[int] = 50
AVAILABLE_BONUS: Final[int] = 50


def score_tokens(query: str) -> list[str]:
    """Tokens that count towards the tag bonus: two or more chars, not all digits."""
    return [t for t in tokenize(query) if len(t) >= 2 and not t.isdigit()]


def _is_available(listing: Listing) -> bool:
    if effective_availability(listing) == Availability.AVAILABLE:
        return True
    if normalise_condition(effective_condition(listing)) == PropertyCondition.FIRST_HAND:
        return True
    return listing.status == Availability.AVAILABLE


def score(record: Any, query: str) -> int:
    """Compute the relevance score of *record* for *query*.

    Args:
        record: A listing mapping or validated :class:`Listing`.
        query: The original free-text query.

    Returns:
        Non-negative integer; ``0`` for a malformed record.  An empty query
        earns only the availability bonus.
    """
    listing = as_listing(record)
    if listing is None:
        return 0
    q = normalise_text(query)
    total = 0

    display_id = normalise_text(effective_display_id(listing))
    if display_id and q and (q in display_id or display_id in q):
        total += ID_MATCH
        if display_id.startswith(q) or q == display_id:
            total += ID_PREFIX_BONUS

    title = normalise_text(listing.title)
    if title and q and q in title:
        total += TITLE_MATCH
        if title.startswith(q):
            total += TITLE_PREFIX_BONUS

    tags = normalise_text(" ".join(tag_text(t) for t in effective_tags(listing)))
    tokens = score_tokens(q)
    if tags and q:
        if q in tags or (len(tokens) <= 1 and any(t in tags for t in tokens)):
            total += TAG_MATCH

    description = normalise_text(listing.description)
    if description and q and q in description:
        total += DESCRIPTION_MATCH

    type_code = normalise_text(listing.type)
    type_label = normalise_text(property_label(listing.type))
    if q and ((type_code and q in type_code) or (type_label and q in type_label)):
        total += TYPE_MATCH

    if q:
        combined = normalise_text(" ".join((title, description, tags)))
        for keyword in PRIORITY_KEYWORDS:
            if keyword in q and keyword in combined:
                total += PRIORITY_KEYWORD_MATCH

    if _is_available(listing):
        total += AVAILABLE_BONUS

    return total


def rank_listings(records: Iterable[Any] | None, query: str) -> list[ScoredListing]:
    """Score every record and sort by descending score.

    The sort is stable, so equal scores keep their input order.  Malformed
    records are dropped.
    """
    scored = [
        ScoredListing(listing=record, score=score(listing, query))
        for record, listing in iter_listings(records)
    ]
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored
