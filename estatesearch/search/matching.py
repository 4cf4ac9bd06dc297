"""Field matching for keyword search.

A token matches a listing when it is a case- and whitespace-insensitive
substring of the listing's searchable text, of one of its tags, or of one
of its nearby places.  Condition-marker tokens (``"มือ 1"`` / ``"มือ 2"``)
first get an *exact* comparison against the listing's condition, since they
name a discrete category rather than free text; only if that fails do they
fall back to the ordinary substring check.

Searchable text is assembled in priority order:

1. display id (``displayId`` → ``propertyId``)
2. title
3. type
4. flattened location display
5. province, district, sub-district
6. description
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from estatesearch.core.fields import (
    effective_condition,
    effective_display_id,
    effective_tags,
    normalise_condition,
    normalise_text,
    tag_text,
)
from estatesearch.core.models import Listing
from estatesearch.search.tokenizer import is_condition_marker

__all__ = [
    "matches_array_field",
    "matches_condition_marker",
    "matches_field",
    "matches_keyword",
    "matches_token",
    "searchable_text",
]

logger = logging.getLogger(__name__)


def matches_field(value: Any, token: str | None) -> bool:
    """Return ``True`` if normalised *value* contains normalised *token*.

    An empty token matches everything; an empty value matches nothing.
    """
    needle = normalise_text(token)
    if not needle:
        return True
    if value is None or value == "":
        return False
    return needle in normalise_text(value)


def matches_array_field(items: Iterable[Any] | None, token: str | None) -> bool:
    """Return ``True`` if any element of *items* substring-matches *token*.

    Elements may be strings or ``{label|name|value}`` objects.
    """
    if not normalise_text(token):
        return True
    if not items or isinstance(items, str):
        return False
    return any(matches_field(tag_text(item), token) for item in items)


def searchable_text(listing: Listing) -> str:
    """Return the normalised free-text haystack for *listing*."""
    location = listing.location
    parts = [
        effective_display_id(listing),
        listing.title,
        listing.type,
        listing.location_display,
        location.province if location else "",
        location.district if location else "",
        location.sub_district if location else "",
        listing.description,
    ]
    return normalise_text(" ".join(parts))


def matches_condition_marker(listing: Listing, token: str) -> bool:
    """Exact comparison of a condition-marker *token* with the listing's condition."""
    condition = effective_condition(listing)
    if not condition:
        return False
    return normalise_condition(condition) == normalise_condition(token)


def matches_token(listing: Listing, token: str, *, haystack: str | None = None) -> bool:
    """Return ``True`` if a single search *token* matches *listing*.

    Args:
        listing: Listing to test.
        token: One token from :func:`~estatesearch.search.tokenizer.tokenize`.
        haystack: Pre-built :func:`searchable_text`, when testing several
            tokens against the same listing.
    """
    if is_condition_marker(token) and matches_condition_marker(listing, token):
        return True
    text = haystack if haystack is not None else searchable_text(listing)
    if normalise_text(token) in text:
        return True
    return matches_array_field(effective_tags(listing), token) or matches_array_field(
        listing.nearby_place, token
    )


def matches_keyword(listing: Listing, tokens: Sequence[str]) -> bool:
    """AND-match: ``True`` only if *every* token matches *listing*.

    An empty token sequence matches every listing.
    """
    if not tokens:
        return True
    haystack = searchable_text(listing)
    return all(matches_token(listing, token, haystack=haystack) for token in tokens)
