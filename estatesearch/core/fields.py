"""Field normalisation and effective-value accessors.

Listing data comes from a gradually migrated schema, so several concepts are
stored twice: a canonical field and a legacy one.  Every read in the search
layer goes through one accessor per concept, which consults the canonical
field first and falls back to the legacy field:

+-------------------------------+------------------------+--------------------------+
| Accessor                      | Canonical field        | Legacy fallback          |
+===============================+========================+==========================+
| :func:`effective_listing_type`| ``listingType``        | ``isRental`` (bool)      |
+-------------------------------+------------------------+--------------------------+
| :func:`effective_sub_listing_type` | ``subListingType`` | ``directInstallment``   |
+-------------------------------+------------------------+--------------------------+
| :func:`effective_condition`   | ``propertyCondition``  | ``propertySubStatus``    |
+-------------------------------+------------------------+--------------------------+
| :func:`effective_availability`| ``availability``       | ``status``               |
+-------------------------------+------------------------+--------------------------+
| :func:`effective_display_id`  | ``displayId``          | ``propertyId``           |
+-------------------------------+------------------------+--------------------------+
| :func:`effective_tags`        | ``tags``               | ``customTags``           |
+-------------------------------+------------------------+--------------------------+

Text helpers (:func:`normalise_text`, :func:`normalise_condition`,
:func:`tag_text`) are shared by the tokenizer, matcher, filter and scorer so
all of them agree on what "the same string" means.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from estatesearch.core.models import (
    Availability,
    Listing,
    ListingType,
    PropertyCondition,
    SubListingType,
)

__all__ = [
    "normalise_text",
    "normalise_condition",
    "normalise_availability",
    "tag_text",
    "effective_listing_type",
    "effective_sub_listing_type",
    "effective_condition",
    "effective_availability",
    "effective_display_id",
    "effective_tags",
]

logger = logging.getLogger(__name__)

_WHITESPACE_RE: re.Pattern[str] = re.compile(r"\s+")

#: Availability synonyms, keyed by normalised raw value.
_AVAILABILITY_SYNONYMS: dict[str, Availability] = {
    "available": Availability.AVAILABLE,
    "ว่าง": Availability.AVAILABLE,
    "sold": Availability.SOLD,
    "ขายแล้ว": Availability.SOLD,
    "reserved": Availability.RESERVED,
    "ติดจอง": Availability.RESERVED,
}

#: Condition-marker synonyms, keyed by the value with all whitespace and
#: hyphens removed.
_CONDITION_SYNONYMS: dict[str, PropertyCondition] = {
    "มือ1": PropertyCondition.FIRST_HAND,
    "hand1": PropertyCondition.FIRST_HAND,
    "firsthand": PropertyCondition.FIRST_HAND,
    "มือ2": PropertyCondition.SECOND_HAND,
    "hand2": PropertyCondition.SECOND_HAND,
    "secondhand": PropertyCondition.SECOND_HAND,
}


# ---------------------------------------------------------------------------
# Text normalisation
# ---------------------------------------------------------------------------


def normalise_text(value: Any) -> str:
    """Trim, collapse whitespace runs and lowercase *value*.

    Non-string values are converted with ``str()``; ``None`` becomes ``""``.
    Thai script has no case, so lowercasing only affects Latin text.

    Examples::

        normalise_text("  Condo   City ")  # → "condo city"
        normalise_text(None)               # → ""
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


def normalise_condition(value: Any) -> str:
    """Map a condition value to its canonical marker.

    ``"มือ1"``, ``"มือ 1"``, ``"first-hand"`` and ``"hand 1"`` all become
    ``"มือ 1"``; the second-hand spellings become ``"มือ 2"``.  Unknown values
    are returned with all whitespace removed and lowercased, so comparisons
    stay exact but spacing-insensitive.
    """
    compact = _WHITESPACE_RE.sub("", normalise_text(value))
    marker = _CONDITION_SYNONYMS.get(compact.replace("-", ""))
    return marker.value if marker is not None else compact


def normalise_availability(value: Any) -> str:
    """Map an availability / legacy status value to its canonical bucket.

    Unknown values pass through normalised, e.g. ``"Pending"`` → ``"pending"``.
    """
    text = normalise_text(value)
    bucket = _AVAILABILITY_SYNONYMS.get(text)
    return bucket.value if bucket is not None else text


def tag_text(tag: Any) -> str:
    """Return the display text of a tag (string or ``{label|name|value}`` object)."""
    if isinstance(tag, str):
        return tag
    if isinstance(tag, dict):
        return str(tag.get("label") or tag.get("name") or tag.get("value") or "")
    return "" if tag is None else str(tag)


# ---------------------------------------------------------------------------
# Effective values
# ---------------------------------------------------------------------------


def effective_listing_type(listing: Listing) -> str:
    """Return ``"sale"`` or ``"rent"`` (or the raw canonical value if unknown).

    Falls back to the legacy ``isRental`` flag; a record with neither field is
    a sale.
    """
    if listing.listing_type:
        return listing.listing_type.strip().lower()
    return ListingType.RENT.value if listing.is_rental else ListingType.SALE.value


def effective_sub_listing_type(listing: Listing) -> str:
    """Return ``"rent_only"`` / ``"installment_only"``.

    Falls back to the legacy ``directInstallment`` flag.
    """
    if listing.sub_listing_type:
        return listing.sub_listing_type.strip().lower()
    if listing.direct_installment:
        return SubListingType.INSTALLMENT_ONLY.value
    return SubListingType.RENT_ONLY.value


def effective_condition(listing: Listing) -> str:
    """Return the raw condition marker, ``""`` when neither field is set."""
    return listing.property_condition or listing.property_sub_status or ""


def effective_availability(listing: Listing) -> str:
    """Return the canonical availability bucket (``""`` when unknown)."""
    return normalise_availability(listing.availability or listing.status)


def effective_display_id(listing: Listing) -> str:
    """Return the human-facing listing code, ``""`` when absent."""
    return listing.display_id or listing.property_id or ""


def effective_tags(listing: Listing) -> list[Any]:
    """Return the tag list, falling back to the legacy ``customTags``."""
    return listing.tags or listing.custom_tags
