"""Estatesearch core domain models.

This module defines the :class:`Listing` model every search component reads,
the small result types the components produce, and the enumerations for the
transaction / availability / condition classifications.

Listing records arrive from an external data-access layer as plain
mappings, often in a mix of the current schema and a legacy one (e.g.
``listingType`` next to the older ``isRental`` flag).  :class:`Listing`
accepts both spellings as camelCase aliases and is deliberately lenient:
values that cannot be parsed are dropped to ``None`` rather than rejected,
so one dirty field never hides the rest of a record.  Only a record without
an identifier fails validation; :func:`as_listing` turns that failure into a
logged skip.

Typical usage::

    from estatesearch.core.models import as_listing

    listing = as_listing({"id": "p1", "title": "คอนโด", "price": "2,500,000"})
    assert listing is not None and listing.price == 2_500_000
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

__all__ = [
    "Availability",
    "ListingType",
    "PropertyCondition",
    "SubListingType",
    "Location",
    "Listing",
    "ParsedPrice",
    "PriceRange",
    "ScoredListing",
    "as_listing",
    "coerce_number",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ListingType(StrEnum):
    """Transaction type of a listing."""

    SALE = "sale"
    RENT = "rent"


class SubListingType(StrEnum):
    """Sub-type of a rental listing."""

    RENT_ONLY = "rent_only"
    INSTALLMENT_ONLY = "installment_only"


class Availability(StrEnum):
    """Canonical availability buckets.

    Legacy Thai status values are mapped onto these by
    :func:`~estatesearch.core.fields.normalise_availability`.
    """

    AVAILABLE = "available"
    SOLD = "sold"
    RESERVED = "reserved"


class PropertyCondition(StrEnum):
    """Canonical condition markers ("first-hand" / "second-hand")."""

    FIRST_HAND = "มือ 1"
    SECOND_HAND = "มือ 2"


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def coerce_number(value: Any) -> float | None:
    """Best-effort conversion of a raw numeric field to ``float``.

    Accepts ints, floats, and numeric strings with thousands separators
    (``"2,500,000"``).  Booleans, blanks, and anything unparseable become
    ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, int | float):
            number = float(value)
        else:
            text = str(value).replace(",", "").strip()
            if not text:
                return None
            number = float(text)
    except (ValueError, OverflowError):
        logger.debug("coerce_number: cannot parse %r, treating as missing", value)
        return None
    if number != number:  # NaN
        return None
    return number


def _coerce_flag(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _coerce_optional_text(value: Any) -> str | None:
    text = _coerce_text(value).strip()
    return text or None


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class Location(BaseModel):
    """Structured address parts of a listing (Thai administrative levels)."""

    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}

    province: str = ""
    district: str = ""
    sub_district: str = Field(default="", alias="subDistrict")

    @field_validator("province", "district", "sub_district", mode="before")
    @classmethod
    def _text(cls, v: object) -> str:
        return _coerce_text(v)


class Listing(BaseModel):
    """Read-only view of one property record.

    Canonical fields and their legacy counterparts are both kept; use the
    accessors in :mod:`estatesearch.core.fields` to read the *effective*
    value instead of touching either field directly.

    Attributes:
        id: Opaque unique identifier (the only required field).
        display_id: Human-facing listing code (``displayId``).
        property_id: Legacy human-facing code (``propertyId``).
        title: Headline text.
        description: Body text; empty string when absent.
        type: Property type code or label.
        tags: Tag strings or ``{label|name|value}`` objects.
        custom_tags: Legacy tag list (``customTags``).
        location: Province / district / sub-district parts.
        location_display: Pre-flattened location string.
        nearby_place: Nearby landmark strings or objects.
        price: Price in baht; ``None`` when absent or unparseable.
        area: Floor / land area; ``None`` when absent or unparseable.
        bedrooms: Bedroom count; ``None`` when absent or unparseable.
        bathrooms: Bathroom count; ``None`` when absent or unparseable.
        listing_type: ``"sale"`` / ``"rent"``.
        is_rental: Legacy rental flag.
        sub_listing_type: ``"rent_only"`` / ``"installment_only"``.
        direct_installment: Legacy direct-installment flag.
        property_condition: Condition marker (``"มือ 1"`` / ``"มือ 2"``).
        property_sub_status: Legacy condition marker.
        availability: Availability code.
        status: Legacy availability code.
        created_at: Creation timestamp, passed through untouched.
    """

    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}

    id: str = Field(..., min_length=1)
    display_id: str | None = Field(None, alias="displayId")
    property_id: str | None = Field(None, alias="propertyId")
    title: str = ""
    description: str = ""
    type: str = ""
    tags: list[Any] = Field(default_factory=list)
    custom_tags: list[Any] = Field(default_factory=list, alias="customTags")
    location: Location | None = None
    location_display: str = Field(default="", alias="locationDisplay")
    nearby_place: list[Any] = Field(default_factory=list, alias="nearbyPlace")
    price: float | None = None
    area: float | None = None
    bedrooms: float | None = None
    bathrooms: float | None = None
    listing_type: str | None = Field(None, alias="listingType")
    is_rental: bool | None = Field(None, alias="isRental")
    sub_listing_type: str | None = Field(None, alias="subListingType")
    direct_installment: bool | None = Field(None, alias="directInstallment")
    property_condition: str | None = Field(None, alias="propertyCondition")
    property_sub_status: str | None = Field(None, alias="propertySubStatus")
    availability: str | None = None
    status: str | None = None
    created_at: Any = Field(None, alias="createdAt")

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: object) -> object:
        """Accept numeric ids; strip surrounding whitespace."""
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("title", "description", "location_display", mode="before")
    @classmethod
    def _text(cls, v: object) -> str:
        return _coerce_text(v)

    @field_validator("type", mode="before")
    @classmethod
    def _type_code(cls, v: object) -> str:
        """Type codes are compared exactly, so surrounding whitespace is dropped."""
        return _coerce_text(v).strip()

    @field_validator(
        "display_id",
        "property_id",
        "listing_type",
        "sub_listing_type",
        "property_condition",
        "property_sub_status",
        "availability",
        "status",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v: object) -> str | None:
        return _coerce_optional_text(v)

    @field_validator("tags", "custom_tags", "nearby_place", mode="before")
    @classmethod
    def _list_or_empty(cls, v: object) -> list[Any]:
        if isinstance(v, list | tuple):
            return list(v)
        return []

    @field_validator("location", mode="before")
    @classmethod
    def _mapping_or_none(cls, v: object) -> object:
        if isinstance(v, Mapping) or isinstance(v, Location):
            return v
        return None

    @field_validator("price", "area", "bedrooms", "bathrooms", mode="before")
    @classmethod
    def _number(cls, v: object) -> float | None:
        return coerce_number(v)

    @field_validator("is_rental", "direct_installment", mode="before")
    @classmethod
    def _flag(cls, v: object) -> bool | None:
        return _coerce_flag(v)


def as_listing(record: Any) -> Listing | None:
    """Validate *record* into a :class:`Listing`, or return ``None``.

    Records that are already :class:`Listing` instances are returned as-is.
    Anything that is not a mapping, or that fails validation (e.g. a missing
    ``id``), is logged at ``WARNING`` and skipped.
    """
    if isinstance(record, Listing):
        return record
    if not isinstance(record, Mapping):
        logger.warning("Skipping malformed record of type %s", type(record).__name__)
        return None
    try:
        return Listing.model_validate(dict(record))
    except ValidationError as exc:
        logger.warning(
            "Skipping malformed record %r: %d validation error(s)",
            record.get("id"),
            exc.error_count(),
        )
        return None


# ---------------------------------------------------------------------------
# Derived result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedPrice:
    """Outcome of :func:`~estatesearch.search.price.parse_price_query`.

    Attributes:
        min: Lower price bound in baht, or ``None``.
        max: Upper price bound in baht, or ``None``.
        cleaned_query: The query with the price phrase removed and whitespace
            collapsed; this is what should be tokenized for keyword matching.
    """

    min: int | None
    max: int | None
    cleaned_query: str


@dataclass(frozen=True, slots=True)
class PriceRange:
    """Inclusive price band produced by the single-figure price detector."""

    min: int
    max: int


@dataclass(frozen=True, slots=True)
class ScoredListing:
    """A caller record paired with its relevance score."""

    listing: Any
    score: int
