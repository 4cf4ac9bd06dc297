"""Structured criteria filtering.

Provides :class:`FilterCriteria`, the structured description of what the
user is looking for, and :class:`ListingFilter`, the rule-based gate that
evaluates listings against it.  Every supplied criterion must pass (AND
semantics); an absent or blank criterion places no constraint on its axis.

Predicates, in evaluation order (the first failure decides the reason):

* **Keyword** — price phrase parsed out first, the rest tokenized; every
  token must match (see :mod:`estatesearch.search.matching`).
* **Location** — substring of location display, nearby places, province,
  district or sub-district.
* **Transaction** — effective listing type; for rentals the sub-type, for
  sales the condition marker.
* **Availability** — canonical bucket (Thai synonyms folded in).
* **Type** — exact equality.
* **Price** — inclusive bounds (a price phrase in the keyword overrides the
  explicit bounds).
* **Bedrooms / bathrooms** — exact equality.
* **Area** — inclusive bounds.
* **Direct installment** — see :func:`offers_direct_installment`.

Nothing here raises on bad data.  A record that cannot be read as a listing
is dropped; a numeric field that cannot be parsed fails any predicate that
references it; a criterion value that cannot be parsed fails for every
record.

Typical usage::

    from estatesearch.search.filters import filter_properties

    hits = filter_properties(records, {"keyword": "คอนโด ไม่เกิน 2 ล้าน", "bedrooms": 1})
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from estatesearch.core.fields import (
    effective_availability,
    effective_condition,
    effective_listing_type,
    effective_sub_listing_type,
    effective_tags,
    normalise_availability,
    normalise_condition,
    normalise_text,
    tag_text,
)
from estatesearch.core.logging_config import request_scope
from estatesearch.core.models import Listing, ListingType, SubListingType, as_listing
from estatesearch.search.matching import matches_array_field, matches_field, matches_keyword
from estatesearch.search.price import parse_price_query
from estatesearch.search.tokenizer import tokenize

__all__ = [
    "FilterCriteria",
    "FilterResult",
    "ListingFilter",
    "filter_properties",
    "iter_listings",
    "offers_direct_installment",
]

logger = logging.getLogger(__name__)

DIRECT_INSTALLMENT_WORD: Final[str] = "ผ่อนตรง"

# "does not accept / no / cannot do direct installment"
_INSTALLMENT_NEGATIONS: Final[tuple[re.Pattern[str], ...]] = tuple(
    re.compile(rf"{prefix}\s*{DIRECT_INSTALLMENT_WORD}")
    for prefix in ("ไม่รับ", "งด", "ไม่", "ไม่มี", "ไม่สามารถ")
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = (value if isinstance(value, str) else str(value)).strip()
    return text or None


def _optional_number(value: object) -> float | None:
    """Blank → ``None`` (no constraint); unparseable → NaN (never matches)."""
    if value is None:
        return None
    if isinstance(value, bool):
        return math.nan
    try:
        if isinstance(value, int | float):
            return float(value)
        text = str(value).replace(",", "").strip()
        if not text:
            return None
        return float(text)
    except (ValueError, OverflowError):
        logger.debug("Criterion value %r is not a number, it will match nothing", value)
        return math.nan


def _within(value: float | None, low: float | None, high: float | None) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return False
    if low is not None and not value >= low:
        return False
    if high is not None and not value <= high:
        return False
    return True


def offers_direct_installment(listing: Listing) -> bool:
    """Return ``True`` if *listing* offers direct installment (ผ่อนตรง).

    Checked in order: the explicit flag / sub-type, a ``ผ่อนตรง`` tag, then a
    mention in the description that is not negated (``ไม่รับผ่อนตรง``,
    ``งดผ่อนตรง`` ...).
    """
    if listing.direct_installment or (
        listing.sub_listing_type or ""
    ).lower() == SubListingType.INSTALLMENT_ONLY:
        return True
    tags = normalise_text(" ".join(tag_text(t) for t in effective_tags(listing)))
    if DIRECT_INSTALLMENT_WORD in tags:
        return True
    description = normalise_text(listing.description)
    if DIRECT_INSTALLMENT_WORD not in description:
        return False
    return not any(pattern.search(description) for pattern in _INSTALLMENT_NEGATIONS)


def iter_listings(records: Iterable[Any] | None) -> Iterable[tuple[Any, Listing]]:
    """Yield ``(record, listing)`` pairs, skipping records that are not listings.

    A *records* value that is not a collection at all yields nothing.
    """
    if records is None or isinstance(records, str | bytes | Mapping):
        if records is not None:
            logger.warning("Expected a collection of listings, got %s", type(records).__name__)
        return
    try:
        iterator = iter(records)
    except TypeError:
        logger.warning("Expected a collection of listings, got %s", type(records).__name__)
        return
    for record in iterator:
        listing = as_listing(record)
        if listing is not None:
            yield record, listing


# ---------------------------------------------------------------------------
# Criteria model
# ---------------------------------------------------------------------------


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class FilterCriteria(BaseModel):
    """Structured search criteria; every field is optional.

    ``None`` means "no constraint on this axis", never "only records missing
    this field".  Blank strings are normalised to ``None`` on construction.
    Both snake_case and the camelCase keys used by the front-end forms are
    accepted.

    Attributes:
        keyword: Free text, may embed a price phrase.
        listing_type: ``"sale"`` / ``"rent"``.
        sub_listing_type: ``"rent_only"`` / ``"installment_only"``; applied
            only when ``listing_type`` is ``"rent"``.
        property_condition: Condition marker; applied only when
            ``listing_type`` is ``"sale"``.
        availability: ``"available"`` / ``"sold"`` / ``"reserved"``.
        type: Property type, compared exactly.
        location: Location substring.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        bedrooms: Exact bedroom count.
        bathrooms: Exact bathroom count.
        area_min: Inclusive lower area bound.
        area_max: Inclusive upper area bound.
        direct_installment: ``True`` keeps only listings offering direct
            installment, ``False`` drops them.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    keyword: str | None = None
    listing_type: str | None = Field(None, validation_alias=_alias("listing_type", "listingType"))
    sub_listing_type: str | None = Field(
        None, validation_alias=_alias("sub_listing_type", "subListingType")
    )
    property_condition: str | None = Field(
        None,
        validation_alias=_alias("property_condition", "propertyCondition", "propertySubStatus"),
    )
    availability: str | None = None
    type: str | None = Field(None, validation_alias=_alias("type", "propertyType"))
    location: str | None = None
    min_price: float | None = Field(
        None, validation_alias=_alias("min_price", "minPrice", "priceMin")
    )
    max_price: float | None = Field(
        None, validation_alias=_alias("max_price", "maxPrice", "priceMax")
    )
    bedrooms: float | None = None
    bathrooms: float | None = None
    area_min: float | None = Field(None, validation_alias=_alias("area_min", "areaMin"))
    area_max: float | None = Field(None, validation_alias=_alias("area_max", "areaMax"))
    direct_installment: bool | None = Field(
        None, validation_alias=_alias("direct_installment", "directInstallment")
    )

    @field_validator(
        "keyword",
        "listing_type",
        "sub_listing_type",
        "property_condition",
        "availability",
        "type",
        "location",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v: object) -> str | None:
        return _optional_text(v)

    @field_validator(
        "min_price", "max_price", "bedrooms", "bathrooms", "area_min", "area_max", mode="before"
    )
    @classmethod
    def _number(cls, v: object) -> float | None:
        return _optional_number(v)

    @field_validator("direct_installment", mode="before")
    @classmethod
    def _flag(cls, v: object) -> bool | None:
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return v.strip().lower() in {"true", "1", "yes"}
        return bool(v)

    @classmethod
    def coerce(cls, filters: FilterCriteria | Mapping[str, Any] | None) -> FilterCriteria:
        """Build criteria from a mapping (or pass an instance through).

        Anything that is not a mapping is treated as "no criteria".
        """
        if isinstance(filters, FilterCriteria):
            return filters
        if not isinstance(filters, Mapping):
            if filters is not None:
                logger.warning("Ignoring filters of type %s", type(filters).__name__)
            return cls()
        try:
            return cls.model_validate(dict(filters))
        except ValidationError as exc:
            logger.warning("Ignoring invalid filters %r: %s", dict(filters), exc)
            return cls()

    @property
    def is_empty(self) -> bool:
        """``True`` when no criterion is set."""
        return all(value is None for value in self.model_dump().values())


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FilterResult:
    """Outcome of a single criteria evaluation.

    Attributes:
        passed: ``True`` if the record satisfies every supplied criterion.
        reason: Empty on pass; otherwise the first failing check.
        listing_id: Listing id, or ``None`` for a malformed record.
    """

    passed: bool
    reason: str
    listing_id: str | None


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------


class ListingFilter:
    """AND-filter over a listing collection.

    Query pre-processing (price-phrase extraction, tokenization,
    normalisation) happens once in the constructor; :meth:`evaluate` is then
    a pure per-record check.  Instances hold no mutable state and are safe
    to share between threads.

    Args:
        criteria: Criteria instance, a plain mapping, or ``None``.
    """

    def __init__(self, criteria: FilterCriteria | Mapping[str, Any] | None = None) -> None:
        self._criteria = c = FilterCriteria.coerce(criteria)

        parsed = parse_price_query(c.keyword or "")
        self._tokens: list[str] = tokenize(parsed.cleaned_query)
        self._min_price = parsed.min if parsed.min is not None else c.min_price
        self._max_price = parsed.max if parsed.max is not None else c.max_price
        self._location = normalise_text(c.location)
        self._listing_type = normalise_text(c.listing_type)
        self._sub_listing_type = normalise_text(c.sub_listing_type)
        self._condition = normalise_condition(c.property_condition) if c.property_condition else ""
        self._availability = normalise_availability(c.availability) if c.availability else ""

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def tokens(self) -> list[str]:
        """Keyword tokens left after removing any price phrase."""
        return list(self._tokens)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def check(self, listing: Listing) -> tuple[bool, str]:
        """Run every predicate on a validated listing.

        Returns:
            ``(passed, reason)``; *reason* is ``""`` on pass.
        """
        c = self._criteria

        if self._tokens and not matches_keyword(listing, self._tokens):
            return False, f"keyword tokens {self._tokens} not all matched"

        if self._location and not self._matches_location(listing):
            return False, f"location {c.location!r} not matched"

        if self._listing_type:
            listing_type = effective_listing_type(listing)
            if listing_type != self._listing_type:
                return False, f"listing type {listing_type!r} != {self._listing_type!r}"
            if self._listing_type == ListingType.RENT and self._sub_listing_type:
                sub_type = effective_sub_listing_type(listing)
                if sub_type != self._sub_listing_type:
                    return False, f"sub-type {sub_type!r} != {self._sub_listing_type!r}"
            if self._listing_type == ListingType.SALE and self._condition:
                condition = normalise_condition(effective_condition(listing))
                if condition != self._condition:
                    return False, f"condition {condition!r} != {self._condition!r}"

        if self._availability:
            availability = effective_availability(listing)
            if availability != self._availability:
                return False, f"availability {availability!r} != {self._availability!r}"

        if c.type is not None and listing.type != c.type:
            return False, f"type {listing.type!r} != {c.type!r}"

        if not _within(listing.price, self._min_price, self._max_price):
            return False, f"price {listing.price} outside [{self._min_price}, {self._max_price}]"

        if c.bedrooms is not None and not listing.bedrooms == c.bedrooms:
            return False, f"bedrooms {listing.bedrooms} != {c.bedrooms}"
        if c.bathrooms is not None and not listing.bathrooms == c.bathrooms:
            return False, f"bathrooms {listing.bathrooms} != {c.bathrooms}"

        if not _within(listing.area, c.area_min, c.area_max):
            return False, f"area {listing.area} outside [{c.area_min}, {c.area_max}]"

        if c.direct_installment is not None:
            offers = offers_direct_installment(listing)
            if offers != c.direct_installment:
                return False, f"direct installment {offers} != {c.direct_installment}"

        return True, ""

    def _matches_location(self, listing: Listing) -> bool:
        location = listing.location
        return (
            matches_field(listing.location_display, self._location)
            or matches_array_field(listing.nearby_place, self._location)
            or (
                location is not None
                and (
                    matches_field(location.province, self._location)
                    or matches_field(location.district, self._location)
                    or matches_field(location.sub_district, self._location)
                )
            )
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(self, record: Any) -> FilterResult:
        """Evaluate one caller record (mapping or :class:`Listing`)."""
        listing = as_listing(record)
        if listing is None:
            return FilterResult(passed=False, reason="malformed record", listing_id=None)
        passed, reason = self.check(listing)
        if not passed:
            logger.debug("DROP  %s — %s", listing.id, reason)
        return FilterResult(passed=passed, reason=reason, listing_id=listing.id)

    def filter_many(self, records: Iterable[Any] | None) -> tuple[list[Any], list[FilterResult]]:
        """Evaluate a batch and return the passing records separately.

        Returns:
            ``(passing_records, results)``.  *passing_records* keeps input
            order and holds the caller's original objects.  Malformed records
            are dropped without a result entry.
        """
        passing: list[Any] = []
        results: list[FilterResult] = []
        for record, listing in iter_listings(records):
            passed, reason = self.check(listing)
            results.append(FilterResult(passed=passed, reason=reason, listing_id=listing.id))
            if passed:
                passing.append(record)
            else:
                logger.debug("DROP  %s — %s", listing.id, reason)

        logger.debug(
            "Criteria filter: %d/%d listings passed",
            len(passing),
            len(results),
            extra={"matched": len(passing), "candidates": len(results)},
        )
        return passing, results


def filter_properties(
    records: Iterable[Any] | None,
    filters: FilterCriteria | Mapping[str, Any] | None = None,
) -> list[Any]:
    """Return the records satisfying every supplied criterion, in input order.

    An empty (or absent) *filters* keeps every well-formed record.

    Args:
        records: Listing records (mappings or :class:`Listing` instances).
        filters: :class:`FilterCriteria` or an equivalent mapping.

    Returns:
        A new list holding the caller's original record objects.
    """
    with request_scope():
        passing, _ = ListingFilter(filters).filter_many(records)
    return passing
