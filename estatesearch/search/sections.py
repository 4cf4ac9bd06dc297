"""Rule-based selection for curated homepage sections.

A "query" section stores a small declarative rule (price bounds, location,
type, tags) instead of a hand-picked list of listings.  Unlike
:func:`~estatesearch.search.filters.filter_properties`, the base set here is
*available listings only*, so an empty rule shows everything on the market
rather than everything in the collection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from estatesearch.core.fields import effective_availability, effective_tags, tag_text
from estatesearch.core.logging_config import request_scope
from estatesearch.core.models import Availability, Listing, coerce_number
from estatesearch.search.filters import iter_listings

__all__ = ["SectionCriteria", "filter_by_criteria"]

logger = logging.getLogger(__name__)


class SectionCriteria(BaseModel):
    """Declarative rule of a homepage section.

    Attributes:
        min_price: Inclusive lower bound; ignored unless > 0.
        max_price: Inclusive upper bound; ignored unless > 0.
        location: Case-insensitive substring of province or district.
        type: Property type, compared exactly.
        tags: The listing must carry at least one of these tags exactly.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    min_price: float | None = Field(None, validation_alias=AliasChoices("min_price", "minPrice"))
    max_price: float | None = Field(None, validation_alias=AliasChoices("max_price", "maxPrice"))
    location: str | None = None
    type: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _positive_or_none(cls, v: object) -> float | None:
        number = coerce_number(v)
        return number if number is not None and number > 0 else None

    @field_validator("location", "type", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> str | None:
        if v is None:
            return None
        text = (v if isinstance(v, str) else str(v)).strip()
        return text or None

    @field_validator("tags", mode="before")
    @classmethod
    def _tag_list(cls, v: object) -> list[str]:
        if not isinstance(v, list | tuple):
            return []
        return [text for text in (tag_text(t) for t in v) if text]

    @classmethod
    def coerce(cls, criteria: SectionCriteria | Mapping[str, Any] | None) -> SectionCriteria:
        """Build a rule from a mapping; anything else means the empty rule."""
        if isinstance(criteria, SectionCriteria):
            return criteria
        if not isinstance(criteria, Mapping):
            return cls()
        try:
            return cls.model_validate(dict(criteria))
        except ValidationError as exc:
            logger.warning("Ignoring invalid section criteria %r: %s", dict(criteria), exc)
            return cls()

    def matches(self, listing: Listing) -> bool:
        """Return ``True`` if an *available* listing satisfies the rule."""
        if effective_availability(listing) != Availability.AVAILABLE:
            return False
        if self.min_price is not None and not (
            listing.price is not None and listing.price >= self.min_price
        ):
            return False
        if self.max_price is not None and not (
            listing.price is not None and listing.price <= self.max_price
        ):
            return False
        if self.location is not None:
            needle = self.location.lower()
            location = listing.location
            province = location.province.lower() if location else ""
            district = location.district.lower() if location else ""
            if needle not in province and needle not in district:
                return False
        if self.type is not None and listing.type != self.type:
            return False
        if self.tags:
            own = {tag_text(t) for t in effective_tags(listing)}
            if not any(tag in own for tag in self.tags):
                return False
        return True


def filter_by_criteria(
    records: Iterable[Any] | None,
    criteria: SectionCriteria | Mapping[str, Any] | None = None,
) -> list[Any]:
    """Return the available records matching a section rule, in input order.

    Args:
        records: Listing records (mappings or :class:`Listing` instances).
        criteria: :class:`SectionCriteria` or an equivalent mapping.  Empty
            or absent means "all available listings".
    """
    rule = SectionCriteria.coerce(criteria)
    with request_scope():
        selected = [record for record, listing in iter_listings(records) if rule.matches(listing)]
        logger.debug(
            "Section rule %s selected %d listings",
            rule.model_dump(exclude_none=True),
            len(selected),
            extra={"matched": len(selected)},
        )
    return selected
