"""Plain-text rendering of search results for the terminal.

Public API
----------
:func:`format_price` — Thai baht price string, ``บาท/เดือน`` for rentals,
    optionally masked (``2,xxx,xxx``) for listings that hide their price.

:func:`format_listing` — One listing as a short multi-line block.

:func:`format_results` — A numbered result list with an optional score column.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

from estatesearch.core.fields import (
    effective_availability,
    effective_display_id,
    effective_listing_type,
)
from estatesearch.core.models import Listing, ListingType, as_listing
from estatesearch.core.property_types import property_label

__all__ = [
    "format_listing",
    "format_price",
    "format_results",
    "mask_formatted_number",
]

logger = logging.getLogger(__name__)

#: Maximum number of description characters shown per listing.
DESCRIPTION_MAX_CHARS: int = 120


def mask_formatted_number(formatted: str) -> str:
    """Hide all but the leading group of a formatted number.

    Examples::

        mask_formatted_number("2,500,000")  # → "2,xxx,xxx"
        mask_formatted_number("950")        # → "9xx"
    """
    if not formatted:
        return "-"
    parts = formatted.split(",")
    if len(parts) == 1:
        return formatted[0] + "x" * max(1, len(formatted) - 1)
    masked = ("".join("x" if ch.isdigit() else ch for ch in p) for p in parts[1:])
    return ",".join([parts[0], *masked])


def format_price(price: Any, listing_type: str | bool | None = None, show_price: bool = True) -> str:
    """Format *price* in baht.

    Args:
        price: Numeric price (or numeric string).
        listing_type: ``"rent"`` / ``True`` for a monthly rent, anything else
            for a sale price.
        show_price: ``False`` masks every group after the first.

    Returns:
        e.g. ``"2,500,000 บาท"`` or ``"8,500 บาท/เดือน"``; ``"-"`` when the
        price is missing or not a number.
    """
    if price is None or price == "" or isinstance(price, bool):
        return "-"
    try:
        number = float(str(price).replace(",", ""))
    except ValueError:
        return "-"
    if not math.isfinite(number):
        return "-"

    formatted = f"{number:,.0f}" if number.is_integer() else f"{number:,.2f}".rstrip("0").rstrip(".")
    display = formatted if show_price else mask_formatted_number(formatted)

    is_rental = listing_type is True or (
        isinstance(listing_type, str) and listing_type.strip().lower() == ListingType.RENT
    )
    return f"{display} บาท/เดือน" if is_rental else f"{display} บาท"


def _location_line(listing: Listing) -> str | None:
    if listing.location_display:
        return listing.location_display
    location = listing.location
    if location is None:
        return None
    parts = [p for p in (location.sub_district, location.district, location.province) if p]
    return ", ".join(parts) or None


def format_listing(record: Any, *, score: int | None = None) -> str:
    """Render one listing record as a short text block."""
    listing = record if isinstance(record, Listing) else as_listing(record)
    if listing is None:
        return "(malformed record)"

    code = effective_display_id(listing) or listing.id
    header = f"[{code}] {listing.title or '(untitled)'}"
    if score is not None:
        header = f"{header}  (score {score})"
    lines = [header]

    # Records may carry a "showPrice": false display flag.
    show_price = (listing.model_extra or {}).get("showPrice") is not False
    details = [format_price(listing.price, effective_listing_type(listing), show_price)]
    if listing.type:
        details.append(property_label(listing.type))
    if listing.bedrooms is not None:
        details.append(f"{listing.bedrooms:g} ห้องนอน")
    if listing.bathrooms is not None:
        details.append(f"{listing.bathrooms:g} ห้องน้ำ")
    if listing.area is not None:
        details.append(f"{listing.area:g} ตร.ม.")
    availability = effective_availability(listing)
    if availability:
        details.append(availability)
    lines.append("  " + " | ".join(details))

    location = _location_line(listing)
    if location:
        lines.append(f"  {location}")

    if listing.description:
        snippet = " ".join(listing.description.split())
        if len(snippet) > DESCRIPTION_MAX_CHARS:
            snippet = snippet[:DESCRIPTION_MAX_CHARS].rstrip() + "…"
        lines.append(f"  {snippet}")

    return "\n".join(lines)


def format_results(records: Sequence[Any], scores: Sequence[int] | None = None) -> str:
    """Render a numbered result list, or a "no results" line."""
    if not records:
        return "No matching listings."
    blocks = []
    for index, record in enumerate(records, start=1):
        score = scores[index - 1] if scores is not None and index - 1 < len(scores) else None
        blocks.append(f"{index}. {format_listing(record, score=score)}")
    blocks.append(f"\n{len(records)} listing(s)")
    return "\n".join(blocks)
