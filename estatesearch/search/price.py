"""Natural-language price detection.

Two independent detectors live here and are used by different call paths:

:func:`parse_price_query`
    Explicit bounds for the AND-filter path.  Recognises a range
    (``"2-3 ล้าน"``) or a max-only phrase (``"ไม่เกิน 2 ล้าน"``,
    ``"งบ 1.5 ล้าน"``, ``"ราคา 3 ล้าน"``, ``"under 2 million"``) and returns
    the bounds together with the query text minus the price phrase.

:func:`buffered_price_range`
    Forgiving "around this price" matching for the ranking / suggestion
    path.  A single figure (``"2.5 ล้าน"``, ``"3m"``, ``"2500000"``) becomes a
    band of ±10% around it.

Units
-----
+-------------------------------+--------------+
| Unit word                     | Multiplier   |
+===============================+==============+
| ``ล้าน`` / ``laan`` / ``million`` | 1,000,000 |
+-------------------------------+--------------+
| ``แสน`` / ``saen``             | 100,000      |
+-------------------------------+--------------+
| (none)                        | 1            |
+-------------------------------+--------------+
"""

from __future__ import annotations

import logging
import math
import re
from typing import Final

from estatesearch.core.fields import normalise_text
from estatesearch.core.models import ParsedPrice, PriceRange

__all__ = [
    "DEFAULT_BUFFER_RATIO",
    "buffered_price_range",
    "parse_price_query",
    "parse_single_price",
]

logger = logging.getLogger(__name__)

LAAN: Final[int] = 1_000_000
SAEN: Final[int] = 100_000

#: Half-width of the band produced by :func:`buffered_price_range`.
DEFAULT_BUFFER_RATIO: Final[float] = 0.1

_UNIT_MULTIPLIERS: Final[dict[str, int]] = {
    "ล้าน": LAAN,
    "laan": LAAN,
    "million": LAAN,
    "แสน": SAEN,
    "saen": SAEN,
}

_NUM = r"(\d[\d,]*(?:\.\d+)?)"
_UNIT = r"\s*(ล้าน|แสน|laan|saen|million)(?![a-z])"
_OPTIONAL_UNIT = rf"(?:{_UNIT})?"
_MAX_WORDS = r"(?:ไม่เกิน|ต่ำกว่า|not\s+exceeding|under|below)"
_PRICE_WORD = r"(?:ราคา|price)"

_RANGE_RE: Final[re.Pattern[str]] = re.compile(
    rf"{_NUM}\s*[-–]\s*{_NUM}{_UNIT}", re.IGNORECASE
)

# Tried in order; the first hit wins.  A bare amount without a unit word is
# only read as baht after งบ/budget or ราคา/price, so "ไม่เกิน 5 นาที" stays text.
_MAX_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(rf"(?:{_PRICE_WORD}\s*)?{_MAX_WORDS}\s*{_NUM}{_UNIT}", re.IGNORECASE),
    re.compile(rf"(?:งบ|budget)\s*{_NUM}{_OPTIONAL_UNIT}", re.IGNORECASE),
    re.compile(rf"{_PRICE_WORD}\s*{_MAX_WORDS}?\s*{_NUM}{_OPTIONAL_UNIT}", re.IGNORECASE),
)

_SINGLE_PRICE_RE: Final[re.Pattern[str]] = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:ล้าน|laan|million|m)(?![a-z])", re.IGNORECASE
)
_BARE_AMOUNT_RE: Final[re.Pattern[str]] = re.compile(r"\d{6,}")

_WHITESPACE_RE: Final[re.Pattern[str]] = re.compile(r"\s+")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_amount(number: str, unit: str | None) -> int | None:
    try:
        value = float(number.replace(",", ""))
    except ValueError:
        logger.debug("Cannot parse price figure %r", number)
        return None
    multiplier = _UNIT_MULTIPLIERS.get((unit or "").lower(), 1)
    return _round_half_up(value * multiplier)


def _cut(text: str, match: re.Match[str]) -> str:
    return f"{text[: match.start()]} {text[match.end():]}"


def parse_price_query(query: str | None) -> ParsedPrice:
    """Extract explicit price bounds from *query*.

    The range pattern is checked first and, when it matches, sets both
    bounds.  Otherwise the max-only patterns are tried in priority order and
    the first hit sets ``max``.  Every matched phrase is removed from the
    returned ``cleaned_query``.

    Args:
        query: Free-text search query.

    Returns:
        A :class:`~estatesearch.core.models.ParsedPrice`.  When nothing
        matches, both bounds are ``None`` and ``cleaned_query`` is the
        whitespace-normalised input.

    Examples::

        parse_price_query("2-3 ล้าน")
        # → ParsedPrice(min=2000000, max=3000000, cleaned_query="")
        parse_price_query("ทาวน์โฮม ไม่เกิน 2 ล้าน")
        # → ParsedPrice(min=None, max=2000000, cleaned_query="ทาวน์โฮม")
    """
    if not isinstance(query, str):
        return ParsedPrice(min=None, max=None, cleaned_query="")

    cleaned = query.strip()
    low: int | None = None
    high: int | None = None

    range_match = _RANGE_RE.search(cleaned)
    if range_match:
        unit = range_match.group(3)
        low = _to_amount(range_match.group(1), unit)
        high = _to_amount(range_match.group(2), unit)
        cleaned = _cut(cleaned, range_match)

    if high is None:
        for pattern in _MAX_PATTERNS:
            match = pattern.search(cleaned)
            if match:
                high = _to_amount(match.group(1), match.group(2))
                cleaned = _cut(cleaned, match)
                break

    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    if low is not None or high is not None:
        logger.debug("Price phrase in %r → min=%s max=%s", query, low, high)
    return ParsedPrice(min=low, max=high, cleaned_query=cleaned)


def parse_single_price(query: str | None) -> int | None:
    """Detect a single price figure in *query*.

    Recognises ``"<number> ล้าน"`` / ``"<number>m"`` anywhere in the query, or
    a query that is nothing but an integer of six or more digits
    (thousands separators and spaces allowed) worth at least 100,000.

    Examples::

        parse_single_price("2.5 ล้าน")   # → 2500000
        parse_single_price("3M")          # → 3000000
        parse_single_price("2,500,000")   # → 2500000
        parse_single_price("50000")       # → None
    """
    normalized = normalise_text(query)
    if not normalized:
        return None

    match = _SINGLE_PRICE_RE.search(normalized)
    if match:
        return _round_half_up(float(match.group(1)) * LAAN) or None

    compact = normalized.replace(" ", "").replace(",", "")
    if _BARE_AMOUNT_RE.fullmatch(compact):
        amount = int(compact)
        if amount >= SAEN:
            return amount
    return None


def buffered_price_range(
    query: str | None,
    buffer_ratio: float = DEFAULT_BUFFER_RATIO,
) -> PriceRange | None:
    """Turn a single typed price into an inclusive band around it.

    Args:
        query: Free-text search query.
        buffer_ratio: Half-width of the band as a fraction of the price.

    Returns:
        ``PriceRange(price - buffer, price + buffer)`` (lower bound clamped
        at zero), or ``None`` when *query* holds no single price figure.

    Example::

        buffered_price_range("2 ล้าน")  # → PriceRange(min=1800000, max=2200000)
    """
    price = parse_single_price(query)
    if not price:
        return None
    buffer = price * buffer_ratio
    return PriceRange(
        min=max(0, _round_half_up(price - buffer)),
        max=_round_half_up(price + buffer),
    )
