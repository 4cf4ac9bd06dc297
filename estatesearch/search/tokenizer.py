"""Query tokenizer.

Splits a free-text query into search tokens on whitespace, except for the
condition markers ("มือ 1" / "มือ 2", i.e. first-hand / second-hand, and the
English "hand 1" / "hand 2").  Those are pulled out first as single atomic
tokens, whether typed with or without the inner space, so that ``"มือ2"``
and ``"มือ 2"`` both produce the token ``"มือ 2"``.

Thai text has no spaces between words; no word segmentation is attempted
beyond explicit whitespace.
"""

from __future__ import annotations

import logging
import re
from typing import Final

from estatesearch.core.fields import normalise_text

__all__ = ["CONDITION_MARKERS", "is_condition_marker", "tokenize"]

logger = logging.getLogger(__name__)

# "มือ" may be glued to the preceding Thai word; "hand" must not be the tail
# of a Latin word such as "secondhand".
_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"(มือ|(?<![a-z])hand)\s*([12])(?!\d)")

#: Canonical spaced form of every condition-marker token.
CONDITION_MARKERS: Final[frozenset[str]] = frozenset({"มือ 1", "มือ 2", "hand 1", "hand 2"})


def is_condition_marker(token: str) -> bool:
    """Return ``True`` if *token* is a canonical condition-marker token."""
    return token in CONDITION_MARKERS


def tokenize(query: str | None) -> list[str]:
    """Normalise *query* and split it into tokens.

    Condition markers are emitted in canonical spaced form at their position
    of appearance; the text around them is whitespace-split as usual.

    Examples::

        tokenize("  Condo   City ")         # → ["condo", "city"]
        tokenize("บ้านมือ2 ใกล้ BTS")      # → ["บ้าน", "มือ 2", "ใกล้", "bts"]
        tokenize("big house hand1 for sale")
        # → ["big", "house", "hand 1", "for", "sale"]
        tokenize("   ")                    # → []
    """
    normalized = normalise_text(query)
    if not normalized:
        return []

    tokens: list[str] = []
    last = 0
    for match in _MARKER_RE.finditer(normalized):
        tokens.extend(normalized[last : match.start()].split())
        tokens.append(f"{match.group(1)} {match.group(2)}")
        last = match.end()
    tokens.extend(normalized[last:].split())
    return tokens
