"""Property type catalogue.

Listings store their type either as a catalogue code (``"SPS-CD-ID"``) or,
in older records, directly as a Thai label.  :func:`property_label` resolves
a code to its label and passes anything else through unchanged.
"""

from __future__ import annotations

from typing import Final

__all__ = ["PROPERTY_TYPES", "property_label"]

#: ``(code, label)`` pairs in display order.
PROPERTY_TYPES: Final[tuple[tuple[str, str], ...]] = (
    ("SPS-S-1CLASS-ID", "บ้านเดี่ยว 1 ชั้น"),
    ("SPS-S-2CLASS-ID", "บ้านเดี่ยว 2 ชั้น"),
    ("SPS-TW-1CLASS-ID", "บ้านแฝด 1 ชั้น"),
    ("SPS-TW-2CLASS-ID", "บ้านแฝด 2 ชั้น"),
    ("SPS-TH-1CLASS-ID", "ทาวน์โฮม 1 ชั้น"),
    ("SPS-TH-2CLASS-ID", "ทาวน์โฮม 2 ชั้น"),
    ("SPS-PV-ID", "บ้านพูลวิลล่า"),
    ("SPS-CD-ID", "คอนโด"),
    ("SPS-LD-ID", "ที่ดินเปล่า"),
    ("SPS-RP-ID", "บ้านเช่า/ผ่อนตรง"),
)

_LABELS: Final[dict[str, str]] = dict(PROPERTY_TYPES)


def property_label(code_or_label: str | None) -> str:
    """Return the display label for a type code.

    Examples::

        property_label("SPS-CD-ID")  # → "คอนโด"
        property_label("คอนโด")      # → "คอนโด"
        property_label(None)         # → ""
    """
    if not code_or_label:
        return ""
    return _LABELS.get(code_or_label, code_or_label)
