from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

"""Money cell parsing.

Cells arrive as free text such as ``"1.234.567,50 VNĐ"`` or ``"₫ 1,234,567.5"``.
Whichever of ``.`` / ``,`` occurs last is taken as the decimal separator; every
other occurrence of either is a thousands separator. The result is rounded to
whole units, half away from zero.

The heuristic is lossy: ``"1.234"`` reads as 1.234 and rounds to 1. Existing
extracts rely on this behaviour, so it is kept as is.

A cell that cannot be parsed yields ``None`` (absent) and never fails the
import.
"""

__all__ = [
    "parse_money",
    "round_amount",
]

# Currency glyphs and the letters of "VND"/"VNĐ"/"đ" in any case
_CURRENCY_RE = re.compile(r"[₫ĐđVvNn][Nn]?[Đđ]?", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_RESIDUE_RE = re.compile(r"[^0-9.\-]")

_WHOLE = Decimal("1")


def round_amount(value: Decimal | int) -> Decimal:
    """Round to zero decimal places, half away from zero."""
    # Decimal's ROUND_HALF_UP rounds ties away from zero for both signs
    return Decimal(value).quantize(_WHOLE, rounding=ROUND_HALF_UP)


def _drop_thousands(text: str, decimal_sep: str, thousands_sep: str) -> str:
    text = text.replace(thousands_sep, "")
    head, sep, tail = text.rpartition(decimal_sep)
    if not sep:
        return text
    return head.replace(decimal_sep, "") + "." + tail


def parse_money(raw: object) -> Decimal | None:
    """Parse a money cell into a whole-unit ``Decimal``.

    Returns:
        Rounded amount, or ``None`` for blank / unparseable input
    """
    if raw is None:
        return None
    text = str(raw)
    if not text.strip():
        return None

    text = _CURRENCY_RE.sub("", text.strip())
    text = _WHITESPACE_RE.sub("", text)

    if text.rfind(",") > text.rfind("."):
        text = _drop_thousands(text, ",", ".")
    else:
        text = _drop_thousands(text, ".", ",")

    text = _RESIDUE_RE.sub("", text)
    try:
        value = Decimal(text)
        if not value.is_finite():
            return None
        # more than 28 significant digits overflows the rounding context
        return round_amount(value)
    except InvalidOperation:
        return None
