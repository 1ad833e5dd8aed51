from __future__ import annotations

import re
from collections.abc import Iterable

"""Header normalization.

Raw column labels are canonicalized so they can be compared against the
required column set and used as SQL identifiers:

1. trim
2. collapse whitespace runs into a single underscore
3. drop every character outside ``[A-Za-z0-9_]``
4. upper-case

A label that normalizes to the empty string is an error for the whole import.
"""

__all__ = [
    "DuplicateHeaderError",
    "EmptyHeaderError",
    "normalize_header",
    "normalize_headers",
]

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9_]")


class EmptyHeaderError(Exception):
    """Raised when a column has no usable title."""

    def __init__(self, raw: str, position: int | None = None) -> None:
        self.raw = raw
        self.position = position
        where = f" (column {position})" if position is not None else ""
        super().__init__(f"column has no usable title{where}: {raw!r}")


class DuplicateHeaderError(Exception):
    """Raised when two raw labels normalize to the same canonical name."""

    def __init__(self, duplicates: list[str]) -> None:
        self.duplicates = duplicates
        super().__init__(f"duplicate columns after normalization: {', '.join(duplicates)}")


def normalize_header(raw: str | None) -> str:
    """Return the canonical form of a raw column label.

    >>> normalize_header("  Ten  TT ")
    'TEN_TT'
    >>> normalize_header("Tiền (PT)")
    'TIN_PT'

    Raises:
        EmptyHeaderError: if nothing usable remains
    """
    text = (raw or "").strip()
    text = _WHITESPACE_RE.sub("_", text)
    text = _DISALLOWED_RE.sub("", text)
    result = text.upper()
    if not result:
        raise EmptyHeaderError(raw or "")
    return result


def normalize_headers(raw_headers: Iterable[str | None]) -> list[str]:
    """Normalize every header of a sheet, preserving order.

    The first unusable label aborts with ``EmptyHeaderError`` (1-based column
    position attached); duplicates are reported together.
    """
    result: list[str] = []
    for position, raw in enumerate(raw_headers, start=1):
        try:
            result.append(normalize_header(raw))
        except EmptyHeaderError as e:
            raise EmptyHeaderError(e.raw, position) from None
    seen: set[str] = set()
    duplicates: list[str] = []
    for name in result:
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise DuplicateHeaderError(duplicates)
    return result
