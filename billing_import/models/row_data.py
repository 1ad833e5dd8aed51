from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""Row models for the billing extract import.

A ``RawRow`` is what the spreadsheet decoder hands over: original header label
-> trimmed cell text. A ``NormalizedRow`` is the same row after header
normalization and value typing; its keys are always the full canonical header
set of the batch.
"""

__all__ = [
    "NormalizedRow",
    "RawRow",
]

RawRow = dict[str, str]


@dataclass(frozen=True)
class NormalizedRow:
    """Logical representation of a single row after normalization.

    ``row_number`` is the 1-based spreadsheet row (the header is row 1), kept
    for traceability in error messages.
    """
    row_number: int
    values: dict[str, Any]  # canonical column -> str | Decimal | None
    raw_values: RawRow | None = None

    def text(self, column: str) -> str:
        """Return the value of ``column`` as trimmed text ("" for null)."""
        value = self.values.get(column)
        if value is None:
            return ""
        return str(value).strip()
