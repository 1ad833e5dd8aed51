from __future__ import annotations

from dataclasses import dataclass, field

from .row_data import NormalizedRow

__all__ = [
    "Batch",
]


@dataclass
class Batch:
    """Ordered rows of one import plus the canonical header list.

    Owned by the ingestor for the lifetime of one import.
    """
    source: str  # file name, for logs only
    headers: tuple[str, ...]
    rows: list[NormalizedRow] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def value_rows(self) -> list[list[object]]:
        """Row values in header order, ready for INSERT."""
        return [[row.values.get(col) for col in self.headers] for row in self.rows]
