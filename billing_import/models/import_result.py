from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

"""Import outcome models.

The ingestor moves linearly through ``ImportStatus`` values and ends in either
``PERSISTED`` or ``REJECTED``:

    RECEIVED -> HEADERS_VALIDATED -> ROWS_NORMALIZED -> CONSISTENCY_CHECKED
             -> SCHEMA_CREATED -> PERSISTED

Any validation step may end in ``REJECTED`` instead. A rejected outcome
carries every accumulated ``Rejection``, not only the first one.
"""

__all__ = [
    "ImportOutcome",
    "ImportStatus",
    "Rejection",
    "RejectionKind",
]


class ImportStatus(Enum):
    RECEIVED = "received"
    HEADERS_VALIDATED = "headers_validated"
    ROWS_NORMALIZED = "rows_normalized"
    CONSISTENCY_CHECKED = "consistency_checked"
    SCHEMA_CREATED = "schema_created"
    PERSISTED = "persisted"
    REJECTED = "rejected"

    @property
    def terminal(self) -> bool:
        return self in (ImportStatus.PERSISTED, ImportStatus.REJECTED)


class RejectionKind(Enum):
    """Error kinds reported to the user. Values double as error log types."""
    EMPTY_HEADER = "EMPTY_HEADER"
    DUPLICATE_HEADER = "DUPLICATE_HEADER"
    MISSING_REQUIRED_COLUMNS = "MISSING_REQUIRED_COLUMNS"
    EMPTY_BATCH = "EMPTY_BATCH"
    IDENTITY_INCONSISTENCY = "IDENTITY_INCONSISTENCY"
    BILLING_CYCLE_INCONSISTENCY = "BILLING_CYCLE_INCONSISTENCY"
    INVALID_DERIVED_NAME = "INVALID_DERIVED_NAME"
    DESTINATION_ALREADY_EXISTS = "DESTINATION_ALREADY_EXISTS"
    SCHEMA_CREATION_FAILED = "SCHEMA_CREATION_FAILED"
    ROW_PERSISTENCE_FAILED = "ROW_PERSISTENCE_FAILED"


@dataclass(frozen=True)
class Rejection:
    """One structured rejection reason.

    ``detail`` holds the machine-readable part, e.g. ``{"columns": [...]}`` for
    missing columns or ``{"group": "...", "count": 2}`` for identity conflicts.
    """
    kind: RejectionKind
    message: str
    detail: dict[str, Any] = field(default_factory=dict)

    @property
    def group(self) -> str | None:
        group = self.detail.get("group")
        return None if group is None else str(group)


@dataclass(frozen=True)
class ImportOutcome:
    """Result of one import operation."""
    source: str
    table_name: str | None  # None when no valid name could be derived
    status: ImportStatus
    inserted_rows: int = 0
    rejections: tuple[Rejection, ...] = ()
    dry_run: bool = False
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def persisted(self) -> bool:
        return self.status is ImportStatus.PERSISTED

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    def kinds(self) -> list[RejectionKind]:
        return [r.kind for r in self.rejections]
