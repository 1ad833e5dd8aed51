from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord
from ..models.import_result import ImportOutcome

"""Error log buffering.

Rejection reasons and persistence failures of an import are buffered as
``ErrorRecord`` objects and written once, as JSON Lines, to
``<logs_dir>/errors-YYYYMMDD-HHMMSS.log`` (UTC, fixed per buffer).
"""

__all__ = [
    "ErrorLogBuffer",
    "ErrorRecord",
    "records_for_outcome",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def records_for_outcome(outcome: ImportOutcome) -> list[ErrorRecord]:
    """One record per rejection of ``outcome``."""
    return [
        ErrorRecord.create(
            source=outcome.source,
            table=outcome.table_name or "",
            group=rejection.group or "",
            error_type=rejection.kind.value,
            message=rejection.message,
        )
        for rejection in outcome.rejections
    ]


class ErrorLogBuffer:
    """In-memory buffer for error records. ``flush`` appends JSON Lines.

    The file path is decided on first access; nothing is created while the
    buffer stays empty.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._logs_dir = logs_dir or LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend(self, records: list[ErrorRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file written, or None when empty."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
