from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per rejection reason or persistence failure. The key set is fixed;
``to_json_line`` never emits extra keys.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Spreadsheet file name being imported
        table: Derived destination table name ("" when none could be derived)
        group: Group key (TEN_FILE value) the error refers to, "" for batch-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description or verbatim driver message
    """
    timestamp: str  # ISO8601 UTC
    source: str
    table: str
    group: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, table: str, group: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            table=table,
            group=group,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # ensure_ascii=False keeps Vietnamese text readable in the log
        return json.dumps(asdict(self), ensure_ascii=False)
