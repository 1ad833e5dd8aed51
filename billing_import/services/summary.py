from __future__ import annotations

from ..models.import_result import ImportOutcome

"""SUMMARY line rendering.

Format:
    SUMMARY source={file} table={table|-} status={status} rows={n}
    reasons={k} elapsed_sec={elapsed}[ dry_run=1]
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(value: float) -> str:
    """Compact number rendering: integers without decimals, no scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(outcome: ImportOutcome) -> str:
    """Render the SUMMARY line of one import.

    >>> from billing_import.models.import_result import ImportStatus
    >>> render_summary_line(ImportOutcome("a.xlsx", "Vnpt_a", ImportStatus.PERSISTED, 3))
    'SUMMARY source=a.xlsx table=Vnpt_a status=persisted rows=3 reasons=0 elapsed_sec=0'
    """
    line = (
        f"SUMMARY source={outcome.source} "
        f"table={outcome.table_name or '-'} "
        f"status={outcome.status.value} "
        f"rows={outcome.inserted_rows} "
        f"reasons={len(outcome.rejections)} "
        f"elapsed_sec={format_seconds(outcome.elapsed_seconds)}"
    )
    if outcome.dry_run:
        line += " dry_run=1"
    return line
