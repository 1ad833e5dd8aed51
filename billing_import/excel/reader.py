from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.columns import MONEY_COLUMNS
from ..models.row_data import NormalizedRow, RawRow
from .money import parse_money

"""Spreadsheet decoding and row normalization.

Layout of a billing extract: the first sheet is read, its first row holds the
column titles and every following row is data. Rows whose cells are all blank
are dropped before anything else looks at them.

Cells are handed on as trimmed text; typing happens in ``normalize_rows``:
money columns become whole-unit ``Decimal`` (``None`` when blank or
unparseable), every other column stays text with blanks turned into ``None``.
"""

__all__ = [
    "RawSheet",
    "SpreadsheetReadError",
    "build_raw_sheet",
    "normalize_rows",
    "read_spreadsheet",
    "to_raw_rows",
]

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


class SpreadsheetReadError(Exception):
    """Raised when a file cannot be decoded into a header row plus data rows."""


@dataclass
class RawSheet:
    headers: list[str]  # raw labels, not yet normalized
    rows: list[tuple[int, list[str]]]  # (1-based sheet row, cell texts)


def read_spreadsheet(path: Path) -> pd.DataFrame:
    """Read the first sheet of ``path`` header-less into a DataFrame.

    Parameters
    ----------
    path: .xlsx/.xls/.csv file

    Raises
    ------
    SpreadsheetReadError: unknown suffix, missing file or decoder failure
    """
    if not path.exists():
        raise SpreadsheetReadError(f"file not found: {path}")
    suffix = path.suffix.lower()
    try:
        if suffix in EXCEL_SUFFIXES:
            # header=None: the title row is handled by to_raw_rows
            return pd.read_excel(path, sheet_name=0, header=None, dtype=object, keep_default_na=False)
        if suffix == ".csv":
            return pd.read_csv(path, header=None, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except Exception as e:
        raise SpreadsheetReadError(f"cannot read {path.name}: {e}") from e
    raise SpreadsheetReadError(f"unsupported file type: {path.suffix or '(none)'}")


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


def build_raw_sheet(headers: Sequence[Any], rows: Iterable[Sequence[Any]]) -> RawSheet:
    """Build a ``RawSheet`` from header labels and data rows in sheet order.

    Cells are turned into trimmed text, rows are padded or cut to the header
    width, and rows whose cells are all blank are dropped. Row numbers count
    the header as row 1.
    """
    labels = [_cell_text(v) for v in headers]
    width = len(labels)
    kept: list[tuple[int, list[str]]] = []
    for row_number, values in enumerate(rows, start=2):
        cells = [_cell_text(v) for v in list(values)[:width]]
        if not any(cells):
            continue
        cells.extend([""] * (width - len(cells)))
        kept.append((row_number, cells))
    return RawSheet(headers=labels, rows=kept)


def to_raw_rows(df: pd.DataFrame) -> RawSheet:
    """Split a header-less frame into raw header labels and non-blank rows."""
    if df.shape[0] < 1:
        raise SpreadsheetReadError("sheet has no header row")
    width = df.shape[1]
    # Trailing untitled columns without data are layout noise, not headers
    while width and not _cell_text(df.iat[0, width - 1]) and _column_blank(df, width - 1):
        width -= 1
    frame = df.iloc[:, :width]
    return build_raw_sheet(
        frame.iloc[0].tolist(),
        frame.iloc[1:].itertuples(index=False, name=None),
    )


def _column_blank(df: pd.DataFrame, index: int) -> bool:
    return all(not _cell_text(v) for v in df.iloc[1:, index].tolist())


def normalize_rows(sheet: RawSheet, headers: list[str]) -> list[NormalizedRow]:
    """Type the cells of every raw row under the canonical ``headers``.

    ``headers`` must be the normalized form of ``sheet.headers`` (same order,
    same length). Every resulting row carries exactly that key set.
    """
    if len(headers) != len(sheet.headers):
        raise ValueError("canonical header count differs from raw header count")
    result: list[NormalizedRow] = []
    for row_number, cells in sheet.rows:
        raw: RawRow = dict(zip(sheet.headers, cells, strict=True))
        values: dict[str, Any] = {}
        for column, text in zip(headers, cells, strict=True):
            if column in MONEY_COLUMNS:
                values[column] = parse_money(text)
            else:
                values[column] = text if text else None
        result.append(NormalizedRow(row_number=row_number, values=values, raw_values=raw))
    return result
