from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pandas as pd
import pytest

from billing_import.excel.headers import normalize_headers
from billing_import.excel.reader import (
    SpreadsheetReadError,
    build_raw_sheet,
    normalize_rows,
    read_spreadsheet,
    to_raw_rows,
)
from tests.builders import HEADER_LABELS, billing_row, make_sheet, make_xlsx


def test_read_xlsx_first_sheet(tmp_path):
    path = make_xlsx(
        tmp_path / "thang10.xlsx",
        [HEADER_LABELS, billing_row(), [None] * len(HEADER_LABELS), billing_row(code="TT002")],
    )
    sheet = to_raw_rows(read_spreadsheet(path))
    assert sheet.headers == HEADER_LABELS
    assert [cells[0] for _, cells in sheet.rows] == ["TT001", "TT002"]


def test_numeric_cells_become_plain_text(tmp_path):
    path = make_xlsx(
        tmp_path / "nums.xlsx",
        [["Tien PT", "SoHD", "Ngay In"], [1500000, 123.0, datetime(2024, 2, 5)]],
    )
    sheet = to_raw_rows(read_spreadsheet(path))
    assert sheet.rows == [(2, ["1500000", "123", "2024-02-05"])]


def test_read_csv(tmp_path):
    path = tmp_path / "thang10.csv"
    path.write_text("Ma TT,Tien PT\nTT001, 1.000.000 \n,\n", encoding="utf-8-sig")
    sheet = to_raw_rows(read_spreadsheet(path))
    assert sheet.headers == ["Ma TT", "Tien PT"]
    assert sheet.rows == [(2, ["TT001", "1.000.000"])]


def test_read_missing_file(tmp_path):
    with pytest.raises(SpreadsheetReadError, match="not found"):
        read_spreadsheet(tmp_path / "nope.xlsx")


def test_read_unsupported_type(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("x", encoding="utf-8")
    with pytest.raises(SpreadsheetReadError, match="unsupported"):
        read_spreadsheet(path)


def test_read_corrupt_workbook(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a zip file")
    with pytest.raises(SpreadsheetReadError, match="cannot read"):
        read_spreadsheet(path)


def test_to_raw_rows_empty_frame():
    with pytest.raises(SpreadsheetReadError):
        to_raw_rows(pd.DataFrame())


def test_to_raw_rows_trims_untitled_empty_columns():
    df = pd.DataFrame([["Ma TT", "", ""], ["TT001", "", ""]], dtype=object)
    sheet = to_raw_rows(df)
    assert sheet.headers == ["Ma TT"]
    assert sheet.rows == [(2, ["TT001"])]


def test_build_raw_sheet_pads_short_rows():
    sheet = build_raw_sheet(["A", "B", "C"], [["1"], ["x", "y", "z", "extra"]])
    assert sheet.rows == [(2, ["1", "", ""]), (3, ["x", "y", "z"])]


def test_normalize_rows_types_cells():
    sheet = make_sheet([billing_row(email="", payable="abc")])
    headers = normalize_headers(sheet.headers)
    [row] = normalize_rows(sheet, headers)

    assert set(row.values) == set(headers)
    assert row.row_number == 2
    assert row.values["TIEN_TTHUE"] == Decimal("1000000")
    assert row.values["THUE"] == Decimal("100000")
    assert row.values["TIEN_PT"] is None
    assert row.values["EMAIL"] is None
    assert row.values["TEN_FILE"] == "BK001"
    assert row.raw_values["Tien PT"] == "abc"


def test_normalize_rows_header_count_mismatch():
    sheet = make_sheet([billing_row()])
    with pytest.raises(ValueError):
        normalize_rows(sheet, ["MA_TT"])


def test_build_raw_sheet_drops_blank_rows_keeps_numbering():
    sheet = build_raw_sheet(["A", "B"], [["1", "2"], [None, "  "], ["3", ""]])
    assert sheet.rows == [(2, ["1", "2"]), (4, ["3", ""])]
