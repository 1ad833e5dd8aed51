from __future__ import annotations

import re

import pytest

from billing_import.excel.headers import (
    DuplicateHeaderError,
    EmptyHeaderError,
    normalize_header,
    normalize_headers,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Ma TT", "MA_TT"),
        ("  Ten   TT ", "TEN_TT"),
        ("ma_tt", "MA_TT"),
        ("Email (KH)", "EMAIL_KH"),
        ("Tiền PT", "TIN_PT"),
        ("ChuKyNo", "CHUKYNO"),
        ("so\thd", "SO_HD"),
    ],
)
def test_normalize_header(raw, expected):
    assert normalize_header(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "!!!", "₫₫", None])
def test_normalize_header_empty_raises(raw):
    with pytest.raises(EmptyHeaderError):
        normalize_header(raw)


@pytest.mark.parametrize("raw", ["a b c", "Số HĐ", "x-y.z", "__", "  9 lives  ", "tên file"])
def test_normalized_output_alphabet(raw):
    assert re.fullmatch(r"[A-Z0-9_]+", normalize_header(raw))


def test_normalize_headers_keeps_order():
    assert normalize_headers(["Ten File", "Ma TT", "Thue"]) == ["TEN_FILE", "MA_TT", "THUE"]


def test_normalize_headers_reports_position_of_empty_title():
    with pytest.raises(EmptyHeaderError) as exc:
        normalize_headers(["Ma TT", "  ", "Thue"])
    assert exc.value.position == 2
    assert "column 2" in str(exc.value)


def test_normalize_headers_duplicates():
    with pytest.raises(DuplicateHeaderError) as exc:
        normalize_headers(["Ten TT", "TEN_TT", "Thue", "thue", "Ten  TT"])
    assert exc.value.duplicates == ["TEN_TT", "THUE"]
