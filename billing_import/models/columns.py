from __future__ import annotations

"""Canonical column names of a billing extract.

Names are given in their normalized form (see ``billing_import.excel.headers``),
so they compare directly against normalized spreadsheet headers.
"""

__all__ = [
    "ACCOUNT_COLUMN",
    "ADDRESS_COLUMN",
    "BILLING_CYCLE_COLUMN",
    "EMAIL_COLUMN",
    "GROUP_COLUMN",
    "IDENTITY_COLUMNS",
    "INVOICE_NUMBER_COLUMN",
    "LOOKUP_CODE_COLUMN",
    "MONEY_COLUMNS",
    "NAME_COLUMN",
    "PAYABLE_COLUMN",
    "PRE_TAX_COLUMN",
    "PRINT_DATE_COLUMN",
    "REQUIRED_COLUMNS",
    "TAX_COLUMN",
    "TRANSACTION_CODE_COLUMN",
]

TRANSACTION_CODE_COLUMN = "MA_TT"
ACCOUNT_COLUMN = "ACCOUNT"
NAME_COLUMN = "TEN_TT"
ADDRESS_COLUMN = "DIACHI_TT"
PRE_TAX_COLUMN = "TIEN_TTHUE"
TAX_COLUMN = "THUE"
PAYABLE_COLUMN = "TIEN_PT"
LOOKUP_CODE_COLUMN = "MA_TRACUUHD"
INVOICE_NUMBER_COLUMN = "SOHD"
PRINT_DATE_COLUMN = "NGAY_IN"
EMAIL_COLUMN = "EMAIL"
GROUP_COLUMN = "TEN_FILE"  # one notice / statement per value
BILLING_CYCLE_COLUMN = "CHUKYNO"

# Order matters: missing columns are reported in this order.
REQUIRED_COLUMNS: tuple[str, ...] = (
    TRANSACTION_CODE_COLUMN,
    ACCOUNT_COLUMN,
    NAME_COLUMN,
    ADDRESS_COLUMN,
    PRE_TAX_COLUMN,
    TAX_COLUMN,
    PAYABLE_COLUMN,
    LOOKUP_CODE_COLUMN,
    INVOICE_NUMBER_COLUMN,
    PRINT_DATE_COLUMN,
    EMAIL_COLUMN,
    GROUP_COLUMN,
    BILLING_CYCLE_COLUMN,
)

MONEY_COLUMNS: frozenset[str] = frozenset({PRE_TAX_COLUMN, TAX_COLUMN, PAYABLE_COLUMN})

# (email, name, address): must be identical for every row of one group
IDENTITY_COLUMNS: tuple[str, str, str] = (EMAIL_COLUMN, NAME_COLUMN, ADDRESS_COLUMN)
