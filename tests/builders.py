"""Test data builders and an in-memory psycopg2 cursor double."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
import psycopg2
from psycopg2 import sql

from billing_import.excel.reader import RawSheet, build_raw_sheet

# Raw labels as they appear in real extracts; they normalize to the 13 required columns
HEADER_LABELS = [
    "Ma TT", "Account", "Ten TT", "Diachi TT", "Tien TThue", "Thue", "Tien PT",
    "Ma TracuuHD", "SoHD", "Ngay In", "Email", "Ten File", "ChuKyNo",
]


def billing_row(
    group: str = "BK001",
    cycle: str = "01/2024",
    *,
    code: str = "TT001",
    account: str = "ACC001",
    name: str = "Cong ty A",
    address: str = "1 Le Loi, Hue",
    email: str = "ketoan@a.vn",
    pre_tax: str = "1.000.000",
    tax: str = "100.000",
    payable: str = "1.100.000,00",
    lookup: str = "LK001",
    invoice: str = "0000123",
    printed: str = "05/02/2024",
) -> list[str]:
    """One data row in HEADER_LABELS order."""
    return [
        code, account, name, address, pre_tax, tax, payable,
        lookup, invoice, printed, email, group, cycle,
    ]


def make_sheet(rows: list[list[Any]], headers: list[str] | None = None) -> RawSheet:
    return build_raw_sheet(headers if headers is not None else HEADER_LABELS, rows)


def make_xlsx(path: Path, rows: list[list[Any]]) -> Path:
    """Write a header-less sheet (first row = titles) with openpyxl."""
    with pd.ExcelWriter(path) as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
    return path


def target_table(query: Any) -> str | None:
    """Last part of the first Identifier in a composed statement."""
    for part in getattr(query, "seq", []):
        if isinstance(part, sql.Identifier):
            return part.strings[-1]
    return None


class FakeConnection:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class FakeCursor:
    """In-memory stand-in for a psycopg2 cursor.

    Understands the existence check, the advisory lock, CREATE TABLE and
    (through the patched execute_values) INSERT pages.
    """

    def __init__(
        self,
        existing: tuple[str, ...] = (),
        *,
        hidden: tuple[str, ...] = (),
        create_error: Exception | None = None,
        insert_error: Exception | None = None,
    ) -> None:
        self.connection = FakeConnection()
        self.tables: dict[str, list[list[Any]]] = {name: [] for name in existing}
        # created by "someone else" between the existence check and CREATE
        self.hidden = set(hidden)
        self.create_error = create_error
        self.insert_error = insert_error
        self.executed: list[tuple[Any, Any]] = []
        self.created: list[Any] = []
        self._result: list[tuple[Any, ...]] = []

    def execute(self, query: Any, params: Any = None) -> None:
        self.executed.append((query, params))
        self._result = []
        if isinstance(query, str):
            if "information_schema.tables" in query:
                _schema, table = params
                if table in self.tables:
                    self._result = [(1,)]
            elif "pg_advisory_xact_lock" in query:
                self._result = [("",)]
            return
        if "CREATE TABLE" in repr(query):
            if self.create_error is not None:
                raise self.create_error
            table = target_table(query)
            if table in self.tables or table in self.hidden:
                raise psycopg2.errors.DuplicateTable(f'relation "{table}" already exists')
            self.tables[table] = []
            self.created.append(query)

    def fetchone(self) -> tuple[Any, ...] | None:
        return self._result[0] if self._result else None

    def fetchall(self) -> list[tuple[Any, ...]]:
        return list(self._result)

