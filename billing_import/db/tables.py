from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from psycopg2 import sql

from ..models.columns import (
    ADDRESS_COLUMN,
    BILLING_CYCLE_COLUMN,
    GROUP_COLUMN,
    NAME_COLUMN,
    PAYABLE_COLUMN,
    PRE_TAX_COLUMN,
    TAX_COLUMN,
)
from ..models.config_models import DEFAULT_TABLE_PREFIX
from .schema import table_exists

"""Read/drop helpers for tables created by previous imports.

Only tables whose name carries the import prefix are ever touched; any other
name is refused before a statement is built.
"""

__all__ = [
    "GroupDetail",
    "TableSummary",
    "UnsafeTableNameError",
    "drop_import_table",
    "group_details",
    "is_safe_import_table_name",
    "list_import_tables",
]

_REST_RE = re.compile(r"^[A-Za-z0-9_]+$")

_LIST_TABLES_SQL = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = %s AND table_name LIKE %s ORDER BY table_name"
)


class UnsafeTableNameError(Exception):
    """Raised for names that are not import tables (prefix + [A-Za-z0-9_]+)."""


@dataclass(frozen=True)
class TableSummary:
    table_name: str
    group_count: int  # distinct TEN_FILE values (number of notices)
    billing_cycle: str  # single value, "(blank)" or "Multiple (n)"
    total_rows: int
    payable_total: Decimal


@dataclass(frozen=True)
class GroupDetail:
    group: str
    billing_cycle: str | None
    customer_name: str | None
    customer_address: str | None
    row_count: int
    pre_tax_total: Decimal
    tax_total: Decimal
    payable_total: Decimal


def is_safe_import_table_name(table: str | None, prefix: str = DEFAULT_TABLE_PREFIX) -> bool:
    if not table or not table.strip():
        return False
    if not table.lower().startswith(prefix.lower()):
        return False
    return bool(_REST_RE.match(table[len(prefix):]))


def _require_safe(table: str, prefix: str) -> None:
    if not is_safe_import_table_name(table, prefix):
        raise UnsafeTableNameError(f"not an import table ({prefix}...): {table!r}")


def _like_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _like_prefix(prefix: str) -> str:
    return _like_escape(prefix) + "%"


def _billing_cycle_label(distinct: int, sample: str | None) -> str:
    if distinct == 1 and sample:
        return sample
    if distinct == 0:
        return "(blank)"
    return f"Multiple ({distinct})"


def list_import_tables(cursor: Any, schema: str, prefix: str = DEFAULT_TABLE_PREFIX) -> list[TableSummary]:
    """Summarize every non-empty import table, ordered case-insensitively by name."""
    cursor.execute(_LIST_TABLES_SQL, (schema, _like_prefix(prefix)))
    names = [r[0] for r in cursor.fetchall()]

    summaries: list[TableSummary] = []
    for name in names:
        if not is_safe_import_table_name(name, prefix):
            continue
        query = sql.SQL(
            "SELECT COUNT(*), COALESCE(SUM({pt}), 0), COUNT(DISTINCT {grp}), "
            "COUNT(DISTINCT NULLIF(BTRIM({ck}), '')), "
            "MIN(NULLIF(BTRIM({ck}), '')) FROM {tbl}"
        ).format(
            pt=sql.Identifier(PAYABLE_COLUMN),
            grp=sql.Identifier(GROUP_COLUMN),
            ck=sql.Identifier(BILLING_CYCLE_COLUMN),
            tbl=sql.Identifier(schema, name),
        )
        cursor.execute(query)
        total_rows, payable, groups, cycles, sample = cursor.fetchone()
        if not total_rows:
            continue
        summaries.append(
            TableSummary(
                table_name=name,
                group_count=int(groups or 0),
                billing_cycle=_billing_cycle_label(int(cycles or 0), sample),
                total_rows=int(total_rows),
                payable_total=Decimal(payable or 0),
            )
        )
    summaries.sort(key=lambda s: s.table_name.casefold())
    return summaries


def group_details(
    cursor: Any,
    schema: str,
    table: str,
    query: str | None = None,
    prefix: str = DEFAULT_TABLE_PREFIX,
) -> list[GroupDetail]:
    """One line per TEN_FILE with totals, optionally filtered by a search string.

    TEN_FILE values differing only in case form one group, the same as in
    import validation. The filter is a case-insensitive substring match on
    TEN_FILE, TEN_TT or DIACHI_TT; ``%`` and ``_`` in it match literally.
    """
    _require_safe(table, prefix)
    params: list[Any] = []
    where = sql.SQL("")
    if query and query.strip():
        where = sql.SQL(" WHERE ({g} ILIKE %s OR {n} ILIKE %s OR {a} ILIKE %s)").format(
            g=sql.Identifier(GROUP_COLUMN),
            n=sql.Identifier(NAME_COLUMN),
            a=sql.Identifier(ADDRESS_COLUMN),
        )
        pattern = f"%{_like_escape(query.strip())}%"
        params = [pattern, pattern, pattern]
    statement = sql.SQL(
        "SELECT MIN({g}), MAX({ck}), MAX({n}), MAX({a}), COUNT(*), "
        "COALESCE(SUM({pre}), 0), COALESCE(SUM({tax}), 0), COALESCE(SUM({pt}), 0) "
        "FROM {tbl}{where} GROUP BY LOWER({g}) ORDER BY LOWER({g})"
    ).format(
        g=sql.Identifier(GROUP_COLUMN),
        ck=sql.Identifier(BILLING_CYCLE_COLUMN),
        n=sql.Identifier(NAME_COLUMN),
        a=sql.Identifier(ADDRESS_COLUMN),
        pre=sql.Identifier(PRE_TAX_COLUMN),
        tax=sql.Identifier(TAX_COLUMN),
        pt=sql.Identifier(PAYABLE_COLUMN),
        tbl=sql.Identifier(schema, table),
        where=where,
    )
    cursor.execute(statement, params or None)
    return [
        GroupDetail(
            group=row[0] or "",
            billing_cycle=row[1],
            customer_name=row[2],
            customer_address=row[3],
            row_count=int(row[4] or 0),
            pre_tax_total=Decimal(row[5] or 0),
            tax_total=Decimal(row[6] or 0),
            payable_total=Decimal(row[7] or 0),
        )
        for row in cursor.fetchall()
    ]


def drop_import_table(cursor: Any, schema: str, table: str, prefix: str = DEFAULT_TABLE_PREFIX) -> bool:
    """Drop an import table. Returns False when it does not exist."""
    _require_safe(table, prefix)
    if not table_exists(cursor, schema, table):
        return False
    cursor.execute(sql.SQL("DROP TABLE {}").format(sql.Identifier(schema, table)))
    return True
