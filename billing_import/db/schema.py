from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2 import sql

from ..models.columns import MONEY_COLUMNS, REQUIRED_COLUMNS
from ..models.config_models import DEFAULT_SCHEMA, DEFAULT_TABLE_PREFIX
from ..models.destination import ColumnSpec, ColumnType, DestinationSchema

"""Destination schema synthesis.

Table name derivation:
    base name -> strip an existing prefix (case-insensitive) -> replace every
    character outside [A-Za-z0-9_] with '_' -> re-add the prefix

Column typing:
    money columns -> NUMERIC(18,0) NULL
    NGAY_IN and every other column -> TEXT NULL (source dates are not reliably typed)
    plus a synthetic identity column and an import timestamp, prepended

Creation runs as one critical section per derived name: a transaction-scoped
advisory lock, an existence check, then a plain CREATE TABLE. The existence
check only gives an early, friendly answer; a DuplicateTable error from the
CREATE itself is mapped to the same ``TableAlreadyExistsError``.
"""

__all__ = [
    "IDENTITY_COLUMN",
    "IMPORTED_AT_COLUMN",
    "InvalidTableNameError",
    "SchemaCreationError",
    "TableAlreadyExistsError",
    "build_destination_schema",
    "create_destination",
    "create_table_sql",
    "derive_table_name",
    "synthesize_destination",
    "table_exists",
]

IDENTITY_COLUMN = "ID"
IMPORTED_AT_COLUMN = "ImportedAt"

# PostgreSQL silently truncates longer identifiers
MAX_IDENTIFIER_LENGTH = 63

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_]")
_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9_]+$")

_EXISTS_SQL = (
    "SELECT 1 FROM information_schema.tables WHERE table_schema = %s AND table_name = %s"
)
_LOCK_SQL = "SELECT pg_advisory_xact_lock(hashtext(%s))"


class InvalidTableNameError(Exception):
    """Raised when no safe table name can be derived from the user input."""


class TableAlreadyExistsError(Exception):
    """Raised when the derived destination already exists. Imports never merge."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"table '{table_name}' already exists; choose another name")


class SchemaCreationError(Exception):
    """Raised when the store refuses the CREATE TABLE for any other reason."""


def derive_table_name(base_name: str | None, prefix: str = DEFAULT_TABLE_PREFIX) -> str:
    """Derive the destination table name for a user supplied base name.

    >>> derive_table_name("Report 2024!")
    'Vnpt_Report_2024_'
    >>> derive_table_name("vnpt_Thang10")
    'Vnpt_Thang10'

    Raises:
        InvalidTableNameError: when nothing remains after sanitizing
    """
    text = (base_name or "").strip()
    if prefix:
        text = re.sub(rf"^\s*{re.escape(prefix)}", "", text, flags=re.IGNORECASE)
    safe = _UNSAFE_RE.sub("_", text)
    if not safe:
        raise InvalidTableNameError(f"invalid table name: {base_name!r}")
    final = f"{prefix}{safe}"
    if not _SAFE_NAME_RE.match(final):
        raise InvalidTableNameError(f"invalid table prefix: {prefix!r}")
    if len(final.encode("utf-8")) > MAX_IDENTIFIER_LENGTH:
        raise InvalidTableNameError(
            f"table name '{final}' is longer than {MAX_IDENTIFIER_LENGTH} characters"
        )
    return final


def _column_type(name: str) -> ColumnType:
    if name in MONEY_COLUMNS:
        return ColumnType.MONEY
    # NGAY_IN included: print dates arrive in mixed formats
    return ColumnType.TEXT


def build_destination_schema(
    base_name: str | None,
    headers: Sequence[str],
    *,
    prefix: str = DEFAULT_TABLE_PREFIX,
    schema: str = DEFAULT_SCHEMA,
) -> DestinationSchema:
    """Build the destination description without touching the store.

    ``headers`` are canonical (normalized) names and must include every
    required column.
    """
    table_name = derive_table_name(base_name, prefix)
    missing = [c for c in REQUIRED_COLUMNS if c not in headers]
    if missing:
        raise ValueError(f"headers lack required columns: {', '.join(missing)}")
    if IDENTITY_COLUMN in headers:
        raise SchemaCreationError(f"column name {IDENTITY_COLUMN!r} is reserved for the row identity")
    columns = [
        ColumnSpec(IDENTITY_COLUMN, ColumnType.IDENTITY),
        ColumnSpec(IMPORTED_AT_COLUMN, ColumnType.IMPORT_TIMESTAMP),
    ]
    columns.extend(ColumnSpec(h, _column_type(h)) for h in headers)
    return DestinationSchema(schema=schema, table_name=table_name, columns=tuple(columns))


def create_table_sql(dest: DestinationSchema) -> sql.Composed:
    column_defs = sql.SQL(", ").join(
        sql.SQL("{} {}").format(sql.Identifier(c.name), sql.SQL(c.type.ddl)) for c in dest.columns
    )
    return sql.SQL("CREATE TABLE {} ({})").format(
        sql.Identifier(dest.schema, dest.table_name), column_defs
    )


def table_exists(cursor: Any, schema: str, table: str) -> bool:
    cursor.execute(_EXISTS_SQL, (schema, table))
    return cursor.fetchone() is not None


def create_destination(cursor: Any, dest: DestinationSchema) -> None:
    """Create ``dest`` inside the cursor's current transaction.

    The caller commits; the advisory lock is released at transaction end.

    Raises:
        TableAlreadyExistsError: name taken, before or during creation
        SchemaCreationError: any other driver failure
    """
    try:
        cursor.execute(_LOCK_SQL, (dest.qualified_name,))
        if table_exists(cursor, dest.schema, dest.table_name):
            raise TableAlreadyExistsError(dest.table_name)
        cursor.execute(create_table_sql(dest))
    except pg_errors.DuplicateTable as e:
        raise TableAlreadyExistsError(dest.table_name) from e
    except psycopg2.Error as e:
        raise SchemaCreationError(str(e).strip() or type(e).__name__) from e


def synthesize_destination(
    cursor: Any,
    base_name: str | None,
    headers: Sequence[str],
    *,
    prefix: str = DEFAULT_TABLE_PREFIX,
    schema: str = DEFAULT_SCHEMA,
) -> DestinationSchema:
    """Derive, describe and create the destination table in one call."""
    dest = build_destination_schema(base_name, headers, prefix=prefix, schema=schema)
    create_destination(cursor, dest)
    return dest
