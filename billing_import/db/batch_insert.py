from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import psycopg2
from psycopg2 import sql
from psycopg2.extras import execute_values

"""Batched row insertion with psycopg2.extras.execute_values.

Identifiers are composed with ``psycopg2.sql.Identifier``; values always travel
as parameters. Rows are sent in pages of ``page_size`` so progress can be
reported between pages. Any driver failure is surfaced verbatim as
``BatchInsertError``; there is no retry.
"""

__all__ = [
    "BatchInsertError",
    "InsertResult",
    "batch_insert",
    "insert_sql",
]


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    pages: int = 0


def insert_sql(schema: str, table: str, columns: Sequence[str]) -> sql.Composed:
    return sql.SQL("INSERT INTO {} ({}) VALUES %s").format(
        sql.Identifier(schema, table),
        sql.SQL(", ").join(sql.Identifier(c) for c in columns),
    )


def batch_insert(
    cursor: Any,
    schema: str,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    progress_callback: Callable[[int], None] | None = None,
) -> InsertResult:
    """Insert ``rows`` into ``schema.table``.

    Parameters
    ----------
    cursor: psycopg2 cursor (transaction handled by the caller)
    schema, table: destination, already validated by the schema synthesizer
    columns: insert columns in row order
    rows: row value sequences
    page_size: rows per execute_values call
    progress_callback: called with the row count of each page after it is sent.
        Not invoked for empty input.
    """
    if page_size < 1:
        raise ValueError("page_size must be positive")
    rows_list = [list(r) for r in rows]
    if not rows_list:
        return InsertResult(inserted_rows=0)

    query = insert_sql(schema, table, columns)
    inserted = 0
    pages = 0
    for start in range(0, len(rows_list), page_size):
        page = rows_list[start : start + page_size]
        try:
            execute_values(cursor, query, page, page_size=page_size)
        except psycopg2.Error as e:
            raise BatchInsertError(str(e).strip() or type(e).__name__) from e
        inserted += len(page)
        pages += 1
        if progress_callback is not None:
            progress_callback(len(page))
    return InsertResult(inserted_rows=inserted, pages=pages)
