from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Destination table model produced by the schema synthesizer."""

__all__ = [
    "ColumnSpec",
    "ColumnType",
    "DestinationSchema",
]


class ColumnType(Enum):
    """Semantic column types and their PostgreSQL rendering."""
    IDENTITY = "BIGINT GENERATED ALWAYS AS IDENTITY PRIMARY KEY"
    IMPORT_TIMESTAMP = "TIMESTAMPTZ NOT NULL DEFAULT now()"
    MONEY = "NUMERIC(18,0) NULL"
    TEXT = "TEXT NULL"

    @property
    def ddl(self) -> str:
        return self.value


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    type: ColumnType

    @property
    def synthetic(self) -> bool:
        """True for columns filled by the database, never by the import."""
        return self.type in (ColumnType.IDENTITY, ColumnType.IMPORT_TIMESTAMP)


@dataclass(frozen=True)
class DestinationSchema:
    """Derived table name plus ordered column list. Never mutated once created."""
    schema: str
    table_name: str
    columns: tuple[ColumnSpec, ...]

    @property
    def data_columns(self) -> list[str]:
        """Columns the import writes, in header order."""
        return [c.name for c in self.columns if not c.synthetic]

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.table_name}"
