from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the billing extract importer.

The loader in ``billing_import.config.loader`` builds these from
``config/import.yml`` after schema validation and default application.
"""

__all__ = [
    "DatabaseConfig",
    "ImportConfig",
]

DEFAULT_TABLE_PREFIX = "Vnpt_"
DEFAULT_SCHEMA = "public"
DEFAULT_PAGE_SIZE = 1000
DEFAULT_CURRENCY_SUFFIX = "đồng"
DEFAULT_LOGS_DIR = "./logs"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for imports and imported-table queries."""
    table_prefix: str = DEFAULT_TABLE_PREFIX  # namespace prefix of every destination table
    schema: str = DEFAULT_SCHEMA  # PostgreSQL schema holding destination tables
    page_size: int = DEFAULT_PAGE_SIZE  # rows per INSERT page
    currency_suffix: str = DEFAULT_CURRENCY_SUFFIX  # trailing word of amounts in words
    logs_dir: str = DEFAULT_LOGS_DIR
    database: DatabaseConfig = DatabaseConfig()
