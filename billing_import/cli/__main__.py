from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..db.tables import UnsafeTableNameError, drop_import_table, group_details, list_import_tables
from ..excel.headers import DuplicateHeaderError, EmptyHeaderError, normalize_headers
from ..excel.reader import SpreadsheetReadError, read_spreadsheet, to_raw_rows
from ..logging.init import get_logger, log_summary, setup_logging
from ..models.config_models import ImportConfig
from ..services.ingestor import BatchIngestor
from ..services.summary import render_summary_line
from ..services.verbalizer import DEFAULT_SUFFIX, amount_to_words

"""CLI entrypoint.

Commands:
    import FILE --table NAME [--dry-run]   validate + persist one extract
    inspect FILE                           show canonical headers and sample rows
    tables                                 list imported tables
    details TABLE [--query Q]              per-notice totals, payable in words
    drop TABLE                             drop one imported table
    words AMOUNT [--suffix TEXT]           Vietnamese text of an amount

Exit codes: 0 success, 1 fatal (config, file, database connection), 2 import
rejected.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2

INSPECT_SAMPLE_ROWS = 3


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 cursor on a non-autocommit connection.

    Connection resolution order:
        1. DATABASE_URL / PGDSN (``.env`` already loaded with override)
        2. ``database.dsn`` from the config file
        3. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE,
           falling back to the config ``database`` section
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    try:
        conn.autocommit = False
        with conn.cursor() as cur:
            try:
                yield cur
            except BaseException:
                conn.rollback()
                raise
            else:
                conn.commit()
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load ``.env`` so that its connection settings win over the shell's."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="billing-import", description="Billing extract importer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config YAML path")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Validate and import one spreadsheet")
    imp.add_argument("file", type=Path)
    imp.add_argument("--table", required=True, help="Base name of the destination table")
    imp.add_argument("--dry-run", action="store_true", help="Validate only, write nothing")

    insp = sub.add_parser("inspect", help="Print canonical headers and first rows")
    insp.add_argument("file", type=Path)

    sub.add_parser("tables", help="List imported tables")

    det = sub.add_parser("details", help="Per-notice totals of one imported table")
    det.add_argument("table")
    det.add_argument("--query", default=None, help="Filter on TEN_FILE / TEN_TT / DIACHI_TT")

    drop = sub.add_parser("drop", help="Drop one imported table")
    drop.add_argument("table")

    words = sub.add_parser("words", help="Print an amount in Vietnamese words")
    words.add_argument("amount")
    words.add_argument("--suffix", default=DEFAULT_SUFFIX)
    return p.parse_args(argv)


def _inspect_data(path: Path) -> int:
    logger = get_logger()
    try:
        sheet = to_raw_rows(read_spreadsheet(path))
        headers = normalize_headers(sheet.headers)
    except (SpreadsheetReadError, EmptyHeaderError, DuplicateHeaderError) as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {path.name} rows={len(sheet.rows)}")
    print(f"  columns={headers}")
    for row_number, cells in sheet.rows[:INSPECT_SAMPLE_ROWS]:
        print(f"  row {row_number}: {dict(zip(headers, cells, strict=True))}")
    return EXIT_SUCCESS


def _print_words(amount_text: str, suffix: str) -> int:
    logger = get_logger()
    try:
        amount = Decimal(amount_text.replace("_", ""))
        print(amount_to_words(amount, suffix=suffix))
    except (InvalidOperation, ValueError) as e:
        logger.error(f"words: invalid amount {amount_text!r}: {e}")
        return EXIT_FATAL
    return EXIT_SUCCESS


def _run_import(args: argparse.Namespace, cfg: ImportConfig) -> int:
    logger = get_logger()
    dry_run = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"
    logger.info(f"Importing {args.file} into table base name {args.table!r}")
    try:
        if dry_run:
            outcome = BatchIngestor(cfg, cursor=None).ingest_file(args.file, args.table)
        else:
            with _db_connection(cfg) as cur:
                outcome = BatchIngestor(cfg, cursor=cur).ingest_file(args.file, args.table)
    except SpreadsheetReadError as e:
        logger.error(f"read: {e}")
        return EXIT_FATAL
    except psycopg2.OperationalError as e:
        logger.error(f"database: {e}".strip())
        return EXIT_FATAL

    if outcome.persisted:
        verb = "would insert" if outcome.dry_run else "inserted"
        logger.info(f"{verb} {outcome.inserted_rows} rows into {outcome.table_name}")
    log_summary(render_summary_line(outcome)[len("SUMMARY "):])
    return EXIT_SUCCESS if outcome.persisted else EXIT_REJECTED


def _run_db_command(args: argparse.Namespace, cfg: ImportConfig) -> int:
    logger = get_logger()
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.error(f"{args.command}: database access disabled (DISABLE_DB_CONNECT=1)")
        return EXIT_FATAL
    try:
        with _db_connection(cfg) as cur:
            if args.command == "tables":
                for s in list_import_tables(cur, cfg.schema, cfg.table_prefix):
                    print(
                        f"{s.table_name}\tnotices={s.group_count}\tcycle={s.billing_cycle}"
                        f"\trows={s.total_rows}\tpayable={s.payable_total:,}"
                    )
            elif args.command == "details":
                for d in group_details(cur, cfg.schema, args.table, args.query, cfg.table_prefix):
                    print(
                        f"{d.group}\tcycle={d.billing_cycle or ''}\tname={d.customer_name or ''}"
                        f"\trows={d.row_count}\tpre_tax={d.pre_tax_total:,}\ttax={d.tax_total:,}"
                        f"\tpayable={d.payable_total:,}"
                        f"\twords={amount_to_words(d.payable_total, cfg.currency_suffix)}"
                    )
            elif args.command == "drop":
                if not drop_import_table(cur, cfg.schema, args.table, cfg.table_prefix):
                    logger.error(f"drop: table {args.table!r} does not exist")
                    return EXIT_FATAL
                logger.info(f"dropped table {args.table}")
    except UnsafeTableNameError as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database: {e}".strip())
        return EXIT_FATAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # Only read sys.argv when no explicit list was given ([] stays [])
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    if args.command == "words":
        return _print_words(args.amount, args.suffix)
    if args.command == "inspect":
        return _inspect_data(args.file)

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "import":
        return _run_import(args, cfg)
    return _run_db_command(args, cfg)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
