from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import psycopg2

from ..db.batch_insert import BatchInsertError, batch_insert
from ..db.schema import (
    InvalidTableNameError,
    SchemaCreationError,
    TableAlreadyExistsError,
    build_destination_schema,
    create_destination,
    derive_table_name,
)
from ..excel.headers import DuplicateHeaderError, EmptyHeaderError, normalize_headers
from ..excel.reader import RawSheet, normalize_rows, read_spreadsheet, to_raw_rows
from ..logging.error_log import ErrorLogBuffer, records_for_outcome
from ..models.batch import Batch
from ..models.columns import REQUIRED_COLUMNS
from ..models.config_models import ImportConfig
from ..models.import_result import ImportOutcome, ImportStatus, Rejection, RejectionKind
from .consistency import validate_batch
from .progress import InsertProgress

"""Import orchestration.

One call = one import, linear, no retries:

    RECEIVED -> HEADERS_VALIDATED -> ROWS_NORMALIZED -> CONSISTENCY_CHECKED
             -> SCHEMA_CREATED -> PERSISTED      (or REJECTED from any step)

Header problems (unusable/duplicate titles, missing required columns) stop the
import before any row is looked at. Everything else found during validation
(invalid table name, empty batch, identity and billing-cycle conflicts) is
collected and reported together, so a user can fix every problem in one pass.

Storage is touched only after validation passed. The table is created and
committed first; rows are inserted in a second transaction. A failed insert
rolls back its rows but leaves the (empty) table behind, and the rejection
says so.

With ``cursor=None`` the import runs as a dry run: all checks, no writes.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "BatchIngestor",
]


class BatchIngestor:
    """Validate a billing extract and persist it into a new table."""

    def __init__(
        self,
        config: ImportConfig,
        cursor: Any = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.config = config
        self.cursor = cursor
        self.error_log = error_log if error_log is not None else ErrorLogBuffer(Path(config.logs_dir))
        self.status = ImportStatus.RECEIVED

    @property
    def dry_run(self) -> bool:
        return self.cursor is None

    def ingest_file(self, path: Path, base_name: str) -> ImportOutcome:
        """Read ``path`` and import it. ``SpreadsheetReadError`` propagates."""
        sheet = to_raw_rows(read_spreadsheet(path))
        return self.ingest(sheet, base_name, source=path.name)

    def ingest(self, sheet: RawSheet, base_name: str, source: str = "<memory>") -> ImportOutcome:
        start_time = datetime.now(UTC)
        self._advance(ImportStatus.RECEIVED, source)
        rejections: list[Rejection] = []

        table_name: str | None = None
        try:
            table_name = derive_table_name(base_name, self.config.table_prefix)
        except InvalidTableNameError as e:
            rejections.append(
                Rejection(RejectionKind.INVALID_DERIVED_NAME, str(e), {"base_name": base_name})
            )

        # Header checks gate everything below
        try:
            headers = normalize_headers(sheet.headers)
        except EmptyHeaderError as e:
            rejections.append(
                Rejection(RejectionKind.EMPTY_HEADER, str(e), {"position": e.position})
            )
            return self._finish(source, table_name, rejections, 0, start_time)
        except DuplicateHeaderError as e:
            rejections.append(
                Rejection(RejectionKind.DUPLICATE_HEADER, str(e), {"columns": e.duplicates})
            )
            return self._finish(source, table_name, rejections, 0, start_time)

        missing = [c for c in REQUIRED_COLUMNS if c not in headers]
        if missing:
            rejections.append(
                Rejection(
                    RejectionKind.MISSING_REQUIRED_COLUMNS,
                    f"missing required columns: {', '.join(missing)}",
                    {"columns": missing},
                )
            )
            return self._finish(source, table_name, rejections, 0, start_time)
        self._advance(ImportStatus.HEADERS_VALIDATED, source)

        batch = Batch(source=source, headers=tuple(headers), rows=normalize_rows(sheet, headers))
        self._advance(ImportStatus.ROWS_NORMALIZED, source)
        logger.debug("source=%s rows=%d columns=%s", source, len(batch), list(batch.headers))

        if batch.is_empty:
            rejections.append(Rejection(RejectionKind.EMPTY_BATCH, "spreadsheet has no data rows"))
        else:
            rejections.extend(validate_batch(batch.rows).rejections())
        # table_name is None only together with an INVALID_DERIVED_NAME rejection
        if rejections or table_name is None:
            return self._finish(source, table_name, rejections, 0, start_time)
        self._advance(ImportStatus.CONSISTENCY_CHECKED, source)

        if self.dry_run:
            logger.info("dry run: %d rows of %s validated, nothing written", len(batch), source)
            return self._finish(source, table_name, [], len(batch), start_time)

        failure = self._create_schema(batch, base_name)
        if failure is not None:
            return self._finish(source, table_name, [failure], 0, start_time)
        self._advance(ImportStatus.SCHEMA_CREATED, source)

        inserted, failure = self._insert_rows(batch, table_name)
        if failure is not None:
            return self._finish(source, table_name, [failure], 0, start_time)
        return self._finish(source, table_name, [], inserted, start_time)

    # ------------------------------------------------------------------ steps

    def _create_schema(self, batch: Batch, base_name: str) -> Rejection | None:
        try:
            dest = build_destination_schema(
                base_name,
                batch.headers,
                prefix=self.config.table_prefix,
                schema=self.config.schema,
            )
            create_destination(self.cursor, dest)
            self._commit()
        except TableAlreadyExistsError as e:
            self._rollback()
            return Rejection(
                RejectionKind.DESTINATION_ALREADY_EXISTS, str(e), {"table": e.table_name}
            )
        except (SchemaCreationError, psycopg2.Error) as e:
            self._rollback()
            return Rejection(RejectionKind.SCHEMA_CREATION_FAILED, f"cannot create table: {e}")
        logger.info("created table %s.%s", dest.schema, dest.table_name)
        return None

    def _insert_rows(self, batch: Batch, table_name: str) -> tuple[int, Rejection | None]:
        try:
            with InsertProgress(len(batch), description=f"Inserting {table_name}") as progress:
                result = batch_insert(
                    self.cursor,
                    self.config.schema,
                    table_name,
                    list(batch.headers),
                    batch.value_rows(),
                    page_size=self.config.page_size,
                    progress_callback=progress.advance,
                )
            self._commit()
        except (BatchInsertError, psycopg2.Error) as e:
            self._rollback()
            return 0, Rejection(
                RejectionKind.ROW_PERSISTENCE_FAILED,
                f"{e} (table {table_name} was created and may need manual cleanup)",
                {"table": table_name},
            )
        return result.inserted_rows, None

    # ---------------------------------------------------------------- helpers

    def _advance(self, status: ImportStatus, source: str) -> None:
        self.status = status
        logger.debug("source=%s state=%s", source, status.value)

    def _commit(self) -> None:
        self.cursor.connection.commit()

    def _rollback(self) -> None:
        try:
            self.cursor.connection.rollback()
        except psycopg2.Error as e:
            # Report the create or insert failure, not this one
            logger.warning("rollback failed: %s", e)

    def _finish(
        self,
        source: str,
        table_name: str | None,
        rejections: list[Rejection],
        inserted_rows: int,
        start_time: datetime,
    ) -> ImportOutcome:
        status = ImportStatus.REJECTED if rejections else ImportStatus.PERSISTED
        self._advance(status, source)
        outcome = ImportOutcome(
            source=source,
            table_name=table_name,
            status=status,
            inserted_rows=inserted_rows,
            rejections=tuple(rejections),
            dry_run=self.dry_run,
            start_time=start_time,
            end_time=datetime.now(UTC),
        )
        if rejections:
            for rejection in rejections:
                logger.error("%s: %s", rejection.kind.value, rejection.message)
            self.error_log.extend(records_for_outcome(outcome))
            try:
                path = self.error_log.flush()
            except OSError as e:
                logger.warning("could not write error log: %s", e)
            else:
                if path is not None:
                    logger.info("error details written to %s", path)
        return outcome
