"""Domain models for the billing extract importer.

Rows, batches, destination schemas, import outcomes, error records and the
configuration objects shared across the package.
"""

from .batch import Batch
from .config_models import DatabaseConfig, ImportConfig
from .destination import ColumnSpec, ColumnType, DestinationSchema
from .error_record import ErrorRecord
from .import_result import ImportOutcome, ImportStatus, Rejection, RejectionKind
from .row_data import NormalizedRow, RawRow

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    # Processing models
    "Batch",
    "NormalizedRow",
    "RawRow",
    # Destination models
    "ColumnSpec",
    "ColumnType",
    "DestinationSchema",
    # Results
    "ErrorRecord",
    "ImportOutcome",
    "ImportStatus",
    "Rejection",
    "RejectionKind",
]
