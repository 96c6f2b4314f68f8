"""Domain models for the trust's bulk spreadsheet import.

This package contains the dataclasses shared by the reader, the store
implementations, the import services and the CLI.
"""

from .config_models import DatabaseConfig, ImportConfig, ImportDefaults, TableNames
from .error_record import ErrorRecord
from .import_log import ImportLog, ImportLogStatus, Trip
from .import_result import (
    ImportOutcome,
    ImportResult,
    ImportStatus,
    ImportSummary,
    ValidationOutcome,
)
from .import_row import ImportKind, ImportRow

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    "ImportDefaults",
    "TableNames",
    # Import models
    "ImportKind",
    "ImportRow",
    "ImportOutcome",
    "ImportResult",
    "ImportStatus",
    "ImportSummary",
    "ValidationOutcome",
    # Backend records
    "ImportLog",
    "ImportLogStatus",
    "Trip",
    "ErrorRecord",
]
