from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .import_row import ImportKind

"""Per-row import results and the batch summary derived from them.

ImportResult entries are appended in input row order, one per row. The
summary is always computed from the finished list (see
services.summary.summarize) so that successful + failed == total holds by
construction.
"""

__all__ = [
    "ImportStatus",
    "ImportResult",
    "ImportSummary",
    "ImportOutcome",
    "ValidationOutcome",
]


class ImportStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating a single row. error is None when valid."""
    valid: bool
    error: str | None = None

    @staticmethod
    def ok() -> ValidationOutcome:
        return ValidationOutcome(valid=True)

    @staticmethod
    def fail(error: str) -> ValidationOutcome:
        return ValidationOutcome(valid=False, error=error)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one spreadsheet row.

    Attributes:
        row: Spreadsheet row number (first data row = 2)
        data: Original row values as parsed
        status: success or error
        member_id: Allocated identifier (member import successes only)
        error: Reason the row failed (error rows only)
        error_type: VALIDATION_ERROR | CONFLICT_ERROR | STORE_ERROR | UNEXPECTED_ERROR
    """
    row: int
    data: dict[str, Any]
    status: ImportStatus
    member_id: str | None = None
    error: str | None = None
    error_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ImportStatus.SUCCESS

    @staticmethod
    def success(row: int, data: dict[str, Any], member_id: str | None = None) -> ImportResult:
        return ImportResult(row=row, data=data, status=ImportStatus.SUCCESS, member_id=member_id)

    @staticmethod
    def failure(
        row: int, data: dict[str, Any], error: str, error_type: str = "VALIDATION_ERROR"
    ) -> ImportResult:
        return ImportResult(
            row=row, data=data, status=ImportStatus.ERROR, error=error, error_type=error_type
        )


@dataclass(frozen=True)
class ImportSummary:
    """Aggregate counts for one batch (written to the import log)."""
    total: int
    successful: int
    failed: int
    status: str  # completed | partial
    error_details: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class ImportOutcome:
    """Everything a finished batch hands to the result reporter.

    log_finalized is False when the import log could not be updated at the
    end of the batch; that log stays at status=processing.
    """
    kind: ImportKind
    file_name: str
    log_id: Any
    results: list[ImportResult]
    summary: ImportSummary
    elapsed_seconds: float
    log_finalized: bool = True
    error_log_path: Path | None = None
