from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

"""ImportLog and Trip models mirroring the backend's import_logs / trips rows.

State transitions of an import log: processing -> (completed | partial).
A log left at processing after its batch ended marks a batch that crashed
or could not be finalized.
"""


class ImportLogStatus(Enum):
    """Status of a server-side import log record.

    - PROCESSING: created at batch start, rows are being processed
    - COMPLETED: batch finished and every row succeeded
    - PARTIAL: batch finished with at least one failed row
    """
    PROCESSING = "processing"
    COMPLETED = "completed"
    PARTIAL = "partial"


@dataclass
class ImportLog:
    id: Any
    import_type: str
    file_name: str
    total_rows: int
    status: ImportLogStatus = ImportLogStatus.PROCESSING
    successful_rows: int | None = None
    failed_rows: int | None = None
    error_details: list[dict[str, Any]] = field(default_factory=list)
    imported_by: Any = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def orphaned(self) -> bool:
        return self.status is ImportLogStatus.PROCESSING


@dataclass(frozen=True)
class Trip:
    id: Any
    title: str
    start_date: date | None = None
