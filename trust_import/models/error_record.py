from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the local JSON Lines error log.

Supports row=-1 as a sentinel for batch-level errors where no spreadsheet
row applies (unreadable file, import log could not be created, ...).
The key set is fixed; to_json_line never emits extra keys.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Spreadsheet file name being imported
        import_type: members | trip_allocations
        row: Spreadsheet row number. -1 for batch-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Validation reason or store error message
    """
    timestamp: str
    file: str
    import_type: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, import_type: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            import_type=import_type,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
