from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol

from ..models.import_log import ImportLog, Trip
from ..models.import_result import ImportSummary

"""Store interface used by the import services.

The import services never import a connection singleton; they receive an
ImportStore. Implementations wrap every backend failure in StoreError and
keep the backend's own message as the error text, because that text is
what ends up in the per-row results.
"""

__all__ = [
    "StoreError",
    "DuplicateKeyError",
    "ImportStore",
]


class StoreError(Exception):
    """A read or write against the backing store failed."""


class DuplicateKeyError(StoreError):
    """A unique constraint rejected the write."""


class ImportStore(Protocol):
    # members
    def find_member_by_email(self, email: str) -> str | None: ...

    def last_member_id_with_prefix(self, prefix: str) -> str | None: ...

    def member_exists(self, member_id: str) -> bool: ...

    def insert_member(self, record: dict[str, Any]) -> None: ...

    # trips
    def has_registration(self, trip_id: Any, member_id: str, status: str) -> bool: ...

    def upsert_trip_assignment(self, record: dict[str, Any]) -> None: ...

    def list_trips(self) -> Sequence[Trip]: ...

    # import logs
    def create_import_log(
        self, import_type: str, file_name: str, total_rows: int, imported_by: Any = None
    ) -> Any: ...

    def complete_import_log(
        self, log_id: Any, summary: ImportSummary, completed_at: datetime
    ) -> None: ...

    def list_import_logs(self, status: str | None = None, limit: int = 20) -> Sequence[ImportLog]: ...

    # operators
    def find_profile_id(self, email: str) -> Any: ...
