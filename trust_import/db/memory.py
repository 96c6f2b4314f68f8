from __future__ import annotations

import itertools
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from typing import Any

from ..models.import_log import ImportLog, ImportLogStatus, Trip
from ..models.import_result import ImportSummary
from .store import DuplicateKeyError, StoreError

"""Dict-backed ImportStore.

Mirrors the backend's constraints that matter to the importer (unique
member id and email, one assignment per trip/member pair). Used by the test
suite and by the CLI mock mode (DISABLE_DB_CONNECT=1).
"""

__all__ = ["InMemoryStore"]


class InMemoryStore:
    def __init__(
        self,
        members: Iterable[dict[str, Any]] = (),
        registrations: Iterable[dict[str, Any]] = (),
        trips: Iterable[Trip] = (),
        profiles: Iterable[dict[str, Any]] = (),
    ) -> None:
        self.members: dict[str, dict[str, Any]] = {}
        for m in members:
            self.members[m["id"]] = dict(m)
        self.registrations: list[dict[str, Any]] = [dict(r) for r in registrations]
        self.trips: list[Trip] = list(trips)
        self.profiles: list[dict[str, Any]] = [dict(p) for p in profiles]
        self.assignments: dict[tuple[Any, str], dict[str, Any]] = {}
        self.import_logs: dict[int, ImportLog] = {}
        self._log_ids = itertools.count(1)

    # members
    def find_member_by_email(self, email: str) -> str | None:
        needle = email.strip().lower()
        for member_id, m in self.members.items():
            if (m.get("email") or "").lower() == needle:
                return member_id
        return None

    def last_member_id_with_prefix(self, prefix: str) -> str | None:
        candidates = [mid for mid in self.members if mid.upper().startswith(prefix.upper())]
        return max(candidates) if candidates else None

    def member_exists(self, member_id: str) -> bool:
        return member_id in self.members

    def insert_member(self, record: dict[str, Any]) -> None:
        member_id = record["id"]
        if member_id in self.members:
            raise DuplicateKeyError(
                f'duplicate key value violates unique constraint "members_pkey" ({member_id})'
            )
        if self.find_member_by_email(record.get("email") or "") is not None:
            raise DuplicateKeyError(
                'duplicate key value violates unique constraint "members_email_key"'
            )
        self.members[member_id] = dict(record)

    # trips
    def has_registration(self, trip_id: Any, member_id: str, status: str) -> bool:
        return any(
            r.get("trip_id") == trip_id
            and r.get("member_id") == member_id
            and r.get("status") == status
            for r in self.registrations
        )

    def upsert_trip_assignment(self, record: dict[str, Any]) -> None:
        if record.get("member_id") not in self.members:
            raise StoreError(
                'insert or update on table "trip_assignments" violates foreign key constraint '
                '"trip_assignments_member_id_fkey"'
            )
        self.assignments[(record["trip_id"], record["member_id"])] = dict(record)

    def list_trips(self) -> Sequence[Trip]:
        return sorted(self.trips, key=lambda t: t.start_date or date.min, reverse=True)

    # import logs
    def create_import_log(
        self, import_type: str, file_name: str, total_rows: int, imported_by: Any = None
    ) -> int:
        log_id = next(self._log_ids)
        self.import_logs[log_id] = ImportLog(
            id=log_id,
            import_type=import_type,
            file_name=file_name,
            total_rows=total_rows,
            imported_by=imported_by,
            created_at=datetime.now(UTC),
        )
        return log_id

    def complete_import_log(self, log_id: Any, summary: ImportSummary, completed_at: datetime) -> None:
        log = self.import_logs.get(log_id)
        if log is None:
            raise StoreError(f"import log {log_id} not found")
        log.successful_rows = summary.successful
        log.failed_rows = summary.failed
        log.status = ImportLogStatus(summary.status)
        log.error_details = list(summary.error_details)
        log.completed_at = completed_at

    def list_import_logs(self, status: str | None = None, limit: int = 20) -> Sequence[ImportLog]:
        logs = [
            log for log in self.import_logs.values() if status is None or log.status.value == status
        ]
        logs.sort(key=lambda log: log.id, reverse=True)
        return logs[:limit]

    # operators
    def find_profile_id(self, email: str) -> Any:
        needle = email.strip().lower()
        for p in self.profiles:
            if (p.get("email") or "").lower() == needle:
                return p.get("id")
        return None
