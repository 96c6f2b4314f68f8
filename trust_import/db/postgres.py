from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import psycopg2
import psycopg2.errors
from psycopg2.extras import Json

from ..models.config_models import TableNames
from ..models.import_log import ImportLog, ImportLogStatus, Trip
from ..models.import_result import ImportSummary
from .store import DuplicateKeyError, StoreError

"""PostgreSQL ImportStore on top of a psycopg2 cursor.

The connection is expected in autocommit mode (see db.connection): every
insert/upsert commits on its own, so a failed row never rolls back the rows
before it. Table names come from config (validated as identifiers by the
config schema) and are quoted here.
"""

__all__ = ["PostgresStore"]

MEMBER_COLUMNS = (
    "id",
    "full_name",
    "email",
    "phone",
    "date_of_birth",
    "gender",
    "membership_type",
    "address",
    "city",
    "state",
    "postal_code",
    "country",
    "status",
    "photo_url",
    "emergency_contact",
)

ASSIGNMENT_COLUMNS = (
    "trip_id",
    "member_id",
    "room_number",
    "bus_seat_number",
    "train_seat_number",
    "pnr_number",
    "flight_ticket_number",
    "additional_notes",
)

_JSON_COLUMNS = {"emergency_contact"}


def _quote(name: str) -> str:
    # schema.table -> "schema"."table"
    return ".".join(f'"{part}"' for part in name.split("."))


def _adapt(column: str, value: Any) -> Any:
    if column in _JSON_COLUMNS and value is not None:
        return Json(value)
    return value


class PostgresStore:
    def __init__(self, cursor: Any, tables: TableNames | None = None) -> None:
        self._cur = cursor
        self._tables = tables or TableNames()

    def _execute(self, query: str, params: Sequence[Any] = ()) -> None:
        try:
            self._cur.execute(query, params)
        except psycopg2.errors.UniqueViolation as e:
            raise DuplicateKeyError(str(e).strip()) from e
        except psycopg2.Error as e:
            raise StoreError(str(e).strip()) from e

    def _fetchone(self, query: str, params: Sequence[Any] = ()) -> tuple[Any, ...] | None:
        self._execute(query, params)
        try:
            return self._cur.fetchone()
        except psycopg2.Error as e:
            raise StoreError(str(e).strip()) from e

    def _fetchall(self, query: str, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        self._execute(query, params)
        try:
            return list(self._cur.fetchall())
        except psycopg2.Error as e:
            raise StoreError(str(e).strip()) from e

    # members
    def find_member_by_email(self, email: str) -> str | None:
        row = self._fetchone(
            f"SELECT id FROM {_quote(self._tables.members)} WHERE lower(email) = lower(%s) LIMIT 1",
            (email.strip(),),
        )
        return row[0] if row else None

    def last_member_id_with_prefix(self, prefix: str) -> str | None:
        row = self._fetchone(
            f"SELECT id FROM {_quote(self._tables.members)} WHERE id ILIKE %s ORDER BY id DESC LIMIT 1",
            (f"{prefix}%",),
        )
        return row[0] if row else None

    def member_exists(self, member_id: str) -> bool:
        row = self._fetchone(
            f"SELECT 1 FROM {_quote(self._tables.members)} WHERE id = %s",
            (member_id,),
        )
        return row is not None

    def insert_member(self, record: dict[str, Any]) -> None:
        cols = [c for c in MEMBER_COLUMNS if c in record]
        cols_sql = ",".join(f'"{c}"' for c in cols)
        placeholders = ",".join(["%s"] * len(cols))
        self._execute(
            f"INSERT INTO {_quote(self._tables.members)} ({cols_sql}) VALUES ({placeholders})",
            [_adapt(c, record[c]) for c in cols],
        )

    # trips
    def has_registration(self, trip_id: Any, member_id: str, status: str) -> bool:
        row = self._fetchone(
            f"SELECT id FROM {_quote(self._tables.trip_registrations)} "
            "WHERE trip_id = %s AND member_id = %s AND status = %s LIMIT 1",
            (trip_id, member_id, status),
        )
        return row is not None

    def upsert_trip_assignment(self, record: dict[str, Any]) -> None:
        # Full-record replace: every logistics column is overwritten, NULLs included
        cols_sql = ",".join(f'"{c}"' for c in ASSIGNMENT_COLUMNS)
        placeholders = ",".join(["%s"] * len(ASSIGNMENT_COLUMNS))
        updates = ",".join(
            f'"{c}" = EXCLUDED."{c}"' for c in ASSIGNMENT_COLUMNS if c not in ("trip_id", "member_id")
        )
        self._execute(
            f"INSERT INTO {_quote(self._tables.trip_assignments)} ({cols_sql}) VALUES ({placeholders}) "
            f"ON CONFLICT (trip_id, member_id) DO UPDATE SET {updates}",
            [record.get(c) for c in ASSIGNMENT_COLUMNS],
        )

    def list_trips(self) -> Sequence[Trip]:
        rows = self._fetchall(
            f"SELECT id, title, start_date FROM {_quote(self._tables.trips)} ORDER BY start_date DESC"
        )
        return [Trip(id=r[0], title=r[1], start_date=r[2]) for r in rows]

    # import logs
    def create_import_log(
        self, import_type: str, file_name: str, total_rows: int, imported_by: Any = None
    ) -> Any:
        row = self._fetchone(
            f"INSERT INTO {_quote(self._tables.import_logs)} "
            "(import_type, file_name, total_rows, imported_by, status) "
            "VALUES (%s, %s, %s, %s, %s) RETURNING id",
            (import_type, file_name, total_rows, imported_by, ImportLogStatus.PROCESSING.value),
        )
        if row is None:
            raise StoreError("import log insert returned no id")
        return row[0]

    def complete_import_log(self, log_id: Any, summary: ImportSummary, completed_at: datetime) -> None:
        self._execute(
            f"UPDATE {_quote(self._tables.import_logs)} SET successful_rows = %s, failed_rows = %s, "
            "status = %s, completed_at = %s, error_details = %s WHERE id = %s",
            (
                summary.successful,
                summary.failed,
                summary.status,
                completed_at,
                Json(summary.error_details),
                log_id,
            ),
        )
        if getattr(self._cur, "rowcount", 1) == 0:
            raise StoreError(f"import log {log_id} not found")

    def list_import_logs(self, status: str | None = None, limit: int = 20) -> Sequence[ImportLog]:
        query = (
            "SELECT id, import_type, file_name, total_rows, successful_rows, failed_rows, status, "
            f"error_details, imported_by, created_at, completed_at FROM {_quote(self._tables.import_logs)}"
        )
        params: list[Any] = []
        if status is not None:
            query += " WHERE status = %s"
            params.append(status)
        query += " ORDER BY created_at DESC LIMIT %s"
        params.append(limit)
        return [
            ImportLog(
                id=r[0],
                import_type=r[1],
                file_name=r[2],
                total_rows=r[3],
                successful_rows=r[4],
                failed_rows=r[5],
                status=ImportLogStatus(r[6]),
                error_details=r[7] or [],
                imported_by=r[8],
                created_at=r[9],
                completed_at=r[10],
            )
            for r in self._fetchall(query, params)
        ]

    # operators
    def find_profile_id(self, email: str) -> Any:
        row = self._fetchone(
            f"SELECT id FROM {_quote(self._tables.user_profiles)} WHERE lower(email) = lower(%s) LIMIT 1",
            (email.strip(),),
        )
        return row[0] if row else None
