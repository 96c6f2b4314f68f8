from __future__ import annotations

from datetime import UTC, date, datetime
from unittest.mock import MagicMock

import psycopg2
import psycopg2.errors
import pytest
from psycopg2.extras import Json

from trust_import.db.postgres import PostgresStore
from trust_import.db.store import DuplicateKeyError, StoreError
from trust_import.models.config_models import TableNames
from trust_import.models.import_log import ImportLogStatus
from trust_import.models.import_result import ImportSummary


@pytest.fixture()
def cursor():
    cur = MagicMock()
    cur.fetchone.return_value = None
    cur.fetchall.return_value = []
    cur.rowcount = 1
    return cur


def _last_sql(cur) -> tuple[str, list]:
    query, params = cur.execute.call_args.args
    return query, list(params)


def test_find_member_by_email(cursor):
    cursor.fetchone.return_value = ("R00001",)
    store = PostgresStore(cursor)
    assert store.find_member_by_email(" Ravi.Shah@example.com ") == "R00001"
    query, params = _last_sql(cursor)
    assert 'FROM "members"' in query
    assert "lower(email) = lower(%s)" in query
    assert params == ["Ravi.Shah@example.com"]


def test_last_member_id_with_prefix(cursor):
    cursor.fetchone.return_value = ("P00045",)
    store = PostgresStore(cursor)
    assert store.last_member_id_with_prefix("P") == "P00045"
    query, params = _last_sql(cursor)
    assert "ILIKE %s ORDER BY id DESC LIMIT 1" in query
    assert params == ["P%"]


def test_insert_member_wraps_json_columns(cursor):
    store = PostgresStore(cursor, TableNames(members="public.members"))
    store.insert_member({"id": "P00001", "email": "a@x.org", "emergency_contact": {}})
    query, params = _last_sql(cursor)
    assert query.startswith('INSERT INTO "public"."members" ("id","email","emergency_contact")')
    assert params[:2] == ["P00001", "a@x.org"]
    assert isinstance(params[2], Json)


def test_unique_violation_maps_to_duplicate_key(cursor):
    cursor.execute.side_effect = psycopg2.errors.UniqueViolation("duplicate key value")
    store = PostgresStore(cursor)
    with pytest.raises(DuplicateKeyError):
        store.insert_member({"id": "R00001", "email": "a@x.org"})


def test_other_database_errors_map_to_store_error(cursor):
    cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")
    store = PostgresStore(cursor)
    with pytest.raises(StoreError, match="server closed the connection") as e:
        store.member_exists("R00001")
    assert not isinstance(e.value, DuplicateKeyError)


def test_has_registration_filters_on_status(cursor):
    cursor.fetchone.return_value = (17,)
    store = PostgresStore(cursor)
    assert store.has_registration("trip-palitana", "R00001", "confirmed")
    query, params = _last_sql(cursor)
    assert 'FROM "trip_registrations"' in query
    assert params == ["trip-palitana", "R00001", "confirmed"]


def test_upsert_assignment_replaces_every_column(cursor):
    store = PostgresStore(cursor)
    store.upsert_trip_assignment({"trip_id": "trip-palitana", "member_id": "R00001", "room_number": "101"})
    query, params = _last_sql(cursor)
    assert "ON CONFLICT (trip_id, member_id) DO UPDATE SET" in query
    assert '"pnr_number" = EXCLUDED."pnr_number"' in query
    assert '"trip_id" = EXCLUDED' not in query
    assert params == ["trip-palitana", "R00001", "101", None, None, None, None, None]


def test_list_trips(cursor):
    cursor.fetchall.return_value = [("trip-shikharji", "Shikharji Yatra", date(2027, 1, 10))]
    trips = PostgresStore(cursor).list_trips()
    assert trips[0].title == "Shikharji Yatra"
    assert "ORDER BY start_date DESC" in _last_sql(cursor)[0]


def test_create_import_log_returns_id(cursor):
    cursor.fetchone.return_value = (9,)
    store = PostgresStore(cursor)
    assert store.create_import_log("members", "m.xlsx", 4, "profile-7") == 9
    query, params = _last_sql(cursor)
    assert "RETURNING id" in query
    assert params == ["members", "m.xlsx", 4, "profile-7", "processing"]


def test_create_import_log_without_id_fails(cursor):
    with pytest.raises(StoreError):
        PostgresStore(cursor).create_import_log("members", "m.xlsx", 4)


def test_complete_import_log(cursor):
    store = PostgresStore(cursor)
    done_at = datetime(2026, 10, 17, tzinfo=UTC)
    summary = ImportSummary(2, 1, 1, "partial", [{"row": 3, "error": "Address is required"}])
    store.complete_import_log(9, summary, done_at)
    query, params = _last_sql(cursor)
    assert query.startswith('UPDATE "import_logs" SET')
    assert params[:4] == [1, 1, "partial", done_at]
    assert isinstance(params[4], Json)
    assert params[5] == 9


def test_complete_import_log_missing_row(cursor):
    cursor.rowcount = 0
    with pytest.raises(StoreError, match="not found"):
        PostgresStore(cursor).complete_import_log(9, ImportSummary(0, 0, 0, "completed"), datetime.now(UTC))


def test_list_import_logs_with_status(cursor):
    created = datetime(2026, 10, 17, 8, 0, tzinfo=UTC)
    cursor.fetchall.return_value = [
        (5, "members", "m.xlsx", 4, None, None, "processing", None, None, created, None)
    ]
    logs = PostgresStore(cursor).list_import_logs(status="processing", limit=5)
    query, params = _last_sql(cursor)
    assert "WHERE status = %s" in query
    assert params == ["processing", 5]
    assert logs[0].status is ImportLogStatus.PROCESSING
    assert logs[0].error_details == []
    assert logs[0].orphaned
