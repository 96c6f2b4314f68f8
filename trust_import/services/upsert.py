from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..db.store import ImportStore
from ..models.config_models import ImportDefaults
from ..models.import_row import ALLOCATION_OPTIONAL_COLUMNS

"""Record builders and writers for validated rows.

Member rows are inserted (never updated). Trip assignments are upserted on
(trip_id, member_id) as a full-record replace: absent logistics fields are
written as NULL rather than left untouched.
"""

__all__ = [
    "build_member_record",
    "build_assignment_record",
    "insert_member",
    "upsert_assignment",
]


def _trimmed(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def build_member_record(
    row: Mapping[str, Any], member_id: str, defaults: ImportDefaults | None = None
) -> dict[str, Any]:
    defaults = defaults or ImportDefaults()
    return {
        "id": member_id,
        "full_name": _trimmed(row.get("full_name")),
        "email": _trimmed(row.get("email")).lower(),
        "phone": _trimmed(row.get("phone")),
        "date_of_birth": row.get("date_of_birth"),
        "gender": row.get("gender"),
        "membership_type": row.get("membership_type"),
        "address": _trimmed(row.get("address")),
        "city": _trimmed(row.get("city")),
        "state": _trimmed(row.get("state")),
        "postal_code": _trimmed(row.get("postal_code")),
        "country": _trimmed(row.get("country")) or defaults.country,
        "status": defaults.member_status,
        "photo_url": defaults.photo_url,
        "emergency_contact": {},
    }


def build_assignment_record(row: Mapping[str, Any], trip_id: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "trip_id": trip_id,
        "member_id": _trimmed(row.get("member_id")),
    }
    for column in ALLOCATION_OPTIONAL_COLUMNS:
        record[column] = _trimmed(row.get(column)) or None
    return record


def insert_member(
    store: ImportStore, row: Mapping[str, Any], member_id: str, defaults: ImportDefaults | None = None
) -> dict[str, Any]:
    record = build_member_record(row, member_id, defaults)
    store.insert_member(record)
    return record


def upsert_assignment(store: ImportStore, row: Mapping[str, Any], trip_id: Any) -> dict[str, Any]:
    record = build_assignment_record(row, trip_id)
    store.upsert_trip_assignment(record)
    return record
