from __future__ import annotations

import logging
from typing import Any

from ..db.store import ImportStore, StoreError

"""Existence checks run before a row is written. Read-only.

In the trip-allocation checks a failed lookup counts as a negative answer
("Member not found" / "Member not registered for this trip"). A failed
email lookup propagates as a store error so no duplicate can slip through.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "RowRejected",
    "check_member_email",
    "check_trip_allocation",
]


class RowRejected(Exception):
    """A row failed validation or a precondition. The message is shown to the operator."""

    def __init__(self, message: str, error_type: str = "VALIDATION_ERROR") -> None:
        super().__init__(message)
        self.error_type = error_type


def check_member_email(store: ImportStore, email: str) -> None:
    if store.find_member_by_email(email.strip().lower()) is not None:
        raise RowRejected("Email already exists", "CONFLICT_ERROR")


def check_trip_allocation(
    store: ImportStore, trip_id: Any, member_id: str, registration_status: str = "confirmed"
) -> None:
    member_id = member_id.strip()
    try:
        exists = store.member_exists(member_id)
    except StoreError as e:
        logger.debug("member lookup failed for %s: %s", member_id, e)
        exists = False
    if not exists:
        raise RowRejected("Member not found", "CONFLICT_ERROR")

    try:
        registered = store.has_registration(trip_id, member_id, registration_status)
    except StoreError as e:
        logger.debug("registration lookup failed for %s on %s: %s", member_id, trip_id, e)
        registered = False
    if not registered:
        raise RowRejected("Member not registered for this trip", "CONFLICT_ERROR")
