from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.import_result import ValidationOutcome
from ..models.import_row import ALLOCATION_FIELDS, ImportKind

"""Row validation rules.

Pure functions; no store access. Rules are checked in a fixed order and the
first failing rule determines the error message.
"""

__all__ = [
    "GENDERS",
    "MEMBERSHIP_TYPES",
    "validate_row",
    "validate_member_row",
    "validate_allocation_row",
]

GENDERS = ("male", "female", "other")
MEMBERSHIP_TYPES = ("regular", "premium", "honorary")


def _filled(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def validate_member_row(row: Mapping[str, Any]) -> ValidationOutcome:
    if not _filled(row.get("full_name")):
        return ValidationOutcome.fail("Full name is required")

    email = row.get("email")
    if not isinstance(email, str) or "@" not in email:
        return ValidationOutcome.fail("Valid email is required")

    if not _filled(row.get("phone")):
        return ValidationOutcome.fail("Phone number is required")

    dob = row.get("date_of_birth")
    if not isinstance(dob, str) or dob == "":
        return ValidationOutcome.fail("Date of birth is required")

    if row.get("gender") not in GENDERS:
        return ValidationOutcome.fail("Gender must be male, female, or other")

    if row.get("membership_type") not in MEMBERSHIP_TYPES:
        return ValidationOutcome.fail("Membership type must be regular, premium, or honorary")

    if not _filled(row.get("address")):
        return ValidationOutcome.fail("Address is required")

    return ValidationOutcome.ok()


def validate_allocation_row(row: Mapping[str, Any]) -> ValidationOutcome:
    if not _filled(row.get("member_id")):
        return ValidationOutcome.fail("Member ID is required")

    if not any(row.get(f) for f in ALLOCATION_FIELDS):
        return ValidationOutcome.fail("At least one allocation field is required")

    return ValidationOutcome.ok()


def validate_row(kind: ImportKind, row: Mapping[str, Any]) -> ValidationOutcome:
    if kind is ImportKind.MEMBERS:
        return validate_member_row(row)
    return validate_allocation_row(row)
