from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""ImportRow model and ImportKind enum for the bulk spreadsheet import.

An ImportRow is one parsed spreadsheet record. Every cell value is either a
string or None until the row has been validated; the reader takes care of
rendering dates and integral numbers as strings.
"""

__all__ = [
    "ImportKind",
    "ImportRow",
    "MEMBER_REQUIRED_COLUMNS",
    "MEMBER_OPTIONAL_COLUMNS",
    "ALLOCATION_REQUIRED_COLUMNS",
    "ALLOCATION_FIELDS",
    "ALLOCATION_OPTIONAL_COLUMNS",
]


class ImportKind(Enum):
    """Import variant. The value is the import_type stored in the import log."""
    MEMBERS = "members"
    TRIP_ALLOCATIONS = "trip_allocations"

    @property
    def noun(self) -> str:
        # Used in operator notices ("Successfully imported 3 members.")
        return "members" if self is ImportKind.MEMBERS else "allocations"


MEMBER_REQUIRED_COLUMNS = (
    "full_name",
    "email",
    "phone",
    "date_of_birth",
    "gender",
    "membership_type",
    "address",
)
MEMBER_OPTIONAL_COLUMNS = ("city", "state", "postal_code", "country")

ALLOCATION_REQUIRED_COLUMNS = ("member_id",)
# At least one of these must be filled for an allocation row
ALLOCATION_FIELDS = (
    "room_number",
    "bus_seat_number",
    "train_seat_number",
    "pnr_number",
    "flight_ticket_number",
)
ALLOCATION_OPTIONAL_COLUMNS = ALLOCATION_FIELDS + ("additional_notes",)


@dataclass(frozen=True)
class ImportRow:
    """One data row of the uploaded sheet.

    row_number is the spreadsheet row number (header row = 1, so the first
    data row is 2). It is derived from input position, not from processing
    order.
    """
    row_number: int
    values: dict[str, str | None]

    def get(self, column: str) -> str | None:
        return self.values.get(column)
