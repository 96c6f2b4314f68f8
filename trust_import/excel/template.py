from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..models.import_row import (
    ALLOCATION_OPTIONAL_COLUMNS,
    ALLOCATION_REQUIRED_COLUMNS,
    MEMBER_OPTIONAL_COLUMNS,
    MEMBER_REQUIRED_COLUMNS,
    ImportKind,
)

"""Template workbook generator.

Writes a workbook with the exact header row the importer expects plus two
example rows, so operators can copy the shape.
"""

__all__ = [
    "TEMPLATE_COLUMNS",
    "TEMPLATE_FILE_NAMES",
    "TEMPLATE_SHEET_NAMES",
    "template_rows",
    "write_template",
]

TEMPLATE_COLUMNS: dict[ImportKind, tuple[str, ...]] = {
    ImportKind.MEMBERS: MEMBER_REQUIRED_COLUMNS + MEMBER_OPTIONAL_COLUMNS,
    ImportKind.TRIP_ALLOCATIONS: ALLOCATION_REQUIRED_COLUMNS + ALLOCATION_OPTIONAL_COLUMNS,
}

TEMPLATE_SHEET_NAMES = {
    ImportKind.MEMBERS: "Members",
    ImportKind.TRIP_ALLOCATIONS: "Trip Allocations",
}

TEMPLATE_FILE_NAMES = {
    ImportKind.MEMBERS: "member_import_template.xlsx",
    ImportKind.TRIP_ALLOCATIONS: "trip_allocation_template.xlsx",
}

_EXAMPLE_ROWS: dict[ImportKind, list[dict[str, str]]] = {
    ImportKind.MEMBERS: [
        {
            "full_name": "John Doe",
            "email": "john.doe@example.com",
            "phone": "+911234567890",
            "date_of_birth": "1990-01-15",
            "gender": "male",
            "membership_type": "regular",
            "address": "123 Main Street",
            "city": "Mumbai",
            "state": "Maharashtra",
            "postal_code": "400001",
            "country": "India",
        },
        {
            "full_name": "Jane Smith",
            "email": "jane.smith@example.com",
            "phone": "+919876543210",
            "date_of_birth": "1985-05-20",
            "gender": "female",
            "membership_type": "premium",
            "address": "456 Park Avenue",
            "city": "Delhi",
            "state": "Delhi",
            "postal_code": "110001",
            "country": "India",
        },
    ],
    ImportKind.TRIP_ALLOCATIONS: [
        {
            "member_id": "R00001",
            "room_number": "101",
            "bus_seat_number": "A1",
            "train_seat_number": "",
            "pnr_number": "",
            "flight_ticket_number": "",
            "additional_notes": "Window seat preferred",
        },
        {
            "member_id": "P00045",
            "room_number": "102",
            "bus_seat_number": "A2",
            "train_seat_number": "B12",
            "pnr_number": "1234567890",
            "flight_ticket_number": "",
            "additional_notes": "",
        },
    ],
}


def template_rows(kind: ImportKind) -> list[dict[str, str]]:
    return [dict(r) for r in _EXAMPLE_ROWS[kind]]


def write_template(kind: ImportKind, path: Path | None = None) -> Path:
    """Write the template workbook for kind and return its path.

    Args:
        kind: Import variant
        path: Output file; defaults to the standard template name in the CWD
    """
    out = path if path is not None else Path(TEMPLATE_FILE_NAMES[kind])
    df = pd.DataFrame(template_rows(kind), columns=list(TEMPLATE_COLUMNS[kind]))
    # Every cell is text; keeps phone numbers and PNRs from turning into numbers
    df = df.astype(str)
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=TEMPLATE_SHEET_NAMES[kind], index=False)
    return out
