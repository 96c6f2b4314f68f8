from __future__ import annotations

import math
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.import_row import ImportRow

"""Spreadsheet reader for the bulk import.

- Only .xlsx / .xls uploads are accepted.
- The first sheet is read; its first row is the header, every following row
  is a data row. Row numbers are 1-based with the header at 1, so the first
  data row is 2.
- Cells are handed on as strings (or None) so the validator sees the same
  shape regardless of how the spreadsheet application typed the cell.
"""

__all__ = [
    "ALLOWED_EXTENSIONS",
    "SheetHeaderError",
    "UnsupportedFileError",
    "check_extension",
    "read_import_rows",
    "normalize_cell",
]

ALLOWED_EXTENSIONS = (".xlsx", ".xls")
HEADER_ROW_NUMBER = 1


class UnsupportedFileError(Exception):
    """Raised when the uploaded file is not an Excel workbook."""


class SheetHeaderError(Exception):
    """Raised when the first sheet has no usable header row."""


def check_extension(path: Path) -> None:
    if path.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise UnsupportedFileError("Please upload an Excel file (.xlsx or .xls)")


def normalize_cell(value: Any) -> str | None:
    """Render one cell as the string an operator typed, or None if blank."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, datetime):
        # Date cells carry a midnight time component; keep it only when set
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        # Phone numbers and postal codes typed without quotes come back as floats
        return str(int(value))
    return str(value)


def read_import_rows(path: Path) -> list[ImportRow]:
    """Read the first sheet of an Excel file into ImportRow objects.

    Fully blank rows are dropped before numbering: row_number is the
    position in the parsed sequence plus 2 (1-based, header consumed).

    Raises:
        UnsupportedFileError: wrong extension
        SheetHeaderError: data rows present under a blank header row
    """
    check_extension(path)
    df = pd.read_excel(path, sheet_name=0, header=None, dtype=object, keep_default_na=False, na_values=[])
    if df.shape[0] < 2:
        # Blank sheet or header only: nothing to import
        return []

    columns = [str(c).strip() if normalize_cell(c) is not None else "" for c in df.iloc[0].tolist()]
    if not any(columns):
        raise SheetHeaderError(f"'{path.name}' has an empty header row")

    rows: list[ImportRow] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        values: dict[str, str | None] = {}
        for col, val in zip(columns, raw, strict=False):
            if not col:
                continue
            values[col] = normalize_cell(val)
        if all(v is None for v in values.values()):
            continue
        rows.append(ImportRow(row_number=HEADER_ROW_NUMBER + 1 + len(rows), values=values))
    return rows
