from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..db.store import ImportStore, StoreError
from ..excel.reader import SheetHeaderError, UnsupportedFileError, check_extension, read_import_rows
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import ImportDefaults
from ..models.import_result import ImportOutcome, ImportResult
from ..models.import_row import ImportKind, ImportRow
from .allocator import allocate_member_id
from .checks import RowRejected, check_member_email, check_trip_allocation
from .progress import ProgressTracker
from .summary import summarize
from .upsert import insert_member, upsert_assignment
from .validator import validate_row

logger = logging.getLogger(__name__)

"""Batch orchestration for the bulk spreadsheet import.

run_import() drives one uploaded file end to end:
1. Parse the first sheet (batch-fatal if the file is rejected or empty)
2. Create the import log with status=processing (batch-fatal on failure)
3. For every row, strictly in input order:
   validate -> existence check -> allocate id (members) -> insert/upsert
   Any row-level failure becomes an error ImportResult; the loop goes on.
4. Reduce the results and finalize the import log (completed | partial)

There is no rollback across rows; each row's write is committed on its own.
"""

__all__ = [
    "ProcessingError",
    "run_import",
    "process_row",
]


class ProcessingError(Exception):
    """Batch-fatal error: nothing (or nothing more) will be imported."""


def process_row(
    kind: ImportKind,
    row: ImportRow,
    store: ImportStore,
    *,
    trip_id: Any = None,
    defaults: ImportDefaults | None = None,
) -> ImportResult:
    """Run one row through validate -> check -> allocate -> write.

    Rejections and store errors are converted to an error ImportResult;
    only exceptions outside those two families propagate.
    """
    defaults = defaults or ImportDefaults()
    data = dict(row.values)
    try:
        validation = validate_row(kind, data)
        if not validation.valid:
            raise RowRejected(validation.error)

        if kind is ImportKind.MEMBERS:
            check_member_email(store, data["email"])
            member_id = allocate_member_id(store, data.get("membership_type"))
            insert_member(store, data, member_id, defaults)
            return ImportResult.success(row.row_number, data, member_id=member_id)

        check_trip_allocation(store, trip_id, data["member_id"], defaults.registration_status)
        upsert_assignment(store, data, trip_id)
        return ImportResult.success(row.row_number, data)
    except RowRejected as e:
        return ImportResult.failure(row.row_number, data, str(e), e.error_type)
    except StoreError as e:
        return ImportResult.failure(row.row_number, data, str(e), "STORE_ERROR")


def run_import(
    kind: ImportKind,
    file_path: Path,
    store: ImportStore,
    *,
    trip_id: Any = None,
    imported_by: Any = None,
    defaults: ImportDefaults | None = None,
    on_progress: Callable[[int], None] | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportOutcome:
    """Import one spreadsheet.

    Args:
        kind: members or trip_allocations
        file_path: Uploaded .xlsx / .xls file
        store: Backing store
        trip_id: Target trip (required for trip allocations)
        imported_by: Operator's profile id recorded on the import log
        defaults: Values for fields the sheet leaves out
        on_progress: Called with the completion percentage after every row
        error_log: JSON Lines buffer receiving one record per failed row

    Returns:
        ImportOutcome with the ordered per-row results and the summary

    Raises:
        ProcessingError: file rejected or empty, missing trip, import log
            could not be created
    """
    start = time.perf_counter()
    defaults = defaults or ImportDefaults()
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    file_name = file_path.name

    if kind is ImportKind.TRIP_ALLOCATIONS and not trip_id:
        raise ProcessingError("Please select a trip first")

    try:
        check_extension(file_path)
        rows = read_import_rows(file_path)
    except (UnsupportedFileError, SheetHeaderError) as e:
        raise ProcessingError(str(e)) from e
    except Exception as e:
        # Corrupt workbooks surface as zipfile / openpyxl / pandas errors
        raise ProcessingError(f"could not read {file_name}: {e}") from e

    if not rows:
        raise ProcessingError("Excel file is empty")

    try:
        log_id = store.create_import_log(kind.value, file_name, len(rows), imported_by)
    except StoreError as e:
        error_log.append(ErrorRecord.create(file_name, kind.value, -1, "IMPORT_LOG_CREATE_ERROR", str(e)))
        _flush(error_log)
        raise ProcessingError(f"could not create import log: {e}") from e

    logger.info("import started type=%s file=%s rows=%d log_id=%s", kind.value, file_name, len(rows), log_id)

    results: list[ImportResult] = []
    failed_so_far = 0  # progress display only; the summary is reduced from results
    with ProgressTracker(len(rows), description=f"Importing {kind.noun}", on_progress=on_progress) as progress:
        for row in rows:
            try:
                result = process_row(kind, row, store, trip_id=trip_id, defaults=defaults)
            except Exception as e:
                logger.exception("row %d: unexpected error", row.row_number)
                result = ImportResult.failure(row.row_number, dict(row.values), str(e), "UNEXPECTED_ERROR")

            results.append(result)
            if not result.ok:
                logger.debug("row %d failed: %s", result.row, result.error)
                error_log.append(
                    ErrorRecord.create(
                        file_name, kind.value, result.row, result.error_type or "", result.error or ""
                    )
                )
            failed_so_far += 0 if result.ok else 1
            progress.advance()
            progress.set_postfix(success=len(results) - failed_so_far, failed=failed_so_far)

    summary = summarize(results)

    log_finalized = True
    try:
        store.complete_import_log(log_id, summary, datetime.now(UTC))
    except StoreError as e:
        log_finalized = False
        logger.error("could not finalize import log %s (left at processing): %s", log_id, e)
        error_log.append(ErrorRecord.create(file_name, kind.value, -1, "IMPORT_LOG_UPDATE_ERROR", str(e)))

    error_log_path = _flush(error_log)

    return ImportOutcome(
        kind=kind,
        file_name=file_name,
        log_id=log_id,
        results=results,
        summary=summary,
        elapsed_seconds=time.perf_counter() - start,
        log_finalized=log_finalized,
        error_log_path=error_log_path,
    )


def _flush(error_log: ErrorLogBuffer) -> Path | None:
    try:
        return error_log.flush()
    except OSError as e:
        # The import itself already happened; losing the local copy is not fatal
        logger.warning("could not write error log: %s", e)
        return None
