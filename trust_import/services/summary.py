from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, tzinfo

from ..models.import_log import ImportLog
from ..models.import_result import ImportOutcome, ImportResult, ImportStatus, ImportSummary
from ..models.import_row import ImportKind

"""Result reporting for a finished import batch.

- summarize(): reduce the ordered result list to counts and error details
- render_summary_line(): the machine-readable SUMMARY line
- render_results_table(): the row-by-row table shown after the run
- render_completion_notice(): the one-line operator notice

Pure presentation; nothing here touches the store.
"""

__all__ = [
    "summarize",
    "render_summary_line",
    "render_results_table",
    "render_completion_notice",
    "render_import_logs",
]


def summarize(results: Sequence[ImportResult]) -> ImportSummary:
    """Reduce per-row results to batch counts.

    >>> summarize([]).status
    'completed'
    """
    successful = sum(1 for r in results if r.status is ImportStatus.SUCCESS)
    errors = [r for r in results if r.status is ImportStatus.ERROR]
    return ImportSummary(
        total=len(results),
        successful=successful,
        failed=len(errors),
        status="completed" if not errors else "partial",
        error_details=[{"row": r.row, "error": r.error} for r in errors],
    )


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(outcome: ImportOutcome) -> str:
    """Render the SUMMARY line for a batch.

    Format:
    SUMMARY type={kind} file={name} total={n} success={s} failed={f} status={status} elapsed_sec={e}
    """
    s = outcome.summary
    return (
        f"SUMMARY type={outcome.kind.value} "
        f"file={outcome.file_name} "
        f"total={s.total} "
        f"success={s.successful} "
        f"failed={s.failed} "
        f"status={s.status} "
        f"elapsed_sec={_format_seconds(outcome.elapsed_seconds)}"
    )


def render_completion_notice(kind: ImportKind, summary: ImportSummary) -> str:
    return f"Successfully imported {summary.successful} {kind.noun}. {summary.failed} failed."


def _cell(value: object) -> str:
    if value is None or value == "":
        return "-"
    return str(value)


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = [
        "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)).rstrip(),
        "  ".join("-" * w for w in widths),
    ]
    for row in rows:
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
    return "\n".join(lines)


def render_results_table(kind: ImportKind, results: Sequence[ImportResult]) -> str:
    """Row-by-row results, in input order."""
    if kind is ImportKind.MEMBERS:
        headers = ["Row", "Name", "Email", "Status", "Member ID / Error"]
        rows = [
            [
                str(r.row),
                _cell(r.data.get("full_name")),
                _cell(r.data.get("email")),
                r.status.value,
                _cell(r.member_id if r.ok else r.error),
            ]
            for r in results
        ]
    else:
        headers = ["Row", "Member ID", "Room", "Bus/Train", "Status", "Error"]
        rows = [
            [
                str(r.row),
                _cell(r.data.get("member_id")),
                _cell(r.data.get("room_number")),
                _cell(r.data.get("bus_seat_number") or r.data.get("train_seat_number")),
                r.status.value,
                _cell(r.error),
            ]
            for r in results
        ]
    return _table(headers, rows)


def _local_time(value: datetime | None, tz: tzinfo) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        # Naive timestamps from the store are UTC
        value = value.replace(tzinfo=UTC)
    return value.astimezone(tz).isoformat(timespec="seconds")


def render_import_logs(logs: Sequence[ImportLog], tz: tzinfo = UTC) -> str:
    """Import log listing, start times shown in tz (the configured timezone)."""
    headers = ["ID", "Type", "File", "Total", "Success", "Failed", "Status", "Started"]
    rows = [
        [
            _cell(log.id),
            log.import_type,
            log.file_name,
            str(log.total_rows),
            _cell(log.successful_rows),
            _cell(log.failed_rows),
            log.status.value,
            _cell(_local_time(log.created_at, tz)),
        ]
        for log in logs
    ]
    return _table(headers, rows)
