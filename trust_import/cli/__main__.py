from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from trust_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config, resolve_timezone
from trust_import.db.connection import db_cursor
from trust_import.db.memory import InMemoryStore
from trust_import.db.postgres import PostgresStore
from trust_import.db.store import ImportStore, StoreError
from trust_import.excel.template import write_template
from trust_import.logging.error_log import ErrorLogBuffer
from trust_import.logging.init import log_summary, setup_logging
from trust_import.models.config_models import ImportConfig
from trust_import.models.import_row import ImportKind
from trust_import.services.orchestrator import ProcessingError, run_import
from trust_import.services.summary import (
    render_completion_notice,
    render_import_logs,
    render_results_table,
    render_summary_line,
)

"""Operator CLI for the bulk spreadsheet import.

Subcommands:
- members FILE                     import new members
- trip-allocations FILE --trip ID  import room/seat/ticket allocations for a trip
- template KIND                    write an example workbook
- trips                            list trips (ids for --trip)
- logs                             list import logs (--status processing finds orphaned batches)

Exit codes: 0 all rows imported, 2 at least one row failed, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

_KIND_CHOICES = {
    "members": ImportKind.MEMBERS,
    "trip-allocations": ImportKind.TRIP_ALLOCATIONS,
}


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


@contextmanager
def _open_store(cfg: ImportConfig) -> Iterator[ImportStore]:
    """Yield the PostgreSQL store, or an empty in-memory store when DISABLE_DB_CONNECT=1."""
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        yield InMemoryStore()
        return
    with db_cursor(cfg.database) as cur:
        yield PostgresStore(cur, cfg.tables)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="trust-import", description="Bulk spreadsheet import for the trust's member records")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to import.yml")
    sub = p.add_subparsers(dest="command", required=True)

    members = sub.add_parser("members", help="Import new members from an Excel file")
    members.add_argument("file", type=Path)
    members.add_argument("--operator", help="Operator email recorded on the import log")

    trips = sub.add_parser("trip-allocations", help="Import trip allocations from an Excel file")
    trips.add_argument("file", type=Path)
    trips.add_argument("--trip", required=True, help="Trip id (see the 'trips' command)")
    trips.add_argument("--operator", help="Operator email recorded on the import log")

    template = sub.add_parser("template", help="Write an example workbook")
    template.add_argument("kind", choices=sorted(_KIND_CHOICES))
    template.add_argument("--output", type=Path, default=None)

    sub.add_parser("trips", help="List trips, newest first")

    logs = sub.add_parser("logs", help="List import logs")
    logs.add_argument("--status", choices=["processing", "completed", "partial"], default=None)
    logs.add_argument("--limit", type=int, default=20)
    return p.parse_args(argv)


def _run_import_command(args: argparse.Namespace, cfg: ImportConfig, store: ImportStore) -> int:
    logger = setup_logging()
    kind = ImportKind.MEMBERS if args.command == "members" else ImportKind.TRIP_ALLOCATIONS

    imported_by = None
    if args.operator:
        try:
            imported_by = store.find_profile_id(args.operator)
        except StoreError as e:
            logger.warning(f"operator lookup failed: {e}")
        if imported_by is None:
            logger.warning(f"no profile found for operator {args.operator}; import log will have no owner")

    try:
        outcome = run_import(
            kind,
            args.file,
            store,
            trip_id=getattr(args, "trip", None),
            imported_by=imported_by,
            defaults=cfg.defaults,
            error_log=ErrorLogBuffer(Path(cfg.error_log_dir)),
        )
    except ProcessingError as e:
        logger.error(f"Import Failed: {e}")
        return EXIT_FATAL

    print(render_results_table(kind, outcome.results))
    notice = render_completion_notice(kind, outcome.summary)
    if outcome.summary.failed:
        logger.warning(notice)
    else:
        logger.info(notice)
    if outcome.error_log_path is not None and outcome.summary.failed:
        logger.info(f"error details written to {outcome.error_log_path}")
    if not outcome.log_finalized:
        logger.error(f"import log {outcome.log_id} could not be finalized and remains 'processing'")

    log_summary(render_summary_line(outcome)[len("SUMMARY "):])

    if outcome.summary.failed > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _list_trips(store: ImportStore) -> int:
    for trip in store.list_trips():
        start = trip.start_date.isoformat() if trip.start_date else "-"
        print(f"{trip.id}\t{trip.title}\t{start}")
    return EXIT_SUCCESS_ALL


def _list_logs(args: argparse.Namespace, cfg: ImportConfig, store: ImportStore) -> int:
    logs = store.list_import_logs(status=args.status, limit=args.limit)
    print(render_import_logs(logs, resolve_timezone(cfg.timezone)))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv for None; tests pass explicit lists
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    if args.command == "template":
        path = write_template(_KIND_CHOICES[args.kind], args.output)
        logger.info(f"Template written to {path}")
        return EXIT_SUCCESS_ALL

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        with _open_store(cfg) as store:
            if args.command == "trips":
                return _list_trips(store)
            if args.command == "logs":
                return _list_logs(args, cfg, store)
            return _run_import_command(args, cfg, store)
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database connection failed: {e}")
        return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
