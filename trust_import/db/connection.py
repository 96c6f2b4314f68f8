from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..models.config_models import DatabaseConfig

"""psycopg2 connection handling for the CLI.

Resolution order for connection parameters:
    1. DATABASE_URL / PGDSN (the .env file is loaded with override before this runs)
    2. Individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. The database section of config/import.yml (dsn first, then the
       individual keys)
"""

__all__ = ["resolve_dsn", "db_cursor"]


_PG_VARS = ("PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE")


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn_env = os.getenv("DATABASE_URL") or os.getenv("PGDSN")
    if dsn_env:
        return dsn_env
    if db_cfg.dsn and not any(os.getenv(name) for name in _PG_VARS):
        return db_cfg.dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_cursor(db_cfg: DatabaseConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a cursor on an autocommit connection.

    Each statement commits on its own; a mid-batch failure leaves earlier
    rows in place.
    """
    conn = psycopg2.connect(resolve_dsn(db_cfg))
    try:
        conn.autocommit = True
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()
