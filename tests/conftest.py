# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from trust_import.db.memory import InMemoryStore
from trust_import.models.import_log import Trip


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: trustdb
tables:
  members: members
  import_logs: import_logs
defaults:
  country: India
  registration_status: confirmed
error_log_dir: ./logs
timezone: UTC
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_workbook(path: Path, rows: list[dict[str, Any]], columns: list[str] | None = None) -> Path:
    """Write rows as a single-sheet workbook with a header row, every cell as text."""
    df = pd.DataFrame(rows, columns=columns)
    df = df.astype(object).where(pd.notna(df), None)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Sheet1", index=False)
    return path


@pytest.fixture()
def workbook():
    return make_workbook


@pytest.fixture()
def member_row() -> dict[str, Any]:
    return {
        "full_name": "Asha Mehta",
        "email": "asha.mehta@example.com",
        "phone": "+919812345678",
        "date_of_birth": "1988-03-14",
        "gender": "female",
        "membership_type": "premium",
        "address": "12 Temple Road",
        "city": "Ahmedabad",
        "state": "Gujarat",
        "postal_code": "380001",
        "country": "India",
    }


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore(
        members=[
            {"id": "R00001", "full_name": "Ravi Shah", "email": "ravi.shah@example.com"},
            {"id": "P00045", "full_name": "Meera Jain", "email": "meera.jain@example.com"},
            {"id": "H00002", "full_name": "Kiran Doshi", "email": "kiran.doshi@example.com"},
        ],
        registrations=[
            {"trip_id": "trip-palitana", "member_id": "R00001", "status": "confirmed"},
            {"trip_id": "trip-palitana", "member_id": "P00045", "status": "pending"},
        ],
        trips=[
            Trip(id="trip-palitana", title="Palitana Yatra", start_date=date(2026, 11, 20)),
            Trip(id="trip-shikharji", title="Shikharji Yatra", start_date=date(2027, 1, 10)),
        ],
        profiles=[{"id": "profile-7", "email": "admin@trust.example.org"}],
    )
