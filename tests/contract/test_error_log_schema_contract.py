from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from trust_import.logging.error_log import ErrorLogBuffer
from trust_import.models.error_record import ErrorRecord
from trust_import.models.import_row import ImportKind
from trust_import.services.orchestrator import run_import

"""JSON Lines error log record contract."""

ERROR_LOG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "required": ["timestamp", "file", "import_type", "row", "error_type", "message"],
    "properties": {
        "timestamp": {"type": "string", "pattern": "Z$"},
        "file": {"type": "string"},
        "import_type": {"enum": ["members", "trip_allocations"]},
        "row": {"type": "integer", "minimum": -1},
        "error_type": {"type": "string", "pattern": "^[A-Z][A-Z_]*$"},
        "message": {"type": "string"},
    },
}


def test_schema_rejects_extra_key():
    record = json.loads(ErrorRecord.create("m.xlsx", "members", 2, "VALIDATION_ERROR", "x").to_json_line())
    jsonschema.validate(record, ERROR_LOG_SCHEMA)
    record["sheet"] = "Members"
    with pytest.raises(ValidationError):
        jsonschema.validate(record, ERROR_LOG_SCHEMA)


def test_batch_error_log_matches_schema(temp_workdir: Path, workbook, member_row, store):
    rows = [
        dict(member_row, full_name=None),
        dict(member_row, email="ravi.shah@example.com"),
        dict(member_row, email="fine@example.com"),
    ]
    path = workbook(temp_workdir / "data" / "members.xlsx", rows)
    outcome = run_import(ImportKind.MEMBERS, path, store, error_log=ErrorLogBuffer(temp_workdir / "logs"))

    lines = outcome.error_log_path.read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    for rec in records:
        jsonschema.validate(rec, ERROR_LOG_SCHEMA)
    assert [(r["row"], r["error_type"], r["message"]) for r in records] == [
        (2, "VALIDATION_ERROR", "Full name is required"),
        (3, "CONFLICT_ERROR", "Email already exists"),
    ]
