from __future__ import annotations

import json
import re
from pathlib import Path

from trust_import.logging.error_log import ErrorLogBuffer
from trust_import.models.error_record import ErrorRecord

EXPECTED_KEYS = {"timestamp", "file", "import_type", "row", "error_type", "message"}


def test_error_record_json_line_has_fixed_keys():
    rec = ErrorRecord.create("members.xlsx", "members", 3, "VALIDATION_ERROR", "Phone number is required")
    obj = json.loads(rec.to_json_line())
    assert set(obj) == EXPECTED_KEYS
    assert obj["row"] == 3
    assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$", obj["timestamp"])


def test_error_record_keeps_non_ascii():
    rec = ErrorRecord.create("सदस्य.xlsx", "members", -1, "IMPORT_LOG_CREATE_ERROR", "boom")
    assert "सदस्य.xlsx" in rec.to_json_line()


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    buf.append(ErrorRecord.create("a.xlsx", "members", 2, "VALIDATION_ERROR", "Address is required"))
    buf.append(ErrorRecord.create("a.xlsx", "members", 5, "CONFLICT_ERROR", "Email already exists"))
    assert len(buf) == 2

    path = buf.flush()
    assert path is not None
    assert re.match(r"^errors-\d{8}-\d{6}\.log$", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["row"] for line in lines] == [2, 5]
    assert len(buf) == 0


def test_flush_without_records_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_second_flush_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("a.xlsx", "members", 2, "VALIDATION_ERROR", "x"))
    first = buf.flush()
    buf.append(ErrorRecord.create("a.xlsx", "members", -1, "IMPORT_LOG_UPDATE_ERROR", "y"))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2
