from __future__ import annotations

import json
from datetime import tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DatabaseConfig, ImportConfig, ImportDefaults, TableNames

"""Config loader.

Responsibilities:
- Load YAML config/import.yml
- Validate it against the bundled config_schema.json
- Check the timezone name against the IANA database
- Apply defaults (timezone=UTC, standard table names, India / active / placeholder photo)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails schema validation (unknown keys, wrong types).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def resolve_timezone(name: str) -> tzinfo:
    """IANA zone used when showing import log times (e.g. "Asia/Kolkata")."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"config validation failed: unknown timezone {name!r}") from e


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)
    resolve_timezone(data.get("timezone", "UTC"))

    return ImportConfig(
        database=DatabaseConfig(**data.get("database", {})),
        tables=TableNames(**data.get("tables", {})),
        defaults=ImportDefaults(**data.get("defaults", {})),
        error_log_dir=data.get("error_log_dir", "./logs"),
        timezone=data.get("timezone", "UTC"),
    )
