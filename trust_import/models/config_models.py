from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the trust import tool.

Populated by trust_import.config.loader from config/import.yml. Environment
variables take precedence over the database section at connect time.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback used when no DSN / PG* env vars are set."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class TableNames:
    """Backend table names. Defaults match the hosted schema."""
    members: str = "members"
    trip_registrations: str = "trip_registrations"
    trip_assignments: str = "trip_assignments"
    import_logs: str = "import_logs"
    trips: str = "trips"
    user_profiles: str = "user_profiles"


@dataclass(frozen=True)
class ImportDefaults:
    """Values applied to imported records when the sheet leaves them out."""
    country: str = "India"
    member_status: str = "active"
    photo_url: str = "/placeholder.svg"
    registration_status: str = "confirmed"  # trip registration status that allows allocation


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import tool."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    tables: TableNames = field(default_factory=TableNames)
    defaults: ImportDefaults = field(default_factory=ImportDefaults)
    error_log_dir: str = "./logs"
    timezone: str = "UTC"
