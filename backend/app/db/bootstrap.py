from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

from app import models  # noqa: F401
from app.db.base import Base
from app.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role", "department_id"},
    "faculty": {"id", "email", "designation", "role"},
    "booking_requests": {"id", "status", "request_metadata", "version", "timetable_entry_id"},
    "resource_requests": {"id", "status", "version"},
    "timetable_entries": {"id", "timetable_id", "faculty_id", "classroom_id", "day_of_week"},
}

HOD_DESIGNATION_FILTER = "(UPPER(designation) LIKE '%HOD%' OR UPPER(designation) LIKE '%HEAD%')"


def _column_names(connection: Connection, table_name: str) -> set[str] | None:
    inspector = inspect(connection)
    if table_name not in set(inspector.get_table_names()):
        return None
    return {item["name"] for item in inspector.get_columns(table_name)}


def _ensure_faculty_role_column(connection: Connection) -> None:
    column_names = _column_names(connection, "faculty")
    if column_names is None or "role" in column_names:
        return
    connection.execute(text("ALTER TABLE faculty ADD COLUMN role VARCHAR(20) NOT NULL DEFAULT 'faculty'"))


def _ensure_request_version_columns(connection: Connection) -> None:
    for table_name in ("booking_requests", "resource_requests"):
        column_names = _column_names(connection, table_name)
        if column_names is None or "version" in column_names:
            continue
        connection.execute(text(f"ALTER TABLE {table_name} ADD COLUMN version INTEGER NOT NULL DEFAULT 1"))


def _ensure_booking_request_metadata_column(connection: Connection) -> None:
    column_names = _column_names(connection, "booking_requests")
    if column_names is None or "request_metadata" in column_names:
        return
    if connection.dialect.name == "postgresql":
        connection.execute(
            text("ALTER TABLE booking_requests ADD COLUMN request_metadata JSONB NOT NULL DEFAULT '{}'::jsonb")
        )
        return
    connection.execute(text("ALTER TABLE booking_requests ADD COLUMN request_metadata JSON NOT NULL DEFAULT '{}'"))


def backfill_roles_from_designation(connection: Connection) -> int:
    """Promote rows whose legacy designation names a department head.

    Only ever upgrades plain faculty rows, so running it repeatedly is a no-op.
    """
    faculty_result = connection.execute(
        text(f"UPDATE faculty SET role = 'hod' WHERE role = 'faculty' AND {HOD_DESIGNATION_FILTER}")
    )
    user_result = connection.execute(
        text(f"UPDATE users SET role = 'hod' WHERE role = 'faculty' AND {HOD_DESIGNATION_FILTER}")
    )
    promoted = (faculty_result.rowcount or 0) + (user_result.rowcount or 0)
    if promoted:
        logger.info("Promoted %d faculty/user row(s) to HOD from designation", promoted)
    return promoted


def describe_schema_gaps(connection: Connection) -> tuple[list[str], dict[str, list[str]]]:
    """Return (missing tables, missing columns per table) against REQUIRED_COLUMNS."""
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, required in REQUIRED_COLUMNS.items():
        existing = _column_names(connection, table_name)
        if existing is None:
            missing_tables.append(table_name)
            continue
        absent = sorted(required - existing)
        if absent:
            missing_columns[table_name] = absent
    return sorted(missing_tables), missing_columns


def _assert_required_columns(connection: Connection) -> None:
    missing_tables, missing_columns = describe_schema_gaps(connection)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flat)}")


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    bind = engine or default_engine
    try:
        # Missing tables first, then additive patches for databases created by older releases.
        Base.metadata.create_all(bind=bind)
        with bind.begin() as connection:
            _ensure_faculty_role_column(connection)
            _ensure_request_version_columns(connection)
            _ensure_booking_request_metadata_column(connection)
            backfill_roles_from_designation(connection)
            _assert_required_columns(connection)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
