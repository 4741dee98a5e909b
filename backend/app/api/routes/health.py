from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.db.bootstrap import describe_schema_gaps
from app.db.session import engine

router = APIRouter()
logger = logging.getLogger(__name__)

settings = get_settings()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _database_status() -> dict:
    status = {"ok": True, "schema_ok": False, "missing_tables": [], "missing_columns": {}, "error": None}
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            missing_tables, missing_columns = describe_schema_gaps(connection)
    except SQLAlchemyError as exc:
        logger.warning("Readiness probe failed to reach the database: %s", exc)
        status.update(ok=False, error=str(exc))
        return status
    status.update(
        schema_ok=not missing_tables and not missing_columns,
        missing_tables=missing_tables,
        missing_columns=missing_columns,
    )
    return status


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "service": settings.project_name}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _now()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    database = _database_status()
    ready = database["ok"] and database["schema_ok"]
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ok" if ready else "degraded",
            "timestamp": _now(),
            "database": database,
            "workflow": {
                "auto_approve_same_department_hod": settings.auto_approve_same_department_hod,
                "booking_timetable_name": settings.booking_timetable_name,
            },
        },
    )
