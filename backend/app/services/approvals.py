from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import ConflictError, StateGuardViolation, ValidationError
from app.models.user import User, UserRole

AUTO_APPROVED_BY_TEMPLATE = "Auto-approved ({requester_id} - Same Department HOD)"
AUTO_APPROVAL_NOTE = "Automatically approved - HOD requesting department resource"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _same_department(first: str | None, second: str | None) -> bool:
    if not first or not second:
        return False
    return first.strip().casefold() == second.strip().casefold()


def qualifies_for_auto_approval(requester: User, requester_department: str | None, target_department: str | None) -> bool:
    """HOD asking for a resource owned by their own department."""
    return requester.role == UserRole.hod and _same_department(requester_department, target_department)


def guard_transition(current: Enum, target: Enum, allowed_from: Mapping[Enum, set]) -> None:
    if current not in allowed_from.get(target, set()):
        raise StateGuardViolation(
            f"Cannot change status from {current.value} to {target.value}",
            details={"current_status": current.value, "requested_status": target.value},
        )


def require_reason(value: str | None, field: str = "rejection_reason") -> str:
    reason = (value or "").strip()
    if not reason:
        raise ValidationError(f"{field} is required", details={"field": field})
    return reason


def commit_or_conflict(db: Session, entity_label: str) -> None:
    """Commit, translating an optimistic-lock miss into a 409."""
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        raise ConflictError(f"{entity_label} was modified by another request; reload and retry") from exc
