from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.models.activity_log import ActivityLog
from app.models.user import User, UserRole
from app.schemas.activity import ActivityLogOut
from app.schemas.common import ApiResponse, ok

router = APIRouter()


@router.get("/activity/logs", response_model=ApiResponse[list[ActivityLogOut]])
def list_activity_logs(
    action: str | None = None,
    entity_type: str | None = None,
    entity_id: str | None = None,
    limit: int = Query(default=200, ge=1, le=500),
    current_user: User = Depends(require_roles(UserRole.admin, UserRole.vc, UserRole.principal)),
    db: Session = Depends(get_db),
) -> dict:
    query = select(ActivityLog).order_by(ActivityLog.created_at.desc())
    if action:
        query = query.where(ActivityLog.action == action)
    if entity_type:
        query = query.where(ActivityLog.entity_type == entity_type)
    if entity_id:
        query = query.where(ActivityLog.entity_id == entity_id)
    rows = db.execute(query.limit(limit)).scalars()
    return ok([ActivityLogOut.model_validate(row) for row in rows])
