from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.models.resource_request import ResourceRequest, ResourceRequestStatus
from app.models.user import User, UserRole
from app.schemas.common import ApiResponse, ok
from app.schemas.resource_request import (
    ResourceRequestCreate,
    ResourceRequestDecision,
    ResourceRequestOut,
    ResourceRequestReject,
    ResourceRequestUpdate,
)
from app.services.resource_request_workflow import ResourceRequestWorkflow

router = APIRouter()


def _one(item: ResourceRequest, message: str | None = None) -> dict:
    return ok(ResourceRequestOut.model_validate(item), message)


def _listing(db: Session, *conditions) -> dict:
    query = select(ResourceRequest).where(*conditions).order_by(ResourceRequest.created_at.desc())
    return ok([ResourceRequestOut.model_validate(row) for row in db.execute(query).scalars()])


@router.post("/create", response_model=ApiResponse[ResourceRequestOut], status_code=status.HTTP_201_CREATED)
def create_resource_request(
    payload: ResourceRequestCreate,
    current_user: User = Depends(require_roles(UserRole.hod)),
    db: Session = Depends(get_db),
) -> dict:
    item, message = ResourceRequestWorkflow(db).create(payload, current_user)
    return _one(item, message)


@router.get("", response_model=ApiResponse[list[ResourceRequestOut]])
def list_resource_requests(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    return _listing(db)


@router.get("/requester/{hod_id}", response_model=ApiResponse[list[ResourceRequestOut]])
def list_by_requester(
    hod_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return _listing(db, ResourceRequest.requester_hod_id == hod_id)


@router.get("/pending/department/{department_id}", response_model=ApiResponse[list[ResourceRequestOut]])
def list_pending_for_department(
    department_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return _listing(
        db,
        ResourceRequest.target_department_id == department_id,
        ResourceRequest.status == ResourceRequestStatus.pending,
    )


@router.get("/target-department/{department_id}", response_model=ApiResponse[list[ResourceRequestOut]])
def list_for_target_department(
    department_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return _listing(db, ResourceRequest.target_department_id == department_id)


@router.get("/status/{request_status}", response_model=ApiResponse[list[ResourceRequestOut]])
def list_by_status(
    request_status: ResourceRequestStatus,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return _listing(db, ResourceRequest.status == request_status)


@router.get("/{request_id}", response_model=ApiResponse[ResourceRequestOut])
def get_resource_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return _one(ResourceRequestWorkflow(db).get(request_id))


@router.put("/{request_id}/approve", response_model=ApiResponse[ResourceRequestOut])
def approve_resource_request(
    request_id: str,
    payload: ResourceRequestDecision | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    notes = payload.notes if payload is not None else None
    item = ResourceRequestWorkflow(db).approve(request_id, current_user, notes)
    return _one(item, "Resource request approved successfully")


@router.put("/{request_id}/reject", response_model=ApiResponse[ResourceRequestOut])
def reject_resource_request(
    request_id: str,
    payload: ResourceRequestReject,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    item = ResourceRequestWorkflow(db).reject(request_id, current_user, payload.rejection_reason)
    return _one(item, "Resource request rejected successfully")


@router.put("/{request_id}/cancel", response_model=ApiResponse[ResourceRequestOut])
def cancel_resource_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    item = ResourceRequestWorkflow(db).cancel(request_id, current_user)
    return _one(item, "Resource request cancelled successfully")


@router.put("/{request_id}/update", response_model=ApiResponse[ResourceRequestOut])
def update_resource_request(
    request_id: str,
    payload: ResourceRequestUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    item = ResourceRequestWorkflow(db).update(request_id, payload, current_user)
    return _one(item, "Resource request updated successfully")


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    ResourceRequestWorkflow(db).delete(request_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
