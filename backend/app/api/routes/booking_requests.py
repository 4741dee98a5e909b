from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.deps import VC_APPROVERS, get_current_user, get_db, require_roles
from app.models.booking_request import BookingRequest, BookingRequestStatus
from app.models.user import User, UserRole
from app.schemas.booking_request import (
    BookingRequestCreate,
    BookingRequestOut,
    BookingRequestStatusUpdate,
    VcApprovalUpdate,
)
from app.schemas.common import ApiResponse, ok
from app.services.booking_workflow import BookingRequestWorkflow, WorkflowResult

router = APIRouter()

REQUESTER_ROLES = (UserRole.admin, UserRole.principal, UserRole.hod, UserRole.faculty)


def _result(result: WorkflowResult) -> dict:
    return ok(BookingRequestOut.model_validate(result.request), result.message, warnings=result.warnings)


def _listing(db: Session, *conditions) -> dict:
    query = select(BookingRequest).where(*conditions).order_by(BookingRequest.request_date.desc())
    return ok([BookingRequestOut.model_validate(row) for row in db.execute(query).scalars()])


@router.get("", response_model=ApiResponse[list[BookingRequestOut]])
def list_booking_requests(
    status_filter: BookingRequestStatus | None = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    conditions = [BookingRequest.status == status_filter] if status_filter is not None else []
    return _listing(db, *conditions)


@router.post("", response_model=ApiResponse[BookingRequestOut], status_code=status.HTTP_201_CREATED)
def create_booking_request(
    payload: BookingRequestCreate,
    current_user: User = Depends(require_roles(*REQUESTER_ROLES)),
    db: Session = Depends(get_db),
) -> dict:
    return _result(BookingRequestWorkflow(db).create(payload, current_user))


@router.get("/vc-approval-needed", response_model=ApiResponse[list[BookingRequestOut]])
def list_vc_approval_needed(
    current_user: User = Depends(require_roles(*VC_APPROVERS)),
    db: Session = Depends(get_db),
) -> dict:
    return _listing(
        db,
        BookingRequest.status == BookingRequestStatus.approved,
        BookingRequest.vc_approved.is_(None),
    )


@router.get("/requester/{department}", response_model=ApiResponse[list[BookingRequestOut]])
def list_by_requester_department(
    department: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return _listing(db, func.lower(BookingRequest.requester_department) == department.strip().lower())


@router.get("/target/{department}", response_model=ApiResponse[list[BookingRequestOut]])
def list_by_target_department(
    department: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return _listing(db, func.lower(BookingRequest.target_department) == department.strip().lower())


@router.get("/{request_id}", response_model=ApiResponse[BookingRequestOut])
def get_booking_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return ok(BookingRequestOut.model_validate(BookingRequestWorkflow(db).get(request_id)))


@router.put("/{request_id}/status", response_model=ApiResponse[BookingRequestOut])
def update_booking_request_status(
    request_id: str,
    payload: BookingRequestStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return _result(BookingRequestWorkflow(db).update_status(request_id, payload, current_user))


@router.put("/{request_id}/vc-approval", response_model=ApiResponse[BookingRequestOut])
def update_vc_approval(
    request_id: str,
    payload: VcApprovalUpdate,
    current_user: User = Depends(require_roles(*VC_APPROVERS)),
    db: Session = Depends(get_db),
) -> dict:
    return _result(BookingRequestWorkflow(db).set_vc_approval(request_id, payload, current_user))


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    BookingRequestWorkflow(db).delete(request_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
