from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import CATALOG_MANAGERS, get_current_user, get_db, require_roles
from app.db.references import commit_delete, delete_unreferenced
from app.models.booking_request import BookingRequest
from app.models.classroom import Classroom
from app.models.department import Department
from app.models.resource import Resource, ResourceType
from app.models.resource_request import ResourceRequest
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.resource import ResourceCreate, ResourceOut, ResourceUpdate
from app.services.audit import log_activity

router = APIRouter()


def _get_resource(db: Session, resource_id: str) -> Resource:
    resource = db.get(Resource, resource_id)
    if resource is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return resource


def _ensure_links(db: Session, *, department_id: str | None, classroom_id: str | None) -> None:
    if department_id is not None and db.get(Department, department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    if classroom_id is not None and db.get(Classroom, classroom_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Classroom not found")


@router.get("", response_model=ApiResponse[list[ResourceOut]])
def list_resources(
    type: ResourceType | None = None,
    active_only: bool = True,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    query = select(Resource).order_by(Resource.name)
    if type is not None:
        query = query.where(Resource.type == type)
    if active_only:
        query = query.where(Resource.is_active.is_(True))
    return ok([ResourceOut.model_validate(row) for row in db.execute(query).scalars()])


@router.get("/shared", response_model=ApiResponse[list[ResourceOut]])
def list_shared_resources(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    rows = db.execute(
        select(Resource)
        .where(or_(Resource.is_shared.is_(True), Resource.department_id.is_(None)), Resource.is_active.is_(True))
        .order_by(Resource.name)
    ).scalars()
    return ok([ResourceOut.model_validate(row) for row in rows])


@router.get("/department/{department_id}", response_model=ApiResponse[list[ResourceOut]])
def list_department_resources(
    department_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    rows = db.execute(
        select(Resource).where(Resource.department_id == department_id).order_by(Resource.name)
    ).scalars()
    return ok([ResourceOut.model_validate(row) for row in rows])


@router.post("", response_model=ApiResponse[ResourceOut], status_code=status.HTTP_201_CREATED)
def create_resource(
    payload: ResourceCreate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    _ensure_links(db, department_id=payload.department_id, classroom_id=payload.classroom_id)
    resource = Resource(**payload.model_dump())
    db.add(resource)
    db.flush()
    log_activity(db, user=current_user, action="resource.created", entity_type="resource", entity_id=resource.id)
    db.commit()
    db.refresh(resource)
    return ok(ResourceOut.model_validate(resource), "Resource created successfully")


@router.get("/{resource_id}", response_model=ApiResponse[ResourceOut])
def get_resource(
    resource_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return ok(ResourceOut.model_validate(_get_resource(db, resource_id)))


@router.put("/{resource_id}", response_model=ApiResponse[ResourceOut])
def update_resource(
    resource_id: str,
    payload: ResourceUpdate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    resource = _get_resource(db, resource_id)
    data = payload.model_dump(exclude_unset=True)
    _ensure_links(db, department_id=data.get("department_id"), classroom_id=data.get("classroom_id"))
    for key, value in data.items():
        if value is None and key not in ("department_id", "classroom_id"):
            continue
        setattr(resource, key, value)
    log_activity(db, user=current_user, action="resource.updated", entity_type="resource", entity_id=resource.id)
    db.commit()
    db.refresh(resource)
    return ok(ResourceOut.model_validate(resource), "Resource updated successfully")


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(
    resource_id: str,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> Response:
    resource = _get_resource(db, resource_id)
    delete_unreferenced(
        db,
        resource,
        "Resource",
        (BookingRequest.target_resource_id, ResourceRequest.target_resource_id),
    )
    log_activity(db, user=current_user, action="resource.deleted", entity_type="resource", entity_id=resource_id)
    commit_delete(db, "Resource")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
