from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import CATALOG_MANAGERS, get_current_user, get_db, require_roles
from app.db.references import commit_delete, delete_unreferenced
from app.models.classroom import Classroom
from app.models.classroom_booking import ClassroomBooking
from app.models.department import Department
from app.models.resource import Resource
from app.models.timetable import TimetableEntry
from app.models.user import User
from app.schemas.classroom import ClassroomCreate, ClassroomOut, ClassroomUpdate
from app.schemas.common import ApiResponse, ok
from app.services.audit import log_activity

router = APIRouter()


def _get_classroom(db: Session, classroom_id: str) -> Classroom:
    classroom = db.get(Classroom, classroom_id)
    if classroom is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Classroom not found")
    return classroom


def _ensure_department(db: Session, department_id: str | None) -> None:
    if department_id is not None and db.get(Department, department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")


@router.get("", response_model=ApiResponse[list[ClassroomOut]])
def list_classrooms(
    active_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    query = select(Classroom).order_by(Classroom.building, Classroom.room_number)
    if active_only:
        query = query.where(Classroom.is_active.is_(True))
    return ok([ClassroomOut.model_validate(row) for row in db.execute(query).scalars()])


@router.get("/department/{department_id}", response_model=ApiResponse[list[ClassroomOut]])
def list_department_classrooms(
    department_id: str,
    include_shared: bool = True,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    _ensure_department(db, department_id)
    scope = Classroom.department_id == department_id
    if include_shared:
        scope = or_(scope, Classroom.department_id.is_(None))
    rows = db.execute(select(Classroom).where(scope).order_by(Classroom.name)).scalars()
    return ok([ClassroomOut.model_validate(row) for row in rows])


@router.post("", response_model=ApiResponse[ClassroomOut], status_code=status.HTTP_201_CREATED)
def create_classroom(
    payload: ClassroomCreate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    _ensure_department(db, payload.department_id)
    existing = db.execute(
        select(Classroom).where(Classroom.building == payload.building, Classroom.room_number == payload.room_number)
    ).scalars().first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room number already exists in this building")
    classroom = Classroom(**payload.model_dump())
    db.add(classroom)
    db.flush()
    log_activity(db, user=current_user, action="classroom.created", entity_type="classroom", entity_id=classroom.id)
    db.commit()
    db.refresh(classroom)
    return ok(ClassroomOut.model_validate(classroom), "Classroom created successfully")


@router.get("/{classroom_id}", response_model=ApiResponse[ClassroomOut])
def get_classroom(
    classroom_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return ok(ClassroomOut.model_validate(_get_classroom(db, classroom_id)))


@router.put("/{classroom_id}", response_model=ApiResponse[ClassroomOut])
def update_classroom(
    classroom_id: str,
    payload: ClassroomUpdate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    classroom = _get_classroom(db, classroom_id)
    data = payload.model_dump(exclude_unset=True)
    if "department_id" in data:
        _ensure_department(db, data["department_id"])
    for key, value in data.items():
        if value is None and key != "department_id":
            continue
        setattr(classroom, key, value)
    log_activity(db, user=current_user, action="classroom.updated", entity_type="classroom", entity_id=classroom.id)
    db.commit()
    db.refresh(classroom)
    return ok(ClassroomOut.model_validate(classroom), "Classroom updated successfully")


@router.delete("/{classroom_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_classroom(
    classroom_id: str,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> Response:
    classroom = _get_classroom(db, classroom_id)
    delete_unreferenced(
        db,
        classroom,
        "Classroom",
        (TimetableEntry.classroom_id, ClassroomBooking.classroom_id, Resource.classroom_id),
    )
    log_activity(db, user=current_user, action="classroom.deleted", entity_type="classroom", entity_id=classroom_id)
    commit_delete(db, "Classroom")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
