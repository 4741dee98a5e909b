from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.db.references import commit_delete, delete_unreferenced
from app.models.classroom import Classroom
from app.models.classroom_booking import ClassroomBooking
from app.models.department import Department
from app.models.faculty import Faculty
from app.models.resource import Resource
from app.models.resource_request import ResourceRequest
from app.models.subject import Subject
from app.models.timetable import Timetable
from app.models.user import User, UserRole
from app.schemas.common import ApiResponse, ok
from app.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate
from app.services.audit import log_activity

router = APIRouter()


def _get_department(db: Session, department_id: str) -> Department:
    department = db.get(Department, department_id)
    if department is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    return department


@router.get("", response_model=ApiResponse[list[DepartmentOut]])
def list_departments(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    rows = db.execute(select(Department).order_by(Department.name)).scalars()
    return ok([DepartmentOut.model_validate(row) for row in rows])


@router.post("", response_model=ApiResponse[DepartmentOut], status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentCreate,
    current_user: User = Depends(require_roles(UserRole.admin, UserRole.principal)),
    db: Session = Depends(get_db),
) -> dict:
    existing = db.execute(
        select(Department).where(or_(Department.name == payload.name, Department.code == payload.code))
    ).scalars().first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department name or code already exists")
    department = Department(**payload.model_dump())
    db.add(department)
    db.flush()
    log_activity(db, user=current_user, action="department.created", entity_type="department", entity_id=department.id)
    db.commit()
    db.refresh(department)
    return ok(DepartmentOut.model_validate(department), "Department created successfully")


@router.get("/{department_id}", response_model=ApiResponse[DepartmentOut])
def get_department(
    department_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return ok(DepartmentOut.model_validate(_get_department(db, department_id)))


@router.put("/{department_id}", response_model=ApiResponse[DepartmentOut])
def update_department(
    department_id: str,
    payload: DepartmentUpdate,
    current_user: User = Depends(require_roles(UserRole.admin, UserRole.principal)),
    db: Session = Depends(get_db),
) -> dict:
    department = _get_department(db, department_id)
    data = payload.model_dump(exclude_unset=True)
    for key in ("name", "code"):
        if data.get(key) is None:
            data.pop(key, None)
            continue
        clash = db.execute(
            select(Department).where(getattr(Department, key) == data[key], Department.id != department_id)
        ).scalars().first()
        if clash:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Department {key} already exists")

    for key, value in data.items():
        setattr(department, key, value)
    log_activity(db, user=current_user, action="department.updated", entity_type="department", entity_id=department.id)
    db.commit()
    db.refresh(department)
    return ok(DepartmentOut.model_validate(department), "Department updated successfully")


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(
    department_id: str,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> Response:
    department = _get_department(db, department_id)
    delete_unreferenced(
        db,
        department,
        "Department",
        (
            User.department_id,
            Faculty.department_id,
            Classroom.department_id,
            Subject.department_id,
            Resource.department_id,
            Timetable.department_id,
            ClassroomBooking.department_id,
            ResourceRequest.requester_department_id,
            ResourceRequest.target_department_id,
        ),
    )
    log_activity(db, user=current_user, action="department.deleted", entity_type="department", entity_id=department_id)
    commit_delete(db, "Department")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
