from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import CATALOG_MANAGERS, get_current_user, get_db, require_roles
from app.db.references import commit_delete, delete_unreferenced
from app.models.department import Department
from app.models.faculty import Faculty, FacultyRole
from app.models.timetable import TimetableEntry
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.faculty import FacultyCreate, FacultyOut, FacultyUpdate
from app.services.audit import log_activity

router = APIRouter()


def _get_faculty(db: Session, faculty_id: str) -> Faculty:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")
    return faculty


def _ensure_department(db: Session, department_id: str | None) -> None:
    if department_id is not None and db.get(Department, department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")


@router.get("", response_model=ApiResponse[list[FacultyOut]])
def list_faculty(
    role: FacultyRole | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    query = select(Faculty).order_by(Faculty.name)
    if role is not None:
        query = query.where(Faculty.role == role)
    return ok([FacultyOut.model_validate(row) for row in db.execute(query).scalars()])


@router.get("/department/{department_id}", response_model=ApiResponse[list[FacultyOut]])
def list_department_faculty(
    department_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    _ensure_department(db, department_id)
    rows = db.execute(
        select(Faculty).where(Faculty.department_id == department_id).order_by(Faculty.name)
    ).scalars()
    return ok([FacultyOut.model_validate(row) for row in rows])


@router.post("", response_model=ApiResponse[FacultyOut], status_code=status.HTTP_201_CREATED)
def create_faculty(
    payload: FacultyCreate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    _ensure_department(db, payload.department_id)
    existing = db.execute(select(Faculty).where(Faculty.email == payload.email)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty email already exists")
    faculty = Faculty(**payload.model_dump())
    db.add(faculty)
    db.flush()
    log_activity(db, user=current_user, action="faculty.created", entity_type="faculty", entity_id=faculty.id)
    db.commit()
    db.refresh(faculty)
    return ok(FacultyOut.model_validate(faculty), "Faculty created successfully")


@router.get("/{faculty_id}", response_model=ApiResponse[FacultyOut])
def get_faculty(
    faculty_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return ok(FacultyOut.model_validate(_get_faculty(db, faculty_id)))


@router.put("/{faculty_id}", response_model=ApiResponse[FacultyOut])
def update_faculty(
    faculty_id: str,
    payload: FacultyUpdate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    faculty = _get_faculty(db, faculty_id)
    data = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    if "department_id" in data:
        _ensure_department(db, data["department_id"])
    if "email" in data:
        clash = db.execute(
            select(Faculty).where(Faculty.email == data["email"], Faculty.id != faculty_id)
        ).scalar_one_or_none()
        if clash:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty email already exists")

    for key, value in data.items():
        setattr(faculty, key, value)
    log_activity(db, user=current_user, action="faculty.updated", entity_type="faculty", entity_id=faculty.id)
    db.commit()
    db.refresh(faculty)
    return ok(FacultyOut.model_validate(faculty), "Faculty updated successfully")


@router.delete("/{faculty_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_faculty(
    faculty_id: str,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> Response:
    faculty = _get_faculty(db, faculty_id)
    delete_unreferenced(db, faculty, "Faculty member", (TimetableEntry.faculty_id,))
    log_activity(db, user=current_user, action="faculty.deleted", entity_type="faculty", entity_id=faculty_id)
    commit_delete(db, "Faculty member")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
