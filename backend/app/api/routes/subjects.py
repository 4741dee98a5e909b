from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import CATALOG_MANAGERS, get_current_user, get_db, require_roles
from app.db.references import commit_delete, delete_unreferenced
from app.models.department import Department
from app.models.subject import Subject
from app.models.timetable import TimetableEntry
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate
from app.services.audit import log_activity

router = APIRouter()


def _get_subject(db: Session, subject_id: str) -> Subject:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    return subject


@router.get("", response_model=ApiResponse[list[SubjectOut]])
def list_subjects(
    department_id: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    query = select(Subject).order_by(Subject.code)
    if department_id:
        query = query.where(Subject.department_id == department_id)
    return ok([SubjectOut.model_validate(row) for row in db.execute(query).scalars()])


@router.post("", response_model=ApiResponse[SubjectOut], status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    if payload.department_id and db.get(Department, payload.department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.flush()
    log_activity(db, user=current_user, action="subject.created", entity_type="subject", entity_id=subject.id)
    db.commit()
    db.refresh(subject)
    return ok(SubjectOut.model_validate(subject), "Subject created successfully")


@router.get("/{subject_id}", response_model=ApiResponse[SubjectOut])
def get_subject(
    subject_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return ok(SubjectOut.model_validate(_get_subject(db, subject_id)))


@router.put("/{subject_id}", response_model=ApiResponse[SubjectOut])
def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    subject = _get_subject(db, subject_id)
    data = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    if "code" in data:
        clash = db.execute(
            select(Subject).where(Subject.code == data["code"], Subject.id != subject_id)
        ).scalar_one_or_none()
        if clash:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    for key, value in data.items():
        setattr(subject, key, value)
    log_activity(db, user=current_user, action="subject.updated", entity_type="subject", entity_id=subject.id)
    db.commit()
    db.refresh(subject)
    return ok(SubjectOut.model_validate(subject), "Subject updated successfully")


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(
    subject_id: str,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> Response:
    subject = _get_subject(db, subject_id)
    delete_unreferenced(db, subject, "Subject", (TimetableEntry.subject_id,))
    log_activity(db, user=current_user, action="subject.deleted", entity_type="subject", entity_id=subject_id)
    commit_delete(db, "Subject")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
