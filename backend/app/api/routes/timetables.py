from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import CATALOG_MANAGERS, get_current_user, get_db, require_roles
from app.models.department import Department
from app.models.timetable import Timetable, TimetableEntry
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.timetable import (
    TimetableCreate,
    TimetableDetailOut,
    TimetableEntryCreate,
    TimetableEntryOut,
    TimetableEntryUpdate,
    TimetableOut,
    TimetableUpdate,
)
from app.services.audit import log_activity
from app.services.conflict_checker import TimeInterval
from app.services.timetable_manager import TimetableEntryManager

router = APIRouter()


def _get_timetable(db: Session, timetable_id: str) -> Timetable:
    timetable = db.get(Timetable, timetable_id)
    if timetable is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable not found")
    return timetable


def _entries_for(db: Session, timetable_id: str) -> list[TimetableEntry]:
    return list(
        db.execute(
            select(TimetableEntry)
            .where(TimetableEntry.timetable_id == timetable_id)
            .order_by(TimetableEntry.day_of_week, TimetableEntry.start_time)
        ).scalars()
    )


def _detail(db: Session, timetable: Timetable) -> TimetableDetailOut:
    detail = TimetableDetailOut.model_validate(timetable)
    detail.entries = [TimetableEntryOut.model_validate(entry) for entry in _entries_for(db, timetable.id)]
    return detail


@router.get("", response_model=ApiResponse[list[TimetableOut]])
def list_timetables(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    rows = db.execute(select(Timetable).order_by(Timetable.name)).scalars()
    return ok([TimetableOut.model_validate(row) for row in rows])


@router.get("/department/{department_id}", response_model=ApiResponse[list[TimetableOut]])
def list_department_timetables(
    department_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    rows = db.execute(
        select(Timetable).where(Timetable.department_id == department_id).order_by(Timetable.semester, Timetable.name)
    ).scalars()
    return ok([TimetableOut.model_validate(row) for row in rows])


@router.post("", response_model=ApiResponse[TimetableOut], status_code=status.HTTP_201_CREATED)
def create_timetable(
    payload: TimetableCreate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    if payload.department_id and db.get(Department, payload.department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    timetable = Timetable(**payload.model_dump())
    db.add(timetable)
    db.flush()
    log_activity(db, user=current_user, action="timetable.created", entity_type="timetable", entity_id=timetable.id)
    db.commit()
    db.refresh(timetable)
    return ok(TimetableOut.model_validate(timetable), "Timetable created successfully")


@router.put("/entries/{entry_id}", response_model=ApiResponse[TimetableEntryOut])
def update_entry(
    entry_id: str,
    payload: TimetableEntryUpdate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    entry = TimetableEntryManager(db).update_entry(entry_id, payload.model_dump(exclude_unset=True))
    log_activity(db, user=current_user, action="timetable_entry.updated", entity_type="timetable_entry", entity_id=entry.id)
    db.commit()
    db.refresh(entry)
    return ok(TimetableEntryOut.model_validate(entry), "Session updated successfully")


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: str,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> Response:
    TimetableEntryManager(db).delete_entry(entry_id)
    log_activity(db, user=current_user, action="timetable_entry.deleted", entity_type="timetable_entry", entity_id=entry_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{timetable_id}", response_model=ApiResponse[TimetableDetailOut])
def get_timetable(
    timetable_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return ok(_detail(db, _get_timetable(db, timetable_id)))


@router.put("/{timetable_id}", response_model=ApiResponse[TimetableOut])
def update_timetable(
    timetable_id: str,
    payload: TimetableUpdate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    timetable = _get_timetable(db, timetable_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("department_id") and db.get(Department, data["department_id"]) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    for key, value in data.items():
        if value is None and key not in ("department_id", "section"):
            continue
        setattr(timetable, key, value)
    log_activity(db, user=current_user, action="timetable.updated", entity_type="timetable", entity_id=timetable.id)
    db.commit()
    db.refresh(timetable)
    return ok(TimetableOut.model_validate(timetable), "Timetable updated successfully")


@router.delete("/{timetable_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_timetable(
    timetable_id: str,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> Response:
    removed = TimetableEntryManager(db).delete_timetable(timetable_id)
    log_activity(
        db,
        user=current_user,
        action="timetable.deleted",
        entity_type="timetable",
        entity_id=timetable_id,
        details={"entries_removed": removed},
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{timetable_id}/entries", response_model=ApiResponse[list[TimetableEntryOut]])
def list_entries(
    timetable_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    _get_timetable(db, timetable_id)
    return ok([TimetableEntryOut.model_validate(entry) for entry in _entries_for(db, timetable_id)])


@router.post(
    "/{timetable_id}/entries",
    response_model=ApiResponse[TimetableEntryOut],
    status_code=status.HTTP_201_CREATED,
)
def add_entry(
    timetable_id: str,
    payload: TimetableEntryCreate,
    current_user: User = Depends(require_roles(*CATALOG_MANAGERS)),
    db: Session = Depends(get_db),
) -> dict:
    entry = TimetableEntryManager(db).add_entry(timetable_id, **payload.model_dump())
    log_activity(db, user=current_user, action="timetable_entry.created", entity_type="timetable_entry", entity_id=entry.id)
    db.commit()
    db.refresh(entry)
    return ok(TimetableEntryOut.model_validate(entry), "Session added successfully")


@router.post("/{timetable_id}/entries/check-conflicts")
def check_entry_conflicts(
    timetable_id: str,
    payload: TimetableEntryCreate,
    exclude_entry_id: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    _get_timetable(db, timetable_id)
    interval = TimeInterval.build(payload.day_of_week, payload.start_time, payload.end_time)
    report = TimetableEntryManager(db).check_entry_conflicts(
        faculty_id=payload.faculty_id,
        classroom_id=payload.classroom_id,
        interval=interval,
        exclude_entry_id=exclude_entry_id,
    )
    return ok(report.to_details(), "Conflicts found" if report.has_conflicts else "No conflicts")
