from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import CATALOG_MANAGERS, get_current_user, get_db, require_roles
from app.models.classroom_booking import ClassroomBooking, ClassroomBookingStatus
from app.models.user import User, UserRole
from app.schemas.classroom import ClassroomOut
from app.schemas.classroom_booking import ClassroomBookingCreate, ClassroomBookingOut, ClassroomBookingUpdate
from app.schemas.common import ApiResponse, ok
from app.services.audit import log_activity
from app.services.classroom_bookings import ClassroomBookingService, booking_summary

router = APIRouter()

BOOKING_ROLES = (*CATALOG_MANAGERS, UserRole.faculty)


def _listing(rows) -> dict:
    return ok([ClassroomBookingOut.model_validate(row) for row in rows])


@router.get("", response_model=ApiResponse[list[ClassroomBookingOut]])
def list_bookings(
    classroom_id: str | None = None,
    status_filter: ClassroomBookingStatus | None = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    query = select(ClassroomBooking).order_by(ClassroomBooking.booking_date, ClassroomBooking.start_time)
    if classroom_id:
        query = query.where(ClassroomBooking.classroom_id == classroom_id)
    if status_filter is not None:
        query = query.where(ClassroomBooking.status == status_filter)
    return _listing(db.execute(query).scalars())


@router.get("/date/{booking_date}", response_model=ApiResponse[list[ClassroomBookingOut]])
def list_bookings_on_date(
    booking_date: date,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    rows = db.execute(
        select(ClassroomBooking)
        .where(ClassroomBooking.booking_date == booking_date)
        .order_by(ClassroomBooking.start_time)
    ).scalars()
    return _listing(rows)


@router.get("/department/{department_id}", response_model=ApiResponse[list[ClassroomBookingOut]])
def list_department_bookings(
    department_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    rows = db.execute(
        select(ClassroomBooking)
        .where(ClassroomBooking.department_id == department_id)
        .order_by(ClassroomBooking.booking_date, ClassroomBooking.start_time)
    ).scalars()
    return _listing(rows)


@router.get("/available-classrooms", response_model=ApiResponse[list[ClassroomOut]])
def available_classrooms(
    booking_date: date = Query(alias="date"),
    start_time: str = Query(),
    end_time: str = Query(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    rooms = ClassroomBookingService(db).available_classrooms(booking_date, start_time.strip(), end_time.strip())
    return ok([ClassroomOut.model_validate(room) for room in rooms])


@router.post("/check-conflicts")
def check_booking_conflicts(
    payload: ClassroomBookingCreate,
    exclude_booking_id: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    conflicts = ClassroomBookingService(db).check_conflicts(payload.model_dump(), exclude_booking_id)
    return ok(
        {"has_conflicts": bool(conflicts), "conflicts": [booking_summary(item) for item in conflicts]},
        "Conflicts found" if conflicts else "No conflicts",
    )


@router.post("", response_model=ApiResponse[ClassroomBookingOut], status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: ClassroomBookingCreate,
    current_user: User = Depends(require_roles(*BOOKING_ROLES)),
    db: Session = Depends(get_db),
) -> dict:
    booking = ClassroomBookingService(db).create(payload.model_dump(), user=current_user)
    log_activity(
        db,
        user=current_user,
        action="classroom_booking.created",
        entity_type="classroom_booking",
        entity_id=booking.id,
    )
    db.commit()
    db.refresh(booking)
    return ok(ClassroomBookingOut.model_validate(booking), "Classroom booked successfully")


@router.get("/{booking_id}", response_model=ApiResponse[ClassroomBookingOut])
def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return ok(ClassroomBookingOut.model_validate(ClassroomBookingService(db).get(booking_id)))


@router.put("/{booking_id}", response_model=ApiResponse[ClassroomBookingOut])
def update_booking(
    booking_id: str,
    payload: ClassroomBookingUpdate,
    current_user: User = Depends(require_roles(*BOOKING_ROLES)),
    db: Session = Depends(get_db),
) -> dict:
    booking = ClassroomBookingService(db).update(booking_id, payload.model_dump(exclude_unset=True))
    log_activity(
        db,
        user=current_user,
        action="classroom_booking.updated",
        entity_type="classroom_booking",
        entity_id=booking.id,
    )
    db.commit()
    db.refresh(booking)
    return ok(ClassroomBookingOut.model_validate(booking), "Booking updated successfully")


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: str,
    current_user: User = Depends(require_roles(*BOOKING_ROLES)),
    db: Session = Depends(get_db),
) -> Response:
    ClassroomBookingService(db).delete(booking_id)
    log_activity(
        db,
        user=current_user,
        action="classroom_booking.deleted",
        entity_type="classroom_booking",
        entity_id=booking_id,
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
