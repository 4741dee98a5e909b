from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from app.db.locking import lock_reservation_target
from app.models.classroom import Classroom
from app.models.classroom_booking import ClassroomBooking, ClassroomBookingStatus
from app.models.department import Department
from app.models.user import User
from app.services.conflict_checker import TimeInterval, find_conflicts

logger = logging.getLogger(__name__)

BOOKING_FIELDS = (
    "classroom_id",
    "booking_date",
    "day_of_week",
    "start_time",
    "end_time",
    "department_id",
    "course",
    "instructor",
    "status",
)


def booking_interval(booking: ClassroomBooking) -> TimeInterval:
    return TimeInterval.from_stored(booking.day_of_week, booking.start_time, booking.end_time, booking.booking_date)


def booking_summary(booking: ClassroomBooking) -> dict:
    return {
        "id": booking.id,
        "classroom_id": booking.classroom_id,
        "booking_date": booking.booking_date.isoformat(),
        "day_of_week": booking.day_of_week,
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "department_id": booking.department_id,
        "course": booking.course,
        "status": booking.status.value,
    }


def _interval_for(values: dict) -> TimeInterval:
    booking_date: date = values["booking_date"]
    day_of_week = values.get("day_of_week") or booking_date.isoweekday()
    return TimeInterval.build(day_of_week, values["start_time"], values["end_time"], booking_date)


class ClassroomBookingService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, booking_id: str) -> ClassroomBooking:
        booking = self.db.get(ClassroomBooking, booking_id)
        if booking is None:
            raise ResourceNotFoundError("Classroom booking", booking_id)
        return booking

    def find_conflicts(
        self,
        *,
        classroom_id: str,
        interval: TimeInterval,
        exclude_booking_id: str | None = None,
    ) -> list[ClassroomBooking]:
        rows = self.db.execute(
            select(ClassroomBooking).where(
                ClassroomBooking.classroom_id == classroom_id,
                ClassroomBooking.booking_date == interval.date,
                ClassroomBooking.day_of_week == interval.day_of_week,
                ClassroomBooking.status == ClassroomBookingStatus.confirmed,
            )
        ).scalars()
        return find_conflicts(list(rows), interval, interval_of=booking_interval, exclude_id=exclude_booking_id)

    def check_conflicts(self, values: dict, exclude_booking_id: str | None = None) -> list[ClassroomBooking]:
        interval = _interval_for(values)
        return self.find_conflicts(
            classroom_id=values["classroom_id"],
            interval=interval,
            exclude_booking_id=exclude_booking_id,
        )

    def _lock_classroom(self, classroom_id: str) -> Classroom:
        classroom = lock_reservation_target(self.db, Classroom, classroom_id)
        if classroom is None:
            raise ResourceNotFoundError("Classroom", classroom_id)
        return classroom

    def _ensure_department(self, department_id: str | None) -> None:
        if department_id is not None and self.db.get(Department, department_id) is None:
            raise ResourceNotFoundError("Department", department_id)

    def _reject_conflicts(self, values: dict, interval: TimeInterval, exclude_booking_id: str | None = None) -> None:
        if values.get("status", ClassroomBookingStatus.confirmed) != ClassroomBookingStatus.confirmed:
            return
        conflicts = self.find_conflicts(
            classroom_id=values["classroom_id"],
            interval=interval,
            exclude_booking_id=exclude_booking_id,
        )
        if conflicts:
            logger.info(
                "Classroom %s already booked on %s (%d conflict(s))",
                values["classroom_id"],
                interval.describe(),
                len(conflicts),
            )
            raise ConflictError(
                "There are conflicts with existing bookings",
                conflicts=[booking_summary(item) for item in conflicts],
            )

    def create(self, values: dict, *, user: User | None = None) -> ClassroomBooking:
        classroom = self._lock_classroom(values["classroom_id"])
        if not classroom.is_active:
            raise ValidationError(f"Classroom {classroom.name} is not active")
        self._ensure_department(values.get("department_id"))

        interval = _interval_for(values)
        self._reject_conflicts(values, interval)

        data = {key: value for key, value in values.items() if key in BOOKING_FIELDS and value is not None}
        data["day_of_week"] = interval.day_of_week
        data["start_time"] = interval.start_time
        data["end_time"] = interval.end_time
        booking = ClassroomBooking(**data, booked_by_id=user.id if user is not None else None)
        self.db.add(booking)
        self.db.flush()
        return booking

    def update(self, booking_id: str, patch: dict) -> ClassroomBooking:
        booking = self.get(booking_id)
        merged = {name: getattr(booking, name) for name in BOOKING_FIELDS}
        merged.update({key: value for key, value in patch.items() if key in BOOKING_FIELDS and value is not None})
        if "booking_date" in patch and "day_of_week" not in patch:
            merged["day_of_week"] = None

        self._lock_classroom(merged["classroom_id"])
        self._ensure_department(merged.get("department_id"))
        interval = _interval_for(merged)
        self._reject_conflicts(merged, interval, exclude_booking_id=booking.id)

        merged["day_of_week"] = interval.day_of_week
        merged["start_time"] = interval.start_time
        merged["end_time"] = interval.end_time
        for key, value in merged.items():
            setattr(booking, key, value)
        self.db.flush()
        return booking

    def delete(self, booking_id: str) -> None:
        booking = self.get(booking_id)
        self.db.delete(booking)
        self.db.flush()

    def available_classrooms(self, booking_date: date, start_time: str, end_time: str) -> list[Classroom]:
        interval = TimeInterval.build(booking_date.isoweekday(), start_time, end_time, booking_date)
        booked = self.db.execute(
            select(ClassroomBooking).where(
                ClassroomBooking.booking_date == booking_date,
                ClassroomBooking.status == ClassroomBookingStatus.confirmed,
            )
        ).scalars()
        busy_ids = {item.classroom_id for item in find_conflicts(list(booked), interval, interval_of=booking_interval)}
        classrooms = self.db.execute(
            select(Classroom).where(Classroom.is_active.is_(True)).order_by(Classroom.name)
        ).scalars()
        return [room for room in classrooms if room.id not in busy_ids]
