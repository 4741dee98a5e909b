from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ResourceNotFoundError
from app.db.locking import lock_reservation_target
from app.models.booking_request import BookingRequest
from app.models.classroom import Classroom
from app.models.faculty import Faculty
from app.models.subject import Subject
from app.models.timetable import Timetable, TimetableEntry
from app.schemas.common import DAY_NAMES
from app.services.conflict_checker import TimeInterval, find_conflicts

logger = logging.getLogger(__name__)

ENTRY_FIELDS = ("subject_id", "faculty_id", "classroom_id", "day_of_week", "start_time", "end_time")


def entry_interval(entry: TimetableEntry) -> TimeInterval:
    return TimeInterval.from_stored(entry.day_of_week, entry.start_time, entry.end_time)


def _entry_summary(entry: TimetableEntry) -> dict:
    return {
        "id": entry.id,
        "timetable_id": entry.timetable_id,
        "subject_id": entry.subject_id,
        "faculty_id": entry.faculty_id,
        "classroom_id": entry.classroom_id,
        "day_of_week": entry.day_of_week,
        "start_time": entry.start_time,
        "end_time": entry.end_time,
    }


@dataclass
class EntryConflictReport:
    faculty_conflicts: list[TimetableEntry] = field(default_factory=list)
    classroom_conflicts: list[TimetableEntry] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.faculty_conflicts or self.classroom_conflicts)

    @property
    def total(self) -> int:
        return len(self.faculty_conflicts) + len(self.classroom_conflicts)

    def messages(self) -> list[str]:
        lines = []
        for item in self.faculty_conflicts:
            day = DAY_NAMES.get(item.day_of_week, str(item.day_of_week))
            lines.append(f"Faculty is already teaching another session on {day} from {item.start_time} to {item.end_time}")
        for item in self.classroom_conflicts:
            day = DAY_NAMES.get(item.day_of_week, str(item.day_of_week))
            lines.append(f"Classroom is already occupied on {day} from {item.start_time} to {item.end_time}")
        return lines

    def to_details(self) -> dict:
        return {
            "has_conflicts": self.has_conflicts,
            "total_conflicts": self.total,
            "faculty_conflicts": [_entry_summary(item) for item in self.faculty_conflicts],
            "classroom_conflicts": [_entry_summary(item) for item in self.classroom_conflicts],
            "messages": self.messages(),
        }


class TimetableEntryManager:
    """Conflict-checked writes for timetable entries.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _require(self, model, row_id: str, label: str):
        row = self.db.get(model, row_id)
        if row is None:
            raise ResourceNotFoundError(label, row_id)
        return row

    def get_entry(self, entry_id: str) -> TimetableEntry:
        return self._require(TimetableEntry, entry_id, "Timetable entry")

    def check_entry_conflicts(
        self,
        *,
        faculty_id: str,
        classroom_id: str,
        interval: TimeInterval,
        exclude_entry_id: str | None = None,
    ) -> EntryConflictReport:
        faculty_rows = self.db.execute(
            select(TimetableEntry).where(
                TimetableEntry.faculty_id == faculty_id,
                TimetableEntry.day_of_week == interval.day_of_week,
            )
        ).scalars()
        classroom_rows = self.db.execute(
            select(TimetableEntry).where(
                TimetableEntry.classroom_id == classroom_id,
                TimetableEntry.day_of_week == interval.day_of_week,
            )
        ).scalars()
        # Both scopes are always evaluated so every problem is reported at once.
        return EntryConflictReport(
            faculty_conflicts=find_conflicts(
                list(faculty_rows), interval, interval_of=entry_interval, exclude_id=exclude_entry_id
            ),
            classroom_conflicts=find_conflicts(
                list(classroom_rows), interval, interval_of=entry_interval, exclude_id=exclude_entry_id
            ),
        )

    def _ensure_references(self, *, subject_id: str, faculty_id: str, classroom_id: str) -> None:
        self._require(Subject, subject_id, "Subject")
        if lock_reservation_target(self.db, Faculty, faculty_id) is None:
            raise ResourceNotFoundError("Faculty", faculty_id)
        if lock_reservation_target(self.db, Classroom, classroom_id) is None:
            raise ResourceNotFoundError("Classroom", classroom_id)

    def add_entry(
        self,
        timetable_id: str,
        *,
        subject_id: str,
        faculty_id: str,
        classroom_id: str,
        day_of_week: int,
        start_time: str,
        end_time: str,
    ) -> TimetableEntry:
        self._require(Timetable, timetable_id, "Timetable")
        interval = TimeInterval.build(day_of_week, start_time, end_time)
        self._ensure_references(subject_id=subject_id, faculty_id=faculty_id, classroom_id=classroom_id)

        report = self.check_entry_conflicts(faculty_id=faculty_id, classroom_id=classroom_id, interval=interval)
        if report.has_conflicts:
            logger.info(
                "Rejected timetable entry for timetable %s on %s: %d conflict(s)",
                timetable_id,
                interval.describe(),
                report.total,
            )
            raise ConflictError("Cannot create session due to conflicts", details=report.to_details())

        entry = TimetableEntry(
            timetable_id=timetable_id,
            subject_id=subject_id,
            faculty_id=faculty_id,
            classroom_id=classroom_id,
            day_of_week=interval.day_of_week,
            start_time=interval.start_time,
            end_time=interval.end_time,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def update_entry(self, entry_id: str, patch: dict) -> TimetableEntry:
        entry = self.get_entry(entry_id)
        merged = {name: getattr(entry, name) for name in ENTRY_FIELDS}
        merged.update({key: value for key, value in patch.items() if key in ENTRY_FIELDS and value is not None})

        interval = TimeInterval.build(merged["day_of_week"], merged["start_time"], merged["end_time"])
        self._ensure_references(
            subject_id=merged["subject_id"],
            faculty_id=merged["faculty_id"],
            classroom_id=merged["classroom_id"],
        )
        report = self.check_entry_conflicts(
            faculty_id=merged["faculty_id"],
            classroom_id=merged["classroom_id"],
            interval=interval,
            exclude_entry_id=entry.id,
        )
        if report.has_conflicts:
            raise ConflictError("Cannot update session due to conflicts", details=report.to_details())

        merged["start_time"] = interval.start_time
        merged["end_time"] = interval.end_time
        for key, value in merged.items():
            setattr(entry, key, value)
        self.db.flush()
        return entry

    def _release_booking_links(self, entry_ids: list[str]) -> None:
        if not entry_ids:
            return
        self.db.execute(
            update(BookingRequest)
            .where(BookingRequest.timetable_entry_id.in_(entry_ids))
            .values(timetable_entry_id=None)
        )

    def delete_entry(self, entry_id: str) -> None:
        entry = self.get_entry(entry_id)
        self._release_booking_links([entry.id])
        self.db.delete(entry)
        self.db.flush()

    def delete_timetable(self, timetable_id: str) -> int:
        timetable = self._require(Timetable, timetable_id, "Timetable")
        entry_ids = list(
            self.db.execute(select(TimetableEntry.id).where(TimetableEntry.timetable_id == timetable_id)).scalars()
        )
        self._release_booking_links(entry_ids)
        result = self.db.execute(delete(TimetableEntry).where(TimetableEntry.timetable_id == timetable_id))
        removed = result.rowcount or 0
        self.db.delete(timetable)
        self.db.flush()
        logger.info("Deleted timetable %s and %d entr(ies)", timetable_id, removed)
        return removed
