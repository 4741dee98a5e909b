"""Overlap detection for classroom, faculty and resource reservations.

Every reservation is reduced to a :class:`TimeInterval`, a half-open
``[start, end)`` range on a daily clock scoped to an ISO day of week and,
for dated bookings, a calendar date. Two intervals conflict only when they
fall on the same day and ``start_a < end_b and end_a > start_b``; intervals
that merely touch at a boundary are compatible.

The checker is storage-agnostic: callers load the candidate rows for one
resource key (a classroom, a faculty member, a bookable resource) and pass an
``interval_of`` accessor that maps each row to its interval.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import TypeVar

from app.core.exceptions import ValidationError
from app.schemas.common import DAY_NAMES, minutes_to_hhmm, parse_time_to_minutes

RowT = TypeVar("RowT")


def _parse_clock(value: str, field: str) -> int:
    try:
        return parse_time_to_minutes(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must be in HH:MM 24-hour format", details={"field": field}) from exc


@dataclass(frozen=True)
class TimeInterval:
    day_of_week: int
    start_minutes: int
    end_minutes: int
    date: date | None = None

    @classmethod
    def build(
        cls,
        day_of_week: int,
        start_time: str,
        end_time: str,
        on_date: date | None = None,
    ) -> "TimeInterval":
        """Validated constructor for intervals coming from user input."""
        if day_of_week not in DAY_NAMES:
            raise ValidationError("day_of_week must be between 1 (Monday) and 7 (Sunday)")
        start = _parse_clock(start_time, "start_time")
        end = _parse_clock(end_time, "end_time")
        if end <= start:
            raise ValidationError(
                "end_time must be after start_time",
                details={"start_time": start_time, "end_time": end_time},
            )
        if on_date is not None and on_date.isoweekday() != day_of_week:
            raise ValidationError(
                f"day_of_week {day_of_week} does not match {on_date.isoformat()} ({DAY_NAMES[on_date.isoweekday()]})"
            )
        return cls(day_of_week=day_of_week, start_minutes=start, end_minutes=end, date=on_date)

    @classmethod
    def from_stored(
        cls,
        day_of_week: int,
        start_time: str,
        end_time: str,
        on_date: date | None = None,
    ) -> "TimeInterval":
        # Persisted rows are trusted as-is; degenerate legacy rows simply never conflict.
        return cls(
            day_of_week=day_of_week,
            start_minutes=_parse_clock(start_time, "start_time"),
            end_minutes=_parse_clock(end_time, "end_time"),
            date=on_date,
        )

    @property
    def start_time(self) -> str:
        return minutes_to_hhmm(self.start_minutes)

    @property
    def end_time(self) -> str:
        return minutes_to_hhmm(self.end_minutes)

    @property
    def is_empty(self) -> bool:
        return self.end_minutes <= self.start_minutes

    def same_day(self, other: "TimeInterval") -> bool:
        if self.day_of_week != other.day_of_week:
            return False
        if self.date is not None and other.date is not None:
            return self.date == other.date
        return True

    def overlaps(self, other: "TimeInterval") -> bool:
        if self.is_empty or other.is_empty:
            return False
        if not self.same_day(other):
            return False
        return self.start_minutes < other.end_minutes and self.end_minutes > other.start_minutes

    def describe(self) -> str:
        day = DAY_NAMES.get(self.day_of_week, str(self.day_of_week))
        if self.date is not None:
            day = f"{day} {self.date.isoformat()}"
        return f"{day} {self.start_time}-{self.end_time}"


def intervals_overlap(first: TimeInterval, second: TimeInterval) -> bool:
    return first.overlaps(second)


def has_conflict(existing: Iterable[TimeInterval], candidate: TimeInterval) -> bool:
    return any(candidate.overlaps(item) for item in existing)


def find_conflicts(
    existing: Iterable[RowT],
    candidate: TimeInterval,
    *,
    interval_of: Callable[[RowT], TimeInterval],
    exclude_id: str | None = None,
    id_of: Callable[[RowT], str] = lambda row: getattr(row, "id"),
) -> list[RowT]:
    """Return every row in ``existing`` whose interval overlaps ``candidate``.

    ``existing`` must already be scoped to a single resource key. The row whose
    id equals ``exclude_id`` (the entity being updated) is skipped.
    """
    conflicts: list[RowT] = []
    for row in existing:
        if exclude_id is not None and id_of(row) == exclude_id:
            continue
        if candidate.overlaps(interval_of(row)):
            conflicts.append(row)
    return conflicts
