from __future__ import annotations

from dataclasses import asdict, dataclass

from app.core.exceptions import ValidationError


@dataclass(frozen=True)
class TimeSlot:
    id: str
    start_time: str
    end_time: str
    duration: int
    label: str


def _hourly_slots(first_hour: int, last_hour: int) -> tuple[TimeSlot, ...]:
    slots = []
    for index, hour in enumerate(range(first_hour, last_hour), start=1):
        start = f"{hour:02d}:00"
        end = f"{hour + 1:02d}:00"
        slots.append(TimeSlot(id=str(index), start_time=start, end_time=end, duration=60, label=f"{start}-{end}"))
    return tuple(slots)


DEFAULT_TIME_SLOTS = _hourly_slots(8, 17)
_SLOTS_BY_ID = {slot.id: slot for slot in DEFAULT_TIME_SLOTS}


def resolve_time_slot(slot_id: str) -> TimeSlot:
    slot = _SLOTS_BY_ID.get(str(slot_id).strip())
    if slot is None:
        raise ValidationError(
            f"Unknown time slot '{slot_id}'",
            details={"valid_time_slot_ids": list(_SLOTS_BY_ID)},
        )
    return slot


def time_slot_catalog() -> dict[str, list[dict]]:
    slots = [asdict(slot) for slot in DEFAULT_TIME_SLOTS]
    return {"departmentSlots": slots, "universitySlots": list(slots)}
