from __future__ import annotations

import re
from typing import Generic, TypeVar

from pydantic import BaseModel

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# ISO weekday numbering, Monday=1.
DAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}

T = TypeVar("T")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value or ""):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_time_value(value: str) -> str:
    value = (value or "").strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


def normalize_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T
    message: str | None = None
    total: int | None = None
    warnings: list[str] = []


def ok(data, message: str | None = None, *, warnings: list[str] | None = None) -> dict:
    payload = {"success": True, "data": data, "message": message, "warnings": warnings or []}
    if isinstance(data, list):
        payload["total"] = len(data)
    return payload
