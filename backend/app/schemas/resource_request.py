from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.resource_request import ResourceRequestPriority, ResourceRequestStatus
from app.schemas.common import normalize_optional_text, parse_time_to_minutes, validate_time_value


class ResourceRequestCreate(BaseModel):
    target_resource_id: str = Field(min_length=1, max_length=36)
    requested_date: date
    start_time: str
    end_time: str
    purpose: str = Field(min_length=1, max_length=2000)
    course_name: str | None = Field(default=None, max_length=200)
    expected_attendance: int = Field(ge=1, le=10000)
    additional_requirements: str | None = Field(default=None, max_length=2000)
    priority: ResourceRequestPriority = ResourceRequestPriority.medium
    is_recurring: bool = False
    recurring_pattern: dict | None = None
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return validate_time_value(value)

    @field_validator("purpose")
    @classmethod
    def strip_purpose(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("purpose cannot be empty")
        return trimmed

    @model_validator(mode="after")
    def validate_order(self) -> "ResourceRequestCreate":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class ResourceRequestUpdate(BaseModel):
    target_resource_id: str | None = Field(default=None, min_length=1, max_length=36)
    requested_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    purpose: str | None = Field(default=None, min_length=1, max_length=2000)
    course_name: str | None = Field(default=None, max_length=200)
    expected_attendance: int | None = Field(default=None, ge=1, le=10000)
    additional_requirements: str | None = Field(default=None, max_length=2000)
    priority: ResourceRequestPriority | None = None
    is_recurring: bool | None = None
    recurring_pattern: dict | None = None
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_time_value(value)


class ResourceRequestDecision(BaseModel):
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class ResourceRequestReject(BaseModel):
    rejection_reason: str | None = Field(default=None, max_length=2000)


class ResourceRequestOut(BaseModel):
    id: str
    requester_hod_id: str
    requester_department_id: str
    target_resource_id: str
    target_department_id: str | None = None
    requested_date: date
    start_time: str
    end_time: str
    purpose: str
    course_name: str | None = None
    expected_attendance: int
    additional_requirements: str | None = None
    status: ResourceRequestStatus
    priority: ResourceRequestPriority
    approved_by_hod_id: str | None = None
    approved_at: datetime | None = None
    auto_approved: bool
    rejection_reason: str | None = None
    notes: str | None = None
    is_recurring: bool
    recurring_pattern: dict | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
