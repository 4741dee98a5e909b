from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.booking_request import BookingRequestStatus
from app.schemas.common import normalize_optional_text


class BookingRequestCreate(BaseModel):
    target_resource_id: str = Field(min_length=1, max_length=36)
    # Derived from the resource owner; only consulted for shared resources.
    target_department: str | None = Field(default=None, max_length=200)
    # Only consulted when the requester account has no department.
    requester_department: str | None = Field(default=None, max_length=200)
    time_slot_id: str = Field(min_length=1, max_length=20)
    day_of_week: int = Field(ge=1, le=7)
    course_name: str = Field(min_length=1, max_length=200)
    purpose: str | None = Field(default=None, max_length=2000)
    expected_attendance: int = Field(ge=1, le=10000)
    notes: str | None = Field(default=None, max_length=2000)
    request_metadata: dict = Field(default_factory=dict)

    @field_validator("course_name")
    @classmethod
    def strip_course_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("course_name cannot be empty")
        return trimmed

    @field_validator("target_department", "requester_department", "purpose", "notes")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class BookingRequestStatusUpdate(BaseModel):
    status: BookingRequestStatus
    notes: str | None = Field(default=None, max_length=2000)
    approved_by: str | None = Field(default=None, max_length=200)
    rejection_reason: str | None = Field(default=None, max_length=2000)

    @field_validator("status")
    @classmethod
    def validate_target_status(cls, value: BookingRequestStatus) -> BookingRequestStatus:
        if value == BookingRequestStatus.pending:
            raise ValueError('Invalid status value. Must be "approved", "rejected", or "withdrawn".')
        return value


class VcApprovalUpdate(BaseModel):
    vc_approved: bool
    notes: str | None = Field(default=None, max_length=2000)


class BookingRequestOut(BaseModel):
    id: str
    requester_id: str
    requester_name: str | None = None
    requester_department: str
    target_resource_id: str
    target_department: str
    time_slot_id: str
    day_of_week: int
    start_time: str
    end_time: str
    course_name: str
    purpose: str | None = None
    expected_attendance: int
    status: BookingRequestStatus
    approved_by: str | None = None
    auto_approved: bool
    response_date: datetime | None = None
    notes: str | None = None
    rejection_reason: str | None = None
    vc_approved: bool | None = None
    vc_response_date: datetime | None = None
    vc_notes: str | None = None
    timetable_entry_id: str | None = None
    request_metadata: dict
    request_date: datetime | None = None

    model_config = {"from_attributes": True}
