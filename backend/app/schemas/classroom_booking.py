from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.classroom_booking import ClassroomBookingStatus
from app.schemas.common import parse_time_to_minutes, validate_time_value


class ClassroomBookingBase(BaseModel):
    classroom_id: str = Field(min_length=1, max_length=36)
    booking_date: date
    # Derived from booking_date when omitted.
    day_of_week: int | None = Field(default=None, ge=1, le=7)
    start_time: str
    end_time: str
    department_id: str | None = Field(default=None, max_length=36)
    course: str | None = Field(default=None, max_length=200)
    instructor: str | None = Field(default=None, max_length=200)
    status: ClassroomBookingStatus = ClassroomBookingStatus.confirmed

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_order(self) -> "ClassroomBookingBase":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class ClassroomBookingCreate(ClassroomBookingBase):
    pass


class ClassroomBookingUpdate(BaseModel):
    classroom_id: str | None = Field(default=None, min_length=1, max_length=36)
    booking_date: date | None = None
    day_of_week: int | None = Field(default=None, ge=1, le=7)
    start_time: str | None = None
    end_time: str | None = None
    department_id: str | None = Field(default=None, max_length=36)
    course: str | None = Field(default=None, max_length=200)
    instructor: str | None = Field(default=None, max_length=200)
    status: ClassroomBookingStatus | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_time_value(value)


class ClassroomBookingOut(ClassroomBookingBase):
    id: str
    day_of_week: int
    booked_by_id: str | None = None

    model_config = {"from_attributes": True}
