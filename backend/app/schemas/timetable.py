from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import parse_time_to_minutes, validate_time_value


class TimetableBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    semester: int = Field(default=1, ge=1, le=12)
    department_id: str | None = Field(default=None, max_length=36)
    section: str | None = Field(default=None, max_length=50)
    academic_year: str = Field(min_length=4, max_length=20)
    number_of_students: int = Field(default=0, ge=0, le=10000)
    is_active: bool = True


class TimetableCreate(TimetableBase):
    pass


class TimetableUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    semester: int | None = Field(default=None, ge=1, le=12)
    department_id: str | None = Field(default=None, max_length=36)
    section: str | None = Field(default=None, max_length=50)
    academic_year: str | None = Field(default=None, min_length=4, max_length=20)
    number_of_students: int | None = Field(default=None, ge=0, le=10000)
    is_active: bool | None = None


class TimetableEntryBase(BaseModel):
    subject_id: str = Field(min_length=1, max_length=36)
    faculty_id: str = Field(min_length=1, max_length=36)
    classroom_id: str = Field(min_length=1, max_length=36)
    day_of_week: int = Field(ge=1, le=7)
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_order(self) -> "TimetableEntryBase":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class TimetableEntryCreate(TimetableEntryBase):
    pass


class TimetableEntryUpdate(BaseModel):
    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    faculty_id: str | None = Field(default=None, min_length=1, max_length=36)
    classroom_id: str | None = Field(default=None, min_length=1, max_length=36)
    day_of_week: int | None = Field(default=None, ge=1, le=7)
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_time_value(value)


class TimetableEntryOut(TimetableEntryBase):
    id: str
    timetable_id: str

    model_config = {"from_attributes": True}


class TimetableOut(TimetableBase):
    id: str

    model_config = {"from_attributes": True}


class TimetableDetailOut(TimetableOut):
    entries: list[TimetableEntryOut] = Field(default_factory=list)
