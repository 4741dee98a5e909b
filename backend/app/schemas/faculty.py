from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.faculty import FacultyRole


class FacultyBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    designation: str = Field(default="Assistant Professor", min_length=1, max_length=200)
    role: FacultyRole = FacultyRole.faculty
    department_id: str | None = Field(default=None, max_length=36)

    @field_validator("name", "designation")
    @classmethod
    def strip_text(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Value cannot be empty")
        return trimmed

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class FacultyCreate(FacultyBase):
    pass


class FacultyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    designation: str | None = Field(default=None, min_length=1, max_length=200)
    role: FacultyRole | None = None
    department_id: str | None = Field(default=None, max_length=36)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lower()


class FacultyOut(FacultyBase):
    id: str

    model_config = {"from_attributes": True}
