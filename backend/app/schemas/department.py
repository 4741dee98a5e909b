from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.common import normalize_optional_text


class DepartmentBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=20)
    hod_name: str | None = Field(default=None, max_length=200)
    hod_email: EmailStr | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("Code cannot be empty")
        return code

    @field_validator("hod_name")
    @classmethod
    def normalize_hod_name(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=20)
    hod_name: str | None = Field(default=None, max_length=200)
    hod_email: EmailStr | None = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().upper()


class DepartmentOut(DepartmentBase):
    id: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
