from pydantic import BaseModel, Field, field_validator

from app.models.subject import SubjectType


class SubjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=50)
    credits: int = Field(default=3, ge=0, le=30)
    type: SubjectType = SubjectType.lecture
    department_id: str | None = Field(default=None, max_length=36)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("Code cannot be empty")
        return code


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=50)
    credits: int | None = Field(default=None, ge=0, le=30)
    type: SubjectType | None = None
    department_id: str | None = Field(default=None, max_length=36)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().upper()


class SubjectOut(SubjectBase):
    id: str

    model_config = {"from_attributes": True}
