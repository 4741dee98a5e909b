from pydantic import BaseModel, Field, field_validator

from app.models.classroom import RoomType


def _normalize_features(value: list[str]) -> list[str]:
    return list(dict.fromkeys(item.strip() for item in value if item and item.strip()))


class ClassroomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    room_number: str = Field(min_length=1, max_length=50)
    building: str = Field(min_length=1, max_length=200)
    floor: int = Field(default=0, ge=-5, le=200)
    capacity: int = Field(ge=1, le=1000)
    type: RoomType = RoomType.lecture
    features: list[str] = Field(default_factory=list, max_length=50)
    department_id: str | None = Field(default=None, max_length=36)
    is_active: bool = True

    @field_validator("features")
    @classmethod
    def normalize_features(cls, value: list[str]) -> list[str]:
        return _normalize_features(value)


class ClassroomCreate(ClassroomBase):
    pass


class ClassroomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    room_number: str | None = Field(default=None, min_length=1, max_length=50)
    building: str | None = Field(default=None, min_length=1, max_length=200)
    floor: int | None = Field(default=None, ge=-5, le=200)
    capacity: int | None = Field(default=None, ge=1, le=1000)
    type: RoomType | None = None
    features: list[str] | None = Field(default=None, max_length=50)
    department_id: str | None = Field(default=None, max_length=36)
    is_active: bool | None = None

    @field_validator("features")
    @classmethod
    def normalize_features(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return _normalize_features(value)


class ClassroomOut(ClassroomBase):
    id: str

    model_config = {"from_attributes": True}
