from pydantic import BaseModel, Field, model_validator

from app.models.resource import ResourceType


class ResourceBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    type: ResourceType
    capacity: int | None = Field(default=None, ge=1, le=10000)
    department_id: str | None = Field(default=None, max_length=36)
    classroom_id: str | None = Field(default=None, max_length=36)
    building: str | None = Field(default=None, max_length=200)
    floor: int | None = Field(default=None, ge=-5, le=200)
    location: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    equipment: list[str] = Field(default_factory=list, max_length=100)
    facilities: list[str] = Field(default_factory=list, max_length=100)
    is_shared: bool = False
    is_active: bool = True


class ResourceCreate(ResourceBase):
    @model_validator(mode="after")
    def mark_unowned_as_shared(self) -> "ResourceCreate":
        if self.department_id is None:
            self.is_shared = True
        return self


class ResourceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: ResourceType | None = None
    capacity: int | None = Field(default=None, ge=1, le=10000)
    department_id: str | None = Field(default=None, max_length=36)
    classroom_id: str | None = Field(default=None, max_length=36)
    building: str | None = Field(default=None, max_length=200)
    floor: int | None = Field(default=None, ge=-5, le=200)
    location: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    equipment: list[str] | None = Field(default=None, max_length=100)
    facilities: list[str] | None = Field(default=None, max_length=100)
    is_shared: bool | None = None
    is_active: bool | None = None


class ResourceOut(ResourceBase):
    id: str

    model_config = {"from_attributes": True}
