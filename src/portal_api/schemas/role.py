"""Role registry Pydantic v2 schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from portal_api.models.role import Permission


def _dedupe(permissions: list[Permission]) -> list[Permission]:
    return list(dict.fromkeys(permissions))


class RoleCreateRequest(BaseModel):
    """Request to create a role."""

    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    permissions: list[Permission] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Role name is required"
            raise ValueError(msg)
        return v

    @field_validator("permissions")
    @classmethod
    def dedupe_permissions(cls, v: list[Permission]) -> list[Permission]:
        return _dedupe(v)


class RoleUpdateRequest(BaseModel):
    """Partial role update (all fields optional)."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    permissions: list[Permission] | None = None

    @field_validator("permissions")
    @classmethod
    def dedupe_permissions(cls, v: list[Permission] | None) -> list[Permission] | None:
        return None if v is None else _dedupe(v)


class RoleResponse(BaseModel):
    """Role information response."""

    id: UUID
    name: str
    description: str | None = None
    permissions: list[str]
    created_at: datetime

    model_config = {"from_attributes": True}
