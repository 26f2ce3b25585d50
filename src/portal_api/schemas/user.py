"""User management Pydantic v2 schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class UserResponse(BaseModel):
    """User information response (roles as names)."""

    id: UUID = Field(serialization_alias="_id")
    name: str
    email: str
    sex: str = Field(serialization_alias="sexo")
    national_id: str = Field(serialization_alias="ci")
    verified: bool
    roles: list[str]
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("roles", mode="before")
    @classmethod
    def role_names(cls, v: Any) -> list[str]:
        return [getattr(role, "name", role) for role in v]


class UserUpdateRequest(BaseModel):
    """Administrative update of roles and verification."""

    roles: list[str] | None = Field(default=None, min_length=1)
    verified: bool | None = None


class PasswordHistoryItem(BaseModel):
    """One password history entry, without the hash."""

    id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}
