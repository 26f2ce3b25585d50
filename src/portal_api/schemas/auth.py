"""Authentication and password-lifecycle Pydantic v2 schemas.

Field names follow the public API: registration takes ``sexo`` and ``ci``
and user projections expose the id as ``_id``.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class RegisterRequest(BaseModel):
    """Self-service registration payload."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)
    sex: str = Field(alias="sexo", min_length=1, max_length=50)
    national_id: str = Field(alias="ci", min_length=1, max_length=20)
    roles: list[str] | None = Field(default=None, description="Role names; defaults to the student role")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("name", "national_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class LoginRequest(BaseModel):
    """Login payload. Both fields are checked by the service so a missing
    value yields the credentials error rather than a schema error."""

    email: str | None = None
    password: str | None = None


class AuthUserResponse(BaseModel):
    """User projection returned by registration."""

    id: UUID = Field(serialization_alias="_id")
    name: str
    email: str
    verified: bool
    roles: list[str]
    created_at: datetime
    token: str


class LoginResponse(AuthUserResponse):
    """User projection returned by login, with flattened permissions."""

    permissions: list[str]
    password_age_days: int | None = None
    password_change_recommended: bool = False


class CurrentUserResponse(BaseModel):
    """Projection of the authenticated user."""

    id: UUID = Field(serialization_alias="_id")
    name: str
    email: str
    verified: bool
    roles: list[str]
    permissions: list[str]
    created_at: datetime
    password_age_days: int | None = None
    password_change_recommended: bool = False


class ChangePasswordRequest(BaseModel):
    """Authenticated password change."""

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1, max_length=256)


class PasswordResetRequest(BaseModel):
    """First phase of the reset flow."""

    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class PasswordResetVerifyRequest(BaseModel):
    """Exchange of an emailed reset token."""

    token: str = Field(min_length=1, max_length=256)


class PasswordResetVerifyResponse(BaseModel):
    """Successful verification: a short-lived grant for the password set."""

    success: bool = True
    message: str = "Token is valid"
    reset_grant: str
    expires_in: int = Field(description="Grant lifetime in seconds")


class PasswordResetConfirmRequest(BaseModel):
    """Final phase: store a new password using the grant."""

    reset_grant: str = Field(min_length=1)
    password: str = Field(min_length=1, max_length=256)


class PasswordCheckRequest(BaseModel):
    """Advisory strength check."""

    password: str = Field(min_length=1, max_length=256)


class PasswordCheckResponse(BaseModel):
    """Result of an advisory strength check."""

    ok: bool
    failures: list[str]
    message: str | None = None
    breach_checked: bool
