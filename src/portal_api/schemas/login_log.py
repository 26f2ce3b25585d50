"""Login log Pydantic v2 schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class LoginLogResponse(BaseModel):
    """One login attempt."""

    id: UUID
    user_id: UUID
    ip: str | None = None
    user_agent: str | None = None
    success: bool
    timestamp: datetime

    model_config = {"from_attributes": True}
