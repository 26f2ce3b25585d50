"""Login log API endpoint.

GET /login-logs
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.dependencies import get_async_session, require_permission
from portal_api.models.role import Permission
from portal_api.models.user import User
from portal_api.schemas.common import PaginationMeta, PaginationParams
from portal_api.schemas.login_log import LoginLogResponse
from portal_api.services import login_log_service

login_logs_router = APIRouter(prefix="/login-logs", tags=["login-logs"])


@login_logs_router.get("", response_model=dict)
async def list_login_logs(
    _current_user: Annotated[User, Depends(require_permission(Permission.LOGIN_LOGS_READ))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
    user_id: uuid.UUID | None = Query(default=None, description="Filter by user"),
    success: bool | None = Query(default=None, description="Filter by outcome"),
) -> dict:
    """List login attempts, newest first."""
    entries, total = await login_log_service.list_login_logs(
        session,
        user_id=user_id,
        success=success,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return {
        "items": [LoginLogResponse.model_validate(e) for e in entries],
        "pagination": PaginationMeta.build(total, pagination),
    }
