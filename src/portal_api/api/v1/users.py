"""User administration API endpoints.

GET /users, GET /users/{id}, PATCH /users/{id}, GET /users/{id}/password-history.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.config import Settings, get_settings
from portal_api.core.dependencies import get_async_session, require_permission
from portal_api.models.role import Permission
from portal_api.models.user import User
from portal_api.schemas.common import ErrorResponse, PaginationMeta, PaginationParams
from portal_api.schemas.user import PasswordHistoryItem, UserResponse, UserUpdateRequest
from portal_api.services import password_history_service, user_service

users_router = APIRouter(prefix="/users", tags=["users"])

_NOT_FOUND = {404: {"model": ErrorResponse}}


@users_router.get("", response_model=dict)
async def list_users(
    _current_user: Annotated[User, Depends(require_permission(Permission.USERS_READ))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
    search: str | None = Query(default=None, max_length=200, description="Match name or email"),
) -> dict:
    """List users, newest first."""
    users, total = await user_service.list_users(
        session,
        search=search,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return {
        "items": [UserResponse.model_validate(u) for u in users],
        "pagination": PaginationMeta.build(total, pagination),
    }


@users_router.get("/{user_id}", response_model=UserResponse, responses=_NOT_FOUND)
async def get_user(
    user_id: uuid.UUID,
    _current_user: Annotated[User, Depends(require_permission(Permission.USERS_READ))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> UserResponse:
    """Get one user."""
    user = await user_service.get_user_or_404(session, user_id)
    return UserResponse.model_validate(user)


@users_router.patch("/{user_id}", response_model=UserResponse, responses=_NOT_FOUND)
async def update_user(
    user_id: uuid.UUID,
    request: UserUpdateRequest,
    _current_user: Annotated[User, Depends(require_permission(Permission.USERS_WRITE))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> UserResponse:
    """Replace a user's roles and/or set the verification flag."""
    user = await user_service.get_user_or_404(session, user_id)
    user = await user_service.update_user(session, user, roles=request.roles, verified=request.verified)
    return UserResponse.model_validate(user)


@users_router.get("/{user_id}/password-history", response_model=list[PasswordHistoryItem], responses=_NOT_FOUND)
async def get_password_history(
    user_id: uuid.UUID,
    _current_user: Annotated[User, Depends(require_permission(Permission.USERS_READ))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> list[PasswordHistoryItem]:
    """Timestamps of the user's recent password sets (hashes are never returned)."""
    user = await user_service.get_user_or_404(session, user_id)
    entries = await password_history_service.recent_entries(session, user.id, settings.password_history_depth)
    return [PasswordHistoryItem.model_validate(e) for e in entries]
