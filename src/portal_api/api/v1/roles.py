"""Role registry API endpoints.

GET /roles, POST /roles, GET /roles/{id}, PATCH /roles/{id}, DELETE /roles/{id}.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.core.config import Settings, get_settings
from portal_api.core.dependencies import get_async_session, require_permission
from portal_api.models.role import Permission
from portal_api.models.user import User
from portal_api.schemas.common import ErrorResponse
from portal_api.schemas.role import RoleCreateRequest, RoleResponse, RoleUpdateRequest
from portal_api.services import role_service

roles_router = APIRouter(prefix="/roles", tags=["roles"])

_READ = require_permission(Permission.ROLES_READ)
_WRITE = require_permission(Permission.ROLES_WRITE)


@roles_router.get("", response_model=list[RoleResponse])
async def list_roles(
    _current_user: Annotated[User, Depends(_READ)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> list[RoleResponse]:
    """List roles, newest first."""
    roles = await role_service.list_roles(session)
    return [RoleResponse.model_validate(r) for r in roles]


@roles_router.post(
    "",
    response_model=RoleResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
async def create_role(
    request: RoleCreateRequest,
    _current_user: Annotated[User, Depends(_WRITE)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> RoleResponse:
    """Create a role."""
    role = await role_service.create_role(
        session,
        name=request.name,
        description=request.description,
        permissions=request.permissions,
    )
    return RoleResponse.model_validate(role)


@roles_router.get("/{role_id}", response_model=RoleResponse, responses={404: {"model": ErrorResponse}})
async def get_role(
    role_id: uuid.UUID,
    _current_user: Annotated[User, Depends(_READ)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> RoleResponse:
    """Get one role."""
    return RoleResponse.model_validate(await role_service.get_role(session, role_id))


@roles_router.patch(
    "/{role_id}",
    response_model=RoleResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_role(
    role_id: uuid.UUID,
    request: RoleUpdateRequest,
    _current_user: Annotated[User, Depends(_WRITE)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> RoleResponse:
    """Partially update a role."""
    role = await role_service.get_role(session, role_id)
    role = await role_service.update_role(
        session,
        role,
        name=request.name.strip() if request.name else None,
        description=request.description,
        permissions=request.permissions,
    )
    return RoleResponse.model_validate(role)


@roles_router.delete(
    "/{role_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_role(
    role_id: uuid.UUID,
    _current_user: Annotated[User, Depends(_WRITE)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """Delete a role; users left without a role fall back to the default role."""
    role = await role_service.get_role(session, role_id)
    await role_service.delete_role(session, role, default_role_name=settings.default_role_name)
    return Response(status_code=204)
