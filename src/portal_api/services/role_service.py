"""Role registry service -- CRUD for named permission bundles."""

import uuid
from collections.abc import Iterable

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal_api.models.role import Permission, Role
from portal_api.models.user import User
from portal_api.services.errors import DuplicateRoleError, RoleInUseError, RoleNotFoundError

ADMIN_ROLE_NAME = "Admin"
DEFAULT_ROLE_PERMISSIONS: tuple[Permission, ...] = (Permission.CONTENT_READ,)


async def list_roles(session: AsyncSession) -> list[Role]:
    """Return all roles, newest first."""
    result = await session.execute(select(Role).order_by(Role.created_at.desc()))
    return list(result.scalars().all())


async def get_role(session: AsyncSession, role_id: uuid.UUID) -> Role:
    """Return a role by id.

    Raises:
        RoleNotFoundError: If no role has that id.
    """
    role = await session.get(Role, role_id)
    if role is None:
        raise RoleNotFoundError
    return role


async def get_role_by_name(session: AsyncSession, name: str) -> Role | None:
    result = await session.execute(select(Role).where(Role.name == name))
    return result.scalar_one_or_none()


async def resolve_roles(session: AsyncSession, names: Iterable[str]) -> list[Role]:
    """Look up roles by name, preserving the requested order.

    Args:
        session: The database session.
        names: Role names; duplicates are collapsed.

    Returns:
        The matching Role rows.

    Raises:
        RoleNotFoundError: If any name is unknown.
    """
    wanted = list(dict.fromkeys(name.strip() for name in names))
    result = await session.execute(select(Role).where(Role.name.in_(wanted)))
    by_name = {role.name: role for role in result.scalars().all()}
    missing = [name for name in wanted if name not in by_name]
    if missing:
        raise RoleNotFoundError(f"Role not found: {', '.join(missing)}")
    return [by_name[name] for name in wanted]


async def create_role(
    session: AsyncSession,
    *,
    name: str,
    description: str | None = None,
    permissions: Iterable[Permission] = (),
) -> Role:
    """Create a new role.

    Raises:
        DuplicateRoleError: If a role with the same name already exists.
    """
    if await get_role_by_name(session, name) is not None:
        raise DuplicateRoleError
    role = Role(name=name, description=description, permissions=[str(p) for p in permissions])
    session.add(role)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise DuplicateRoleError from None
    await session.refresh(role)
    logger.info(f"Created role {role.id} ({name})")
    return role


async def update_role(
    session: AsyncSession,
    role: Role,
    *,
    name: str | None = None,
    description: str | None = None,
    permissions: Iterable[Permission] | None = None,
) -> Role:
    """Apply a partial update to a role.

    Raises:
        DuplicateRoleError: If renaming onto an existing role name.
    """
    if name is not None and name != role.name:
        if await get_role_by_name(session, name) is not None:
            raise DuplicateRoleError
        role.name = name
    if description is not None:
        role.description = description
    if permissions is not None:
        role.permissions = [str(p) for p in permissions]
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise DuplicateRoleError from None
    await session.refresh(role)
    logger.info(f"Updated role {role.id} ({role.name})")
    return role


async def delete_role(session: AsyncSession, role: Role, *, default_role_name: str) -> None:
    """Delete a role and detach it from its users.

    Users that would be left without any role are given the default role.

    Raises:
        RoleInUseError: If ``role`` is the default role, or a user would be
            left roleless while the default role does not exist.
    """
    if role.name == default_role_name:
        raise RoleInUseError("The default role cannot be deleted")

    default_role = await get_role_by_name(session, default_role_name)
    result = await session.execute(select(User).where(User.roles.any(Role.id == role.id)))
    holders = list(result.scalars().all())
    for user in holders:
        remaining = [r for r in user.roles if r.id != role.id]
        if not remaining:
            if default_role is None:
                raise RoleInUseError(f"Role is the only role of user {user.id} and no default role exists")
            remaining = [default_role]
        user.roles = remaining

    await session.delete(role)
    await session.commit()
    logger.info(f"Deleted role {role.id} ({role.name}); detached from {len(holders)} users")


async def seed_default_roles(session: AsyncSession, *, default_role_name: str) -> list[str]:
    """Create the default and admin roles if missing.

    Returns:
        Names of the roles that were created.
    """
    wanted = {
        default_role_name: ("Default role for self-registered users", list(DEFAULT_ROLE_PERMISSIONS)),
        ADMIN_ROLE_NAME: ("Full administrative access", list(Permission)),
    }
    created: list[str] = []
    for name, (description, permissions) in wanted.items():
        if await get_role_by_name(session, name) is None:
            session.add(Role(name=name, description=description, permissions=[str(p) for p in permissions]))
            created.append(name)
    if created:
        await session.commit()
        logger.info(f"Seeded roles: {', '.join(created)}")
    return created
