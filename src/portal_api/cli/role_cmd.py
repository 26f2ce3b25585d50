"""Role registry CLI commands."""

import asyncio

import typer

role_app = typer.Typer()


@role_app.command("seed")
def seed_roles() -> None:
    """Create the default and Admin roles if they are missing."""
    asyncio.run(_seed_roles())


async def _seed_roles() -> None:
    from portal_api.core.config import get_settings
    from portal_api.core.database import dispose_engine, init_engine, session_scope
    from portal_api.services.role_service import seed_default_roles

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        async with session_scope() as session:
            created = await seed_default_roles(session, default_role_name=settings.default_role_name)
        if created:
            typer.echo(f"Created roles: {', '.join(created)}")
        else:
            typer.echo("Roles already present, nothing to do")
    finally:
        await dispose_engine()


@role_app.command("list")
def list_roles() -> None:
    """List roles and their permissions."""
    asyncio.run(_list_roles())


async def _list_roles() -> None:
    from portal_api.core.config import get_settings
    from portal_api.core.database import dispose_engine, init_engine, session_scope
    from portal_api.services.role_service import list_roles

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        async with session_scope() as session:
            roles = await list_roles(session)
            typer.echo(f"{'Name':<20} Permissions")
            typer.echo("-" * 72)
            for role in roles:
                typer.echo(f"{role.name:<20} {', '.join(role.permissions) or '-'}")
            typer.echo(f"\nTotal: {len(roles)}")
    finally:
        await dispose_engine()
