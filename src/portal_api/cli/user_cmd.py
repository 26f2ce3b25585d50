"""User management CLI commands."""

import asyncio

import typer

user_app = typer.Typer()


@user_app.command("create")
def create_user(
    name: str = typer.Option(..., prompt=True, help="Full name"),
    email: str = typer.Option(..., prompt=True, help="Email address"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"),
    sex: str = typer.Option(..., "--sex", prompt=True, help="Sex as stored on the profile"),
    national_id: str = typer.Option(..., "--national-id", prompt=True, help="National identity number"),
    role: list[str] = typer.Option([], "--role", "-r", help="Role name (repeatable); defaults to the default role"),
    verified: bool = typer.Option(True, "--verified/--unverified", help="Mark the account as verified"),
    if_not_exists: bool = typer.Option(
        False,
        "--if-not-exists",
        help="Exit successfully if the email is already registered (idempotent mode)",
    ),
) -> None:
    """Create a user, enforcing the password policy."""
    asyncio.run(
        _create_user(
            name,
            email,
            password,
            sex,
            national_id,
            role,
            verified=verified,
            if_not_exists=if_not_exists,
        )
    )


async def _create_user(
    name: str,
    email: str,
    password: str,
    sex: str,
    national_id: str,
    roles: list[str],
    *,
    verified: bool = True,
    if_not_exists: bool = False,
) -> None:
    """Async implementation of user creation."""
    from portal_api.core.config import get_settings
    from portal_api.core.database import dispose_engine, init_engine, session_scope
    from portal_api.schemas.auth import RegisterRequest
    from portal_api.services.auth_service import build_password_policy, register_user
    from portal_api.services.errors import DuplicateEmailError, PortalError

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        request = RegisterRequest(
            name=name,
            email=email,
            password=password,
            sex=sex,
            national_id=national_id,
            roles=roles or None,
        )
        async with session_scope() as session:
            user = await register_user(session, request, settings, build_password_policy(settings))
            if verified:
                user.verified = True
                await session.commit()
            typer.echo(f"User '{user.email}' created with roles {', '.join(user.role_names)}")
    except DuplicateEmailError as e:
        if if_not_exists:
            typer.echo(f"User '{email}' already exists, skipping (--if-not-exists)")
            return
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    except PortalError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@user_app.command("list")
def list_users(
    search: str = typer.Option(None, "--search", "-s", help="Match name or email"),
    page_size: int = typer.Option(50, "--limit", help="Maximum users to show"),
) -> None:
    """List users, newest first."""
    asyncio.run(_list_users(search, page_size))


async def _list_users(search: str | None, page_size: int) -> None:
    """Async implementation of user listing."""
    from portal_api.core.config import get_settings
    from portal_api.core.database import dispose_engine, init_engine, session_scope
    from portal_api.services.user_service import list_users

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        async with session_scope() as session:
            users, total = await list_users(session, search=search, page_size=page_size)
            typer.echo(f"{'Email':<35} {'Name':<25} {'Roles':<25} {'Verified':<8}")
            typer.echo("-" * 96)
            for user in users:
                roles = ",".join(user.role_names)
                typer.echo(f"{user.email:<35} {user.name:<25} {roles:<25} {user.verified!s:<8}")
            typer.echo(f"\nTotal: {total}")
    finally:
        await dispose_engine()
