"""Root `portal-api` Typer app: serve, version, and the db, user and role groups."""

import typer

from portal_api import __version__
from portal_api.core.config import get_settings
from portal_api.core.logging import setup_logging

app = typer.Typer(name="portal-api", help="Portal authentication service CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "portal_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def version() -> None:
    """Print the installed version and the configured environment."""
    typer.echo(f"portal-api {__version__} ({get_settings().environment})")


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from portal_api.cli.db_cmd import db_app
    from portal_api.cli.role_cmd import role_app
    from portal_api.cli.user_cmd import user_app

    app.add_typer(db_app, name="db", help="Database migration commands")
    app.add_typer(user_app, name="user", help="User management commands")
    app.add_typer(role_app, name="role", help="Role registry commands")


_register_subcommands()
