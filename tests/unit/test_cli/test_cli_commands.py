"""Tests for the portal-api CLI against a file-backed SQLite database."""

import asyncio
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from typer.testing import CliRunner

from portal_api.cli.app import app
from portal_api.core.config import Settings
from portal_api.models.base import Base

runner = CliRunner()

STRONG_PASSWORD = "Tr4vel!Quokka#Blue"


def _create_schema(database_url: str) -> None:
    async def _run() -> None:
        engine = create_async_engine(database_url)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_run())


@pytest.fixture
def cli_settings(settings: Settings, tmp_path: Path) -> Iterator[Settings]:
    """Point every CLI command at a fresh SQLite file."""
    configured = settings.model_copy(update={"database_url": f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}"})
    _create_schema(configured.database_url)
    with (
        patch("portal_api.cli.app.get_settings", return_value=configured),
        patch("portal_api.core.config.get_settings", return_value=configured),
        patch("portal_api.cli.app.setup_logging"),
    ):
        yield configured


def _create_args(email: str = "cli@example.com", password: str = STRONG_PASSWORD) -> list[str]:
    return [
        "user",
        "create",
        "--name",
        "Cli User",
        "--email",
        email,
        "--password",
        password,
        "--sex",
        "M",
        "--national-id",
        "5551234",
    ]


class TestRoleCommands:
    def test_seed_is_idempotent(self, cli_settings: Settings) -> None:
        first = runner.invoke(app, ["role", "seed"])
        assert first.exit_code == 0, first.output
        assert "Created roles: Student, Admin" in first.output

        second = runner.invoke(app, ["role", "seed"])
        assert second.exit_code == 0
        assert "Roles already present" in second.output

    def test_list(self, cli_settings: Settings) -> None:
        runner.invoke(app, ["role", "seed"])
        result = runner.invoke(app, ["role", "list"])
        assert result.exit_code == 0
        assert "content:read" in result.output
        assert "Total: 2" in result.output


class TestUserCommands:
    def test_create_and_list(self, cli_settings: Settings) -> None:
        runner.invoke(app, ["role", "seed"])

        created = runner.invoke(app, _create_args())
        assert created.exit_code == 0, created.output
        assert "User 'cli@example.com' created with roles Student" in created.output

        listed = runner.invoke(app, ["user", "list", "--search", "cli"])
        assert listed.exit_code == 0
        assert "cli@example.com" in listed.output
        assert "Total: 1" in listed.output

    def test_create_with_explicit_role(self, cli_settings: Settings) -> None:
        runner.invoke(app, ["role", "seed"])
        result = runner.invoke(app, [*_create_args(), "--role", "Admin"])
        assert result.exit_code == 0, result.output
        assert "with roles Admin" in result.output

    def test_duplicate_fails(self, cli_settings: Settings) -> None:
        runner.invoke(app, ["role", "seed"])
        runner.invoke(app, _create_args())
        result = runner.invoke(app, _create_args())
        assert result.exit_code == 1

    def test_duplicate_with_if_not_exists(self, cli_settings: Settings) -> None:
        runner.invoke(app, ["role", "seed"])
        runner.invoke(app, _create_args())
        result = runner.invoke(app, [*_create_args(), "--if-not-exists"])
        assert result.exit_code == 0
        assert "already exists" in result.output

    def test_weak_password_rejected(self, cli_settings: Settings) -> None:
        runner.invoke(app, ["role", "seed"])
        result = runner.invoke(app, _create_args(password="short"))
        assert result.exit_code == 1


class TestDbCommands:
    def test_upgrade_uses_config_path(self) -> None:
        with (
            patch("portal_api.cli.app.get_settings"),
            patch("portal_api.cli.app.setup_logging"),
            patch("alembic.command.upgrade") as mock_upgrade,
        ):
            result = runner.invoke(app, ["db", "upgrade", "--config", "custom.ini"])
        assert result.exit_code == 0, result.output
        config, revision = mock_upgrade.call_args.args
        assert revision == "head"
        assert config.config_file_name == "custom.ini"

    def test_downgrade_defaults_to_previous(self) -> None:
        with (
            patch("portal_api.cli.app.get_settings"),
            patch("portal_api.cli.app.setup_logging"),
            patch("alembic.command.downgrade") as mock_downgrade,
        ):
            result = runner.invoke(app, ["db", "downgrade"])
        assert result.exit_code == 0, result.output
        assert mock_downgrade.call_args.args[1] == "-1"


class TestRootCommands:
    def test_version(self, cli_settings: Settings) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert result.output.strip() == "portal-api 0.1.0 (production)"

    def test_serve_runs_app_factory(self, cli_settings: Settings) -> None:
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve", "--port", "9000"])
        assert result.exit_code == 0, result.output
        mock_run.assert_called_once_with(
            "portal_api.main:create_app", factory=True, host="0.0.0.0", port=9000, reload=False
        )
