"""Unit tests for logging configuration."""

from pathlib import Path

from loguru import logger

from portal_api.core.logging import mask_secrets, setup_logging


class TestLogging:
    """Tests for Loguru logging setup."""

    def test_setup_logging_does_not_raise(self) -> None:
        setup_logging("DEBUG")
        setup_logging("INFO")
        setup_logging("WARNING")

    def test_setup_logging_case_insensitive(self) -> None:
        setup_logging("info")
        setup_logging("debug")

    def test_file_sink_written(self, tmp_path: Path) -> None:
        setup_logging("INFO", log_dir=str(tmp_path / "logs"))
        logger.info("hello from the file sink")
        setup_logging("INFO")
        log_file = tmp_path / "logs" / "portal-api.log"
        assert log_file.exists()
        assert "hello from the file sink" in log_file.read_text()

    def test_secrets_masked_in_file_sink(self, tmp_path: Path) -> None:
        setup_logging("INFO", log_dir=str(tmp_path))
        logger.info("link https://portal.example.com/reset-password?token=abcDEF123_-x")
        setup_logging("INFO")
        content = (tmp_path / "portal-api.log").read_text()
        assert "abcDEF123_-x" not in content
        assert "token=***" in content

    def test_bound_reveal_skips_masking(self, tmp_path: Path) -> None:
        setup_logging("INFO", log_dir=str(tmp_path))
        logger.bind(reveal_secrets=True).info("link https://portal.example.com/reset-password?token=keepMe42")
        setup_logging("INFO")
        assert "token=keepMe42" in (tmp_path / "portal-api.log").read_text()


class TestMaskSecrets:
    def test_masks_query_token(self) -> None:
        assert mask_secrets("url?token=s3cr3t.value") == "url?token=***"

    def test_masks_bearer_token(self) -> None:
        assert mask_secrets("Authorization: Bearer eyJhbGciOi.abc.def") == "Authorization: Bearer ***"

    def test_masks_password_assignment(self) -> None:
        assert mask_secrets("password=hunter2 next") == "password=*** next"

    def test_leaves_plain_messages_alone(self) -> None:
        assert mask_secrets("User 42 logged in") == "User 42 logged in"
