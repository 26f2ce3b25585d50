"""Loguru logging configuration.

Human-readable lines on stderr, an opt-in JSON sink (records bound with
``json_output=True``), and an optional rotating file sink. Every record
passes through a patcher that masks credentials, so reset tokens, grants
and bearer tokens never reach a log sink verbatim. Records bound with
``reveal_secrets=True`` are left as written; the email sender does this for
unsent messages outside production so the reset link stays usable.
"""

import re
import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"

_SECRET_PATTERNS = (
    re.compile(r"(token=)[A-Za-z0-9_\-\.]+"),
    re.compile(r"(Bearer )[A-Za-z0-9_\-\.]+"),
    re.compile(r"(password=)\S+"),
)


def mask_secrets(message: str) -> str:
    """Replace credential values embedded in a log message with ``***``."""
    for pattern in _SECRET_PATTERNS:
        message = pattern.sub(r"\1***", message)
    return message


def _patch_record(record: dict) -> None:
    if record["extra"].get("reveal_secrets", False):
        return
    record["message"] = mask_secrets(record["message"])


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure Loguru sinks.

    Args:
        log_level: Minimum log level to emit.
        log_dir: Optional directory for log files.  When set, a rotating
            file sink is added (rotated every 24 hours, retained 7 days).
    """
    level = log_level.upper()
    logger.remove()
    logger.configure(patcher=_patch_record)
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT, serialize=False)
    logger.add(
        sys.stderr,
        level=level,
        serialize=True,
        filter=lambda record: record["extra"].get("json_output", False),
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "portal-api.log",
            level=level,
            format=_LOG_FORMAT,
            rotation="24h",
            retention="7 days",
        )
