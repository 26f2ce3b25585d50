"""Outbound email.

Messages are built with ``email.message.EmailMessage`` and sent through
``smtplib`` on a worker thread. When no SMTP host is configured the
message is logged instead of sent, which is the development default.
Outside production the logged body keeps its reset link unmasked.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Protocol
from urllib.parse import urlencode

from loguru import logger

from portal_api.core.config import Settings
from portal_api.services.errors import EmailDeliveryError

RESET_EMAIL_SUBJECT = "Password reset"


class EmailSender(Protocol):
    async def send(self, to_address: str, subject: str, body: str) -> None: ...


class SmtpEmailSender:
    """Sends plain-text email through the configured SMTP relay."""

    def __init__(self, settings: Settings) -> None:
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_username
        self.password = settings.smtp_password
        self.use_tls = settings.smtp_use_tls
        self.from_address = settings.mail_from
        self.reveal_unsent = settings.environment != "production"

    def build_message(self, to_address: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.from_address
        message["To"] = to_address
        message.set_content(body)
        return message

    async def send(self, to_address: str, subject: str, body: str) -> None:
        """Deliver one message.

        Raises:
            EmailDeliveryError: If the SMTP exchange fails.
        """
        message = self.build_message(to_address, subject, body)
        if not self.host:
            logger.bind(reveal_secrets=self.reveal_unsent).info(
                f"SMTP disabled; email to {to_address} not sent: {subject}\n{body}"
            )
            return
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to_address}: {e}")
            raise EmailDeliveryError from e
        logger.info(f"Sent email to {to_address}: {subject}")

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password or "")
            server.send_message(message)


def build_reset_url(frontend_url: str, token: str) -> str:
    """Link the user follows to complete a password reset."""
    return f"{frontend_url.rstrip('/')}/reset-password?{urlencode({'token': token})}"


async def send_password_reset_email(sender: EmailSender, to_address: str, reset_url: str, ttl_seconds: int) -> None:
    """Send the reset link to ``to_address``."""
    minutes = max(1, ttl_seconds // 60)
    body = (
        "We received a request to reset the password for your account.\n\n"
        f"Follow this link to choose a new password:\n{reset_url}\n\n"
        f"The link expires in {minutes} minutes and can be used once. "
        "If you did not ask for a reset you can ignore this message."
    )
    await sender.send(to_address, RESET_EMAIL_SUBJECT, body)
