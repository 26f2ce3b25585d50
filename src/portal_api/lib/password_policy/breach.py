"""Breach corpus lookup over a k-anonymity range API.

Only the first five hex characters of the password's SHA-1 digest leave
the process; the returned ``SUFFIX:COUNT`` lines are searched locally.
"""

import hashlib

import httpx
from loguru import logger

DEFAULT_BREACH_API_URL = "https://api.pwnedpasswords.com"
DEFAULT_TIMEOUT = 5.0
PREFIX_LENGTH = 5

LABEL_BREACHED = "not found in a known data breach"
LABEL_UNAVAILABLE = "breach check unavailable"


class BreachServiceError(Exception):
    """Raised when the range API cannot answer (timeout, HTTP or transport error).

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status returned by the service.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def split_digest(password: str) -> tuple[str, str]:
    """Return the (prefix, suffix) halves of the upper-case SHA-1 hex digest."""
    digest = hashlib.sha1(password.encode("utf-8")).hexdigest().upper()  # noqa: S324
    return digest[:PREFIX_LENGTH], digest[PREFIX_LENGTH:]


class BreachChecker:
    """Client for the breach range API."""

    def __init__(self, base_url: str = DEFAULT_BREACH_API_URL, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def is_breached(self, password: str) -> bool:
        """Check whether the password appears in the breach corpus.

        Args:
            password: Candidate password.

        Returns:
            True if the digest suffix is listed for its prefix.

        Raises:
            BreachServiceError: On timeout, HTTP error status, or transport failure.
        """
        prefix, suffix = split_digest(password)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{self._base_url}/range/{prefix}")
                response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("Breach range request timed out")
            raise BreachServiceError("Breach range request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Breach range service returned HTTP {e.response.status_code}")
            raise BreachServiceError(
                f"Breach range service returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Breach range service connection error: {type(e).__name__}")
            raise BreachServiceError("Connection to breach range service failed") from e

        return self._contains_suffix(response.text, suffix)

    @staticmethod
    def _contains_suffix(body: str, suffix: str) -> bool:
        return suffix in body.upper()
