"""Process-local expiring store for password reset tokens.

Maps an opaque token to the email it was issued for. A token is live
until it is consumed or its TTL elapses, whichever happens first; neither
transition can be undone. Entries are lost on restart.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from portal_api.core.security import generate_reset_token


@dataclass(frozen=True)
class _Entry:
    email: str
    expires_at: float


class ResetTokenStore:
    """TTL map of reset token -> email.

    Args:
        ttl_seconds: Lifetime of each issued token.
        clock: Monotonic clock returning seconds; injectable for tests.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds <= 0:
            msg = f"ttl_seconds must be positive, got {ttl_seconds}"
            raise ValueError(msg)
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, email: str) -> str:
        """Create a new token for ``email`` and return it."""
        token = generate_reset_token()
        with self._lock:
            self._purge_locked()
            self._entries[token] = _Entry(email=email, expires_at=self._clock() + self._ttl_seconds)
        return token

    def peek(self, token: str) -> str | None:
        """Return the email for a live token without consuming it."""
        with self._lock:
            entry = self._live_entry_locked(token)
            return entry.email if entry else None

    def consume(self, token: str) -> str | None:
        """Remove a live token and return its email.

        Returns:
            The email the token was issued for, or None if the token was
            never issued, already consumed, or expired.
        """
        with self._lock:
            entry = self._live_entry_locked(token)
            if entry is None:
                return None
            del self._entries[token]
            return entry.email

    def discard(self, token: str) -> None:
        """Drop a token regardless of state."""
        with self._lock:
            self._entries.pop(token, None)

    def purge_expired(self) -> int:
        """Remove every expired entry and return how many were dropped."""
        with self._lock:
            return self._purge_locked()

    def __len__(self) -> int:
        with self._lock:
            self._purge_locked()
            return len(self._entries)

    def _live_entry_locked(self, token: str) -> _Entry | None:
        entry = self._entries.get(token)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[token]
            return None
        return entry

    def _purge_locked(self) -> int:
        now = self._clock()
        expired = [token for token, entry in self._entries.items() if now >= entry.expires_at]
        for token in expired:
            del self._entries[token]
        return len(expired)
