"""Expiring storage for single-use password reset tokens."""

from portal_api.lib.reset_tokens.store import ResetTokenStore

__all__ = ["ResetTokenStore"]
