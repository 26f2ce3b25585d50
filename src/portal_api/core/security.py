"""Credential primitives: bcrypt-sha256 hashing, signed tokens, opaque reset tokens.

Two kinds of JWT are signed here and told apart by their ``type`` claim:
session tokens (``access``) and password-reset grants (``password_reset``).
"""

import secrets
from datetime import UTC, datetime, timedelta

import jwt
from passlib.context import CryptContext

# bcrypt alone reads only the first 72 bytes of a password
pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
RESET_GRANT_TYPE = "password_reset"

RESET_TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    """Return a salted bcrypt-sha256 hash of ``password``."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored hash.

    The comparison is constant-time.
    """
    return pwd_context.verify(plain_password, hashed_password)


def _sign(claims: dict, lifetime: timedelta, secret_key: str, algorithm: str) -> str:
    issued_at = datetime.now(UTC)
    payload = {**claims, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def create_access_token(
    subject: str,
    roles: list[str],
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60,
) -> str:
    """Sign a session token.

    Args:
        subject: User id placed in ``sub``.
        roles: Role names at issue time. Informational only; permission
            checks read the user's current roles.
        secret_key: HMAC signing key.
        algorithm: JWT signing algorithm.
        expires_minutes: Lifetime in minutes.

    Returns:
        The encoded JWT.
    """
    claims = {"sub": subject, "roles": list(roles), "type": ACCESS_TOKEN_TYPE}
    return _sign(claims, timedelta(minutes=expires_minutes), secret_key, algorithm)


def create_reset_grant(
    subject: str,
    history_entry_id: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_seconds: int = 900,
) -> str:
    """Sign a grant that authorizes one password set for ``subject``.

    ``phid`` pins the grant to the user's latest password history entry.
    Once any newer password is stored the grant no longer matches and is
    refused.

    Args:
        subject: User id placed in ``sub``.
        history_entry_id: Id of the latest password history entry.
        secret_key: HMAC signing key.
        algorithm: JWT signing algorithm.
        expires_seconds: Lifetime in seconds.

    Returns:
        The encoded JWT.
    """
    claims = {"sub": subject, "phid": history_entry_id, "type": RESET_GRANT_TYPE}
    return _sign(claims, timedelta(seconds=expires_seconds), secret_key, algorithm)


def decode_token(token: str, secret_key: str, algorithm: str = "HS256") -> dict:
    """Verify the signature and expiry of a JWT and return its claims.

    Raises:
        jwt.ExpiredSignatureError: If ``exp`` has passed.
        jwt.InvalidTokenError: For any other signature or format problem.
    """
    return jwt.decode(token, secret_key, algorithms=[algorithm])


def generate_reset_token() -> str:
    """Random URL-safe token for emailed reset links."""
    return secrets.token_urlsafe(RESET_TOKEN_BYTES)
