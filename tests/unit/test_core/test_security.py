"""Unit tests for JWT and password security module."""

import jwt as pyjwt
import pytest

from portal_api.core.security import (
    ACCESS_TOKEN_TYPE,
    RESET_GRANT_TYPE,
    create_access_token,
    create_reset_grant,
    decode_token,
    generate_reset_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    """Tests for bcrypt password hashing and verification."""

    def test_hash_and_verify(self) -> None:
        hashed = hash_password("Correct!Horse9")
        assert verify_password("Correct!Horse9", hashed)

    def test_wrong_password_fails(self) -> None:
        hashed = hash_password("Correct!Horse9")
        assert not verify_password("correct!horse9", hashed)

    def test_hash_is_salted(self) -> None:
        assert hash_password("same") != hash_password("same")

    def test_hash_is_bcrypt_sha256(self) -> None:
        assert hash_password("whatever").startswith("$bcrypt-sha256$")

    def test_bytes_past_72_are_significant(self) -> None:
        prefix = "Aa1!" + "x" * 70
        hashed = hash_password(prefix + "CORRECT")
        assert verify_password(prefix + "CORRECT", hashed)
        assert not verify_password(prefix + "totally-wrong", hashed)

    def test_multibyte_password_past_72_bytes(self) -> None:
        prefix = "ñ" * 40
        hashed = hash_password(prefix + "Uno!1")
        assert not verify_password(prefix + "Dos!2", hashed)


class TestJWT:
    """Tests for session tokens and reset grants."""

    SECRET = "test-secret-key-not-for-production-use"

    def test_access_token_payload(self) -> None:
        token = create_access_token("user-id", ["Student", "Admin"], self.SECRET)
        payload = decode_token(token, self.SECRET)
        assert payload["sub"] == "user-id"
        assert payload["roles"] == ["Student", "Admin"]
        assert payload["type"] == ACCESS_TOKEN_TYPE
        assert payload["exp"] > payload["iat"]

    def test_reset_grant_payload(self) -> None:
        token = create_reset_grant("user-id", "entry-id", self.SECRET)
        payload = decode_token(token, self.SECRET)
        assert payload["sub"] == "user-id"
        assert payload["phid"] == "entry-id"
        assert payload["type"] == RESET_GRANT_TYPE

    def test_decode_with_wrong_secret_fails(self) -> None:
        token = create_access_token("user", [], self.SECRET)
        with pytest.raises(pyjwt.InvalidSignatureError):
            decode_token(token, "another-secret-key-of-enough-length")

    def test_expired_token_rejected(self) -> None:
        token = create_access_token("user", [], self.SECRET, expires_minutes=-1)
        with pytest.raises(pyjwt.ExpiredSignatureError):
            decode_token(token, self.SECRET)

    def test_expired_grant_rejected(self) -> None:
        token = create_reset_grant("user", "entry", self.SECRET, expires_seconds=-1)
        with pytest.raises(pyjwt.ExpiredSignatureError):
            decode_token(token, self.SECRET)


class TestResetTokenGeneration:
    def test_tokens_are_unique_and_url_safe(self) -> None:
        tokens = {generate_reset_token() for _ in range(50)}
        assert len(tokens) == 50
        for token in tokens:
            assert len(token) >= 40
            assert all(c.isalnum() or c in "-_" for c in token)
