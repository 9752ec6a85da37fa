"""Tests for auth service."""

from datetime import UTC, datetime, timedelta

import jwt

from fazlaka.config import settings
from fazlaka.services.auth import AuthService


def test_hash_password():
    """Test password hashing."""
    password = "secure_password_123"
    hashed = AuthService.hash_password(password)

    assert hashed != password
    assert hashed.startswith("$2b$10$")  # bcrypt prefix with cost factor 10


def test_verify_password_correct():
    """Test verifying correct password."""
    password = "secure_password_123"
    hashed = AuthService.hash_password(password)

    assert AuthService.verify_password(password, hashed) is True


def test_verify_password_incorrect():
    """Test verifying incorrect password."""
    hashed = AuthService.hash_password("secure_password_123")

    assert AuthService.verify_password("wrong_password", hashed) is False


def test_verify_password_malformed_hash_returns_false():
    """A malformed digest is a mismatch, not an exception."""
    assert AuthService.verify_password("anything", "not-a-bcrypt-hash") is False


def test_verify_password_missing_hash_returns_false():
    assert AuthService.verify_password("anything", None) is False


def test_long_password_is_truncated_consistently():
    """bcrypt only sees 72 bytes; longer secrets still verify."""
    password = "x" * 100
    hashed = AuthService.hash_password(password)

    assert AuthService.verify_password(password, hashed) is True


def test_hash_token_is_deterministic_sha256():
    digest = AuthService.hash_token("abc")

    assert digest == AuthService.hash_token("abc")
    assert len(digest) == 64
    assert digest != "abc"


def test_create_session_token_carries_profile_claims():
    token = AuthService.create_session_token(
        "user-123", name="Alice", email="alice@x.com", image="https://img/a.png"
    )
    decoded = AuthService.decode_session_token(token)

    assert decoded is not None
    assert decoded["sub"] == "user-123"
    assert decoded["name"] == "Alice"
    assert decoded["email"] == "alice@x.com"
    assert decoded["image"] == "https://img/a.png"
    assert decoded["type"] == "session"
    assert decoded["jti"]


def test_session_token_expires_after_configured_days():
    before = datetime.now(UTC)
    token = AuthService.create_session_token("user-123", name=None, email="a@x.com", image=None)
    decoded = AuthService.decode_session_token(token)

    expires = datetime.fromtimestamp(decoded["exp"], UTC)
    expected = before + timedelta(days=settings.session_token_expire_days)
    assert abs((expires - expected).total_seconds()) < 5


def test_decode_expired_token():
    """Test that expired tokens fail."""
    token = AuthService.create_session_token(
        "user-123",
        name=None,
        email="a@x.com",
        image=None,
        expires_at=datetime.now(UTC) - timedelta(hours=1),
    )

    assert AuthService.decode_session_token(token) is None


def test_decode_token_with_wrong_signature():
    token = jwt.encode(
        {"sub": "user-123", "jti": "j", "exp": datetime.now(UTC) + timedelta(hours=1), "type": "session"},
        "some-other-secret",
        algorithm="HS256",
    )

    assert AuthService.decode_session_token(token) is None


def test_decode_token_of_other_type():
    token = jwt.encode(
        {"sub": "user-123", "jti": "j", "exp": datetime.now(UTC) + timedelta(hours=1), "type": "access"},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )

    assert AuthService.decode_session_token(token) is None


def test_decode_garbage_token():
    assert AuthService.decode_session_token("not.a.jwt") is None


def test_dummy_hash_is_cached():
    assert AuthService.get_dummy_hash() is AuthService.get_dummy_hash()
