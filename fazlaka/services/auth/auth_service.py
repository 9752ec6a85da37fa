"""Authentication primitives: password hashing, proof digests and session JWTs."""

import hashlib
import logging
import secrets
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import bcrypt
import jwt

from fazlaka.config import settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a secret
_BCRYPT_MAX_BYTES = 72

SESSION_TOKEN_TYPE = "session"


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class AuthService:
    """Service for authentication operations."""

    _dummy_hash: str | None = None

    @classmethod
    def get_dummy_hash(cls) -> str:
        """Hash of a random secret, for timing-consistent verification of unknown accounts."""
        if cls._dummy_hash is None:
            cls._dummy_hash = cls.hash_password(secrets.token_urlsafe(16))
        return cls._dummy_hash

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt with the configured cost factor."""
        salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed: str | None) -> bool:
        """Verify a password against its hash. Malformed or missing hashes never match."""
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
        except ValueError as e:
            logger.warning(f"Password verification against malformed hash: {e}")
            return False

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 digest of a proof value; only digests are stored."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    @staticmethod
    def create_session_token(
        user_id: str,
        *,
        name: str | None,
        email: str,
        image: str | None,
        session_id: str | None = None,
        expires_at: datetime | None = None,
    ) -> str:
        """Sign a session token carrying the profile claims."""
        issued_at = datetime.now(UTC)
        if expires_at is None:
            expires_at = issued_at + timedelta(days=settings.session_token_expire_days)

        payload = {
            "sub": user_id,
            "name": name,
            "email": email,
            "image": image,
            "jti": session_id or str(uuid4()),
            "iat": issued_at,
            "exp": expires_at,
            "type": SESSION_TOKEN_TYPE,
        }
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    @staticmethod
    def decode_session_token(token: str) -> dict | None:
        """Decode and validate a session token. Returns None if it is not usable."""
        try:
            payload = jwt.decode(
                token,
                settings.jwt_secret_key,
                algorithms=[settings.jwt_algorithm],
                options={"require": ["sub", "exp", "jti"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Session token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid session token: {e}")
            return None

        if payload.get("type") != SESSION_TOKEN_TYPE:
            return None
        return payload
