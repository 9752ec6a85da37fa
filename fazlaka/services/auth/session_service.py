"""Session issuance: turning a proven identity into a signed session token.

Sessions are stateless JWTs. Nothing is stored per session; the token
carries the identifier and the displayed profile claims (name, email,
image) until it is refreshed or expires.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from fazlaka.errors import ForbiddenError, UnauthorizedError, UpstreamError
from fazlaka.models import User
from fazlaka.services.google_oauth_client import GoogleProfile
from fazlaka.services.repositories import DuplicateError, UserRepository

from .auth_service import AuthService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
PROFILE_CLAIMS = ("name", "email", "image")


@dataclass(frozen=True)
class SessionClaims:
    """Claims of a validated session token."""

    user_id: str
    session_id: str
    email: str
    name: str | None
    image: str | None
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: dict) -> "SessionClaims":
        return cls(
            user_id=payload["sub"],
            session_id=payload["jti"],
            email=payload.get("email") or "",
            name=payload.get("name"),
            image=payload.get("image"),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )


class SessionService:
    """Converts verified identities into session tokens."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self._users = UserRepository(db)

    @staticmethod
    def issue(user: User) -> str:
        """Session token whose claims come straight from the user record."""
        return AuthService.create_session_token(
            user.id, name=user.name, email=user.email, image=user.image
        )

    @staticmethod
    def token_response(user: User) -> dict:
        """Response body shared by every sign-in path."""
        return {
            "access_token": SessionService.issue(user),
            "token_type": "bearer",
            "user": {"id": user.id, "email": user.email, "name": user.name, "image": user.image},
        }

    def authenticate_credentials(self, email: str, password: str) -> User:
        """Password sign-in.

        Unknown email, passwordless account and wrong password are
        indistinguishable to the caller.

        Raises:
            UnauthorizedError: Credentials do not match.
            ForbiddenError: Password is right but the email is not verified yet.
        """
        user = self._users.find_by_email(email)
        if user is None or not user.password_hash:
            # Dummy verification keeps response time independent of account existence
            AuthService.verify_password(password, AuthService.get_dummy_hash())
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if not AuthService.verify_password(password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if not user.is_active:
            raise ForbiddenError("email_not_verified")

        return user

    def authenticate_oauth(self, profile: GoogleProfile) -> tuple[User, bool]:
        """Resolve an OAuth identity to a user, creating an active account on first sign-in.

        Returns:
            (user, created)
        """
        user = self._users.find_by_email(profile.email)
        if user is not None:
            patch = self._users.patch(user.id)
            if not user.google_id and profile.subject:
                patch.set(google_id=profile.subject)
            if not user.is_active:
                # The provider verified the address, which completes verification.
                # A password set before the address was proven is discarded.
                patch.set(is_active=True).unset(
                    "password_hash", "verification_token_hash", "verification_token_expiry"
                )
                logger.info(f"Activated pending account through Google sign-in: {user.email}")
            patch.execute()
            return user, False

        try:
            user = self._users.create(
                email=profile.email,
                name=profile.name,
                image=profile.picture,
                google_id=profile.subject or None,
                is_active=True,
            )
        except DuplicateError as e:
            # Another request created the account between lookup and insert
            user = self._users.find_by_email(profile.email)
            if user is None:
                raise UpstreamError("Could not create account for OAuth sign-in") from e
            return user, False

        logger.info(f"Created account from Google sign-in: {user.email}")
        return user, True

    @staticmethod
    def refresh_profile_claims(claims: SessionClaims, user_id: str, **profile: str | None) -> str:
        """Re-sign the caller's session with updated display claims.

        Only the claims passed in ``profile`` (``name``, ``email``, ``image``)
        are overwritten, ``None`` included; the rest are carried over.

        No credential check happens here: the caller must already hold a
        valid session for ``user_id``. Identifier, session id and expiry are
        carried over, so refreshing never extends a session.

        Raises:
            ForbiddenError: The session belongs to a different user.
        """
        unexpected = set(profile) - set(PROFILE_CLAIMS)
        if unexpected:
            raise ValueError(f"Not a profile claim: {sorted(unexpected)}")
        if claims.user_id != user_id:
            raise ForbiddenError("Session does not belong to this user")

        values = {"name": claims.name, "email": claims.email, "image": claims.image}
        values.update(profile)
        return AuthService.create_session_token(
            claims.user_id,
            **values,
            session_id=claims.session_id,
            expires_at=claims.expires_at,
        )

    @staticmethod
    def materialize(claims: SessionClaims) -> dict:
        """Outward-facing session object."""
        return {
            "user": {
                "id": claims.user_id,
                "name": claims.name,
                "email": claims.email,
                "image": claims.image,
            },
            "expires": claims.expires_at,
        }
