"""Authentication dependencies for protected routes."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from fazlaka.database import get_db
from fazlaka.errors import UnauthorizedError
from fazlaka.models import User
from fazlaka.services.auth import AuthService, SessionClaims
from fazlaka.services.repositories import UserRepository

security = HTTPBearer(auto_error=False)


def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> SessionClaims:
    """
    Claims of the caller's session token.

    Usage:
        @router.get("/session")
        def read_session(claims: SessionClaims = Depends(get_current_session)):
            return {"user_id": claims.user_id}
    """
    if credentials is None:
        raise UnauthorizedError("Unauthorized")

    payload = AuthService.decode_session_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid or expired session")

    return SessionClaims.from_payload(payload)


def get_current_user(
    claims: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> User:
    """Account behind the caller's session."""
    user = UserRepository(db).find_by_id(claims.user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    return user
