"""Account authentication: hashing, proofs, sessions and the event trail."""

from .account_event_service import AccountEventService, AccountEventType
from .auth_service import AuthService
from .proof_service import (
    OtpPurpose,
    ProofKind,
    ProofOutcome,
    ProofResult,
    ProofService,
)
from .session_service import SessionClaims, SessionService

__all__ = [
    "AccountEventService",
    "AccountEventType",
    "AuthService",
    "OtpPurpose",
    "ProofKind",
    "ProofOutcome",
    "ProofResult",
    "ProofService",
    "SessionClaims",
    "SessionService",
]
