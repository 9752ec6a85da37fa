"""Service for recording account lifecycle events."""

import logging

from sqlalchemy.orm import Session

from fazlaka.models import AccountEvent

logger = logging.getLogger(__name__)


class AccountEventType:
    """Constants for account event types."""

    REGISTERED = "registered"
    EMAIL_VERIFIED = "email_verified"
    VERIFICATION_RESENT = "verification_resent"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGIN_BLOCKED_UNVERIFIED = "login_blocked_unverified"
    OAUTH_LOGIN = "oauth_login"
    OAUTH_ACCOUNT_CREATED = "oauth_account_created"
    MAGIC_LINK_REQUESTED = "magic_link_requested"
    MAGIC_LINK_LOGIN = "magic_link_login"
    OTP_REQUESTED = "otp_requested"
    OTP_VERIFIED = "otp_verified"
    OTP_FAILED = "otp_failed"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"
    PASSWORD_CHANGED = "password_changed"
    EMAIL_CHANGE_REQUESTED = "email_change_requested"
    EMAIL_CHANGED = "email_changed"
    PROOF_REJECTED = "proof_rejected"


class AccountEventService:
    """Service for writing the account event trail."""

    @staticmethod
    def log_event(
        db: Session,
        event_type: str,
        user_id: str | None = None,
        email: str | None = None,
        ip_address: str | None = None,
        details: dict | None = None,
    ) -> None:
        """Record an event. The caller commits it together with the change it describes."""
        db.add(
            AccountEvent(
                user_id=user_id,
                email=email,
                event_type=event_type,
                ip_address=ip_address,
                details=details,
            )
        )
        logger.info(f"Account event: {event_type} | user_id={user_id} | ip={ip_address}")

    @staticmethod
    def get_client_ip(request) -> str | None:
        """Client address, honouring the first X-Forwarded-For hop."""
        if request is None:
            return None
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()[:45]
        if request.client:
            return request.client.host
        return None
