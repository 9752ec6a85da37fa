"""Authentication router.

Every sign-in path (password, Google, magic link, one-time code) ends in the
same session token. Requests keyed only by an email address answer with a
fixed message so they cannot be used to probe which accounts exist.
"""

import logging
import secrets
from collections.abc import Iterator

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fazlaka.database import get_db
from fazlaka.dependencies.auth import get_current_session, get_current_user
from fazlaka.errors import (
    ConflictError,
    ForbiddenError,
    InvalidProofError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from fazlaka.models import User
from fazlaka.rate_limiter import (
    FORGOT_PASSWORD_LIMIT,
    LOGIN_LIMIT,
    MAGIC_LINK_LIMIT,
    REGISTER_LIMIT,
    RESEND_VERIFICATION_LIMIT,
    SEND_OTP_LIMIT,
    limiter,
)
from fazlaka.schemas.auth import (
    EmailChangeRequest,
    EmailRequest,
    GoogleLoginResponse,
    RegisterResponse,
    ResetPasswordRequest,
    ResetPasswordWithOtpRequest,
    SendOtpRequest,
    SessionRefreshRequest,
    SessionResponse,
    SessionTokenResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
    VerifyEmailChangeRequest,
    VerifyEmailRequest,
    VerifyOtpRequest,
    VerifyOtpResponse,
    WelcomeRequest,
)
from fazlaka.schemas.common import MessageResponse
from fazlaka.services.auth import (
    AccountEventService,
    AccountEventType,
    AuthService,
    OtpPurpose,
    ProofKind,
    ProofService,
    SessionClaims,
    SessionService,
)
from fazlaka.services.email_service import EmailService
from fazlaka.services.google_oauth_client import GoogleOAuthClient, GoogleOAuthError
from fazlaka.services.notification_service import NotificationService
from fazlaka.services.repositories import DuplicateError, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

RESEND_VERIFICATION_MESSAGE = "If that email exists and is unverified, we sent a new verification link."
FORGOT_PASSWORD_MESSAGE = "If that email exists, we sent a password reset link."
MAGIC_LINK_MESSAGE = "If an account exists with this email, a sign-in link has been sent."
SEND_OTP_MESSAGE = "If an account exists with this email, a verification code has been sent."
INVALID_CODE_MESSAGE = "Invalid or expired verification code"


def get_google_client() -> Iterator[GoogleOAuthClient]:
    """Google OAuth client for one request."""
    with GoogleOAuthClient() as client:
        yield client


def _session_user(db: Session, claims: SessionClaims) -> User:
    """Account behind a session; a session for a deleted account is a 404."""
    user = UserRepository(db).find_by_id(claims.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _reject_proof(db: Session, kind: ProofKind, request: Request, email: str | None = None) -> None:
    AccountEventService.log_event(
        db, AccountEventType.PROOF_REJECTED, email=email,
        ip_address=AccountEventService.get_client_ip(request), details={"kind": str(kind)}
    )
    db.commit()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
def register(request: Request, data: UserRegister, db: Session = Depends(get_db)) -> dict:
    """Register a new user and send verification email."""
    users = UserRepository(db)
    if users.find_by_email(data.email):
        raise ConflictError("Email already registered")

    try:
        user = users.create(
            name=data.name,
            email=data.email,
            password_hash=AuthService.hash_password(data.password),
            is_active=False,
        )
    except DuplicateError as e:
        raise ConflictError("Email already registered") from e

    token = ProofService(db).issue(ProofKind.EMAIL_VERIFICATION, user)
    AccountEventService.log_event(
        db, AccountEventType.REGISTERED, user_id=user.id, email=user.email,
        ip_address=AccountEventService.get_client_ip(request)
    )
    db.commit()

    # Account stays created even if the email is lost; resend-verification recovers it
    EmailService.send_verification_email(user.email, token, user.name)

    logger.info(f"User registered (pending verification): {user.email}")
    return {
        "message": "Registration successful. Please check your email to verify your account.",
        "user_id": user.id,
    }


def _verify_email(request: Request, token: str | None, db: Session) -> dict:
    result = ProofService(db).verify(
        ProofKind.EMAIL_VERIFICATION, token, changes={"is_active": True}
    )
    if not result.consumed:
        _reject_proof(db, ProofKind.EMAIL_VERIFICATION, request)
        raise InvalidProofError("Invalid or expired verification token")

    user = result.user
    AccountEventService.log_event(
        db, AccountEventType.EMAIL_VERIFIED, user_id=user.id, email=user.email,
        ip_address=AccountEventService.get_client_ip(request)
    )
    db.commit()

    EmailService.send_welcome_email(user.email, user.name)

    logger.info(f"Email verified for user: {user.email}")
    return {"message": "Email verified successfully. You can now log in."}


@router.get("/verify-email", response_model=MessageResponse)
def verify_email_link(
    request: Request, token: str | None = Query(None), db: Session = Depends(get_db)
) -> dict:
    """Verify email with the token from the emailed link."""
    return _verify_email(request, token, db)


@router.post("/verify-email", response_model=MessageResponse)
def verify_email(request: Request, data: VerifyEmailRequest, db: Session = Depends(get_db)) -> dict:
    """Verify email with a token posted by the frontend."""
    return _verify_email(request, data.token, db)


@router.post("/resend-verification", response_model=MessageResponse)
@limiter.limit(RESEND_VERIFICATION_LIMIT)
def resend_verification(request: Request, data: EmailRequest, db: Session = Depends(get_db)) -> dict:
    """Resend verification email."""
    user = UserRepository(db).find_by_email(data.email)

    if user and not user.is_active:
        token = ProofService(db).issue(ProofKind.EMAIL_VERIFICATION, user)
        AccountEventService.log_event(
            db, AccountEventType.VERIFICATION_RESENT, user_id=user.id, email=user.email,
            ip_address=AccountEventService.get_client_ip(request)
        )
        db.commit()

        EmailService.send_verification_email(user.email, token, user.name)
        logger.info(f"Verification email resent to: {user.email}")

    # Always return success (don't reveal if email exists)
    return {"message": RESEND_VERIFICATION_MESSAGE}


@router.post("/login", response_model=TokenResponse)
@limiter.limit(LOGIN_LIMIT)
def login(request: Request, data: UserLogin, db: Session = Depends(get_db)) -> dict:
    """Password sign-in."""
    ip_address = AccountEventService.get_client_ip(request)

    try:
        user = SessionService(db).authenticate_credentials(data.email, data.password)
    except UnauthorizedError:
        AccountEventService.log_event(
            db, AccountEventType.LOGIN_FAILED, email=data.email, ip_address=ip_address
        )
        db.commit()
        raise
    except ForbiddenError:
        AccountEventService.log_event(
            db, AccountEventType.LOGIN_BLOCKED_UNVERIFIED, email=data.email, ip_address=ip_address
        )
        db.commit()
        raise

    AccountEventService.log_event(
        db, AccountEventType.LOGIN_SUCCESS, user_id=user.id, email=user.email, ip_address=ip_address
    )
    db.commit()
    NotificationService.try_create_login(db, user.id, user.name)

    logger.info(f"User logged in: {user.email}")
    return SessionService.token_response(user)


@router.post("/magic-link", response_model=MessageResponse)
@limiter.limit(MAGIC_LINK_LIMIT)
def request_magic_link(request: Request, data: EmailRequest, db: Session = Depends(get_db)) -> dict:
    """Email a single-use sign-in link to an active account."""
    user = UserRepository(db).find_active_by_email(data.email)

    if user:
        token = ProofService(db).issue(ProofKind.MAGIC_LINK, user)
        AccountEventService.log_event(
            db, AccountEventType.MAGIC_LINK_REQUESTED, user_id=user.id, email=user.email,
            ip_address=AccountEventService.get_client_ip(request)
        )
        db.commit()

        EmailService.send_magic_link_email(user.email, token)

    return {"message": MAGIC_LINK_MESSAGE}


@router.get("/verify-magic-link", response_model=TokenResponse)
def verify_magic_link(
    request: Request, token: str | None = Query(None), db: Session = Depends(get_db)
) -> dict:
    """Exchange a magic-link token for a session."""
    if not token:
        raise ValidationError("Magic link token is required")

    result = ProofService(db).verify(ProofKind.MAGIC_LINK, token)
    if not result.consumed:
        _reject_proof(db, ProofKind.MAGIC_LINK, request)
        raise InvalidProofError("Invalid or expired magic link")

    user = result.user
    AccountEventService.log_event(
        db, AccountEventType.MAGIC_LINK_LOGIN, user_id=user.id, email=user.email,
        ip_address=AccountEventService.get_client_ip(request)
    )
    db.commit()
    NotificationService.try_create_login(db, user.id, user.name)

    logger.info(f"User logged in with magic link: {user.email}")
    return SessionService.token_response(user)


@router.post("/send-otp", response_model=MessageResponse)
@limiter.limit(SEND_OTP_LIMIT)
def send_otp(request: Request, data: SendOtpRequest, db: Session = Depends(get_db)) -> dict:
    """Email a six-digit code for the requested purpose.

    A ``register`` code for an unknown address creates an inactive
    placeholder account that ``verify-otp`` completes. Every other purpose
    only issues codes to active accounts.
    """
    users = UserRepository(db)
    user = users.find_by_email(data.email)

    if data.purpose is OtpPurpose.REGISTER:
        if user is not None and user.is_active:
            raise ConflictError("Email already registered")
        if user is None:
            try:
                user = users.create(email=data.email, is_active=False)
            except DuplicateError as e:
                raise ConflictError("Email already registered") from e
    elif user is None or not user.is_active:
        logger.info(f"OTP requested for unknown or inactive account ({data.purpose})")
        return {"message": SEND_OTP_MESSAGE}

    code = ProofService(db).issue(ProofKind.OTP, user, otp_purpose=data.purpose.value)
    AccountEventService.log_event(
        db, AccountEventType.OTP_REQUESTED, user_id=user.id, email=user.email,
        ip_address=AccountEventService.get_client_ip(request), details={"purpose": data.purpose.value}
    )
    db.commit()

    EmailService.send_otp_email(user.email, code, data.purpose.value, user.name)
    return {"message": SEND_OTP_MESSAGE}


@router.post("/verify-otp", response_model=VerifyOtpResponse, response_model_exclude_none=True)
def verify_otp(request: Request, data: VerifyOtpRequest, db: Session = Depends(get_db)) -> dict:
    """Consume a one-time code; what it unlocks depends on its purpose.

    - ``register``: completes the account with the supplied name and password.
    - ``reset`` / ``change-password``: grants a short-lived marker that the
      next password change spends.
    - ``login``: signs the user in.
    - ``verify``: only proves control of the address.
    """
    purpose = data.purpose
    changes: dict = {}
    if purpose is OtpPurpose.REGISTER:
        if not data.name or not data.name.strip() or not data.password:
            raise ValidationError("Name and password are required for registration")
        changes = {
            "name": data.name.strip(),
            "password_hash": AuthService.hash_password(data.password),
            "is_active": True,
        }
    elif purpose in (OtpPurpose.RESET, OtpPurpose.CHANGE_PASSWORD):
        changes = ProofService.otp_verified_marker()

    ip_address = AccountEventService.get_client_ip(request)
    result = ProofService(db).verify(
        ProofKind.OTP, data.otp_code, email=data.email, purpose=purpose, changes=changes
    )
    if not result.consumed:
        AccountEventService.log_event(
            db, AccountEventType.OTP_FAILED, email=data.email, ip_address=ip_address,
            details={"purpose": purpose.value}
        )
        db.commit()
        raise InvalidProofError(INVALID_CODE_MESSAGE)

    user = result.user
    AccountEventService.log_event(
        db, AccountEventType.OTP_VERIFIED, user_id=user.id, email=user.email,
        ip_address=ip_address, details={"purpose": purpose.value}
    )
    db.commit()

    if purpose is OtpPurpose.REGISTER:
        NotificationService.create_welcome(db, user.id, user.name)
        db.commit()
        EmailService.send_welcome_email(user.email, user.name)
        return {"message": "Account created successfully", **SessionService.token_response(user)}
    if purpose is OtpPurpose.LOGIN:
        NotificationService.try_create_login(db, user.id, user.name)
        return {"message": "Login successful", **SessionService.token_response(user)}
    if purpose is OtpPurpose.RESET:
        return {"message": "OTP verified. You can now reset your password"}
    if purpose is OtpPurpose.CHANGE_PASSWORD:
        return {"message": "OTP verified. You can now change your password"}
    return {"message": "Identity verified successfully"}


@router.post("/reset-password-with-otp", response_model=MessageResponse)
def reset_password_with_otp(
    request: Request, data: ResetPasswordWithOtpRequest, db: Session = Depends(get_db)
) -> dict:
    """Set a new password after a ``reset`` code was verified."""
    user = UserRepository(db).find_by_email(data.email)
    password_hash = AuthService.hash_password(data.new_password)

    if user is None or not ProofService(db).consume_otp_verified(
        user.id, changes={"password_hash": password_hash}
    ):
        raise ValidationError("Please verify your OTP first")

    AccountEventService.log_event(
        db, AccountEventType.PASSWORD_RESET_COMPLETED, user_id=user.id, email=user.email,
        ip_address=AccountEventService.get_client_ip(request), details={"method": "otp"}
    )
    db.commit()

    EmailService.send_password_changed_notification(user.email)

    logger.info(f"Password reset with OTP for user: {user.email}")
    return {"message": "Password reset successfully"}


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(FORGOT_PASSWORD_LIMIT)
def forgot_password(request: Request, data: EmailRequest, db: Session = Depends(get_db)) -> dict:
    """Request password reset email."""
    user = UserRepository(db).find_active_by_email(data.email)

    if user:
        token = ProofService(db).issue(ProofKind.PASSWORD_RESET, user)
        AccountEventService.log_event(
            db, AccountEventType.PASSWORD_RESET_REQUESTED, user_id=user.id, email=user.email,
            ip_address=AccountEventService.get_client_ip(request)
        )
        db.commit()

        EmailService.send_password_reset_email(user.email, token)
        logger.info(f"Password reset email sent to: {user.email}")

    # Always return success (don't reveal if email exists)
    return {"message": FORGOT_PASSWORD_MESSAGE}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(request: Request, data: ResetPasswordRequest, db: Session = Depends(get_db)) -> dict:
    """Reset password with token from email."""
    result = ProofService(db).verify(
        ProofKind.PASSWORD_RESET,
        data.token,
        changes={"password_hash": AuthService.hash_password(data.new_password)},
    )
    if not result.consumed:
        _reject_proof(db, ProofKind.PASSWORD_RESET, request)
        raise InvalidProofError("Invalid or expired reset token")

    user = result.user
    AccountEventService.log_event(
        db, AccountEventType.PASSWORD_RESET_COMPLETED, user_id=user.id, email=user.email,
        ip_address=AccountEventService.get_client_ip(request), details={"method": "token"}
    )
    db.commit()

    EmailService.send_password_changed_notification(user.email)

    logger.info(f"Password reset for user: {user.email}")
    return {"message": "Password reset successfully. You can now log in with your new password."}


@router.post("/send-email-verification", response_model=MessageResponse)
def request_email_change(
    request: Request,
    data: EmailChangeRequest,
    claims: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> dict:
    """Send an email-change code to the new address."""
    user = _session_user(db, claims)
    new_email = data.new_email.strip().lower()

    if new_email == user.email.lower():
        raise ValidationError("New email must be different from current email")
    if UserRepository(db).email_taken(new_email, exclude_user_id=user.id):
        raise ConflictError("Email is already in use")

    code = ProofService(db).issue(ProofKind.EMAIL_CHANGE, user, new_email=new_email)
    AccountEventService.log_event(
        db, AccountEventType.EMAIL_CHANGE_REQUESTED, user_id=user.id, email=user.email,
        ip_address=AccountEventService.get_client_ip(request), details={"new_email": new_email}
    )
    db.commit()

    # Code goes to the new address only: the change must prove control of it
    EmailService.send_email_change_code(new_email, code, user.name)
    return {"message": "Verification code sent to your new email"}


@router.post("/verify-email-change", response_model=SessionTokenResponse)
def verify_email_change(
    request: Request,
    data: VerifyEmailChangeRequest,
    claims: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> dict:
    """Swap the account email once the code sent to the new address is confirmed."""
    user = _session_user(db, claims)
    old_email = user.email
    new_email = data.new_email.strip().lower()

    if UserRepository(db).email_taken(new_email, exclude_user_id=user.id):
        raise ConflictError("Email is already in use")

    try:
        result = ProofService(db).verify(
            ProofKind.EMAIL_CHANGE,
            data.verification_code,
            email=old_email,
            new_email=new_email,
            changes={"email": new_email},
        )
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Email is already in use") from e

    if not result.consumed:
        _reject_proof(db, ProofKind.EMAIL_CHANGE, request, email=old_email)
        raise InvalidProofError(INVALID_CODE_MESSAGE)

    AccountEventService.log_event(
        db, AccountEventType.EMAIL_CHANGED, user_id=user.id, email=new_email,
        ip_address=AccountEventService.get_client_ip(request), details={"old_email": old_email}
    )
    db.commit()

    token = SessionService.refresh_profile_claims(claims, user.id, email=new_email)
    refreshed = SessionClaims.from_payload(AuthService.decode_session_token(token))

    logger.info(f"Email changed for user {user.id}")
    return {"access_token": token, "session": SessionService.materialize(refreshed)}


@router.get("/google/login", response_model=GoogleLoginResponse)
def google_login(google: GoogleOAuthClient = Depends(get_google_client)) -> dict:
    """Authorization URL for Google sign-in; the caller keeps ``state`` to check the callback."""
    if not google.configured:
        raise UpstreamError("Google sign-in is not configured")

    state = secrets.token_urlsafe(16)
    return {"authorization_url": google.authorization_url(state), "state": state}


@router.get("/google/callback", response_model=TokenResponse)
def google_callback(
    request: Request,
    code: str | None = Query(None),
    db: Session = Depends(get_db),
    google: GoogleOAuthClient = Depends(get_google_client),
) -> dict:
    """Complete Google sign-in, creating an active account on first use."""
    if not code:
        raise ValidationError("Authorization code is required")

    try:
        profile = google.fetch_profile(code)
    except GoogleOAuthError as e:
        raise UpstreamError(f"Google sign-in failed: {e}", status_code=status.HTTP_502_BAD_GATEWAY) from e

    if not profile.email_verified:
        raise ForbiddenError("Google account email is not verified")

    user, created = SessionService(db).authenticate_oauth(profile)
    AccountEventService.log_event(
        db,
        AccountEventType.OAUTH_ACCOUNT_CREATED if created else AccountEventType.OAUTH_LOGIN,
        user_id=user.id,
        email=user.email,
        ip_address=AccountEventService.get_client_ip(request),
    )
    db.commit()

    if created:
        NotificationService.create_welcome(db, user.id, user.name)
        db.commit()
    else:
        NotificationService.try_create_login(db, user.id, user.name)

    logger.info(f"User signed in with Google: {user.email}")
    return SessionService.token_response(user)


@router.get("/session", response_model=SessionResponse)
def read_session(claims: SessionClaims = Depends(get_current_session)) -> dict:
    """The caller's session as the frontend displays it."""
    return SessionService.materialize(claims)


@router.post("/session/refresh", response_model=SessionTokenResponse)
def refresh_session(
    data: SessionRefreshRequest, claims: SessionClaims = Depends(get_current_session)
) -> dict:
    """Re-sign the caller's session with updated display claims.

    Only fields present in the body are overwritten; an explicit ``null``
    clears ``name`` or ``image``.
    """
    profile = data.model_dump(exclude_unset=True, exclude={"user_id"})
    if "email" in profile and profile["email"] is None:
        raise ValidationError("email: must not be empty")
    token = SessionService.refresh_profile_claims(claims, data.user_id, **profile)
    refreshed = SessionClaims.from_payload(AuthService.decode_session_token(token))
    return {"access_token": token, "session": SessionService.materialize(refreshed)}


@router.post("/welcome", response_model=MessageResponse)
def welcome(
    data: WelcomeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Greeting notification after the frontend finishes a sign-in."""
    if data.is_new_user:
        NotificationService.create_welcome(db, user.id, user.name)
        message = "Welcome notification created"
    else:
        NotificationService.create_login(db, user.id, user.name)
        message = "Login notification created"
    db.commit()
    return {"message": message}
