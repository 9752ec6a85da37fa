"""User profile router."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from fazlaka.database import get_db
from fazlaka.dependencies.auth import get_current_session
from fazlaka.errors import ForbiddenError, NotFoundError, ValidationError
from fazlaka.schemas.common import MessageResponse
from fazlaka.schemas.user import (
    ChangePasswordRequest,
    OwnProfile,
    ProfileUpdate,
    ProfileUpdateResponse,
    PublicProfile,
)
from fazlaka.services.auth import (
    AccountEventService,
    AccountEventType,
    AuthService,
    ProofService,
    SessionClaims,
    SessionService,
)
from fazlaka.services.email_service import EmailService
from fazlaka.services.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["users"])


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: Request,
    data: ChangePasswordRequest,
    claims: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> dict:
    """Change password while logged in.

    Either the current password is supplied, or a ``reset`` /
    ``change-password`` code was verified just before; that marker is
    spent by this call.
    """
    user = UserRepository(db).find_by_id(claims.user_id)
    if user is None:
        raise NotFoundError("User not found")

    proofs = ProofService(db)
    password_hash = AuthService.hash_password(data.new_password)

    if data.current_password:
        if not AuthService.verify_password(data.current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        UserRepository(db).patch(user.id).set(
            password_hash=password_hash, otp_verified=False
        ).unset("otp_verified_expiry").execute()
    elif not proofs.consume_otp_verified(user.id, changes={"password_hash": password_hash}):
        raise ForbiddenError("Verification required. Please verify your identity via OTP.")

    AccountEventService.log_event(
        db, AccountEventType.PASSWORD_CHANGED, user_id=user.id, email=user.email,
        ip_address=AccountEventService.get_client_ip(request),
        details={"method": "password" if data.current_password else "otp"},
    )
    db.commit()

    # Send notification email
    EmailService.send_password_changed_notification(user.email)

    logger.info(f"Password changed for user: {user.email}")
    return {"message": "Password changed successfully"}


@router.get("/{user_id}", response_model=PublicProfile)
def get_profile(user_id: str, db: Session = Depends(get_db)):
    """Public profile of any user."""
    user = UserRepository(db).find_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.put("/{user_id}", response_model=ProfileUpdateResponse)
def update_profile(
    user_id: str,
    data: ProfileUpdate,
    claims: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> dict:
    """Update the caller's own profile and re-sign the session with the new display claims."""
    if claims.user_id != user_id:
        raise ForbiddenError("You can only update your own profile")

    users = UserRepository(db)
    user = users.find_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")

    update_data = data.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is None:
        raise ValidationError("name: must not be empty")
    users.patch(user.id).set(**update_data).execute()
    db.commit()

    token = SessionService.refresh_profile_claims(
        claims, user.id, name=user.name, email=user.email, image=user.image
    )

    logger.info(f"Profile updated for user {user.id}: {sorted(update_data)}")
    return {"user": OwnProfile.model_validate(user), "access_token": token}
