"""Schemas for authentication endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from fazlaka.services.auth import OtpPurpose

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100


def _require_text(v: str) -> str:
    """Shared check for free-text fields that must not be blank."""
    if not v.strip():
        raise ValueError("must not be blank")
    return v.strip()


class UserRegister(BaseModel):
    """Schema for user registration."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _require_text(v)


class RegisterResponse(BaseModel):
    message: str
    user_id: str


class UserLogin(BaseModel):
    """Schema for user login."""

    email: str
    password: str


class UserInfo(BaseModel):
    """Schema for user info in auth responses."""

    id: str
    email: str
    name: str | None = None
    image: str | None = None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    """Schema for token response."""

    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class VerifyEmailRequest(BaseModel):
    """Schema for email verification."""

    token: str


class EmailRequest(BaseModel):
    """Schema for flows keyed only by an address (resend, magic link, forgot password)."""

    email: EmailStr


class SendOtpRequest(BaseModel):
    email: EmailStr
    purpose: OtpPurpose = OtpPurpose.LOGIN


class VerifyOtpRequest(BaseModel):
    """Schema for verifying a one-time code.

    ``name`` and ``password`` are only used to complete a ``register`` code.
    """

    email: EmailStr
    otp_code: str = Field(min_length=1, max_length=10)
    purpose: OtpPurpose = OtpPurpose.LOGIN
    name: str | None = Field(None, max_length=100)
    password: str | None = Field(None, min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class VerifyOtpResponse(BaseModel):
    message: str
    access_token: str | None = None
    token_type: str | None = None
    user: UserInfo | None = None


class ResetPasswordWithOtpRequest(BaseModel):
    email: EmailStr
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class ResetPasswordRequest(BaseModel):
    """Schema for resetting password with token."""

    token: str
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class EmailChangeRequest(BaseModel):
    new_email: EmailStr


class VerifyEmailChangeRequest(BaseModel):
    new_email: EmailStr
    verification_code: str = Field(min_length=1, max_length=10)


class SessionUser(BaseModel):
    id: str
    name: str | None = None
    email: str
    image: str | None = None


class SessionResponse(BaseModel):
    """Outward-facing session object."""

    user: SessionUser
    expires: datetime


class SessionRefreshRequest(BaseModel):
    """Profile claims to re-sign into the caller's session."""

    user_id: str
    name: str | None = Field(None, max_length=100)
    email: EmailStr | None = None
    image: str | None = Field(None, max_length=500)


class SessionTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    session: SessionResponse


class WelcomeRequest(BaseModel):
    is_new_user: bool = False


class GoogleLoginResponse(BaseModel):
    authorization_url: str
    state: str
