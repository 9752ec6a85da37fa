"""Schemas for user profile endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from .auth import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH


class ChangePasswordRequest(BaseModel):
    """Schema for changing password while logged in.

    Without ``current_password`` the change is only allowed right after a
    ``reset`` or ``change-password`` one-time code was verified.
    """

    current_password: str | None = None
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class PublicProfile(BaseModel):
    id: str
    name: str | None = None
    image: str | None = None
    bio: str | None = None
    location: str | None = None
    website: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class OwnProfile(PublicProfile):
    email: str


class ProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    bio: str | None = Field(None, max_length=1000)
    image: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=100)
    website: str | None = Field(None, max_length=255)


class ProfileUpdateResponse(BaseModel):
    """Updated profile plus a session token carrying the new display claims."""

    user: OwnProfile
    access_token: str
