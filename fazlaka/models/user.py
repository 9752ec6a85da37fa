"""User model: the durable identity record and its pending proofs."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from fazlaka.database import Base

if TYPE_CHECKING:
    from fazlaka.models.comment import Comment
    from fazlaka.models.favorite import Favorite
    from fazlaka.models.notification import Notification


class User(Base):
    """User account.

    Each proof family is stored as a (digest, expiry) pair that is always
    written and cleared together. ``otp_purpose`` belongs to the OTP family
    and ``new_email`` to the email-change family.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    name: Mapped[str | None] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255))
    google_id: Mapped[str | None] = mapped_column(String(255), unique=True)
    image: Mapped[str | None] = mapped_column(String(500))
    bio: Mapped[str | None] = mapped_column(Text)
    location: Mapped[str | None] = mapped_column(String(100))
    website: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)

    # Email verification
    verification_token_hash: Mapped[str | None] = mapped_column(String(64), index=True)
    verification_token_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Password reset
    reset_token_hash: Mapped[str | None] = mapped_column(String(64), index=True)
    reset_token_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Magic link
    magic_token_hash: Mapped[str | None] = mapped_column(String(64), index=True)
    magic_token_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # One-time passcode
    otp_code_hash: Mapped[str | None] = mapped_column(String(64))
    otp_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    otp_purpose: Mapped[str | None] = mapped_column(String(20))
    otp_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    otp_verified_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Email change
    new_email: Mapped[str | None] = mapped_column(String(255))
    email_change_code_hash: Mapped[str | None] = mapped_column(String(64))
    email_change_code_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    favorites: Mapped[list["Favorite"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    comments: Mapped[list["Comment"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
