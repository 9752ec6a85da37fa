"""Favorite model."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from fazlaka.database import Base

if TYPE_CHECKING:
    from fazlaka.models.user import User


class Favorite(Base):
    """A user's bookmark of an episode or article held by the content backend."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "content_type", "content_id", name="uq_favorites_user_content"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    content_type: Mapped[str] = mapped_column(String(20))  # "episode" or "article"
    content_id: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    user: Mapped["User"] = relationship(back_populates="favorites")

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id}, {self.content_type}={self.content_id})>"
