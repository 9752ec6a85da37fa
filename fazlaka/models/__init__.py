"""SQLAlchemy ORM models."""

from fazlaka.models.account_event import AccountEvent
from fazlaka.models.comment import Comment
from fazlaka.models.favorite import Favorite
from fazlaka.models.notification import Notification
from fazlaka.models.user import User

__all__ = [
    "AccountEvent",
    "Comment",
    "Favorite",
    "Notification",
    "User",
]
