"""Notification data access layer."""

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from fazlaka.models import Notification


class NotificationRepository:
    """Centralized notification data access.

    Every query is scoped to the owning user so one account can never read
    or mutate another account's notifications.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_for_user(self, user_id: str) -> Sequence[Notification]:
        """All notifications of a user, newest first."""
        return (
            self._db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def find_owned(self, notification_id: str, user_id: str) -> Notification | None:
        """Find a notification only if it belongs to the user."""
        return (
            self._db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )

    def count_unread(self, user_id: str) -> int:
        return (
            self._db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

    def create(self, **fields) -> Notification:
        notification = Notification(**fields)
        self._db.add(notification)
        self._db.flush()
        return notification

    def mark_all_read(self, user_id: str, read_at: datetime) -> int:
        """Mark every unread notification of a user as read in one statement."""
        result = self._db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_all(self, user_id: str) -> int:
        """Delete every notification of a user in one statement."""
        result = self._db.execute(
            delete(Notification)
            .where(Notification.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete(self, notification: Notification) -> None:
        self._db.delete(notification)
