"""In-app notifications.

Notifications are side records: failing to write one never affects the
account change that caused it.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fazlaka.errors import NotFoundError
from fazlaka.models import Notification
from fazlaka.services.repositories import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationType:
    """Constants for notification severities."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationService:
    """Creates and manages a user's notifications. The caller commits."""

    @staticmethod
    def create(db: Session, user_id: str, **fields) -> Notification:
        notification = NotificationRepository(db).create(user_id=user_id, **fields)
        logger.info(f"Created notification for user {user_id}: {fields.get('related_type')}")
        return notification

    @classmethod
    def create_welcome(cls, db: Session, user_id: str, name: str | None = None) -> Notification:
        """Greeting for a freshly created account."""
        return cls.create(
            db,
            user_id,
            title="مرحباً بك في منصتنا! 🎉",
            title_en="Welcome to our platform! 🎉",
            message=f"يسعدنا انضمامك إلينا، {name or 'صديقنا'}. استكشف محتوانا المتنوع.",
            message_en=f"We're happy to have you here, {name or 'friend'}. Explore our diverse content.",
            type=NotificationType.SUCCESS,
            related_type="welcome",
            action_url="/",
            action_text="استكشف المحتوى",
            action_text_en="Explore Content",
        )

    @classmethod
    def create_login(cls, db: Session, user_id: str, name: str | None = None) -> Notification:
        """Greeting for a returning user."""
        return cls.create(
            db,
            user_id,
            title="مرحباً بعودتك! 👋",
            title_en="Welcome back! 👋",
            message=f"سعيد برؤيتك مرة أخرى، {name or 'صديقنا'}. استمتع بتصفح المحتوى الجديد.",
            message_en=f"Good to see you again, {name or 'friend'}. Enjoy browsing the new content.",
            type=NotificationType.INFO,
            related_type="login",
            action_url="/",
            action_text="استكشف المحتوى",
            action_text_en="Explore Content",
        )

    @classmethod
    def try_create_login(cls, db: Session, user_id: str, name: str | None = None) -> None:
        """Login greeting that never fails the sign-in it accompanies.

        Commits on its own, so call it after the sign-in itself is committed.
        """
        try:
            cls.create_login(db, user_id, name)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to create login notification for user {user_id}")

    @staticmethod
    def list_for_user(db: Session, user_id: str) -> Sequence[Notification]:
        return NotificationRepository(db).find_for_user(user_id)

    @staticmethod
    def get_owned(db: Session, notification_id: str, user_id: str) -> Notification:
        """Notification belonging to the user; anyone else's is reported as missing."""
        notification = NotificationRepository(db).find_owned(notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification

    @classmethod
    def mark_read(cls, db: Session, notification_id: str, user_id: str) -> Notification:
        notification = cls.get_owned(db, notification_id, user_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(UTC)
        return notification

    @staticmethod
    def mark_all_read(db: Session, user_id: str) -> int:
        updated = NotificationRepository(db).mark_all_read(user_id, datetime.now(UTC))
        logger.info(f"Marked {updated} notifications read for user {user_id}")
        return updated

    @staticmethod
    def clear_all(db: Session, user_id: str) -> int:
        deleted = NotificationRepository(db).delete_all(user_id)
        logger.info(f"Cleared {deleted} notifications for user {user_id}")
        return deleted

    @classmethod
    def delete(cls, db: Session, notification_id: str, user_id: str) -> None:
        notification = cls.get_owned(db, notification_id, user_id)
        NotificationRepository(db).delete(notification)
