"""Notifications router. Every route is scoped to the caller's own notifications."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fazlaka.database import get_db
from fazlaka.dependencies.auth import get_current_user
from fazlaka.models import User
from fazlaka.schemas.common import MessageResponse
from fazlaka.schemas.notification import (
    BulkUpdateResponse,
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
)
from fazlaka.services.notification_service import NotificationService
from fazlaka.services.repositories import NotificationRepository

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    """Caller's notifications, newest first."""
    return {
        "notifications": NotificationService.list_for_user(db, current_user.id),
        "unread_count": NotificationRepository(db).count_unread(current_user.id),
    }


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def create_notification(
    data: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = NotificationService.create(db, current_user.id, **data.model_dump())
    db.commit()
    return notification


@router.patch("/read-all", response_model=BulkUpdateResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    count = NotificationService.mark_all_read(db, current_user.id)
    db.commit()
    return {"message": "All notifications marked as read", "count": count}


@router.delete("/clear-all", response_model=BulkUpdateResponse)
def clear_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    count = NotificationService.clear_all(db, current_user.id)
    db.commit()
    return {"message": "All notifications cleared", "count": count}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = NotificationService.mark_read(db, notification_id, current_user.id)
    db.commit()
    return notification


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    NotificationService.delete(db, notification_id, current_user.id)
    db.commit()
    return {"message": "Notification deleted"}
