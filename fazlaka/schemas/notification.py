"""Schemas for notification endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

NotificationKind = Literal["info", "success", "warning", "error"]


class NotificationCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    title_en: str | None = Field(None, max_length=255)
    message: str = Field(min_length=1)
    message_en: str | None = None
    type: NotificationKind = "info"
    related_id: str | None = Field(None, max_length=100)
    related_type: str | None = Field(None, max_length=50)
    image_url: str | None = Field(None, max_length=500)
    action_url: str | None = Field(None, max_length=500)
    action_text: str | None = Field(None, max_length=100)
    action_text_en: str | None = Field(None, max_length=100)


class NotificationResponse(BaseModel):
    id: str
    title: str
    title_en: str | None = None
    message: str
    message_en: str | None = None
    type: str
    related_id: str | None = None
    related_type: str | None = None
    image_url: str | None = None
    action_url: str | None = None
    action_text: str | None = None
    action_text_en: str | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class BulkUpdateResponse(BaseModel):
    message: str
    count: int
