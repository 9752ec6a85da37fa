"""Schemas for favorite endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ContentType = Literal["episode", "article"]


class FavoriteRequest(BaseModel):
    content_id: str = Field(min_length=1, max_length=100)
    content_type: ContentType


class FavoriteStatus(BaseModel):
    is_favorite: bool


class FavoriteResponse(BaseModel):
    id: str
    content_id: str
    content_type: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class FavoriteListResponse(BaseModel):
    favorites: list[FavoriteResponse]
