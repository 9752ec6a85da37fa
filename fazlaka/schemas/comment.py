"""Schemas for comment endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class CommentCreate(BaseModel):
    """A new comment on exactly one episode or article."""

    content: str = Field(min_length=1, max_length=5000)
    episode_id: str | None = Field(None, max_length=100)
    article_id: str | None = Field(None, max_length=100)
    parent_comment_id: str | None = None

    @model_validator(mode="after")
    def validate_target(self) -> "CommentCreate":
        if bool(self.episode_id) == bool(self.article_id):
            raise ValueError("Provide exactly one of episode_id or article_id")
        if not self.content.strip():
            raise ValueError("Comment content is required")
        return self

    @property
    def target(self) -> tuple[str, str]:
        """(content_type, content_id) of the commented item."""
        if self.episode_id:
            return "episode", self.episode_id
        return "article", self.article_id


class CommentResponse(BaseModel):
    id: str
    user_id: str | None = None
    name: str
    user_image_url: str | None = None
    content: str
    parent_id: str | None = None
    created_at: datetime | None = None
    replies: list["CommentResponse"] = []

    model_config = {"from_attributes": True}


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
