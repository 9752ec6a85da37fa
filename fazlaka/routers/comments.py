"""Comments router."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fazlaka.database import get_db
from fazlaka.dependencies.auth import get_current_user
from fazlaka.errors import ForbiddenError, NotFoundError, ValidationError
from fazlaka.models import User
from fazlaka.schemas.comment import CommentCreate, CommentListResponse, CommentResponse
from fazlaka.schemas.common import MessageResponse
from fazlaka.services.repositories import CommentRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=CommentListResponse)
def list_comments(
    episode_id: str | None = Query(None),
    article_id: str | None = Query(None),
    db: Session = Depends(get_db),
) -> dict:
    """Threads on one episode or article, each with its replies."""
    if bool(episode_id) == bool(article_id):
        raise ValidationError("Provide exactly one of episode_id or article_id")
    content_type, content_id = ("episode", episode_id) if episode_id else ("article", article_id)

    comments = CommentRepository(db)
    threads = comments.find_threads(content_type, content_id)
    replies_by_parent: dict[str, list] = {}
    for reply in comments.find_replies([thread.id for thread in threads]):
        replies_by_parent.setdefault(reply.parent_id, []).append(
            CommentResponse.model_validate(reply)
        )

    result = []
    for thread in threads:
        item = CommentResponse.model_validate(thread)
        item.replies = replies_by_parent.get(thread.id, [])
        result.append(item)
    return {"comments": result}


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content_type, content_id = data.target
    comments = CommentRepository(db)

    if data.parent_comment_id:
        parent = comments.find_by_id(data.parent_comment_id)
        if parent is None:
            raise NotFoundError("Parent comment not found")
        if (parent.content_type, parent.content_id) != (content_type, content_id):
            raise ValidationError("Reply must be on the same content as its parent")
        if parent.parent_id is not None:
            raise ValidationError("Replies cannot be nested")

    comment = comments.create(
        user_id=current_user.id,
        content_type=content_type,
        content_id=content_id,
        parent_id=data.parent_comment_id,
        name=current_user.name or current_user.email.split("@")[0],
        user_image_url=current_user.image,
        content=data.content.strip(),
    )
    db.commit()

    logger.info(f"Comment {comment.id} added on {content_type} {content_id}")
    return comment


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    """Delete one of the caller's comments together with its replies."""
    comments = CommentRepository(db)
    comment = comments.find_by_id(comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    if comment.user_id != current_user.id:
        raise ForbiddenError("You can only delete your own comments")

    removed = comments.delete_with_replies(comment.id)
    db.commit()

    logger.info(f"Deleted comment {comment_id} ({removed} rows)")
    return {"message": "Comment deleted"}
