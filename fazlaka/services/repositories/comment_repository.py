"""Comment data access layer."""

from collections.abc import Sequence

from sqlalchemy import delete
from sqlalchemy.orm import Session

from fazlaka.models import Comment


class CommentRepository:
    """Centralized comment data access."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, comment_id: str) -> Comment | None:
        return self._db.query(Comment).filter(Comment.id == comment_id).first()

    def find_threads(self, content_type: str, content_id: str) -> Sequence[Comment]:
        """Top-level comments on a piece of content, newest first."""
        return (
            self._db.query(Comment)
            .filter(
                Comment.content_type == content_type,
                Comment.content_id == content_id,
                Comment.parent_id.is_(None),
            )
            .order_by(Comment.created_at.desc())
            .all()
        )

    def find_replies(self, parent_ids: list[str]) -> Sequence[Comment]:
        """Replies to any of the given comments, oldest first."""
        if not parent_ids:
            return []
        return (
            self._db.query(Comment)
            .filter(Comment.parent_id.in_(parent_ids))
            .order_by(Comment.created_at.asc())
            .all()
        )

    def create(self, **fields) -> Comment:
        comment = Comment(**fields)
        self._db.add(comment)
        self._db.flush()
        return comment

    def delete_with_replies(self, comment_id: str) -> int:
        """Delete a comment and its direct replies. Returns rows removed."""
        replies = self._db.execute(
            delete(Comment)
            .where(Comment.parent_id == comment_id)
            .execution_options(synchronize_session=False)
        ).rowcount
        self._db.execute(
            delete(Comment)
            .where(Comment.id == comment_id)
            .execution_options(synchronize_session=False)
        )
        return replies + 1
