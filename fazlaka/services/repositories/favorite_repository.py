"""Favorite data access layer."""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from fazlaka.models import Favorite


class FavoriteRepository:
    """Centralized favorite data access."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find(self, user_id: str, content_type: str, content_id: str) -> Favorite | None:
        return (
            self._db.query(Favorite)
            .filter(
                Favorite.user_id == user_id,
                Favorite.content_type == content_type,
                Favorite.content_id == content_id,
            )
            .first()
        )

    def find_for_user(self, user_id: str, content_type: str | None = None) -> Sequence[Favorite]:
        query = self._db.query(Favorite).filter(Favorite.user_id == user_id)
        if content_type:
            query = query.filter(Favorite.content_type == content_type)
        return query.order_by(Favorite.created_at.desc()).all()

    def create(self, user_id: str, content_type: str, content_id: str) -> Favorite:
        favorite = Favorite(user_id=user_id, content_type=content_type, content_id=content_id)
        self._db.add(favorite)
        self._db.flush()
        return favorite

    def delete(self, favorite: Favorite) -> None:
        self._db.delete(favorite)
