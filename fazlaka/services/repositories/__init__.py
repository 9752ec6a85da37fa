"""Repository layer - data access abstraction.

Repositories handle all database queries, providing a clean interface
for services. Services should use repositories for data access rather
than directly querying SQLAlchemy models.

Dependency direction: Routers -> Services -> Repositories -> Models
"""

from .comment_repository import CommentRepository
from .exceptions import DuplicateError, NotFoundError, RepositoryError
from .favorite_repository import FavoriteRepository
from .notification_repository import NotificationRepository
from .user_repository import UserPatch, UserRepository

__all__ = [
    "CommentRepository",
    "DuplicateError",
    "FavoriteRepository",
    "NotificationRepository",
    "NotFoundError",
    "RepositoryError",
    "UserPatch",
    "UserRepository",
]
