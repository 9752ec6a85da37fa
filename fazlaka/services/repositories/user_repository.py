"""User data access layer."""

import logging
from typing import Any, Self

from sqlalchemy import ColumnElement, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from fazlaka.models import User

from .exceptions import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class UserPatch:
    """Partial update of one user row.

    ``set`` and ``unset`` compose into a single UPDATE statement. ``when``
    adds guard conditions; if they no longer hold at execution time the row
    is left untouched and ``execute`` returns False.
    """

    def __init__(self, db: Session, user_id: str) -> None:
        self._db = db
        self._user_id = user_id
        self._values: dict[str, Any] = {}
        self._criteria: list[ColumnElement[bool]] = []

    def set(self, **fields: Any) -> Self:
        self._values.update(fields)
        return self

    def unset(self, *fields: str) -> Self:
        for field in fields:
            self._values[field] = None
        return self

    def when(self, *criteria: ColumnElement[bool]) -> Self:
        self._criteria.extend(criteria)
        return self

    def execute(self) -> bool:
        """Run the UPDATE. Returns True if the row was modified."""
        if not self._values:
            return True

        # Pending ORM changes would be discarded by the expire below
        self._db.flush()

        stmt = (
            update(User)
            .where(User.id == self._user_id, *self._criteria)
            .values(**self._values)
            .execution_options(synchronize_session=False)
        )
        result = self._db.execute(stmt)

        # Loaded instance must not keep serving pre-update values
        instance = self._db.identity_map.get(identity_key(User, self._user_id))
        if instance is not None:
            self._db.expire(instance)

        return result.rowcount == 1


class UserRepository:
    """Centralized user data access.

    Naming conventions:
    - find_* : Query that may return None
    - get_* : Query that raises exception if missing

    Nothing here commits; the caller owns the transaction (``create``
    rolls back on a duplicate email).
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, user_id: str) -> User | None:
        """Find user by primary key."""
        return self._db.query(User).filter(User.id == user_id).first()

    def get_by_id(self, user_id: str) -> User:
        """Get user by primary key or raise NotFoundError."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def find_by_email(self, email: str) -> User | None:
        """Find user by email (case-insensitive, exact match)."""
        return (
            self._db.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def find_active_by_email(self, email: str) -> User | None:
        """Find active user by email."""
        user = self.find_by_email(email)
        return user if user is not None and user.is_active else None

    def email_taken(self, email: str, exclude_user_id: str | None = None) -> bool:
        """Whether another account already uses this email."""
        user = self.find_by_email(email)
        return user is not None and user.id != exclude_user_id

    def fetch(self, *criteria: ColumnElement[bool]) -> User | None:
        """First user matching bound criteria."""
        return self._db.query(User).filter(*criteria).first()

    def create(self, **fields: Any) -> User:
        """Insert a user; the primary key is assigned here and the email lowercased.

        Raises:
            DuplicateError: If the email is already registered. The session
                is rolled back in that case.
        """
        if fields.get("email"):
            fields["email"] = fields["email"].strip().lower()
        user = User(**fields)
        self._db.add(user)
        try:
            self._db.flush()
        except IntegrityError as e:
            self._db.rollback()
            logger.warning(f"Duplicate user insert rejected for {fields.get('email')}")
            raise DuplicateError("User", "email", fields.get("email", "")) from e
        return user

    def patch(self, user_id: str) -> UserPatch:
        """Start a partial update of a user row."""
        return UserPatch(self._db, user_id)

    def delete(self, user_id: str) -> None:
        """Delete a user by primary key."""
        user = self.get_by_id(user_id)
        self._db.delete(user)
