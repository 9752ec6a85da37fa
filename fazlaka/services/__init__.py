"""Services layer - business logic and external integrations.

This module is organized into domain-based subpackages:
- auth/: Password hashing, proof artifacts, sessions and the account event trail
- repositories/: Data access layer

Common imports for convenience:
    from fazlaka.services import EmailService, NotificationService
    from fazlaka.services import UserRepository
"""

from fazlaka.services.email_service import EmailService
from fazlaka.services.notification_service import NotificationService
from fazlaka.services.repositories import (
    DuplicateError,
    NotFoundError,
    RepositoryError,
    UserRepository,
)

__all__ = [
    # Repositories
    "DuplicateError",
    "NotFoundError",
    "RepositoryError",
    "UserRepository",
    # Integrations
    "EmailService",
    "NotificationService",
]
