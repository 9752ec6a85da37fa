"""Database configuration and session management."""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fazlaka.config import settings


# Base class for ORM models
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


def _engine_options(url: str) -> dict:
    """Per-dialect engine options."""
    if url.startswith("sqlite"):
        # SQLite connections are shared with the threadpool FastAPI runs sync routes in
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 3600,
        "isolation_level": "READ COMMITTED",
    }


engine = create_engine(settings.database_url, echo=False, **_engine_options(settings.database_url))

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Prevent lazy loading errors after commit
)


# Dependency for FastAPI routes
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Yields:
        Session: SQLAlchemy database session

    Example:
        @router.get("/notifications")
        def list_notifications(db: Session = Depends(get_db)):
            return NotificationRepository(db).find_for_user(user_id)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
