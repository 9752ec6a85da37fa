"""Shared test fixtures."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fazlaka.database import Base, get_db
from fazlaka.main import app
from fazlaka.models import User
from fazlaka.rate_limiter import limiter


def _memory_engine():
    return create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_user(
    test_client: TestClient, email: str, password: str = "secret1", name: str = "Alice"
) -> str:
    """Register a user and return the raw verification token that was emailed."""
    with patch("fazlaka.routers.auth.EmailService.send_verification_email") as mock_send:
        response = test_client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
    assert response.status_code == 201
    return mock_send.call_args[0][1]


def register_and_verify_user(
    test_client: TestClient, email: str, password: str = "secret1", name: str = "Alice"
) -> dict:
    """Helper to register and verify a user, then login to get a session token."""
    token = register_user(test_client, email, password, name)
    response = test_client.get("/api/auth/verify-email", params={"token": token})
    assert response.status_code == 200

    response = test_client.post(
        "/api/auth/login",
        json={"email": email, "password": password},
    )
    assert response.status_code == 200
    return response.json()


def get_user(db_session_maker, email: str) -> User | None:
    db = db_session_maker()
    try:
        return db.query(User).filter(User.email == email).first()
    finally:
        db.close()


@pytest.fixture
def db_session():
    """Session bound to a fresh in-memory database."""
    engine = _memory_engine()
    Base.metadata.create_all(engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client():
    """Create test client with in-memory database.

    Yields a tuple of (TestClient, SessionMaker) for use in tests.
    """
    limiter.reset()

    engine = _memory_engine()
    Base.metadata.create_all(engine)

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client, testing_session_local

    app.dependency_overrides.clear()
    engine.dispose()
