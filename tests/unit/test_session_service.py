"""Tests for SessionService."""

from datetime import UTC, datetime, timedelta

import pytest

from fazlaka.errors import ForbiddenError, UnauthorizedError
from fazlaka.services.auth import AuthService, SessionClaims, SessionService
from fazlaka.services.google_oauth_client import GoogleProfile
from fazlaka.services.repositories import UserRepository


def _profile(email="g@x.com", subject="google-sub-1"):
    return GoogleProfile(
        subject=subject,
        email=email,
        name="Gina",
        picture="https://img/g.png",
        email_verified=True,
    )


def _claims_for(user) -> SessionClaims:
    return SessionClaims.from_payload(AuthService.decode_session_token(SessionService.issue(user)))


@pytest.fixture
def active_user(db_session):
    user = UserRepository(db_session).create(
        email="alice@x.com",
        name="Alice",
        password_hash=AuthService.hash_password("secret1"),
        is_active=True,
    )
    db_session.commit()
    return user


class TestCredentials:
    def test_valid_credentials(self, db_session, active_user):
        user = SessionService(db_session).authenticate_credentials("Alice@X.com", "secret1")
        assert user.id == active_user.id

    def test_wrong_password_and_unknown_email_look_the_same(self, db_session, active_user):
        service = SessionService(db_session)

        with pytest.raises(UnauthorizedError) as wrong_password:
            service.authenticate_credentials("alice@x.com", "nope")
        with pytest.raises(UnauthorizedError) as unknown_email:
            service.authenticate_credentials("nobody@x.com", "secret1")

        assert wrong_password.value.message == unknown_email.value.message

    def test_passwordless_account_cannot_use_credentials(self, db_session):
        UserRepository(db_session).create(email="oauth@x.com", is_active=True)
        db_session.commit()

        with pytest.raises(UnauthorizedError):
            SessionService(db_session).authenticate_credentials("oauth@x.com", "anything")

    def test_unverified_account_is_forbidden(self, db_session):
        UserRepository(db_session).create(
            email="pending@x.com",
            password_hash=AuthService.hash_password("secret1"),
            is_active=False,
        )
        db_session.commit()

        with pytest.raises(ForbiddenError) as exc:
            SessionService(db_session).authenticate_credentials("pending@x.com", "secret1")
        assert exc.value.message == "email_not_verified"


class TestOAuth:
    def test_first_sign_in_creates_active_user(self, db_session):
        user, created = SessionService(db_session).authenticate_oauth(_profile())
        db_session.commit()

        assert created is True
        assert user.is_active is True
        assert user.password_hash is None
        assert user.google_id == "google-sub-1"
        assert user.image == "https://img/g.png"

    def test_existing_email_is_reused(self, db_session, active_user):
        user, created = SessionService(db_session).authenticate_oauth(_profile(email="ALICE@x.com"))
        db_session.commit()

        assert created is False
        assert user.id == active_user.id
        assert user.google_id == "google-sub-1"
        # Claims come from the stored record
        claims = _claims_for(user)
        assert claims.name == "Alice"

    def test_pending_account_is_activated_without_its_password(self, db_session):
        pending = UserRepository(db_session).create(
            email="g@x.com",
            name="Squatter",
            password_hash=AuthService.hash_password("attacker1"),
            is_active=False,
        )
        db_session.commit()

        user, created = SessionService(db_session).authenticate_oauth(_profile())
        db_session.commit()

        assert created is False
        assert user.id == pending.id
        assert user.is_active is True
        assert user.password_hash is None
        assert user.google_id == "google-sub-1"


class TestRefreshProfileClaims:
    def test_refresh_overwrites_display_claims(self, db_session, active_user):
        claims = _claims_for(active_user)

        token = SessionService.refresh_profile_claims(
            claims, active_user.id, name="Alice B", image="https://img/new.png"
        )
        refreshed = SessionClaims.from_payload(AuthService.decode_session_token(token))

        assert refreshed.name == "Alice B"
        assert refreshed.image == "https://img/new.png"
        assert refreshed.email == "alice@x.com"

    def test_passed_none_overwrites_and_omitted_claims_are_kept(self, db_session, active_user):
        claims = SessionClaims.from_payload(
            AuthService.decode_session_token(
                SessionService.refresh_profile_claims(
                    _claims_for(active_user), active_user.id, image="https://img/old.png"
                )
            )
        )

        token = SessionService.refresh_profile_claims(claims, active_user.id, image=None)
        refreshed = SessionClaims.from_payload(AuthService.decode_session_token(token))

        assert refreshed.image is None
        assert refreshed.name == "Alice"
        assert refreshed.email == "alice@x.com"

    def test_unknown_claim_rejected(self, db_session, active_user):
        with pytest.raises(ValueError):
            SessionService.refresh_profile_claims(_claims_for(active_user), active_user.id, role="admin")

    def test_refresh_never_extends_session(self, db_session, active_user):
        expires_at = (datetime.now(UTC) + timedelta(hours=1)).replace(microsecond=0)
        token = AuthService.create_session_token(
            active_user.id, name="Alice", email="alice@x.com", image=None, expires_at=expires_at
        )
        claims = SessionClaims.from_payload(AuthService.decode_session_token(token))

        refreshed = SessionClaims.from_payload(
            AuthService.decode_session_token(
                SessionService.refresh_profile_claims(claims, active_user.id, name="New")
            )
        )

        assert refreshed.expires_at == expires_at
        assert refreshed.session_id == claims.session_id

    def test_refresh_for_another_user_is_forbidden(self, db_session, active_user):
        claims = _claims_for(active_user)

        with pytest.raises(ForbiddenError):
            SessionService.refresh_profile_claims(claims, "someone-else", name="x")


def test_materialize_copies_claims(db_session, active_user):
    claims = _claims_for(active_user)

    session = SessionService.materialize(claims)

    assert session["user"] == {
        "id": active_user.id,
        "name": "Alice",
        "email": "alice@x.com",
        "image": None,
    }
    assert session["expires"] == claims.expires_at
