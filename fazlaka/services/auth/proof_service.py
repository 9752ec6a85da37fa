"""Issuing and consuming proof artifacts.

Every way of proving control of an account (verification link, reset link,
magic link, one-time passcode, email-change code) is a *proof family*
stored on the user row as a (digest, expiry) pair. A family moves through
``absent -> issued -> consumed | expired``:

- ``issue`` overwrites whatever proof of the same family was pending.
- ``verify`` looks the proof up through bound parameters, and consumes it
  with one conditional UPDATE that only matches while the digest is still
  stored and unexpired. Of two concurrent attempts with the same value at
  most one succeeds.
- An expired proof is reported but left in place; only a new issue or a
  successful consume changes the row.

Callers translate ``EXPIRED`` and ``INVALID`` into the same API error.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.orm import Session

from fazlaka.config import settings
from fazlaka.models import User
from fazlaka.services.repositories import UserRepository

from .auth_service import AuthService

logger = logging.getLogger(__name__)


class ProofKind(StrEnum):
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"
    MAGIC_LINK = "magic_link"
    OTP = "otp"
    EMAIL_CHANGE = "email_change"


class OtpPurpose(StrEnum):
    """What a verified OTP is allowed to authorize."""

    LOGIN = "login"
    REGISTER = "register"
    RESET = "reset"
    VERIFY = "verify"
    CHANGE_PASSWORD = "change-password"


class ProofOutcome(StrEnum):
    CONSUMED = "consumed"
    EXPIRED = "expired"
    INVALID = "invalid"


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def generate_token() -> str:
    return str(uuid4())


def generate_code() -> str:
    """Six-digit numeric code in 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


@dataclass(frozen=True)
class ProofFamily:
    value_field: str
    expiry_field: str
    ttl: Callable[[], timedelta]
    generate: Callable[[], str]
    extra_fields: tuple[str, ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        """Every column cleared when the proof is consumed."""
        return (self.value_field, self.expiry_field, *self.extra_fields)


PROOF_FAMILIES: dict[ProofKind, ProofFamily] = {
    ProofKind.EMAIL_VERIFICATION: ProofFamily(
        value_field="verification_token_hash",
        expiry_field="verification_token_expiry",
        ttl=lambda: timedelta(hours=settings.email_verification_ttl_hours),
        generate=generate_token,
    ),
    ProofKind.PASSWORD_RESET: ProofFamily(
        value_field="reset_token_hash",
        expiry_field="reset_token_expiry",
        ttl=lambda: timedelta(hours=settings.password_reset_ttl_hours),
        generate=generate_token,
    ),
    ProofKind.MAGIC_LINK: ProofFamily(
        value_field="magic_token_hash",
        expiry_field="magic_token_expiry",
        ttl=lambda: timedelta(hours=settings.magic_link_ttl_hours),
        generate=generate_token,
    ),
    ProofKind.OTP: ProofFamily(
        value_field="otp_code_hash",
        expiry_field="otp_expiry",
        ttl=lambda: timedelta(minutes=settings.otp_ttl_minutes),
        generate=generate_code,
        extra_fields=("otp_purpose",),
    ),
    ProofKind.EMAIL_CHANGE: ProofFamily(
        value_field="email_change_code_hash",
        expiry_field="email_change_code_expiry",
        ttl=lambda: timedelta(minutes=settings.email_change_ttl_minutes),
        generate=generate_code,
        extra_fields=("new_email",),
    ),
}


@dataclass
class ProofResult:
    outcome: ProofOutcome
    user: User | None = field(default=None)

    @property
    def consumed(self) -> bool:
        return self.outcome is ProofOutcome.CONSUMED


class ProofService:
    """Issue and verify proofs for any ``ProofKind``. The caller commits."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self._users = UserRepository(db)

    def issue(self, kind: ProofKind, user: User, *, now: datetime | None = None, **extra: Any) -> str:
        """Attach a fresh proof to the user and return its raw value.

        ``extra`` carries the family's companion fields (``otp_purpose`` for
        OTPs, ``new_email`` for email changes).
        """
        family = PROOF_FAMILIES[kind]
        unexpected = set(extra) - set(family.extra_fields)
        if unexpected:
            raise ValueError(f"{kind} proofs do not carry {sorted(unexpected)}")

        value = family.generate()
        issued_at = now or utcnow()
        self._users.patch(user.id).set(
            **{
                family.value_field: AuthService.hash_token(value),
                family.expiry_field: issued_at + family.ttl(),
            },
            **extra,
        ).execute()

        logger.info(f"Issued {kind} proof for user {user.id}")
        return value

    def verify(
        self,
        kind: ProofKind,
        value: str | None,
        *,
        email: str | None = None,
        purpose: OtpPurpose | None = None,
        new_email: str | None = None,
        changes: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> ProofResult:
        """Consume a proof, applying ``changes`` in the same UPDATE.

        The optional ``email`` / ``purpose`` / ``new_email`` narrow the lookup;
        a proof bound to a different purpose or address is ``INVALID``.
        """
        if not value or not value.strip():
            return ProofResult(ProofOutcome.INVALID)

        family = PROOF_FAMILIES[kind]
        digest = AuthService.hash_token(value.strip())

        criteria = [getattr(User, family.value_field) == digest]
        if email is not None:
            criteria.append(func.lower(User.email) == email.strip().lower())
        if purpose is not None:
            criteria.append(User.otp_purpose == OtpPurpose(purpose).value)
        if new_email is not None:
            criteria.append(func.lower(User.new_email) == new_email.strip().lower())

        user = self._users.fetch(*criteria)
        if user is None:
            return ProofResult(ProofOutcome.INVALID)

        checked_at = now or utcnow()
        expiry = getattr(user, family.expiry_field)
        if expiry is None or as_utc(expiry) <= checked_at:
            logger.info(f"Rejected expired {kind} proof for user {user.id}")
            return ProofResult(ProofOutcome.EXPIRED)

        if not self.consume(kind, user.id, digest, changes=changes, now=checked_at):
            logger.warning(f"Lost race consuming {kind} proof for user {user.id}")
            return ProofResult(ProofOutcome.INVALID)

        logger.info(f"Consumed {kind} proof for user {user.id}")
        return ProofResult(ProofOutcome.CONSUMED, user)

    def consume(
        self,
        kind: ProofKind,
        user_id: str,
        digest: str,
        *,
        changes: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> bool:
        """Clear the family and apply ``changes`` only if ``digest`` is still live."""
        family = PROOF_FAMILIES[kind]
        checked_at = now or utcnow()
        return (
            self._users.patch(user_id)
            .set(**(changes or {}))
            .unset(*family.fields)
            .when(
                getattr(User, family.value_field) == digest,
                getattr(User, family.expiry_field) > checked_at,
            )
            .execute()
        )

    @staticmethod
    def otp_verified_marker(now: datetime | None = None) -> dict[str, Any]:
        """Field values granting the short-lived ``otp_verified`` marker."""
        granted_at = now or utcnow()
        return {
            "otp_verified": True,
            "otp_verified_expiry": granted_at + timedelta(minutes=settings.otp_verified_ttl_minutes),
        }

    def consume_otp_verified(
        self,
        user_id: str,
        *,
        changes: dict[str, Any],
        now: datetime | None = None,
    ) -> bool:
        """Spend the ``otp_verified`` marker, applying ``changes`` atomically."""
        checked_at = now or utcnow()
        return (
            self._users.patch(user_id)
            .set(**changes)
            .set(otp_verified=False)
            .unset("otp_verified_expiry")
            .when(User.otp_verified.is_(True), User.otp_verified_expiry > checked_at)
            .execute()
        )
