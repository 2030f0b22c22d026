# src/blog_stage/services/identity.py
"""Identity provider interface and the bundled local implementation.

The application only needs the operations declared on :class:`IdentityProvider`.
Production deployments can plug in a managed provider; the local provider keeps
credentials in the ``identity`` table and hands emails off to the log.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blog_stage.core.errors import EmailConflict, Unauthenticated, UpstreamUnavailable
from blog_stage.core.security import create_email_verification_token, hash_password, verify_password
from blog_stage.models.identity import Identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityToken:
    """A verified or unverified identity issued by the provider."""

    uid: str
    email: str
    verified: bool


class IdentityProvider(Protocol):
    def authenticate(self, email: str, password: str) -> IdentityToken: ...

    def register(self, email: str, password: str) -> IdentityToken: ...

    def lookup(self, uid: str) -> IdentityToken | None: ...

    def mark_verified(self, uid: str) -> IdentityToken | None: ...

    def send_verification_email(self, identity: IdentityToken) -> None: ...

    def send_password_reset_email(self, email: str) -> None: ...

    def reauthenticate(self, identity: IdentityToken, password: str) -> bool: ...

    def delete_identity(self, identity: IdentityToken) -> None: ...


def _token(row: Identity) -> IdentityToken:
    return IdentityToken(uid=row.uid, email=row.email, verified=row.verified)


class LocalIdentityProvider:
    """Email/password identities stored alongside the documents."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _by_email(self, email: str) -> Identity | None:
        try:
            return self.session.execute(
                select(Identity).where(Identity.email == email.lower())
            ).scalar_one_or_none()
        except SQLAlchemyError as err:
            logger.error("Identity lookup failed: %s", err)
            raise UpstreamUnavailable("identity lookup") from err

    def authenticate(self, email: str, password: str) -> IdentityToken:
        row = self._by_email(email)
        if row is None or not verify_password(password, row.password_hash):
            raise Unauthenticated("Invalid email or password")
        return _token(row)

    def register(self, email: str, password: str) -> IdentityToken:
        if self._by_email(email) is not None:
            raise EmailConflict(email)
        row = Identity(
            uid=uuid.uuid4().hex,
            email=email.lower(),
            password_hash=hash_password(password),
            verified=False,
        )
        try:
            self.session.add(row)
            self.session.commit()
        except IntegrityError as err:
            self.session.rollback()
            raise EmailConflict(email) from err
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error("Identity registration failed: %s", err)
            raise UpstreamUnavailable("identity register") from err
        return _token(row)

    def lookup(self, uid: str) -> IdentityToken | None:
        try:
            row = self.session.get(Identity, uid)
        except SQLAlchemyError as err:
            logger.error("Identity lookup failed: %s", err)
            raise UpstreamUnavailable("identity lookup") from err
        return _token(row) if row is not None else None

    def mark_verified(self, uid: str) -> IdentityToken | None:
        """Confirm ownership of the email (the verification-link callback)."""
        try:
            row = self.session.get(Identity, uid)
            if row is not None and not row.verified:
                row.verified = True
                self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error("Identity verification failed: %s", err)
            raise UpstreamUnavailable("identity verify") from err
        return _token(row) if row is not None else None

    def send_verification_email(self, identity: IdentityToken) -> None:
        logger.info("Verification email requested for %s", identity.email)
        logger.debug("Verification token for %s: %s", identity.email, create_email_verification_token(identity.uid))

    def send_password_reset_email(self, email: str) -> None:
        logger.info("Password reset email requested for %s", email)

    def reauthenticate(self, identity: IdentityToken, password: str) -> bool:
        row = self.session.get(Identity, identity.uid)
        return row is not None and verify_password(password, row.password_hash)

    def delete_identity(self, identity: IdentityToken) -> None:
        try:
            row = self.session.get(Identity, identity.uid)
            if row is not None:
                self.session.delete(row)
                self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error("Identity deletion failed: %s", err)
            raise UpstreamUnavailable("identity delete") from err
