# src/blog_stage/services/accounts.py
"""Registration, login and profile management for account owners."""

from __future__ import annotations

import logging
import re

from blog_stage.core.errors import (
    DenialReason,
    EmailConflict,
    InvalidInput,
    NotFound,
    PermissionDenied,
    Unauthenticated,
    UpstreamUnavailable,
)
from blog_stage.core.security import decode_email_verification_token
from blog_stage.core.settings import Settings, settings
from blog_stage.db.time import utcnow
from blog_stage.repositories.document_repo import ACCOUNTS, DELETED_ACCOUNTS, DocumentRepository
from blog_stage.schemas.account import Account, Permissions, ProfileUpdate
from blog_stage.schemas.audit import ActivityAction
from blog_stage.schemas.auth import LoginRequest, RegisterRequest
from blog_stage.services.audit import AuditLogWriter
from blog_stage.services.identity import IdentityProvider, IdentityToken
from blog_stage.services.permissions import AuthSession

logger = logging.getLogger(__name__)


def new_account_document(token: IdentityToken, name: str = "", mobile: str = "") -> dict:
    """Account body with default permissions and no roles."""
    now = utcnow().isoformat()
    return {
        "email": token.email,
        "name": name,
        "mobile": mobile,
        "isAdmin": False,
        "isSuperAdmin": False,
        "emailVerified": token.verified,
        "permissions": Permissions().model_dump(by_alias=True),
        "createdAt": now,
        "lastLogin": now,
    }


class AccountService:
    """Self-service account operations backed by the identity provider."""

    def __init__(
        self,
        repo: DocumentRepository,
        audit: AuditLogWriter,
        identity: IdentityProvider,
        config: Settings = settings,
    ) -> None:
        self.repo = repo
        self.audit = audit
        self.identity = identity
        self.config = config

    def validate_mobile(self, mobile: str) -> None:
        if not re.fullmatch(self.config.mobile_number_pattern, mobile):
            raise InvalidInput("Mobile number must be exactly 10 digits")

    def register(self, data: RegisterRequest) -> Account:
        """Create an identity and its account document, then request verification."""
        if data.mobile:
            self.validate_mobile(data.mobile)
        if self.repo.find(ACCOUNTS, "email", data.email.lower()):
            raise EmailConflict(data.email)
        token = self.identity.register(data.email, data.password)
        self.identity.send_verification_email(token)

        body = new_account_document(token, name=data.name.strip(), mobile=data.mobile)
        self.repo.set(ACCOUNTS, token.uid, body)
        session = AuthSession(account_id=token.uid, email=token.email, name=body["name"])
        self.audit.record(session, ActivityAction.USER_REGISTRATION, {"email": token.email})
        logger.info("Registered account %s", token.email)
        return Account.from_document(token.uid, body)

    def login(self, data: LoginRequest) -> Account:
        """Authenticate and refresh the account document.

        Unverified emails and accounts that sit in the deleted set are refused.
        A missing account document is recreated with defaults. Failing to
        refresh the document does not fail the login.
        """
        token = self.identity.authenticate(data.email, data.password)
        if self.repo.exists(DELETED_ACCOUNTS, token.uid):
            raise PermissionDenied(DenialReason.ACCOUNT_DELETED)
        if not token.verified:
            raise PermissionDenied(DenialReason.EMAIL_NOT_VERIFIED)

        try:
            body = self._refresh_on_login(token)
        except UpstreamUnavailable:
            logger.exception("Could not refresh account %s on login", token.email)
            body = new_account_document(token)

        device = {"userAgent": data.user_agent or "", "platform": data.platform or ""}
        self.audit.record_login(token.uid, token.email, device)
        return Account.from_document(token.uid, body)

    def _refresh_on_login(self, token: IdentityToken) -> dict:
        fields = {"lastLogin": utcnow().isoformat(), "emailVerified": token.verified}
        body = self.repo.update(ACCOUNTS, token.uid, fields)
        if body is None:
            logger.warning("Account document missing for %s; recreating", token.email)
            body = new_account_document(token)
            self.repo.set(ACCOUNTS, token.uid, body)
        return body

    def verify_email(self, verification_token: str) -> None:
        """Complete email verification from the link sent at registration."""
        uid = decode_email_verification_token(verification_token)
        token = self.identity.mark_verified(uid)
        if token is None:
            raise NotFound("identity", uid)
        self.repo.update(ACCOUNTS, uid, {"emailVerified": True})
        logger.info("Verified email %s", token.email)

    def resolve_session(self, account_id: str) -> AuthSession:
        """Build the request session for a token subject."""
        data = self.repo.get(ACCOUNTS, account_id)
        if data is None:
            if self.repo.exists(DELETED_ACCOUNTS, account_id):
                raise PermissionDenied(DenialReason.ACCOUNT_DELETED)
            raise Unauthenticated("Account not found")
        return AuthSession.from_account(Account.from_document(account_id, data))

    def get_account(self, actor: AuthSession) -> Account:
        if actor.account_id is None:
            raise PermissionDenied(DenialReason.UNAUTHENTICATED)
        data = self.repo.get(ACCOUNTS, actor.account_id)
        if data is None:
            raise NotFound("account", actor.account_id)
        return Account.from_document(actor.account_id, data)

    def update_profile(self, actor: AuthSession, data: ProfileUpdate) -> Account:
        """Change display name and mobile number. Email cannot be changed."""
        if actor.account_id is None:
            raise PermissionDenied(DenialReason.UNAUTHENTICATED)
        self.validate_mobile(data.mobile)
        body = self.repo.update(
            ACCOUNTS,
            actor.account_id,
            {"name": data.name.strip(), "mobile": data.mobile},
        )
        if body is None:
            raise NotFound("account", actor.account_id)
        return Account.from_document(actor.account_id, body)

    def resend_verification(self, email: str, password: str) -> None:
        """Send another verification email. Requires the account's credentials."""
        token = self.identity.authenticate(email, password)
        if token.verified:
            raise InvalidInput("Email is already verified")
        self.identity.send_verification_email(token)

    def request_password_reset(self, email: str) -> None:
        """Hand the reset off to the identity provider.

        The response never reveals whether the email is registered.
        """
        self.identity.send_password_reset_email(email.strip().lower())
