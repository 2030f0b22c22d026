# src/blog_stage/services/admin.py
"""Role and permission administration."""

from __future__ import annotations

import hmac
import logging
from typing import Any

from blog_stage.core.errors import DenialReason, InvalidInput, NotFound, PermissionDenied
from blog_stage.core.settings import Settings, settings
from blog_stage.repositories.document_repo import ACCOUNTS, DocumentRepository
from blog_stage.schemas.account import Account, Permissions
from blog_stage.schemas.audit import ActivityAction
from blog_stage.services.audit import AuditLogWriter
from blog_stage.services.permissions import (
    AuthSession,
    can_edit_permissions,
    can_list_accounts,
    can_toggle_admin,
    can_toggle_super_admin,
)

logger = logging.getLogger(__name__)


class PromotionMethod:
    BY_SUPER_ADMIN = "by_super_admin"
    BY_MASTER_PASSWORD = "by_master_password"
    BOOTSTRAP = "bootstrap"


class RoleAdministrationService:
    """Promotion, demotion and permission grants.

    Every change writes an activity entry naming the target and the
    before/after values. Requests that would not change anything return the
    current account and write nothing.
    """

    def __init__(
        self,
        repo: DocumentRepository,
        audit: AuditLogWriter,
        config: Settings = settings,
    ) -> None:
        self.repo = repo
        self.audit = audit
        self.config = config

    def get_account(self, account_id: str) -> Account:
        data = self.repo.get(ACCOUNTS, account_id)
        if data is None:
            raise NotFound("account", account_id)
        return Account.from_document(account_id, data)

    def list_accounts(self, actor: AuthSession) -> list[Account]:
        can_list_accounts(actor).require()
        return [Account.from_document(doc_id, data) for doc_id, data in self.repo.list_all(ACCOUNTS)]

    def super_admin_exists(self) -> bool:
        return any(data.get("isSuperAdmin") for _, data in self.repo.list_all(ACCOUNTS))

    def _save(self, account_id: str, fields: dict[str, Any]) -> Account:
        merged = self.repo.update(ACCOUNTS, account_id, fields)
        if merged is None:
            raise NotFound("account", account_id)
        return Account.from_document(account_id, merged)

    def toggle_admin_status(self, actor: AuthSession, target_id: str) -> Account:
        """Flip the target's admin flag."""
        target = self.get_account(target_id)
        can_toggle_admin(actor, target).require()
        new_value = not target.is_admin
        if target.is_super_admin and not new_value:
            raise InvalidInput("Revoke super admin status before removing admin status")
        return self._set_admin(actor, target, new_value)

    def grant_admin_by_email(self, actor: AuthSession, email: str) -> Account:
        """Make the account registered with ``email`` an admin."""
        matches = self.repo.find(ACCOUNTS, "email", email.strip().lower())
        if not matches:
            raise NotFound("account", email)
        doc_id, data = matches[0]
        target = Account.from_document(doc_id, data)
        can_toggle_admin(actor, target).require()
        if target.is_admin:
            return target
        return self._set_admin(actor, target, True)

    def _set_admin(self, actor: AuthSession, target: Account, value: bool) -> Account:
        updated = self._save(target.id, {"isAdmin": value})
        self.audit.record(
            actor,
            ActivityAction.TOGGLE_ADMIN_STATUS,
            {
                "targetUserId": target.id,
                "targetUserEmail": target.email,
                "previousStatus": target.is_admin,
                "newStatus": value,
            },
        )
        logger.info("Admin status of %s set to %s by %s", target.email, value, actor.email)
        return updated

    def _master_password_matches(self, candidate: str | None) -> bool:
        secret = self.config.super_admin_master_password
        if not secret or not candidate:
            return False
        return hmac.compare_digest(secret.encode("utf-8"), candidate.encode("utf-8"))

    def _authorize_super_admin_change(
        self,
        actor: AuthSession,
        target: Account,
        value: bool,
        master_password: str | None,
    ) -> str:
        decision = can_toggle_super_admin(actor, target)
        if decision:
            return PromotionMethod.BY_SUPER_ADMIN
        if master_password is None or actor.is_super_admin:
            decision.require()

        # Master password: promotion of the caller's own account only, and
        # while no super-admin exists unless bootstrap-only mode is off.
        if not self.config.master_password_enabled:
            raise PermissionDenied(DenialReason.NOT_SUPER_ADMIN)
        if not value or actor.account_id != target.id:
            raise PermissionDenied(DenialReason.NOT_SUPER_ADMIN)
        if self.config.master_password_bootstrap_only and self.super_admin_exists():
            raise PermissionDenied(
                DenialReason.NOT_SUPER_ADMIN,
                "The master password is disabled once a super admin exists",
            )
        if not self._master_password_matches(master_password):
            logger.warning("Rejected master password attempt by %s", actor.email)
            raise PermissionDenied(DenialReason.NOT_SUPER_ADMIN, "Invalid master password")
        return PromotionMethod.BY_MASTER_PASSWORD

    def set_super_admin_status(
        self,
        actor: AuthSession,
        target_id: str,
        value: bool | None = None,
        master_password: str | None = None,
    ) -> Account:
        """Set (or, with ``value=None``, flip) the target's super-admin flag.

        Promotion always sets ``isAdmin`` as well. Revocation leaves admin
        status alone.
        """
        target = self.get_account(target_id)
        new_value = (not target.is_super_admin) if value is None else value
        method = self._authorize_super_admin_change(actor, target, new_value, master_password)
        if new_value == target.is_super_admin and (not new_value or target.is_admin):
            return target

        fields: dict[str, Any] = {"isSuperAdmin": new_value}
        if new_value:
            fields["isAdmin"] = True
        updated = self._save(target_id, fields)
        self.audit.record(
            actor,
            ActivityAction.SET_SUPER_ADMIN_STATUS,
            {
                "targetUserId": target_id,
                "targetUserEmail": target.email,
                "previousStatus": target.is_super_admin,
                "newStatus": new_value,
                "method": method,
            },
        )
        logger.info("Super admin status of %s set to %s (%s)", target.email, new_value, method)
        return updated

    def toggle_super_admin_status(self, actor: AuthSession, target_id: str) -> Account:
        return self.set_super_admin_status(actor, target_id)

    def update_permissions(
        self,
        actor: AuthSession,
        target_id: str,
        permissions: Permissions,
    ) -> Account:
        """Replace the target's permission block wholesale."""
        can_edit_permissions(actor).require()
        target = self.get_account(target_id)
        before = target.permissions.model_dump(by_alias=True)
        after = permissions.model_dump(by_alias=True)
        updated = self._save(target_id, {"permissions": after})
        self.audit.record(
            actor,
            ActivityAction.UPDATE_PERMISSIONS,
            {
                "targetUserId": target_id,
                "targetUserEmail": target.email,
                "previousPermissions": before,
                "newPermissions": after,
                "changes": {
                    key: {"from": before.get(key), "to": value}
                    for key, value in after.items()
                    if before.get(key) != value
                },
            },
        )
        return updated

    def bootstrap_first_super_admin(self, actor: AuthSession) -> Account:
        """Promote ``actor`` when no account is a super-admin yet.

        Safe to call repeatedly: once any super-admin exists the caller's
        account is returned unchanged and nothing is logged.
        """
        if not actor.authenticated or actor.account_id is None:
            raise PermissionDenied(DenialReason.UNAUTHENTICATED)
        account = self.get_account(actor.account_id)
        if self.super_admin_exists():
            return account

        updated = self._save(account.id, {"isAdmin": True, "isSuperAdmin": True})
        self.audit.record(
            actor,
            ActivityAction.SET_SUPER_ADMIN_STATUS,
            {
                "targetUserId": account.id,
                "targetUserEmail": account.email,
                "previousStatus": False,
                "newStatus": True,
                "method": PromotionMethod.BOOTSTRAP,
            },
        )
        logger.info("Bootstrapped %s as the first super admin", account.email)
        return updated
