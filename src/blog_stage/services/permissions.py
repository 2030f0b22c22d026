# src/blog_stage/services/permissions.py
"""Authorization rules for posts, accounts, logs and support tickets.

Every rule is a pure function of the caller's :class:`AuthSession` and, where
relevant, the target resource. Rules return a :class:`Decision`; services call
``Decision.require()`` before touching the store so that a denied action never
leaves partial side effects.

Suspension is checked first for post creation and mutation and vetoes those
actions regardless of ownership or admin flags. Super-admin actions (restore,
purge, role changes) only look at the super-admin flag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from blog_stage.core.errors import DenialReason, PermissionDenied
from blog_stage.schemas.account import Account, Permissions
from blog_stage.schemas.post import Post


@dataclass(frozen=True)
class AuthSession:
    """The caller of an operation, resolved once per request.

    A guest session has no ``account_id``.
    """

    account_id: str | None = None
    email: str | None = None
    name: str = ""
    is_admin: bool = False
    is_super_admin: bool = False
    permissions: Permissions = field(default_factory=Permissions)
    email_verified: bool = False

    @classmethod
    def guest(cls) -> AuthSession:
        return cls()

    @classmethod
    def from_account(cls, account: Account) -> AuthSession:
        return cls(
            account_id=account.id,
            email=account.email,
            name=account.name,
            is_admin=account.is_admin,
            is_super_admin=account.is_super_admin,
            permissions=account.permissions,
            email_verified=account.email_verified,
        )

    @property
    def authenticated(self) -> bool:
        return self.account_id is not None

    @property
    def display_name(self) -> str:
        """Public author label: the account name, falling back to email."""
        return self.name or self.email or ""

    @property
    def is_staff(self) -> bool:
        """True for admins and super-admins."""
        return self.is_admin or self.is_super_admin

    @property
    def suspended(self) -> bool:
        return self.permissions.suspended


class MutationKind(StrEnum):
    EDIT = "edit"
    DELETE = "delete"


@dataclass(frozen=True)
class Decision:
    """Outcome of a permission check."""

    allowed: bool
    reason: DenialReason | None = None

    def __bool__(self) -> bool:
        return self.allowed

    def require(self) -> None:
        """Raise :class:`PermissionDenied` unless the action is allowed."""
        if not self.allowed:
            raise PermissionDenied(self.reason or DenialReason.MISSING_CAPABILITY)


ALLOWED = Decision(True)


def deny(reason: DenialReason) -> Decision:
    return Decision(False, reason)


def _super_admin_only(actor: AuthSession) -> Decision:
    return ALLOWED if actor.is_super_admin else deny(DenialReason.NOT_SUPER_ADMIN)


def _staff_only(actor: AuthSession) -> Decision:
    return ALLOWED if actor.is_staff else deny(DenialReason.NOT_ADMIN)


def can_create_post(actor: AuthSession) -> Decision:
    if not actor.authenticated:
        return deny(DenialReason.UNAUTHENTICATED)
    if actor.suspended:
        return deny(DenialReason.SUSPENDED)
    if not (actor.permissions.can_post or actor.is_staff):
        return deny(DenialReason.MISSING_CAPABILITY)
    return ALLOWED


def can_mutate_post(actor: AuthSession, post: Post, kind: MutationKind) -> Decision:
    """Edit/delete rule: suspension, then ownership, then capability."""
    if not actor.authenticated:
        return deny(DenialReason.UNAUTHENTICATED)
    if actor.suspended:
        return deny(DenialReason.SUSPENDED)
    if actor.email != post.actual_author and not actor.is_staff:
        return deny(DenialReason.NOT_OWNER_OR_ADMIN)
    capability = (
        actor.permissions.can_edit if kind is MutationKind.EDIT else actor.permissions.can_delete
    )
    if not (capability or actor.is_staff):
        return deny(DenialReason.MISSING_CAPABILITY)
    return ALLOWED


def can_restore_content(actor: AuthSession) -> Decision:
    return _super_admin_only(actor)


def can_purge_content(actor: AuthSession) -> Decision:
    return _super_admin_only(actor)


def can_view_deleted_content(actor: AuthSession) -> Decision:
    return _super_admin_only(actor)


def can_view_login_logs(actor: AuthSession) -> Decision:
    return _super_admin_only(actor)


def can_view_audit_logs(actor: AuthSession) -> Decision:
    return _staff_only(actor)


def can_edit_permissions(actor: AuthSession) -> Decision:
    return _staff_only(actor)


def can_manage_support_ticket(actor: AuthSession) -> Decision:
    return _staff_only(actor)


def can_list_accounts(actor: AuthSession) -> Decision:
    return _staff_only(actor)


def _guard_other_super_admin(actor: AuthSession, target: Account) -> Decision:
    if target.is_super_admin and target.id != actor.account_id:
        return deny(DenialReason.CANNOT_MODIFY_OTHER_SUPER_ADMIN)
    return ALLOWED


def can_toggle_admin(actor: AuthSession, target: Account) -> Decision:
    """Only super-admins change admin status, and never another super-admin's."""
    if not actor.is_super_admin:
        return deny(DenialReason.NOT_SUPER_ADMIN)
    return _guard_other_super_admin(actor, target)


def can_toggle_super_admin(actor: AuthSession, target: Account) -> Decision:
    """A super-admin may grant the role, or revoke only their own."""
    if not actor.is_super_admin:
        return deny(DenialReason.NOT_SUPER_ADMIN)
    return _guard_other_super_admin(actor, target)


def can_delete_account(actor: AuthSession, target: Account) -> Decision:
    """Super-admins delete any account; anyone may delete their own.

    Self-service deletion additionally requires re-authentication, enforced by
    the lifecycle service.
    """
    if not actor.authenticated:
        return deny(DenialReason.UNAUTHENTICATED)
    if actor.is_super_admin or actor.account_id == target.id:
        return ALLOWED
    return deny(DenialReason.NOT_SUPER_ADMIN)


def can_reveal_author(actor: AuthSession, post: Post) -> bool:
    """Whether ``actor`` may see the owner of an anonymous post."""
    if not post.is_anonymous:
        return True
    return actor.is_super_admin or (actor.authenticated and actor.email == post.actual_author)
