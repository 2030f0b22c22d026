# src/blog_stage/services/lifecycle.py
"""Create, edit, delete, restore and purge posts and accounts.

Moves between a live collection and its deleted counterpart follow a two-phase
order: the additive write (copy into the destination) always completes before
the destructive write (removal from the source). A crash between the phases
leaves the record in both collections, never in neither. The archived copy
reuses the live document id, so repeating phase one rewrites the same document.
"""

from __future__ import annotations

import logging
from typing import Any

from blog_stage.core.errors import (
    EmailConflict,
    IdCollision,
    NotFound,
    ReauthenticationFailed,
)
from blog_stage.core.settings import Settings, settings
from blog_stage.db.time import utcnow
from blog_stage.repositories.document_repo import (
    ACCOUNTS,
    DELETED_ACCOUNTS,
    DELETED_POSTS,
    POSTS,
    DocumentRepository,
)
from blog_stage.schemas.account import Account, DeletedAccount
from blog_stage.schemas.audit import ActivityAction
from blog_stage.schemas.post import DeletedPost, Post, PostCreate, PostOut, PostUpdate
from blog_stage.services.audit import AuditLogWriter
from blog_stage.services.identity import IdentityProvider
from blog_stage.services.permissions import (
    AuthSession,
    MutationKind,
    can_create_post,
    can_delete_account,
    can_mutate_post,
    can_purge_content,
    can_restore_content,
    can_reveal_author,
    can_view_deleted_content,
)

logger = logging.getLogger(__name__)

# Bookkeeping added when a record is archived and dropped when it is restored.
DELETION_FIELDS = frozenset(
    {"originalId", "deletedBy", "deletedByEmail", "deletedAt", "deletionReason"}
)

SELF_DELETION_REASON = "self_deletion"


def strip_deletion_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in DELETION_FIELDS}


def _snippet(text: str, length: int) -> str:
    return text[:length] + "..." if len(text) > length else text


class ContentLifecycleService:
    """Lifecycle operations for posts and accounts, gated by the permission model."""

    def __init__(
        self,
        repo: DocumentRepository,
        audit: AuditLogWriter,
        identity: IdentityProvider | None = None,
        config: Settings = settings,
    ) -> None:
        self.repo = repo
        self.audit = audit
        self.identity = identity
        self.config = config

    def _load(self, collection: str, doc_id: str, entity: str) -> dict[str, Any]:
        data = self.repo.get(collection, doc_id)
        if data is None:
            raise NotFound(entity, doc_id)
        return data

    def _archive(self, actor: AuthSession, source: str, target: str, doc_id: str,
                 data: dict[str, Any], reason: str | None = None) -> None:
        """Copy into ``target`` with deletion bookkeeping, then drop from ``source``."""
        archived = {
            **data,
            "originalId": doc_id,
            "deletedBy": actor.account_id,
            "deletedByEmail": actor.email,
            "deletedAt": utcnow().isoformat(),
        }
        if reason is not None:
            archived["deletionReason"] = reason
        self.repo.set(target, doc_id, archived)
        self.repo.delete(source, doc_id)

    # Posts

    def get_post(self, post_id: str) -> Post:
        return Post.from_document(post_id, self._load(POSTS, post_id, "post"))

    def list_posts(self) -> list[Post]:
        """Return live posts, newest first."""
        posts = [Post.from_document(doc_id, data) for doc_id, data in self.repo.list_all(POSTS)]
        return sorted(posts, key=lambda post: post.created_at or utcnow(), reverse=True)

    def list_own_posts(self, actor: AuthSession) -> list[Post]:
        """Return the caller's live posts, including anonymous ones, newest first."""
        if not actor.authenticated or actor.email is None:
            return []
        rows = self.repo.find(POSTS, "actualAuthor", actor.email)
        posts = [Post.from_document(doc_id, data) for doc_id, data in rows]
        return sorted(posts, key=lambda post: post.created_at or utcnow(), reverse=True)

    def present(self, actor: AuthSession, post: Post) -> PostOut:
        """Shape a post for ``actor``, withholding the owner of anonymous posts."""
        reveal = can_reveal_author(actor, post)
        return PostOut(
            id=post.id,
            title=post.title,
            content=post.content,
            author=post.author,
            is_anonymous=post.is_anonymous,
            created_at=post.created_at,
            author_email=post.author_email if reveal else None,
            actual_author=post.actual_author if reveal else None,
        )

    def create_post(self, actor: AuthSession, data: PostCreate) -> Post:
        can_create_post(actor).require()
        author = self.config.anonymous_author_label if data.is_anonymous else actor.display_name
        body = {
            "title": data.title,
            "content": data.content,
            "author": author,
            "authorEmail": actor.email,
            "actualAuthor": actor.email,
            "isAnonymous": data.is_anonymous,
            "createdAt": utcnow().isoformat(),
        }
        post_id = self.repo.add(POSTS, body)
        self.audit.record(
            actor,
            ActivityAction.CREATE_POST,
            {"postId": post_id, "title": data.title, "isAnonymous": data.is_anonymous},
        )
        return Post.from_document(post_id, body)

    def edit_post(self, actor: AuthSession, post_id: str, patch: PostUpdate) -> Post:
        before = self.get_post(post_id)
        can_mutate_post(actor, before, MutationKind.EDIT).require()

        changes = patch.model_dump(exclude_none=True)
        updated = self.repo.update(POSTS, post_id, changes)
        if updated is None:
            raise NotFound("post", post_id)
        after = Post.from_document(post_id, updated)

        length = self.config.edit_log_snippet_length
        self.audit.record(
            actor,
            ActivityAction.EDIT_POST,
            {
                "postId": post_id,
                "title": after.title,
                "changes": {
                    "before": {"title": before.title, "content": _snippet(before.content, length)},
                    "after": {"title": after.title, "content": _snippet(after.content, length)},
                },
            },
        )
        return after

    def delete_post(self, actor: AuthSession, post_id: str, soft: bool = True) -> None:
        """Remove a live post, archiving it first when ``soft`` is set."""
        data = self._load(POSTS, post_id, "post")
        post = Post.from_document(post_id, data)
        can_mutate_post(actor, post, MutationKind.DELETE).require()

        if soft:
            self._archive(actor, POSTS, DELETED_POSTS, post_id, data)
        else:
            self.repo.delete(POSTS, post_id)

        self.audit.record(
            actor,
            ActivityAction.DELETE_POST,
            {
                "postId": post_id,
                "title": post.title,
                "author": post.actual_author,
                "softDelete": soft,
            },
        )

    def list_deleted_posts(self, actor: AuthSession) -> list[DeletedPost]:
        can_view_deleted_content(actor).require()
        posts = [
            DeletedPost.from_document(doc_id, data)
            for doc_id, data in self.repo.list_all(DELETED_POSTS)
        ]
        return sorted(posts, key=lambda post: post.deleted_at, reverse=True)

    def restore_post(self, actor: AuthSession, post_id: str) -> Post:
        """Move an archived post back to the live set under its original id."""
        can_restore_content(actor).require()
        archived = self._load(DELETED_POSTS, post_id, "deleted post")
        original_id = archived.get("originalId") or post_id
        live = strip_deletion_fields(archived)

        existing = self.repo.get(POSTS, original_id)
        if existing is not None and existing != live:
            raise IdCollision("post", original_id)
        if existing is None:
            self.repo.set(POSTS, original_id, live)
        self.repo.delete(DELETED_POSTS, post_id)

        self.audit.record(
            actor,
            ActivityAction.RESTORE_POST,
            {"postId": original_id, "title": live.get("title")},
        )
        return Post.from_document(original_id, live)

    def purge_post(self, actor: AuthSession, post_id: str) -> None:
        """Permanently erase an archived post."""
        can_purge_content(actor).require()
        archived = self._load(DELETED_POSTS, post_id, "deleted post")
        self.repo.delete(DELETED_POSTS, post_id)
        self.audit.record(
            actor,
            ActivityAction.PURGE_POST,
            {"postId": post_id, "title": archived.get("title")},
        )

    # Accounts

    def _reauthenticate(self, actor: AuthSession, password: str | None) -> None:
        if not password or self.identity is None or actor.account_id is None:
            raise ReauthenticationFailed()
        token = self.identity.lookup(actor.account_id)
        if token is None or not self.identity.reauthenticate(token, password):
            raise ReauthenticationFailed()

    def delete_account(
        self,
        actor: AuthSession,
        target_id: str,
        *,
        soft: bool = True,
        password: str | None = None,
    ) -> None:
        """Delete an account.

        A super-admin deleting someone else may choose ``soft``. Deleting your
        own account requires ``password``, always archives, and removes the
        identity-provider credential afterwards.
        """
        data = self._load(ACCOUNTS, target_id, "account")
        target = Account.from_document(target_id, data)
        can_delete_account(actor, target).require()

        if actor.account_id == target_id:
            self._self_delete(actor, target_id, data, password)
            return

        if soft:
            self._archive(actor, ACCOUNTS, DELETED_ACCOUNTS, target_id, data)
        else:
            self.repo.delete(ACCOUNTS, target_id)
        self.audit.record(
            actor,
            ActivityAction.DELETE_USER,
            {"targetUserId": target_id, "targetUserEmail": target.email, "softDelete": soft},
        )

    def self_delete_account(self, actor: AuthSession, password: str) -> None:
        if actor.account_id is None:
            raise ReauthenticationFailed()
        self.delete_account(actor, actor.account_id, password=password)

    def _self_delete(self, actor: AuthSession, account_id: str, data: dict[str, Any],
                     password: str | None) -> None:
        self._reauthenticate(actor, password)
        self._archive(actor, ACCOUNTS, DELETED_ACCOUNTS, account_id, data, SELF_DELETION_REASON)
        self.audit.record(actor, ActivityAction.SELF_DELETE_ACCOUNT, {"email": actor.email})

        if self.identity is not None:
            token = self.identity.lookup(account_id)
            if token is not None:
                self.identity.delete_identity(token)

    def list_deleted_accounts(self, actor: AuthSession) -> list[DeletedAccount]:
        can_view_deleted_content(actor).require()
        accounts = [
            DeletedAccount.from_document(doc_id, data)
            for doc_id, data in self.repo.list_all(DELETED_ACCOUNTS)
        ]
        return sorted(accounts, key=lambda account: account.deleted_at, reverse=True)

    def restore_account(self, actor: AuthSession, account_id: str) -> Account:
        """Move an archived account back to the live set.

        Refused with :class:`EmailConflict` while another live account holds
        the same email. The restored account is marked verified; if its
        credential was removed the user has to go through a password reset.
        """
        can_restore_content(actor).require()
        archived = self._load(DELETED_ACCOUNTS, account_id, "deleted account")
        original_id = archived.get("originalId") or account_id
        email = archived.get("email", "")

        if any(doc_id != original_id for doc_id, _ in self.repo.find(ACCOUNTS, "email", email)):
            raise EmailConflict(email)
        existing = self.repo.get(ACCOUNTS, original_id)
        if existing is not None and existing.get("email") != email:
            raise IdCollision("account", original_id)

        restored = {
            **strip_deletion_fields(archived),
            "name": archived.get("name") or "",
            "mobile": archived.get("mobile") or "",
            "createdAt": archived.get("createdAt") or utcnow().isoformat(),
            "restoredAt": utcnow().isoformat(),
            "restoredBy": actor.account_id,
            "emailVerified": True,
        }
        self.repo.set(ACCOUNTS, original_id, restored)
        self.repo.delete(DELETED_ACCOUNTS, account_id)

        if self.identity is not None and self.identity.mark_verified(original_id) is None:
            logger.warning(
                "Restored account %s has no credential; the user must reset their password",
                email,
            )
        self.audit.record(
            actor,
            ActivityAction.RESTORE_USER,
            {"userId": original_id, "email": email, "restoredBy": actor.email},
        )
        return Account.from_document(original_id, restored)

    def purge_account(self, actor: AuthSession, account_id: str) -> None:
        """Permanently erase an archived account and any leftover credential."""
        can_purge_content(actor).require()
        archived = self._load(DELETED_ACCOUNTS, account_id, "deleted account")
        self.repo.delete(DELETED_ACCOUNTS, account_id)

        original_id = archived.get("originalId") or account_id
        if self.identity is not None:
            token = self.identity.lookup(original_id)
            if token is not None:
                self.identity.delete_identity(token)
        self.audit.record(
            actor,
            ActivityAction.PURGE_USER,
            {"targetUserId": original_id, "targetUserEmail": archived.get("email")},
        )
