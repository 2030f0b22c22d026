"""Tests for post and account lifecycle operations."""

from __future__ import annotations

import pytest

from blog_stage.core.errors import (
    DenialReason,
    EmailConflict,
    IdCollision,
    NotFound,
    PermissionDenied,
    ReauthenticationFailed,
    UpstreamUnavailable,
)
from blog_stage.repositories.document_repo import (
    ACCOUNTS,
    ACTIVITY_LOG,
    DELETED_ACCOUNTS,
    DELETED_POSTS,
    POSTS,
)
from blog_stage.schemas.account import Permissions
from blog_stage.schemas.auth import LoginRequest, RegisterRequest
from blog_stage.schemas.post import PostCreate, PostUpdate
from blog_stage.services.audit import AuditLogWriter
from blog_stage.services.lifecycle import DELETION_FIELDS, ContentLifecycleService
from tests.conftest import DEFAULT_PASSWORD, session_for


def _actions(repo) -> list[str]:
    return [data["action"] for _, data in repo.list_all(ACTIVITY_LOG)]


def _create(lifecycle, account, **kwargs):
    payload = PostCreate(title=kwargs.pop("title", "Hello"), content=kwargs.pop("content", "World"), **kwargs)
    return lifecycle.create_post(session_for(account), payload)


def test_create_post_records_owner_and_logs(lifecycle, repo, user) -> None:
    post = _create(lifecycle, user)

    stored = repo.get(POSTS, post.id)
    assert stored["author"] == "Regular Reader"
    assert stored["actualAuthor"] == user.email
    assert stored["authorEmail"] == user.email
    assert _actions(repo) == ["create_post"]


def test_anonymous_post_keeps_owner(lifecycle, repo, user) -> None:
    post = _create(lifecycle, user, is_anonymous=True)

    stored = repo.get(POSTS, post.id)
    assert stored["author"] == "Anonymous"
    assert stored["actualAuthor"] == user.email


def test_present_hides_owner_of_anonymous_post(lifecycle, user, other_user, super_admin) -> None:
    post = _create(lifecycle, user, is_anonymous=True)

    hidden = lifecycle.present(session_for(other_user), post)
    assert hidden.actual_author is None
    assert hidden.author_email is None
    assert lifecycle.present(session_for(super_admin), post).actual_author == user.email
    assert lifecycle.present(session_for(user), post).actual_author == user.email


@pytest.mark.parametrize("flags", [{}, {"is_admin": True}])
def test_suspended_accounts_cannot_touch_posts(lifecycle, repo, make_account, user, flags) -> None:
    suspended = make_account("banned@example.com", permissions=Permissions(suspended=True), **flags)
    own_post = _create(lifecycle, user)
    repo.update(POSTS, own_post.id, {"actualAuthor": suspended.email, "authorEmail": suspended.email})
    actor = session_for(suspended)

    with pytest.raises(PermissionDenied) as create_err:
        lifecycle.create_post(actor, PostCreate(title="t", content="c"))
    with pytest.raises(PermissionDenied) as edit_err:
        lifecycle.edit_post(actor, own_post.id, PostUpdate(title="new"))
    with pytest.raises(PermissionDenied) as delete_err:
        lifecycle.delete_post(actor, own_post.id)

    for err in (create_err, edit_err, delete_err):
        assert err.value.reason is DenialReason.SUSPENDED
    assert repo.get(POSTS, own_post.id)["title"] == "Hello"


def test_admin_edits_foreign_post_with_before_after(lifecycle, repo, admin, other_user) -> None:
    post = _create(lifecycle, other_user, title="Before", content="x" * 150)

    edited = lifecycle.edit_post(session_for(admin), post.id, PostUpdate(title="After"))

    assert edited.title == "After"
    assert edited.content == "x" * 150
    entry = [data for _, data in repo.list_all(ACTIVITY_LOG) if data["action"] == "edit_post"][0]
    assert entry["userEmail"] == admin.email
    changes = entry["details"]["changes"]
    assert changes["before"]["title"] == "Before"
    assert changes["after"]["title"] == "After"
    assert changes["before"]["content"] == "x" * 100 + "..."


def test_non_owner_cannot_edit(lifecycle, user, other_user) -> None:
    post = _create(lifecycle, other_user)
    with pytest.raises(PermissionDenied) as err:
        lifecycle.edit_post(session_for(user), post.id, PostUpdate(content="hijack"))
    assert err.value.reason is DenialReason.NOT_OWNER_OR_ADMIN


def test_owner_soft_deletes_post(lifecycle, repo, user) -> None:
    post = _create(lifecycle, user)

    lifecycle.delete_post(session_for(user), post.id, soft=True)

    assert repo.get(POSTS, post.id) is None
    archived = repo.get(DELETED_POSTS, post.id)
    assert archived["deletedByEmail"] == user.email
    assert archived["originalId"] == post.id
    entry = [data for _, data in repo.list_all(ACTIVITY_LOG) if data["action"] == "delete_post"][0]
    assert entry["details"]["softDelete"] is True


def test_hard_delete_leaves_no_copy(lifecycle, repo, user) -> None:
    post = _create(lifecycle, user)
    lifecycle.delete_post(session_for(user), post.id, soft=False)
    assert repo.get(POSTS, post.id) is None
    assert repo.get(DELETED_POSTS, post.id) is None


def test_delete_missing_post_is_not_found(lifecycle, user) -> None:
    with pytest.raises(NotFound):
        lifecycle.delete_post(session_for(user), "missing")


def test_soft_delete_then_restore_round_trips(lifecycle, repo, user, super_admin) -> None:
    post = _create(lifecycle, user, is_anonymous=True)
    before = repo.get(POSTS, post.id)

    lifecycle.delete_post(session_for(user), post.id)
    restored = lifecycle.restore_post(session_for(super_admin), post.id)

    assert restored.id == post.id
    assert repo.get(POSTS, post.id) == before
    assert repo.get(DELETED_POSTS, post.id) is None
    assert "restore_post" in _actions(repo)


def test_restore_requires_super_admin(lifecycle, user, admin) -> None:
    post = _create(lifecycle, user)
    lifecycle.delete_post(session_for(user), post.id)
    with pytest.raises(PermissionDenied) as err:
        lifecycle.restore_post(session_for(admin), post.id)
    assert err.value.reason is DenialReason.NOT_SUPER_ADMIN


def test_restore_refuses_to_overwrite_live_post(lifecycle, repo, user, super_admin) -> None:
    post = _create(lifecycle, user)
    lifecycle.delete_post(session_for(user), post.id)
    repo.set(POSTS, post.id, {"title": "Squatter", "content": "", "author": "x",
                             "authorEmail": "x", "actualAuthor": "x"})

    with pytest.raises(IdCollision):
        lifecycle.restore_post(session_for(super_admin), post.id)
    assert repo.get(DELETED_POSTS, post.id) is not None


def test_restore_finishes_after_interrupted_first_attempt(lifecycle, repo, user, super_admin) -> None:
    post = _create(lifecycle, user)
    lifecycle.delete_post(session_for(user), post.id)
    archived = repo.get(DELETED_POSTS, post.id)
    # Phase one of an earlier restore already copied the post back.
    repo.set(POSTS, post.id, {k: v for k, v in archived.items() if k not in DELETION_FIELDS})

    lifecycle.restore_post(session_for(super_admin), post.id)

    assert repo.get(DELETED_POSTS, post.id) is None
    assert repo.get(POSTS, post.id)["title"] == "Hello"


def test_purge_post_erases_archive(lifecycle, repo, user, super_admin) -> None:
    post = _create(lifecycle, user)
    lifecycle.delete_post(session_for(user), post.id)

    lifecycle.purge_post(session_for(super_admin), post.id)

    assert repo.get(DELETED_POSTS, post.id) is None
    assert "purge_post" in _actions(repo)


def test_list_posts_newest_first(lifecycle, repo, user) -> None:
    first = _create(lifecycle, user, title="first")
    second = _create(lifecycle, user, title="second")
    repo.update(POSTS, first.id, {"createdAt": "2024-01-01T00:00:00+00:00"})
    repo.update(POSTS, second.id, {"createdAt": "2024-06-01T00:00:00+00:00"})

    assert [post.title for post in lifecycle.list_posts()] == ["second", "first"]


def test_list_own_posts_includes_anonymous(lifecycle, user, other_user) -> None:
    _create(lifecycle, user, title="mine", is_anonymous=True)
    _create(lifecycle, other_user, title="theirs")

    assert [post.title for post in lifecycle.list_own_posts(session_for(user))] == ["mine"]


def test_super_admin_soft_deletes_account(lifecycle, repo, identity, user, super_admin) -> None:
    lifecycle.delete_account(session_for(super_admin), user.id)

    assert repo.get(ACCOUNTS, user.id) is None
    archived = repo.get(DELETED_ACCOUNTS, user.id)
    assert archived["deletedBy"] == super_admin.id
    assert "deletionReason" not in archived
    assert identity.lookup(user.id) is not None
    assert "delete_user" in _actions(repo)


def test_admin_cannot_delete_other_account(lifecycle, user, admin) -> None:
    with pytest.raises(PermissionDenied):
        lifecycle.delete_account(session_for(admin), user.id)


def test_self_delete_requires_password(lifecycle, repo, user) -> None:
    with pytest.raises(ReauthenticationFailed):
        lifecycle.self_delete_account(session_for(user), "wrong-password")
    assert repo.get(ACCOUNTS, user.id) is not None


def test_self_delete_archives_and_drops_credential(lifecycle, repo, identity, user) -> None:
    lifecycle.self_delete_account(session_for(user), DEFAULT_PASSWORD)

    assert repo.get(ACCOUNTS, user.id) is None
    assert repo.get(DELETED_ACCOUNTS, user.id)["deletionReason"] == "self_deletion"
    assert identity.lookup(user.id) is None
    assert "self_delete_account" in _actions(repo)


def test_restore_account_marks_verified(lifecycle, repo, user, super_admin) -> None:
    repo.update(ACCOUNTS, user.id, {"emailVerified": False})
    lifecycle.delete_account(session_for(super_admin), user.id)

    restored = lifecycle.restore_account(session_for(super_admin), user.id)

    assert restored.email_verified is True
    assert restored.restored_by == super_admin.id
    assert restored.created_at is not None
    live = repo.get(ACCOUNTS, user.id)
    assert not DELETION_FIELDS & live.keys()
    assert repo.get(DELETED_ACCOUNTS, user.id) is None
    assert "restore_user" in _actions(repo)


def test_restore_account_with_taken_email_conflicts(lifecycle, repo, user, super_admin) -> None:
    lifecycle.delete_account(session_for(super_admin), user.id)
    repo.set(ACCOUNTS, "newcomer", {"email": user.email, "name": "Newcomer"})
    live_before = repo.get(ACCOUNTS, "newcomer")
    archived_before = repo.get(DELETED_ACCOUNTS, user.id)

    with pytest.raises(EmailConflict):
        lifecycle.restore_account(session_for(super_admin), user.id)

    assert repo.get(ACCOUNTS, "newcomer") == live_before
    assert repo.get(DELETED_ACCOUNTS, user.id) == archived_before
    assert repo.get(ACCOUNTS, user.id) is None


def test_purge_account_removes_archive_and_identity(lifecycle, repo, identity, user, super_admin) -> None:
    lifecycle.delete_account(session_for(super_admin), user.id)

    lifecycle.purge_account(session_for(super_admin), user.id)

    assert repo.get(DELETED_ACCOUNTS, user.id) is None
    assert identity.lookup(user.id) is None
    assert "purge_user" in _actions(repo)


def test_deleted_listings_are_super_admin_only(lifecycle, user, admin, super_admin) -> None:
    post = _create(lifecycle, user)
    lifecycle.delete_post(session_for(user), post.id)

    assert [p.id for p in lifecycle.list_deleted_posts(session_for(super_admin))] == [post.id]
    with pytest.raises(PermissionDenied):
        lifecycle.list_deleted_accounts(session_for(admin))


class _InterruptedRepository:
    """Delegates to a real repository but fails one write on one collection."""

    def __init__(self, inner, method: str, collection: str) -> None:
        self.inner = inner
        self.method = method
        self.collection = collection

    def _guard(self, method: str, collection: str) -> None:
        if method == self.method and collection == self.collection:
            raise UpstreamUnavailable(f"{method} {collection}")

    def set(self, collection, doc_id, data):
        self._guard("set", collection)
        return self.inner.set(collection, doc_id, data)

    def delete(self, collection, doc_id):
        self._guard("delete", collection)
        return self.inner.delete(collection, doc_id)

    def __getattr__(self, name):
        return getattr(self.inner, name)


def _interrupted(repo, identity, method: str, collection: str) -> ContentLifecycleService:
    failing = _InterruptedRepository(repo, method, collection)
    return ContentLifecycleService(failing, AuditLogWriter(repo), identity)


def test_soft_delete_keeps_post_live_when_archive_write_fails(lifecycle, repo, identity, user) -> None:
    post = _create(lifecycle, user)

    with pytest.raises(UpstreamUnavailable):
        _interrupted(repo, identity, "set", DELETED_POSTS).delete_post(session_for(user), post.id, soft=True)

    assert repo.get(POSTS, post.id) is not None
    assert repo.get(DELETED_POSTS, post.id) is None
    assert "delete_post" not in _actions(repo)


def test_soft_delete_leaves_both_copies_when_source_delete_fails(lifecycle, repo, identity, user) -> None:
    post = _create(lifecycle, user)

    with pytest.raises(UpstreamUnavailable):
        _interrupted(repo, identity, "delete", POSTS).delete_post(session_for(user), post.id, soft=True)

    assert repo.get(POSTS, post.id) is not None
    assert repo.get(DELETED_POSTS, post.id)["originalId"] == post.id
    assert "delete_post" not in _actions(repo)


def test_restore_post_keeps_archive_when_live_write_fails(lifecycle, repo, identity, user, super_admin) -> None:
    post = _create(lifecycle, user)
    lifecycle.delete_post(session_for(user), post.id)

    with pytest.raises(UpstreamUnavailable):
        _interrupted(repo, identity, "set", POSTS).restore_post(session_for(super_admin), post.id)

    assert repo.get(POSTS, post.id) is None
    assert repo.get(DELETED_POSTS, post.id) is not None
    assert "restore_post" not in _actions(repo)


def test_restore_post_retry_after_archive_delete_fails(lifecycle, repo, identity, user, super_admin) -> None:
    post = _create(lifecycle, user)
    lifecycle.delete_post(session_for(user), post.id)

    with pytest.raises(UpstreamUnavailable):
        _interrupted(repo, identity, "delete", DELETED_POSTS).restore_post(session_for(super_admin), post.id)

    assert repo.get(POSTS, post.id) is not None
    assert repo.get(DELETED_POSTS, post.id) is not None
    assert "restore_post" not in _actions(repo)

    lifecycle.restore_post(session_for(super_admin), post.id)
    assert repo.get(DELETED_POSTS, post.id) is None
    assert _actions(repo).count("restore_post") == 1


def test_restore_account_keeps_archive_when_live_write_fails(lifecycle, repo, identity, user, super_admin) -> None:
    lifecycle.delete_account(session_for(super_admin), user.id)

    with pytest.raises(UpstreamUnavailable):
        _interrupted(repo, identity, "set", ACCOUNTS).restore_account(session_for(super_admin), user.id)

    assert repo.get(ACCOUNTS, user.id) is None
    assert repo.get(DELETED_ACCOUNTS, user.id) is not None
    assert "restore_user" not in _actions(repo)


def test_restore_account_leaves_both_copies_when_archive_delete_fails(
    lifecycle, repo, identity, user, super_admin
) -> None:
    lifecycle.delete_account(session_for(super_admin), user.id)

    with pytest.raises(UpstreamUnavailable):
        _interrupted(repo, identity, "delete", DELETED_ACCOUNTS).restore_account(session_for(super_admin), user.id)

    assert repo.get(ACCOUNTS, user.id)["emailVerified"] is True
    assert repo.get(DELETED_ACCOUNTS, user.id) is not None
    assert "restore_user" not in _actions(repo)


def test_restore_account_verifies_kept_credential(lifecycle, account_service, identity, super_admin) -> None:
    pending = account_service.register(RegisterRequest(email="pending@example.com", password="secret1"))
    lifecycle.delete_account(session_for(super_admin), pending.id)

    lifecycle.restore_account(session_for(super_admin), pending.id)

    assert identity.lookup(pending.id).verified is True
    account = account_service.login(LoginRequest(email="pending@example.com", password="secret1"))
    assert account.id == pending.id
