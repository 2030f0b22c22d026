"""Account-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from blog_stage.schemas.common import CamelModel, DocumentModel


class Permissions(CamelModel):
    """Capability block attached to every account."""

    can_read: bool = True
    can_post: bool = True
    can_edit: bool = True
    can_delete: bool = True
    suspended: bool = False


class Account(DocumentModel):
    """Application-side profile and role flags for an identity."""

    email: str
    name: str = ""
    mobile: str = ""
    is_admin: bool = False
    is_super_admin: bool = False
    email_verified: bool = False
    permissions: Permissions = Field(default_factory=Permissions)
    created_at: datetime | None = None
    last_login: datetime | None = None
    restored_at: datetime | None = None
    restored_by: str | None = None

    @property
    def display_name_or_email(self) -> str:
        """Return the public author label for non-anonymous posts."""
        return self.name or self.email


class DeletedAccount(Account):
    """An account archived in the deleted-accounts collection."""

    original_id: str
    deleted_by: str
    deleted_by_email: str
    deleted_at: datetime
    deletion_reason: str | None = None


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own account. Email is immutable."""

    name: str = Field(..., max_length=100)
    mobile: str


class SuperAdminUpdate(CamelModel):
    """Request body for setting super-admin status."""

    value: bool | None = Field(None, description="Target status; omitted means toggle")
    master_password: str | None = Field(None, description="Bootstrap override secret")


class GrantAdminRequest(CamelModel):
    """Grant admin status to the account registered with ``email``."""

    email: str = Field(..., min_length=3)
