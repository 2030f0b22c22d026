"""Activity and login log schemas."""
from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from blog_stage.schemas.common import DocumentModel


class ActivityAction(StrEnum):
    USER_REGISTRATION = "user_registration"
    CREATE_POST = "create_post"
    EDIT_POST = "edit_post"
    DELETE_POST = "delete_post"
    RESTORE_POST = "restore_post"
    PURGE_POST = "purge_post"
    UPDATE_PERMISSIONS = "update_permissions"
    TOGGLE_ADMIN_STATUS = "toggle_admin_status"
    SET_SUPER_ADMIN_STATUS = "set_super_admin_status"
    DELETE_USER = "delete_user"
    RESTORE_USER = "restore_user"
    PURGE_USER = "purge_user"
    SELF_DELETE_ACCOUNT = "self_delete_account"


class ActivityLogEntry(DocumentModel):
    user_id: str | None
    user_email: str | None
    timestamp: datetime
    action: ActivityAction
    details: dict[str, Any] = Field(default_factory=dict)


class LoginLogEntry(DocumentModel):
    user_id: str
    email: str
    timestamp: datetime
    action: str = "login"
    device_info: dict[str, Any] = Field(default_factory=dict)
