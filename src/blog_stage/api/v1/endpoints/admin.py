# src/blog_stage/api/v1/endpoints/admin.py
"""Administration endpoints: roles, permissions, deleted content and logs.

Every route checks the caller's role inside the service layer, so a denied
request fails before anything is written.
"""

from fastapi import APIRouter, Query, Response, status

from blog_stage.api.v1.dependencies import (
    AdminServiceDep,
    AuditDep,
    CurrentSessionDep,
    LifecycleServiceDep,
)
from blog_stage.schemas.account import (
    Account,
    DeletedAccount,
    GrantAdminRequest,
    Permissions,
    SuperAdminUpdate,
)
from blog_stage.schemas.audit import ActivityAction, ActivityLogEntry, LoginLogEntry
from blog_stage.schemas.post import DeletedPost, Post

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/accounts", response_model=list[Account])
async def list_accounts(session: CurrentSessionDep, admin: AdminServiceDep) -> list[Account]:
    return admin.list_accounts(session)


@router.post("/accounts/grant-admin", response_model=Account)
async def grant_admin(
    payload: GrantAdminRequest,
    session: CurrentSessionDep,
    admin: AdminServiceDep,
) -> Account:
    """Make an existing account an admin by email."""
    return admin.grant_admin_by_email(session, payload.email)


@router.post("/accounts/{account_id}/toggle-admin", response_model=Account)
async def toggle_admin(account_id: str, session: CurrentSessionDep, admin: AdminServiceDep) -> Account:
    return admin.toggle_admin_status(session, account_id)


@router.put("/accounts/{account_id}/super-admin", response_model=Account)
async def set_super_admin(
    account_id: str,
    payload: SuperAdminUpdate,
    session: CurrentSessionDep,
    admin: AdminServiceDep,
) -> Account:
    """Grant or revoke super-admin status.

    Omitting ``value`` flips the current status. ``masterPassword`` lets a
    caller promote themselves when a master password is configured.
    """
    return admin.set_super_admin_status(
        session,
        account_id,
        value=payload.value,
        master_password=payload.master_password,
    )


@router.put("/accounts/{account_id}/permissions", response_model=Account)
async def update_permissions(
    account_id: str,
    payload: Permissions,
    session: CurrentSessionDep,
    admin: AdminServiceDep,
) -> Account:
    return admin.update_permissions(session, account_id, payload)


@router.post("/bootstrap", response_model=Account)
async def bootstrap_super_admin(session: CurrentSessionDep, admin: AdminServiceDep) -> Account:
    """Promote the caller if no super admin exists yet. Safe to repeat."""
    return admin.bootstrap_first_super_admin(session)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    account_id: str,
    session: CurrentSessionDep,
    lifecycle: LifecycleServiceDep,
    soft: bool = Query(True, description="Keep a restorable copy in deleted accounts"),
) -> Response:
    lifecycle.delete_account(session, account_id, soft=soft)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/deleted-accounts", response_model=list[DeletedAccount])
async def list_deleted_accounts(session: CurrentSessionDep, lifecycle: LifecycleServiceDep) -> list[DeletedAccount]:
    return lifecycle.list_deleted_accounts(session)


@router.post("/deleted-accounts/{account_id}/restore", response_model=Account)
async def restore_account(account_id: str, session: CurrentSessionDep, lifecycle: LifecycleServiceDep) -> Account:
    return lifecycle.restore_account(session, account_id)


@router.delete("/deleted-accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def purge_account(account_id: str, session: CurrentSessionDep, lifecycle: LifecycleServiceDep) -> Response:
    lifecycle.purge_account(session, account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/deleted-posts", response_model=list[DeletedPost])
async def list_deleted_posts(session: CurrentSessionDep, lifecycle: LifecycleServiceDep) -> list[DeletedPost]:
    return lifecycle.list_deleted_posts(session)


@router.post("/deleted-posts/{post_id}/restore", response_model=Post)
async def restore_post(post_id: str, session: CurrentSessionDep, lifecycle: LifecycleServiceDep) -> Post:
    return lifecycle.restore_post(session, post_id)


@router.delete("/deleted-posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def purge_post(post_id: str, session: CurrentSessionDep, lifecycle: LifecycleServiceDep) -> Response:
    lifecycle.purge_post(session, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/activity", response_model=list[ActivityLogEntry])
async def list_activity(
    session: CurrentSessionDep,
    audit: AuditDep,
    action: ActivityAction | None = Query(None, description="Only entries with this action"),
) -> list[ActivityLogEntry]:
    return audit.list_activity(session, action)


@router.get("/logins", response_model=list[LoginLogEntry])
async def list_logins(session: CurrentSessionDep, audit: AuditDep) -> list[LoginLogEntry]:
    return audit.list_logins(session)
