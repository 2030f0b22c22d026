# src/blog_stage/api/v1/endpoints/users.py
"""Self-service account endpoints."""

from fastapi import APIRouter, Response, status

from blog_stage.api.v1.dependencies import (
    AccountServiceDep,
    CurrentSessionDep,
    LifecycleServiceDep,
)
from blog_stage.schemas.account import Account, ProfileUpdate
from blog_stage.schemas.auth import ReauthenticateRequest

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=Account)
async def get_me(session: CurrentSessionDep, accounts: AccountServiceDep) -> Account:
    return accounts.get_account(session)


@router.patch("/me", response_model=Account)
async def update_me(
    payload: ProfileUpdate,
    session: CurrentSessionDep,
    accounts: AccountServiceDep,
) -> Account:
    """Update display name and mobile number."""
    return accounts.update_profile(session, payload)


@router.post("/me/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    payload: ReauthenticateRequest,
    session: CurrentSessionDep,
    lifecycle: LifecycleServiceDep,
) -> Response:
    """Delete the caller's own account after confirming their password.

    The account is archived and can be restored by a super admin; the login
    credential is removed.
    """
    lifecycle.self_delete_account(session, payload.password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
