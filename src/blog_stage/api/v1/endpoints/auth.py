# src/blog_stage/api/v1/endpoints/auth.py
"""Authentication endpoints for the Blog Stage API."""

from fastapi import APIRouter, status

from blog_stage.api.v1.dependencies import AccountServiceDep
from blog_stage.core.security import create_access_token
from blog_stage.schemas.account import Account
from blog_stage.schemas.auth import (
    CredentialsRequest,
    LoginRequest,
    LoginResponse,
    PasswordResetRequest,
    RegisterRequest,
    VerifyEmailRequest,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=Account, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, accounts: AccountServiceDep) -> Account:
    """Create an account and send a verification email."""
    return accounts.register(payload)


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, accounts: AccountServiceDep) -> LoginResponse:
    """Authenticate with email and password and issue a bearer token."""
    account = accounts.login(payload)
    return LoginResponse(
        access_token=create_access_token(account.id),
        account_id=account.id,
        email_verified=account.email_verified,
    )


@router.post("/verify")
async def verify_email(payload: VerifyEmailRequest, accounts: AccountServiceDep) -> dict[str, str]:
    """Confirm an email address with the token from the verification email."""
    accounts.verify_email(payload.token)
    return {"status": "verified"}


@router.post("/resend-verification", status_code=status.HTTP_202_ACCEPTED)
async def resend_verification(payload: CredentialsRequest, accounts: AccountServiceDep) -> dict[str, str]:
    accounts.resend_verification(payload.email, payload.password)
    return {"status": "sent"}


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
async def request_password_reset(payload: PasswordResetRequest, accounts: AccountServiceDep) -> dict[str, str]:
    """Request a password reset email. Always succeeds for well-formed emails."""
    accounts.request_password_reset(payload.email)
    return {"status": "sent"}
