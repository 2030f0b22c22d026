"""Authentication request and response schemas."""
from __future__ import annotations

from pydantic import EmailStr, Field

from blog_stage.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field("", max_length=100)
    mobile: str = ""


class LoginRequest(CamelModel):
    email: EmailStr
    password: str
    user_agent: str | None = Field(None, description="Client user agent for the login log")
    platform: str | None = Field(None, description="Client platform for the login log")


class LoginResponse(CamelModel):
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    account_id: str
    email_verified: bool


class PasswordResetRequest(CamelModel):
    email: EmailStr


class CredentialsRequest(CamelModel):
    """Email and password, for actions taken before a session exists."""

    email: EmailStr
    password: str


class VerifyEmailRequest(CamelModel):
    token: str = Field(..., min_length=1, description="Token from the verification email")


class ReauthenticateRequest(CamelModel):
    """Current password, required before destructive self-service actions."""

    password: str = Field(..., min_length=1)
