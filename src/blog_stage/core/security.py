"""Password hashing and access-token helpers."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from blog_stage.core.errors import Unauthenticated
from blog_stage.core.settings import settings

VERIFY_EMAIL_PURPOSE = "verify_email"


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=settings.password_salt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a value produced by :func:`hash_password`."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(subject: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create JWT access token for an identity."""
    to_encode: dict[str, object] = {"sub": subject}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def _decode(token: str) -> dict[str, object]:
    try:
        payload: dict[str, object] = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise Unauthenticated("Could not validate credentials") from err
    if not payload.get("sub"):
        raise Unauthenticated("Could not validate credentials")
    return payload


def decode_access_token(token: str) -> str:
    """Return the identity id carried by ``token``.

    Raises:
        Unauthenticated: If the token is malformed, expired, has no subject
            or was issued for another purpose.
    """
    payload = _decode(token)
    if payload.get("purpose") is not None:
        raise Unauthenticated("Could not validate credentials")
    return str(payload["sub"])


def create_email_verification_token(uid: str) -> str:
    """Create the token a verification email links back with."""
    return create_access_token(uid, {"purpose": VERIFY_EMAIL_PURPOSE})


def decode_email_verification_token(token: str) -> str:
    """Return the identity id of a verification token."""
    payload = _decode(token)
    if payload.get("purpose") != VERIFY_EMAIL_PURPOSE:
        raise Unauthenticated("Invalid verification token")
    return str(payload["sub"])
