"""Tests for password hashing and token helpers."""

import pytest

from blog_stage.core.errors import Unauthenticated
from blog_stage.core.security import (
    create_access_token,
    create_email_verification_token,
    decode_access_token,
    decode_email_verification_token,
    hash_password,
    verify_password,
)


def test_hash_password_uses_bcrypt() -> None:
    hashed = hash_password("correct-horse")

    assert hashed != "correct-horse"
    assert hashed.startswith("$2")
    assert hash_password("correct-horse") != hashed


def test_verify_password() -> None:
    hashed = hash_password("correct-horse")

    assert verify_password("correct-horse", hashed) is True
    assert verify_password("battery-staple", hashed) is False


def test_verify_password_malformed_hash() -> None:
    assert verify_password("correct-horse", "pbkdf2_sha256$1000$salt$digest") is False
    assert verify_password("correct-horse", "") is False


def test_token_purposes_do_not_mix() -> None:
    assert decode_access_token(create_access_token("uid-1")) == "uid-1"
    assert decode_email_verification_token(create_email_verification_token("uid-1")) == "uid-1"

    with pytest.raises(Unauthenticated):
        decode_access_token(create_email_verification_token("uid-1"))
    with pytest.raises(Unauthenticated):
        decode_email_verification_token(create_access_token("uid-1"))
