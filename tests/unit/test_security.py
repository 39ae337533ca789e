import pytest
from jose import jwt

from app.core.auth import create_access_token, decode_access_token
from app.core.config import get_settings
from app.core.errors import UnauthorizedError
from app.core.security import (
    check_password,
    generate_order_number,
    generate_otp,
    hash_password,
)
from app.models.user import User


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert check_password("s3cret-pass", hashed)
    assert not check_password("wrong", hashed)


def test_check_password_with_garbage_hash():
    assert check_password("anything", "not-a-bcrypt-hash") is False


def test_otp_is_six_digits():
    for _ in range(20):
        otp = generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()


def test_order_numbers_are_prefixed_and_distinct():
    first, second = generate_order_number(), generate_order_number()
    assert first.startswith("ORD-")
    assert first != second


def test_access_token_claims():
    user = User(
        id=42,
        first_name="A",
        last_name="B",
        email="a@example.com",
        password_hash="x",
        role="teacher",
    )
    token = create_access_token(user)

    claims = decode_access_token(token)
    assert claims["user_id"] == "42"
    assert claims["role"] == "teacher"
    assert "exp" in claims


def test_token_signed_with_other_secret_is_rejected():
    settings = get_settings()
    forged = jwt.encode({"user_id": "1", "role": "admin"}, "other", algorithm=settings.JWT_ALG)

    with pytest.raises(UnauthorizedError):
        decode_access_token(forged)
