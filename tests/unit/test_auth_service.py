from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import InternalError, ValidationError
from app.models.user import User
from app.repositories.password_reset_repo import PasswordResetRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user import ForgotPasswordRequest, VerifyOtpRequest
from app.services.auth_service import AuthService


@pytest.fixture()
def service():
    return AuthService(UserRepository(), PasswordResetRepository())


@pytest.fixture()
def unverified(session):
    user = User(
        first_name="Grace",
        last_name="Hopper",
        email="grace@example.com",
        password_hash="x",
        otp="123456",
        otp_expires_at=datetime.now(timezone.utc) + timedelta(minutes=5),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def test_verify_otp_compares_in_constant_time(session, service, unverified, monkeypatch):
    calls = []

    def _compare(a, b):
        calls.append((a, b))
        return a == b

    monkeypatch.setattr("app.services.auth_service.secrets.compare_digest", _compare)

    with pytest.raises(ValidationError):
        service.verify_otp(session, VerifyOtpRequest(email=unverified.email, otp="654321"))

    assert calls == [("123456", "654321")]
    session.refresh(unverified)
    assert unverified.is_active is False


def test_verify_otp_activates_account(session, service, unverified):
    service.verify_otp(session, VerifyOtpRequest(email=unverified.email, otp="123456"))

    session.refresh(unverified)
    assert unverified.is_active is True
    assert unverified.otp is None


def test_email_failure_is_internal_error(session, service, unverified, monkeypatch):
    def _broken(*args, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr("app.services.auth_service.send_password_reset_email", _broken)

    with pytest.raises(InternalError) as exc:
        service.forgot_password(session, ForgotPasswordRequest(email=unverified.email))

    assert exc.value.status_code == 500
    assert exc.value.detail == "failed to send reset password email"
