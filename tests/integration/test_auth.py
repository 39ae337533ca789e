from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from app.models.user import PasswordResetToken, User

API = "/api/v1"

REGISTRATION = {
    "first_name": "Grace",
    "last_name": "Hopper",
    "email": "Grace@Example.com",
    "password": "cobol-rules",
    "confirm_password": "cobol-rules",
}


@pytest.fixture()
def sent_otps(monkeypatch):
    sent: list[tuple[str, str]] = []

    def _fake_send(to_email, first_name, otp, ttl_minutes):
        sent.append((to_email, otp))

    monkeypatch.setattr("app.services.auth_service.send_otp_email", _fake_send)
    return sent


def register(client):
    res = client.post(f"{API}/auth/register", json=REGISTRATION)
    assert res.status_code == 201, res.text
    return res


def test_register_creates_inactive_student_and_sends_otp(client, session, sent_otps):
    register(client)

    user = session.exec(select(User).where(User.email == "grace@example.com")).one()
    assert user.role == "student"
    assert user.is_active is False
    assert user.password_hash != REGISTRATION["password"]
    assert sent_otps == [("grace@example.com", user.otp)]
    assert len(user.otp) == 6


def test_register_duplicate_email(client, sent_otps):
    register(client)

    res = client.post(f"{API}/auth/register", json=REGISTRATION)

    assert res.status_code == 409
    assert res.json() == {"err": "email already registered"}


def test_register_password_mismatch(client, sent_otps):
    res = client.post(
        f"{API}/auth/register",
        json={**REGISTRATION, "confirm_password": "something-else"},
    )

    assert res.status_code == 400
    assert "passwords do not match" in res.json()["err"]
    assert sent_otps == []


def test_register_email_failure_returns_500(client, session, monkeypatch):
    def _broken(*args, **kwargs):
        raise RuntimeError("SMTP is not configured correctly.")

    monkeypatch.setattr("app.services.auth_service.send_otp_email", _broken)

    res = client.post(f"{API}/auth/register", json=REGISTRATION)

    assert res.status_code == 500
    assert res.json() == {"err": "failed to send verification email"}
    # account kept so the user can request a new code later
    assert session.exec(select(User)).one().email == "grace@example.com"


def test_verify_then_login(client, session, sent_otps):
    register(client)
    _, otp = sent_otps[0]

    res = client.post(f"{API}/auth/verify-otp", json={"email": "grace@example.com", "otp": otp})
    assert res.status_code == 200

    res = client.post(
        f"{API}/auth/login",
        json={"email": "grace@example.com", "password": "cobol-rules"},
    )
    assert res.status_code == 200
    token = res.json()["access_token"]

    me = client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "grace@example.com"
    assert me.json()["last_login"] is not None


def test_verify_wrong_otp(client, session, sent_otps):
    register(client)
    _, otp = sent_otps[0]
    wrong = "000000" if otp != "000000" else "111111"

    res = client.post(f"{API}/auth/verify-otp", json={"email": "grace@example.com", "otp": wrong})

    assert res.status_code == 400
    assert res.json() == {"err": "invalid OTP"}


def test_verify_expired_otp(client, session, sent_otps):
    register(client)
    user = session.exec(select(User)).one()
    user.otp_expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    session.add(user)
    session.commit()

    res = client.post(
        f"{API}/auth/verify-otp",
        json={"email": "grace@example.com", "otp": user.otp},
    )

    assert res.status_code == 400
    assert res.json() == {"err": "OTP has expired"}


def test_verify_unknown_user(client):
    res = client.post(f"{API}/auth/verify-otp", json={"email": "nobody@example.com", "otp": "123456"})

    assert res.status_code == 404


def test_regenerate_only_after_expiry(client, session, sent_otps):
    register(client)

    res = client.post(f"{API}/auth/regenerate-otp", json={"email": "grace@example.com"})
    assert res.status_code == 400
    assert res.json() == {"err": "OTP has not expired yet"}

    user = session.exec(select(User)).one()
    user.otp_expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    session.add(user)
    session.commit()

    res = client.post(f"{API}/auth/regenerate-otp", json={"email": "grace@example.com"})
    assert res.status_code == 200
    assert len(sent_otps) == 2


def test_login_wrong_password(client, student):
    res = client.post(f"{API}/auth/login", json={"email": student.email, "password": "nope"})

    assert res.status_code == 401
    assert res.json() == {"err": "invalid email or password"}


def test_login_unverified_account(client, make_user):
    pending = make_user("student", is_active=False)

    res = client.post(f"{API}/auth/login", json={"email": pending.email, "password": "password123"})

    assert res.status_code == 403


def test_admin_changes_role(client, session, student, admin, headers_for):
    res = client.patch(
        f"{API}/users/{student.id}/role",
        json={"role": "teacher"},
        headers=headers_for(admin),
    )

    assert res.status_code == 200
    assert res.json()["role"] == "teacher"

    denied = client.get(f"{API}/users", headers=headers_for(student))
    assert denied.status_code == 403


@pytest.fixture()
def sent_reset_links(monkeypatch):
    sent: list[tuple[str, str]] = []

    def _fake_send(to_email, first_name, reset_link, ttl_minutes):
        sent.append((to_email, reset_link))

    monkeypatch.setattr("app.services.auth_service.send_password_reset_email", _fake_send)
    return sent


def request_reset(client, user, sent_reset_links) -> str:
    res = client.post(f"{API}/auth/forgot-password", json={"email": user.email})
    assert res.status_code == 200, res.text
    _, link = sent_reset_links[-1]
    return link.split("token=", 1)[1]


def test_forgot_password_mails_link_with_stored_token(client, session, student, sent_reset_links):
    token = request_reset(client, student, sent_reset_links)

    stored = session.exec(select(PasswordResetToken)).one()
    assert stored.user_id == student.id
    assert stored.token == token
    assert sent_reset_links[0][0] == student.email


def test_forgot_password_unknown_email(client, sent_reset_links):
    res = client.post(f"{API}/auth/forgot-password", json={"email": "nobody@example.com"})

    assert res.status_code == 404
    assert sent_reset_links == []


def test_forgot_password_replaces_previous_token(client, session, student, sent_reset_links):
    first = request_reset(client, student, sent_reset_links)
    second = request_reset(client, student, sent_reset_links)

    assert first != second
    assert [t.token for t in session.exec(select(PasswordResetToken)).all()] == [second]


def test_reset_password_changes_login_and_consumes_token(client, session, student, sent_reset_links):
    token = request_reset(client, student, sent_reset_links)
    body = {"token": token, "new_password": "brand-new-pass", "confirm_password": "brand-new-pass"}

    res = client.post(f"{API}/auth/reset-password", json=body)
    assert res.status_code == 200
    assert res.json() == {"message": "password reset successful"}

    old = client.post(f"{API}/auth/login", json={"email": student.email, "password": "password123"})
    assert old.status_code == 401
    new = client.post(f"{API}/auth/login", json={"email": student.email, "password": "brand-new-pass"})
    assert new.status_code == 200

    again = client.post(f"{API}/auth/reset-password", json=body)
    assert again.status_code == 404
    assert again.json() == {"err": "invalid or expired reset token"}


def test_reset_password_expired_token(client, session, student, sent_reset_links):
    token = request_reset(client, student, sent_reset_links)
    stored = session.exec(select(PasswordResetToken)).one()
    stored.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    session.add(stored)
    session.commit()

    res = client.post(
        f"{API}/auth/reset-password",
        json={"token": token, "new_password": "brand-new-pass", "confirm_password": "brand-new-pass"},
    )

    assert res.status_code == 400
    assert res.json() == {"err": "reset token has expired"}
    assert session.exec(select(PasswordResetToken)).all() == []


def test_reset_password_mismatch(client, student, sent_reset_links):
    token = request_reset(client, student, sent_reset_links)

    res = client.post(
        f"{API}/auth/reset-password",
        json={"token": token, "new_password": "brand-new-pass", "confirm_password": "other-pass-1"},
    )

    assert res.status_code == 400
    assert "passwords do not match" in res.json()["err"]


def test_forgot_password_email_failure(client, student, monkeypatch):
    def _broken(*args, **kwargs):
        raise RuntimeError("SMTP is not configured correctly.")

    monkeypatch.setattr("app.services.auth_service.send_password_reset_email", _broken)

    res = client.post(f"{API}/auth/forgot-password", json={"email": student.email})

    assert res.status_code == 500
    assert res.json() == {"err": "failed to send reset password email"}
