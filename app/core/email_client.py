# app/core/email_client.py
"""
Email client utilities for LearnHub.

Responsibilities:
  - Read SMTP configuration from environment variables.
  - Provide a single send_email(...) function for services to use.
  - Support both TLS (STARTTLS) and SSL connections.

Typical .env configuration:

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=no-reply@learnhub.dev
    SMTP_PASSWORD=<app password>
    SMTP_FROM_NAME=LearnHub
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true
"""
from __future__ import annotations

import logging
import os
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)


def _get_bool_env(name: str, default: bool = False) -> bool:
    """
    Read a boolean env var; "1", "true", "yes", "y" are truthy.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


# ---------------------------------------------------------------------------
# Configuration: read once at import time
# ---------------------------------------------------------------------------

SMTP_HOST: str | None = os.getenv("SMTP_HOST")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))

SMTP_USERNAME: str | None = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")

SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", SMTP_USERNAME or "")
SMTP_FROM_NAME: str = os.getenv("SMTP_FROM_NAME", "LearnHub")

SMTP_USE_TLS: bool = _get_bool_env("SMTP_USE_TLS", default=True)
SMTP_USE_SSL: bool = _get_bool_env("SMTP_USE_SSL", default=False)


def _create_smtp_client() -> smtplib.SMTP:
    """
    SMTP_SSL when SMTP_USE_SSL is set (port 465), otherwise plain SMTP
    upgraded with STARTTLS when SMTP_USE_TLS is set (port 587).
    """
    if SMTP_USE_SSL:
        server: smtplib.SMTP = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
        if SMTP_USE_TLS:
            server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send an email to a single recipient.

    Raises
    ------
    RuntimeError:
        If required SMTP configuration is missing.
    smtplib.SMTPException:
        If the underlying SMTP connection or send fails.
    """
    if not (SMTP_HOST and SMTP_USERNAME and SMTP_PASSWORD):
        raise RuntimeError(
            "SMTP is not configured correctly. "
            "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
        )

    msg = EmailMessage()
    msg["From"] = (
        f"{SMTP_FROM_NAME} <{SMTP_FROM_EMAIL}>" if SMTP_FROM_EMAIL else SMTP_USERNAME
    )
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    server = _create_smtp_client()
    try:
        server.login(SMTP_USERNAME, SMTP_PASSWORD)
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            logger.debug("SMTP quit failed; connection already closed")

    logger.info("Email '%s' sent to %s", subject, to_email)


def send_otp_email(to_email: str, first_name: str, otp: str, ttl_minutes: int) -> None:
    """Account verification code email."""
    send_email(
        to_email=to_email,
        subject="[LearnHub] Your verification code",
        text_body=(
            f"Hi {first_name},\n\n"
            f"Your verification code is {otp}. "
            f"It expires in {ttl_minutes} minutes.\n"
        ),
        html_body=(
            f"<p>Hi {first_name},</p>"
            f"<p>Your verification code is <strong>{otp}</strong>.</p>"
            f"<p>It expires in {ttl_minutes} minutes.</p>"
        ),
    )


def send_password_reset_email(
    to_email: str, first_name: str, reset_link: str, ttl_minutes: int
) -> None:
    send_email(
        to_email=to_email,
        subject="[LearnHub] Reset your password",
        text_body=(
            f"Hi {first_name},\n\n"
            f"Use this link to choose a new password: {reset_link}\n"
            f"The link expires in {ttl_minutes} minutes. "
            "If you did not ask for a reset, ignore this email.\n"
        ),
        html_body=(
            f"<p>Hi {first_name},</p>"
            f'<p><a href="{reset_link}">Choose a new password</a></p>'
            f"<p>The link expires in {ttl_minutes} minutes. "
            "If you did not ask for a reset, ignore this email.</p>"
        ),
    )
