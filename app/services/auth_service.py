# app/services/auth_service.py
import logging
import secrets
import smtplib
from datetime import datetime, timedelta, timezone

from sqlmodel import Session

from app.core.auth import create_access_token
from app.core.config import get_settings
from app.core.email_client import send_otp_email, send_password_reset_email
from app.core.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.core.security import (
    check_password,
    generate_otp,
    generate_reset_token,
    hash_password,
)
from app.models.user import PasswordResetToken, User
from app.repositories.password_reset_repo import PasswordResetRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegenerateOtpRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    VerifyOtpRequest,
)

logger = logging.getLogger(__name__)

settings = get_settings()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """
    Account lifecycle: register -> verify OTP -> login, plus password reset.

    Responsibilities:
      - unique email
      - bcrypt password hashing
      - OTP issuing / expiry / regeneration and its email
      - access token issuing
      - single-use, expiring password reset tokens
    """

    def __init__(self, repo: UserRepository, reset_repo: PasswordResetRepository):
        self.repo = repo
        self.reset_repo = reset_repo

    # ---- internal helpers ----

    def _issue_otp(self, user: User) -> None:
        user.otp = generate_otp()
        user.otp_expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=settings.OTP_TTL_MINUTES
        )

    def _send_otp(self, user: User) -> None:
        try:
            send_otp_email(user.email, user.first_name, user.otp, settings.OTP_TTL_MINUTES)
        except (RuntimeError, smtplib.SMTPException, OSError) as exc:
            logger.error("Sending OTP to %s failed: %s", user.email, exc)
            raise InternalError("failed to send verification email")

    def _get_by_email(self, session: Session, email: str) -> User:
        user = self.repo.get_by_email(session, email.lower())
        if not user:
            raise NotFoundError("user not found")
        return user

    # ---- public operations ----

    def register(self, session: Session, payload: RegisterRequest) -> MessageResponse:
        """
        Create an inactive student account and email its OTP.

        Raises:
            ConflictError: email already registered.
            InternalError: the OTP email could not be sent (account is kept;
                the user can request a new code once this one expires).
        """
        email = payload.email.lower()
        if self.repo.get_by_email(session, email):
            raise ConflictError("email already registered")

        user = User(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=email,
            password_hash=hash_password(payload.password),
            role="student",
            is_active=False,
        )
        self._issue_otp(user)
        user = self.repo.create(session, user)
        logger.info("Registered user %s (%s)", user.id, user.email)

        self._send_otp(user)
        return MessageResponse(
            message="registration successful, check your email for the verification code"
        )

    def verify_otp(self, session: Session, payload: VerifyOtpRequest) -> MessageResponse:
        user = self._get_by_email(session, payload.email)

        if user.is_active:
            return MessageResponse(message="account already verified")

        if not user.otp or not secrets.compare_digest(user.otp, payload.otp):
            raise ValidationError("invalid OTP")

        if user.otp_expires_at is None or _as_utc(user.otp_expires_at) < datetime.now(
            timezone.utc
        ):
            raise ValidationError("OTP has expired")

        user.is_active = True
        user.otp = None
        user.otp_expires_at = None
        self.repo.update(session, user)
        return MessageResponse(message="account verified successfully")

    def regenerate_otp(
        self, session: Session, payload: RegenerateOtpRequest
    ) -> MessageResponse:
        """
        Issue a fresh OTP, only once the previous one has expired.
        """
        user = self._get_by_email(session, payload.email)

        if user.is_active:
            raise ValidationError("account already verified")

        if user.otp_expires_at is not None and _as_utc(
            user.otp_expires_at
        ) > datetime.now(timezone.utc):
            raise ValidationError("OTP has not expired yet")

        self._issue_otp(user)
        self.repo.update(session, user)
        self._send_otp(user)
        return MessageResponse(message="a new verification code has been sent")

    def login(self, session: Session, payload: LoginRequest) -> TokenResponse:
        user = self.repo.get_by_email(session, payload.email.lower())
        if not user or not check_password(payload.password, user.password_hash):
            raise UnauthorizedError("invalid email or password")

        if not user.is_active:
            raise ForbiddenError("account is not verified")

        user.last_login = datetime.now(timezone.utc)
        self.repo.update(session, user)

        return TokenResponse(
            access_token=create_access_token(user),
            expires_in=settings.JWT_EXPIRATION_SECONDS,
        )

    # ---- password reset ----

    def forgot_password(
        self, session: Session, payload: ForgotPasswordRequest
    ) -> MessageResponse:
        """
        Mail a reset link carrying a fresh token.

        Earlier unredeemed tokens of the user are dropped.

        Raises:
            NotFoundError: no account with this email.
            InternalError: the email could not be sent.
        """
        user = self._get_by_email(session, payload.email)

        self.reset_repo.delete_for_user(session, user.id)
        reset = self.reset_repo.create(
            session,
            PasswordResetToken(
                user_id=user.id,
                token=generate_reset_token(),
                expires_at=datetime.now(timezone.utc)
                + timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
            ),
        )

        reset_link = f"{settings.PASSWORD_RESET_URL}?token={reset.token}"
        try:
            send_password_reset_email(
                user.email, user.first_name, reset_link, settings.RESET_TOKEN_TTL_MINUTES
            )
        except (RuntimeError, smtplib.SMTPException, OSError) as exc:
            logger.error("Sending reset link to %s failed: %s", user.email, exc)
            raise InternalError("failed to send reset password email")

        return MessageResponse(
            message="reset password email sent, check your email for the link"
        )

    def reset_password(
        self, session: Session, payload: ResetPasswordRequest
    ) -> MessageResponse:
        """
        Redeem a reset token and store the new password hash.

        Raises:
            NotFoundError: unknown token.
            ValidationError: token expired (it is removed).
        """
        reset = self.reset_repo.get_by_token(session, payload.token)
        if not reset:
            raise NotFoundError("invalid or expired reset token")

        if _as_utc(reset.expires_at) < datetime.now(timezone.utc):
            self.reset_repo.delete_for_user(session, reset.user_id)
            session.commit()
            raise ValidationError("reset token has expired")

        user = self.repo.get_by_id(session, reset.user_id)
        if not user:
            raise NotFoundError("user not found")

        user.password_hash = hash_password(payload.new_password)
        self.reset_repo.delete_for_user(session, user.id)
        self.repo.update(session, user)
        logger.info("Password reset for user %s", user.id)
        return MessageResponse(message="password reset successful")
