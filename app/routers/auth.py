# app/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.database import get_session
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
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
service = AuthService(repo, PasswordResetRepository())


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
):
    """
    Create a student account and email a 6-digit verification code.

    The account cannot log in until /auth/verify-otp succeeds.
    """
    return service.register(session, payload)


@router.post("/verify-otp", response_model=MessageResponse)
def verify_otp(
    payload: VerifyOtpRequest,
    session: Session = Depends(get_session),
):
    """Activate the account matching email + OTP."""
    return service.verify_otp(session, payload)


@router.post("/regenerate-otp", response_model=MessageResponse)
def regenerate_otp(
    payload: RegenerateOtpRequest,
    session: Session = Depends(get_session),
):
    """Send a new code; only allowed once the current one has expired."""
    return service.regenerate_otp(session, payload)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
):
    """Exchange email + password for a bearer token."""
    return service.login(session, payload)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    session: Session = Depends(get_session),
):
    """Email a single-use reset link (valid for RESET_TOKEN_TTL_MINUTES)."""
    return service.forgot_password(session, payload)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    session: Session = Depends(get_session),
):
    """Set a new password using the token from the reset link."""
    return service.reset_password(session, payload)
