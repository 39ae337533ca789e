# app/core/auth.py
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import ForbiddenError, UnauthorizedError
from app.database import get_session
from app.models.user import User

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so public endpoints can share get_current_user (guest mode).
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user: User) -> str:
    """
    Issue a signed access token for `user`.

    Claims:
      - user_id: str(user.id)
      - role: application role at issue time
      - exp: now + JWT_EXPIRATION_SECONDS
    """
    expires = datetime.now(timezone.utc) + timedelta(
        seconds=settings.JWT_EXPIRATION_SECONDS
    )
    claims = {
        "user_id": str(user.id),
        "role": user.role,
        "exp": expires,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token (JWT).

    Verification:
      - signature (JWT_ALG using JWT_SECRET)
      - expiration time (exp)

    Raises:
        UnauthorizedError: if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
        )
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from the bearer token.

    Flow:
      1. If no Authorization header => guest => return None.
      2. Decode JWT => extract 'user_id'.
      3. Load the User row; missing or inactive accounts are rejected.

    The role is always read from the DB row, so a role change applies
    to tokens issued before it.
    """
    if credentials is None:
        return None  # guest mode

    payload = decode_access_token(credentials.credentials)
    raw_id = payload.get("user_id")

    try:
        user_id = int(raw_id)
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid user_id in token")

    user = session.get(User, user_id)
    if user is None:
        raise UnauthorizedError("User no longer exists")
    if not user.is_active:
        raise UnauthorizedError("Account is not verified")

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication. Guests are rejected with 401.
    """
    if user is None:
        raise UnauthorizedError("Authentication required")
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role (403 otherwise).
    """
    if user.role != "admin":
        raise ForbiddenError("Admin access required")
    return user


def require_student(user: User = Depends(require_auth)) -> User:
    """
    Buyer endpoints: cart, checkout, payments, learning.

    Allowed roles: student, admin.
    """
    if user.role not in ("student", "admin"):
        raise ForbiddenError("Student access required")
    return user


def require_teacher(user: User = Depends(require_auth)) -> User:
    """
    Catalog authoring endpoints.

    Allowed roles: teacher, admin.
    """
    if user.role not in ("teacher", "admin"):
        raise ForbiddenError("Teacher access required")
    return user
