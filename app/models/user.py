# app/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent account for LearnHub.

    Role:
      - "student" | "teacher" | "admin"
      - "guest" is represented by a missing token.

    Lifecycle:
      - registered inactive with an OTP (6 digits, short TTL)
      - activated by /auth/verify-otp
    """

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)

    email: str = Field(
        unique=True,
        index=True,
        max_length=255,
    )

    password_hash: str = Field(description="bcrypt hash")

    role: str = Field(
        default="student",
        index=True,
        description="Application role: student | teacher | admin",
    )

    is_active: bool = Field(default=False)

    otp: str | None = Field(default=None, max_length=6)
    otp_expires_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    last_login: datetime | None = None


class PasswordResetToken(SQLModel, table=True):
    """
    Single-use token mailed by /auth/forgot-password.

    Removed once redeemed; expired rows are removed when presented.
    """

    __tablename__ = "password_resets"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    token: str = Field(max_length=128, unique=True, index=True)
    expires_at: datetime
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
