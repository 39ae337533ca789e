# app/schemas/user.py
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

# App-level roles. "guest" = no token, so we don't store it here.
Role = Literal["student", "teacher", "admin"]


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


class RegisterRequest(SQLModel):
    """
    Sign-up payload.

    Validation rules:
      - names cannot be empty or whitespace
      - password at least 8 characters
      - confirm_password must equal password
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    confirm_password: str

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("passwords do not match")
        return self


class VerifyOtpRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    otp: str = Field(min_length=6, max_length=6)


class RegenerateOtpRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(SQLModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class MessageResponse(SQLModel):
    message: str


class UserRead(SQLModel):
    """Response schema returned to clients (no hash, no OTP)."""

    id: int
    first_name: str
    last_name: str
    email: EmailStr
    role: Role
    is_active: bool
    created_at: datetime
    last_login: datetime | None = None


class UserRoleUpdate(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


class ForgotPasswordRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class ResetPasswordRequest(SQLModel):
    """
    Password reset payload.

    - token comes from the emailed link
    - new_password follows the registration rules
    """

    model_config = ConfigDict(extra="forbid")

    token: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=72)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("passwords do not match")
        return self
