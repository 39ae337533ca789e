# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string; sqlite:// works for local dev)
      - JWT_SECRET (HS256 signing secret for access tokens)

    PayPal (needed for /payments/* endpoints):
      - PAYPAL_CLIENT_ID
      - PAYPAL_CLIENT_SECRET
      - PAYPAL_API_BASE (defaults to the sandbox)
    """

    PROJECT_NAME: str = "LearnHub API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str

    # JWT issuing + verification
    JWT_SECRET: str
    JWT_ALG: str = "HS256"
    JWT_EXPIRATION_SECONDS: int = 60 * 60 * 24

    # Account verification
    OTP_TTL_MINUTES: int = 30

    # Password reset
    RESET_TOKEN_TTL_MINUTES: int = 30
    PASSWORD_RESET_URL: str = "http://localhost:3000/reset-password"

    # PayPal REST (v1 payments API)
    PAYPAL_CLIENT_ID: str = ""
    PAYPAL_CLIENT_SECRET: str = ""
    PAYPAL_API_BASE: str = "https://api.sandbox.paypal.com"
    PAYPAL_CURRENCY: str = "USD"
    PAYPAL_RETURN_URL: str = "http://localhost:8000/api/v1/payments/paypal-success"
    PAYPAL_CANCEL_URL: str = "http://localhost:8000/api/v1/payments/paypal-cancel"
    PAYPAL_TIMEOUT_SECONDS: float = 15.0

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
