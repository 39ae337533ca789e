# app/core/security.py
import secrets
import time

import bcrypt


def hash_password(password: str) -> str:
    """Return a bcrypt hash (utf-8 string) for storage in users.password_hash."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in DB
        return False


def generate_otp(length: int = 6) -> str:
    """Numeric one-time code, zero padded."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def generate_reset_token() -> str:
    """URL-safe random token for password reset links."""
    return secrets.token_urlsafe(32)


def generate_order_number() -> str:
    """Time-derived order number, e.g. ORD-1718000000123456789."""
    return f"ORD-{time.time_ns()}"
