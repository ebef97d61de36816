# fitcoach/core/tokens.py
import secrets
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

# 32 random bytes -> 64 hex characters
TOKEN_BYTES = 32


def generate_token() -> str:
    """Return a single-use random credential (64 lowercase hex chars)."""
    return secrets.token_hex(TOKEN_BYTES)


def build_verification_url(base_url: str, token: str) -> str:
    """
    Link embedded in the verification email.

    Example:
        https://api.example.com/api/verify-email?token=<64 hex>
    """
    return f"{base_url.rstrip('/')}/api/verify-email?{urlencode({'token': token})}"


def build_password_reset_url(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/reset-password?{urlencode({'token': token})}"


def reset_expiry(ttl_minutes: int, now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=ttl_minutes)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """
    Expiry predicate for password reset tokens.

    A missing expiry counts as expired. Naive timestamps (as returned by
    `timestamp without time zone` columns) are read as UTC.
    """
    if expires_at is None:
        return True
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return expires_at <= now
