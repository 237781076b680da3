# sponsoring/utils/portal_tokens.py
"""Helpers for sponsor portal access tokens."""
import math
import secrets
from datetime import datetime, timedelta
from typing import Any, Optional

from sponsoring.utils.dates import as_utc, utcnow

# Random bytes per token; rendered as hex, so 64 characters
TOKEN_LENGTH = 32
TOKEN_EXPIRY_DAYS = 90
EXPIRING_SOON_DAYS = 7


def generate_token() -> str:
    """Generate a secure random token for portal access."""
    return secrets.token_hex(TOKEN_LENGTH)


def get_token_expiry_date(
    days: int = TOKEN_EXPIRY_DAYS, now: Optional[datetime] = None
) -> datetime:
    return (now or utcnow()) + timedelta(days=days)


def is_token_expired(token: Any, now: Optional[datetime] = None) -> bool:
    """A token without expires_at never expires; otherwise expired iff now > expires_at."""
    expires_at = as_utc(token.expires_at)
    if expires_at is None:
        return False
    return (now or utcnow()) > expires_at


def is_token_valid(token: Any, now: Optional[datetime] = None) -> bool:
    return not is_token_expired(token, now)


def days_until_expiry(token: Any, now: Optional[datetime] = None) -> Optional[int]:
    """Whole days left before expiry (rounded up); negative once expired, None if it never expires."""
    expires_at = as_utc(token.expires_at)
    if expires_at is None:
        return None
    remaining = expires_at - (now or utcnow())
    return math.ceil(remaining.total_seconds() / 86400)


def is_token_expiring_soon(
    token: Any, days_threshold: int = EXPIRING_SOON_DAYS, now: Optional[datetime] = None
) -> bool:
    days = days_until_expiry(token, now)
    if days is None:
        return False
    return 0 < days <= days_threshold


def build_portal_url(base_url: str, edition_slug: str, token: str) -> str:
    """Portal link; the base URL is used verbatim."""
    return f"{base_url}/sponsor/{edition_slug}/portal?token={token}"
