"""Opaque bearer tokens.

The plain token is returned to the client once at login; the store keeps only
its SHA-256 digest, so a leaked table cannot be replayed.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

_TOKEN_BYTES = 40


def issue_token() -> str:
    """Generate a new random bearer token."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def expiry_for(ttl_minutes: int, now: datetime | None = None) -> datetime | None:
    """Expiry timestamp for a token issued now; None when ttl_minutes <= 0."""
    if ttl_minutes <= 0:
        return None
    issued_at = now or datetime.now(timezone.utc)
    return issued_at + timedelta(minutes=ttl_minutes)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    if expires_at is None:
        return False
    current = now or datetime.now(timezone.utc)
    return as_utc(current) >= as_utc(expires_at)
