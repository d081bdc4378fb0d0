"""One-time password helpers: generation, expiry and comparison."""

import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from storefront.core.config import settings

OTP_LENGTH = 6


def generate_otp() -> str:
    """Six random digits from the OS CSPRNG (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


def otp_expires_at(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.otp_ttl_minutes)


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    SQLite hands back naive values for timezone-aware columns; everything
    stored by this service is UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return ensure_utc(expires_at) < now


def is_well_formed(code: Optional[str]) -> bool:
    return code is not None and len(code.strip()) == OTP_LENGTH


def codes_match(stored: str, submitted: str) -> bool:
    """Constant-time comparison; bytes so non-ASCII input is a mismatch, not an error."""
    return hmac.compare_digest(
        str(stored).strip().encode("utf-8"),
        str(submitted).strip().encode("utf-8"),
    )
