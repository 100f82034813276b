"""
Rotation policy: decides whether a credential is inside its rotation window.

A credential is due when the whole number of days left before it expires
is at or below the configured overlap. Credentials without an expiry are
never rotated automatically.

Usage:
    from kvrotator.policy import should_rotate

    if should_rotate(secret.expires_on, resource.expiration_overlap_days):
        ...
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

Clock = Callable[[], datetime]

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # Naive values coming from config or tests are treated as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def add_days(start: datetime, days: int | float) -> datetime:
    """Return `start` shifted by a (possibly fractional) number of days."""
    return start + timedelta(days=days)


def days_until(expires_on: datetime, now: datetime) -> int:
    """Whole days from `now` until `expires_on`, floored (negative once expired)."""
    delta = _as_utc(expires_on) - _as_utc(now)
    return math.floor(delta.total_seconds() / SECONDS_PER_DAY)


def should_rotate(
    expires_on: datetime | None,
    overlap_days: int | None = None,
    *,
    now: datetime | None = None,
) -> bool:
    """Return True when a credential expiring at `expires_on` is due for rotation.

    Args:
        expires_on: Expiry of the current credential, or None if it never expires.
        overlap_days: Width of the rotation window before expiry (default 0).
        now: Reference time; defaults to the current UTC time.
    """
    if expires_on is None:
        return False

    if overlap_days is None:
        overlap_days = 0
    if now is None:
        now = utc_now()

    return days_until(expires_on, now) <= overlap_days
