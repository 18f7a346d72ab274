"""Time utility helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def days_ago(days: int, base: datetime | None = None) -> datetime:
    """Return the instant ``days`` days before ``base`` (or now)."""
    return (base or now_utc()) - timedelta(days=days)
