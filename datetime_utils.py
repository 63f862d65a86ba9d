from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional


UTC = timezone.utc


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive values (SQLite drops tzinfo) or convert aware ones."""

    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def start_of_month_utc(moment: Optional[datetime] = None) -> datetime:
    current = ensure_utc(moment) or utc_now()
    return midnight_utc(current.date().replace(day=1))


def day_key(dt: datetime) -> str:
    """ISO ``YYYY-MM-DD`` bucket of a timestamp, in UTC."""

    value = ensure_utc(dt)
    return value.date().isoformat()


def to_rfc3339_utc(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime to RFC3339 in UTC."""

    if dt is None:
        return None
    value = ensure_utc(dt)
    if value is None:
        return None
    return value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


__all__ = [
    "UTC",
    "day_key",
    "ensure_utc",
    "midnight_utc",
    "start_of_month_utc",
    "to_rfc3339_utc",
    "utc_now",
]
