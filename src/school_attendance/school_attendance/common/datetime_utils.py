from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from ..core.enums import DayOfWeek


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing 'Z' is accepted as UTC."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def school_zone(name: str) -> tzinfo:
    return ZoneInfo(name)


def now_local(tz: tzinfo) -> datetime:
    """Current time in the school timezone.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(tz)


def to_local(value: datetime, tz: tzinfo) -> datetime:
    """Convert to school-local time. Naive values are taken as already local."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """MySQL DATETIME columns hold naive UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Refusing to store a naive timestamp; localize it first")
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def iter_weekday_dates(start: date, end: date, day: DayOfWeek) -> Iterator[date]:
    """Every date in [start, end] that falls on ``day``."""
    offset = (day.iso_index - start.weekday()) % 7
    current = start + timedelta(days=offset)
    while current <= end:
        yield current
        current += timedelta(days=7)
