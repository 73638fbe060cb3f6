"""Eligibility window arithmetic.

Schedule times are minute offsets from midnight; the window edges may fall on
the previous or next calendar day and are returned as timezone-aware datetimes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from ..core.constants import (
    LATE_AFTER_START_MINUTES,
    MINUTES_PER_DAY,
    WINDOW_CLOSES_AFTER_END_MINUTES,
    WINDOW_OPENS_BEFORE_START_MINUTES,
)
from .model import ClassSchedule


@dataclass(frozen=True)
class AttendanceWindow:
    window_start: datetime
    window_end: datetime
    late_threshold: datetime

    def contains(self, moment: datetime) -> bool:
        return self.window_start <= moment <= self.window_end

    def is_late(self, moment: datetime) -> bool:
        return moment > self.late_threshold

    def has_elapsed(self, now: datetime) -> bool:
        return now >= self.window_end


def at_minute_offset(on_date: date, minutes: int, tz: tzinfo) -> datetime:
    """Wall-clock time ``minutes`` after local midnight of ``on_date``.

    Negative offsets and offsets past 24h roll into the neighbouring days.
    """
    day_shift, minute_of_day = divmod(minutes, MINUTES_PER_DAY)
    day = on_date + timedelta(days=day_shift)
    hour, minute = divmod(minute_of_day, 60)
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=tz)


def compute_window(
    start_minutes: int,
    end_minutes: int,
    on_date: date,
    tz: tzinfo,
    *,
    opens_before: int = WINDOW_OPENS_BEFORE_START_MINUTES,
    closes_after: int = WINDOW_CLOSES_AFTER_END_MINUTES,
    late_after: int = LATE_AFTER_START_MINUTES,
) -> AttendanceWindow:
    return AttendanceWindow(
        window_start=at_minute_offset(on_date, start_minutes - opens_before, tz),
        window_end=at_minute_offset(on_date, end_minutes + closes_after, tz),
        late_threshold=at_minute_offset(on_date, start_minutes + late_after, tz),
    )


def window_for_schedule(schedule: ClassSchedule, on_date: date, tz: tzinfo) -> AttendanceWindow:
    return compute_window(schedule.start_minutes, schedule.end_minutes, on_date, tz)
