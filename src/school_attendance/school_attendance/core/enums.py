from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Session roles used for authorization in controllers."""

    ADMIN = "admin"
    TUTOR = "tutor"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Attendance status stored in the database."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EXCUSED = "excused"

    @property
    def counts_as_attended(self) -> bool:
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class RecordStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TutorRole(str, Enum):
    LEAD = "lead"
    ASSISTANT = "assistant"


class DayOfWeek(str, Enum):
    """Weekday names as stored in class_schedules.day_of_week."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def iso_index(self) -> int:
        """0 = Monday, matching ``date.weekday()``."""
        return _DAY_ORDER.index(self)

    @classmethod
    def parse(cls, value: object) -> Optional["DayOfWeek"]:
        """Lenient lookup; unknown values yield None instead of raising."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @classmethod
    def for_weekday(cls, weekday: int) -> "DayOfWeek":
        return _DAY_ORDER[weekday]


_DAY_ORDER = [
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
    DayOfWeek.SATURDAY,
    DayOfWeek.SUNDAY,
]
