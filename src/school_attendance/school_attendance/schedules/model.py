from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..core.enums import DayOfWeek, RecordStatus


@dataclass(frozen=True)
class ClassSchedule:
    """Domain entity: one weekly slot of a class (e.g. Monday 14:00-15:00)."""

    schedule_id: int
    class_id: int
    day_of_week: str
    start_time: time
    end_time: time
    status: RecordStatus = RecordStatus.ACTIVE

    @property
    def weekday(self) -> Optional[DayOfWeek]:
        """None when the stored day string is not a recognised weekday."""
        return DayOfWeek.parse(self.day_of_week)

    @property
    def start_minutes(self) -> int:
        return self.start_time.hour * 60 + self.start_time.minute

    @property
    def end_minutes(self) -> int:
        return self.end_time.hour * 60 + self.end_time.minute
