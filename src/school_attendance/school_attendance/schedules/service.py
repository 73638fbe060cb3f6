from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import DayOfWeek
from ..core.exceptions import NotFoundError
from .model import ClassSchedule
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleResolver:
    """Finds the active weekly schedule that applies to a class on a given day."""

    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def active_schedules(self, class_id: int) -> Sequence[ClassSchedule]:
        usable = []
        for schedule in self._schedules.list_active_for_class(class_id):
            if schedule.weekday is None:
                logger.warning(
                    "Class %s schedule %s has unrecognised day_of_week %r; ignoring it",
                    class_id,
                    schedule.schedule_id,
                    schedule.day_of_week,
                )
                continue
            usable.append(schedule)
        return usable

    def for_day(self, class_id: int, day: DayOfWeek) -> Optional[ClassSchedule]:
        for schedule in self.active_schedules(class_id):
            if schedule.weekday == day:
                return schedule
        return None

    def for_date(self, class_id: int, on_date: date) -> Optional[ClassSchedule]:
        return self.for_day(class_id, DayOfWeek.for_weekday(on_date.weekday()))

    def require_active(self, class_id: int) -> Sequence[ClassSchedule]:
        schedules = self.active_schedules(class_id)
        if not schedules:
            raise NotFoundError("No active schedule found for this class")
        return schedules

    def scheduled_class_ids(self) -> Sequence[int]:
        return self._schedules.list_classes_with_active_schedules()
