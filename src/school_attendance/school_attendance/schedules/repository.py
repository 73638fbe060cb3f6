from __future__ import annotations

from typing import Protocol, Sequence

from .model import ClassSchedule


class ScheduleRepository(Protocol):
    def list_active_for_class(self, class_id: int) -> Sequence[ClassSchedule]:
        """Active schedules of a class, oldest first.

        Rows whose times cannot be parsed are skipped by implementations.
        """

        raise NotImplementedError

    def list_classes_with_active_schedules(self) -> Sequence[int]:
        raise NotImplementedError
