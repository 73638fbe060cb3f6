from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..schedules.window import AttendanceWindow
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.outside_window_strategy import OutsideWindowStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the strategy for a login based on the schedule window."""

    def for_login(self, *, login_at: datetime, window: Optional[AttendanceWindow]) -> AttendanceStrategy:
        if window is None:
            return NormalStrategy()

        if not window.contains(login_at):
            return OutsideWindowStrategy()
        if window.is_late(login_at):
            return LateStrategy()
        return NormalStrategy()
