from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...schedules.window import AttendanceWindow
from .base import AttendanceStrategy, StatusDecision


class OutsideWindowStrategy(AttendanceStrategy):
    """Login is not evidence of attending the scheduled session: write nothing."""

    def decide(self, *, login_at: datetime, window: Optional[AttendanceWindow]) -> StatusDecision:
        return StatusDecision(status=None, note="Login outside the schedule window")
