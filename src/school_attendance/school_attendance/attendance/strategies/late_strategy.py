from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.window import AttendanceWindow
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Inside the window but past the late threshold."""

    def decide(self, *, login_at: datetime, window: Optional[AttendanceWindow]) -> StatusDecision:
        note = None
        if window is not None:
            minutes_late = int((login_at - window.late_threshold).total_seconds() // 60)
            note = f"Logged in {minutes_late} min after the late threshold"
        return StatusDecision(status=AttendanceStatus.LATE, note=note)
