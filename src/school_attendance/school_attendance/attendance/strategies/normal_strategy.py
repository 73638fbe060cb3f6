from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.window import AttendanceWindow
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On time, or no schedule to judge against."""

    def decide(self, *, login_at: datetime, window: Optional[AttendanceWindow]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
