from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.window import AttendanceWindow


@dataclass(frozen=True)
class StatusDecision:
    """Outcome of a login; ``status`` None means no record should be written."""

    status: Optional[AttendanceStatus]
    note: Optional[str] = None

    @property
    def suppressed(self) -> bool:
        return self.status is None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a login turns into an attendance status."""

    @abstractmethod
    def decide(self, *, login_at: datetime, window: Optional[AttendanceWindow]) -> StatusDecision:
        raise NotImplementedError
