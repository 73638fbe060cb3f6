from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import ClassCodeUsage


class ClassCodeUsageRepository(Protocol):
    def list_for_student(self, *, student_id: int, start_at: datetime, end_at: datetime) -> Sequence[ClassCodeUsage]:
        """Usages in [start_at, end_at], most recent first."""

        raise NotImplementedError
