from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ClassCodeUsage:
    """A student redeeming a class code; the code carries the topic taught."""

    student_id: int
    used_at: datetime
    topic_id: Optional[int]
    topic_name: Optional[str]
