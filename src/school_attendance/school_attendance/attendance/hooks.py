"""Entry points for the login and team-up flows.

These adapters never raise: attendance marking must not block or fail a login.
With an executor the work runs in the background; without one it runs inline
but is still isolated from the caller.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from datetime import datetime
from typing import Iterable, Optional

from .model import AttendanceRecord
from .service import AttendanceService

logger = logging.getLogger(__name__)


class LoginAttendanceHook:
    def __init__(self, service: AttendanceService, *, executor: Optional[Executor] = None):
        self._service = service
        self._executor = executor

    def on_login(self, student_id: int, login_timestamp: datetime) -> Optional[Future]:
        """Called by the login flow after the credential check."""
        return self._dispatch(self._safe_mark_from_login, student_id, login_timestamp)

    def on_team_up(self, student_ids: Iterable[int], timestamp: datetime) -> Optional[Future]:
        """Called once per team-up with every verified teammate."""
        return self._dispatch(self._safe_mark_session, list(student_ids), timestamp)

    def shutdown(self, *, wait: bool = True) -> None:
        """Stops the executor. Later calls run inline."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    def _dispatch(self, fn, *args) -> Optional[Future]:
        if self._executor is None:
            fn(*args)
            return None
        try:
            return self._executor.submit(fn, *args)
        except RuntimeError:
            # Executor already shut down (process exiting).
            logger.warning("Attendance hook executor unavailable; running inline")
            fn(*args)
            return None

    def _safe_mark_from_login(self, student_id: int, login_timestamp: datetime) -> Optional[AttendanceRecord]:
        try:
            return self._service.mark_from_login(student_id, login_timestamp)
        except Exception as exc:
            logger.warning("Failed to auto-mark attendance for student %s: %s", student_id, exc, exc_info=True)
            return None

    def _safe_mark_session(self, student_ids: list[int], timestamp: datetime) -> list[AttendanceRecord]:
        marked: list[AttendanceRecord] = []
        for student_id in student_ids:
            try:
                record = self._service.mark_present_for_session(student_id, timestamp)
            except Exception as exc:
                logger.warning("Failed to mark session attendance for student %s: %s", student_id, exc, exc_info=True)
                continue
            if record:
                marked.append(record)
        return marked
