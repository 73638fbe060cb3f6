from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, tzinfo
from typing import Optional

from ..classes.repository import ClassRepository, StudentRepository
from ..common.datetime_utils import to_local
from ..common.validators import clean_note, require_positive_id, require_status
from ..core.constants import AUTO_MARK_COOLDOWN_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError
from ..schedules.service import ScheduleResolver
from ..schedules.window import window_for_schedule
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Writes attendance records: login-driven, session-driven and manual."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        schedules: ScheduleResolver,
        *,
        tz: tzinfo,
        strategy_factory: AttendanceStrategyFactory | None = None,
        cooldown_days: int = AUTO_MARK_COOLDOWN_DAYS,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._schedules = schedules
        self._tz = tz
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._cooldown_days = int(cooldown_days)

    def _resolve_class_id(self, student_id: int) -> Optional[int]:
        student = self._students.get_by_id(student_id)
        if not student:
            logger.warning("Student not found: %s", student_id)
            return None
        if not student.class_id:
            logger.warning("Student %s has no class assigned", student_id)
            return None
        return student.class_id

    def mark_from_login(self, student_id: int, login_timestamp: datetime) -> Optional[AttendanceRecord]:
        """Auto-mark attendance for a student login.

        Returns the stored record, or None when the login does not produce one
        (unknown student, no class, cool-down, or login outside the schedule
        window). Only store failures raise.
        """

        login_at = to_local(login_timestamp, self._tz)
        today = login_at.date()

        class_id = self._resolve_class_id(student_id)
        if class_id is None:
            return None

        existing = self._attendance.get_for_student_class_date(
            student_id=student_id, class_id=class_id, attendance_date=today
        )
        if existing:
            # Same-day re-login: refresh the timestamp, keep the status.
            self._attendance.update_login_timestamp(attendance_id=existing.attendance_id, login_timestamp=login_at)
            logger.debug("Attendance already marked for student %s on %s", student_id, today)
            return dataclasses.replace(existing, login_timestamp=login_at)

        previous = self._attendance.get_latest_before(student_id=student_id, class_id=class_id, before=today)
        if previous:
            days_since = (today - previous.attendance_date).days
            if days_since < self._cooldown_days:
                logger.debug(
                    "Attendance not marked for student %s: only %d days since %s (requires %d)",
                    student_id,
                    days_since,
                    previous.attendance_date,
                    self._cooldown_days,
                )
                return None

        schedule = self._schedules.for_date(class_id, today)
        window = window_for_schedule(schedule, today, self._tz) if schedule else None
        if schedule is None:
            logger.debug("No schedule for class %s on %s; marking present", class_id, today.strftime("%A"))

        decision = self._factory.for_login(login_at=login_at, window=window).decide(login_at=login_at, window=window)
        if decision.suppressed:
            logger.debug("Attendance not marked for student %s at %s: %s", student_id, login_at, decision.note)
            return None

        course_level_id = self._classes.get_enrolled_course_level_id(class_id)

        record = self._attendance.insert_if_absent(
            student_id=student_id,
            class_id=class_id,
            course_level_id=course_level_id,
            attendance_date=today,
            status=decision.status,
            login_timestamp=login_at,
            class_schedule_id=schedule.schedule_id if schedule else None,
        )
        if record is None:
            # A concurrent login or sweep created the row first.
            logger.debug("Attendance for student %s on %s was marked concurrently", student_id, today)
            return self._attendance.get_by_key(
                student_id=student_id, class_id=class_id, course_level_id=course_level_id, attendance_date=today
            )

        logger.info("Auto-marked student %s %s on %s", student_id, record.status.value, today)
        return record

    def mark_present_for_session(self, student_id: int, timestamp: datetime) -> Optional[AttendanceRecord]:
        """Mark present for today, no window or cool-down checks.

        Used when a verified co-present teammate confirms the student is in the
        session; always sets the day's status to present. Notes and the
        marker of an existing record are kept.
        """

        at = to_local(timestamp, self._tz)

        class_id = self._resolve_class_id(student_id)
        if class_id is None:
            return None

        record = self._attendance.upsert_present(
            student_id=student_id,
            class_id=class_id,
            course_level_id=self._classes.get_enrolled_course_level_id(class_id),
            attendance_date=at.date(),
            login_timestamp=at,
        )
        logger.info("Marked session attendance for student %s on %s", student_id, record.attendance_date)
        return record

    def mark_manually(
        self,
        *,
        student_id: int,
        class_id: int,
        attendance_date: date,
        status: AttendanceStatus | str,
        notes: Optional[str] = None,
        marked_by: Optional[int] = None,
        course_level_id: Optional[int] = None,
    ) -> AttendanceRecord:
        """Authoritative override for one (student, class, course level, date)."""

        student_id = require_positive_id(student_id, "student_id")
        class_id = require_positive_id(class_id, "class_id")
        status = require_status(status)

        if not self._classes.get_class(class_id):
            raise NotFoundError("Class not found")
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")

        record = self._attendance.upsert(
            student_id=student_id,
            class_id=class_id,
            course_level_id=course_level_id,
            attendance_date=attendance_date,
            status=status,
            login_timestamp=None,
            marked_by=marked_by,
            notes=clean_note(notes),
        )
        logger.info(
            "Student %s marked %s on %s for class %s by %s",
            student_id,
            status.value,
            attendance_date,
            class_id,
            marked_by,
        )
        return record
