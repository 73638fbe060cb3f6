from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from typing import Optional

from ..classes.repository import ClassRepository, StudentRepository
from ..common.datetime_utils import iter_weekday_dates, now_local, to_local
from ..core.enums import AttendanceStatus
from ..schedules.model import ClassSchedule
from ..schedules.service import ScheduleResolver
from ..schedules.window import AttendanceWindow, window_for_schedule
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _is_accounted_for(record: AttendanceRecord, window: AttendanceWindow) -> bool:
    # Records without a login (manual or previously swept) always count.
    if record.login_timestamp is None:
        return True
    return window.contains(record.login_timestamp)


class AbsenceBackfillService:
    """Writes 'absent' for scheduled sessions that ended without attendance.

    Safe to run repeatedly or concurrently: inserts that hit the unique key are
    skipped, and a failing student does not stop the sweep.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        *,
        tz: tzinfo,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._tz = tz

    def backfill_absences(
        self,
        class_id: int,
        schedule: ClassSchedule,
        start_date: date,
        end_date: Optional[date] = None,
        *,
        course_level_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Returns how many absent records were created."""

        now = to_local(now, self._tz) if now else now_local(self._tz)
        end_date = end_date or now.date()

        day = schedule.weekday
        if day is None:
            logger.warning(
                "Schedule %s has unrecognised day %r; nothing to backfill", schedule.schedule_id, schedule.day_of_week
            )
            return 0

        elapsed: list[tuple[date, AttendanceWindow]] = []
        for session_date in iter_weekday_dates(start_date, end_date, day):
            window = window_for_schedule(schedule, session_date, self._tz)
            if window.has_elapsed(now):
                elapsed.append((session_date, window))
        if not elapsed:
            return 0

        students = self._students.list_active_for_class(class_id)
        if not students:
            return 0

        if course_level_id is None:
            course_level_id = self._classes.get_enrolled_course_level_id(class_id)

        created = 0
        for session_date, window in elapsed:
            records = self._attendance.list_for_class_date(
                class_id=class_id, attendance_date=session_date, course_level_id=course_level_id
            )
            accounted = {r.student_id for r in records if _is_accounted_for(r, window)}

            marked = 0
            for student in students:
                if student.student_id in accounted:
                    continue
                try:
                    record = self._attendance.insert_if_absent(
                        student_id=student.student_id,
                        class_id=class_id,
                        course_level_id=course_level_id,
                        attendance_date=session_date,
                        status=AttendanceStatus.ABSENT,
                    )
                except Exception:
                    logger.exception(
                        "Error auto-marking absent for student %s on %s", student.student_id, session_date
                    )
                    continue
                if record is not None:
                    marked += 1

            if marked:
                logger.info("Auto-marked %d students absent for class %s on %s", marked, class_id, session_date)
            created += marked

        return created


def sweep_scheduled_classes(
    backfill: AbsenceBackfillService,
    schedules: ScheduleResolver,
    *,
    start_date: date,
    end_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> dict[int, int]:
    """Periodic job: backfill every active schedule of every scheduled class.

    Returns absences created per class. A failing class is logged and skipped.
    """

    created: dict[int, int] = {}
    for class_id in schedules.scheduled_class_ids():
        try:
            total = 0
            for schedule in schedules.active_schedules(class_id):
                total += backfill.backfill_absences(class_id, schedule, start_date, end_date, now=now)
        except Exception:
            logger.exception("Absence sweep failed for class %s", class_id)
            continue
        created[class_id] = total
    logger.info("Absence sweep finished: %d classes, %d records", len(created), sum(created.values()))
    return created
