from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from typing import Optional

from ..classes.repository import StudentRepository
from ..classes.service import ClassDirectoryService
from ..common.datetime_utils import now_local, to_local
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..schedules.service import ScheduleResolver
from .backfill import AbsenceBackfillService
from .model import AttendanceRegister, RegisterEntry, RegisterSummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def attendance_rate(attended: int, students: int, days: int) -> float:
    possible = students * days
    if possible <= 0:
        return 0.0
    return round(attended * 100 / possible, 2)


class AttendanceRegisterService:
    """Builds the class register (students x session dates) for reporting."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        directory: ClassDirectoryService,
        schedules: ScheduleResolver,
        backfill: AbsenceBackfillService,
        *,
        tz: tzinfo,
    ):
        self._attendance = attendance
        self._students = students
        self._directory = directory
        self._schedules = schedules
        self._backfill = backfill
        self._tz = tz

    def build_register(
        self,
        *,
        class_id: int,
        start_date: date,
        end_date: Optional[date] = None,
        course_level_id: Optional[int] = None,
        student_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRegister:
        now = to_local(now, self._tz) if now else now_local(self._tz)
        end_date = end_date or now.date()
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        header = self._directory.class_header(class_id, course_level_id=course_level_id)

        for schedule in self._schedules.require_active(class_id):
            self._backfill.backfill_absences(
                class_id,
                schedule,
                start_date,
                end_date,
                course_level_id=course_level_id,
                now=now,
            )

        dates = sorted(
            self._attendance.list_dates_for_class(
                class_id=class_id,
                start_date=start_date,
                end_date=end_date,
                course_level_id=course_level_id,
                student_id=student_id,
            )
        )

        students = self._students.list_active_for_class(class_id, student_id=student_id)
        if student_id is not None and not students:
            raise NotFoundError("Student not found in this class")

        records = self._attendance.list_for_class_dates(
            class_id=class_id,
            dates=dates,
            course_level_id=course_level_id,
            student_id=student_id,
        )

        by_student: dict[int, dict[date, AttendanceStatus]] = {}
        for r in records:
            by_student.setdefault(r.student_id, {})[r.attendance_date] = r.status

        entries: list[RegisterEntry] = []
        attended = 0
        for s in students:
            marks = by_student.get(s.student_id, {})
            row = {d: marks.get(d) for d in dates}
            attended += sum(1 for status in row.values() if status and status.counts_as_attended)
            entries.append(
                RegisterEntry(
                    student_id=s.student_id,
                    student_name=s.display_name,
                    student_number=s.username,
                    attendance=row,
                )
            )

        logger.info("Register for class %s: %d students x %d dates", class_id, len(students), len(dates))

        school_class = header.school_class
        return AttendanceRegister(
            class_id=school_class.class_id,
            class_name=school_class.name,
            school_id=school_class.school_id,
            school_name=school_class.school_name,
            start_date=start_date,
            end_date=dates[-1] if dates else start_date,
            dates=dates,
            entries=entries,
            summary=RegisterSummary(
                total_students=len(students),
                total_days=len(dates),
                attendance_rate=attendance_rate(attended, len(students), len(dates)),
            ),
            lead_tutor=header.lead_tutor.to_ref() if header.lead_tutor else None,
            assistant_tutor=header.assistant_tutor.to_ref() if header.assistant_tutor else None,
            course_level_id=course_level_id,
            course_level_name=header.course_level.name if header.course_level else None,
            course_name=header.course_level.course_name if header.course_level else None,
        )
