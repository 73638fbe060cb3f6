from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from ..class_codes.repository import ClassCodeUsageRepository
from ..classes.repository import StudentRepository
from ..common.datetime_utils import to_local
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord
from .repository import AttendanceRepository

_ATTENDED = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


def _login_order(r: AttendanceRecord) -> tuple:
    # Records without a login sort first so any logged-in record replaces them.
    if r.login_timestamp is None:
        return (0, 0.0, r.attendance_id or 0)
    return (1, r.login_timestamp.timestamp(), r.attendance_id or 0)


class AttendanceTopicsReportService:
    """Per-day report: when the student was present and which topic they learned.

    The topic for a day comes from the class code the student redeemed that day.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        usage: ClassCodeUsageRepository,
        *,
        tz: tzinfo,
    ):
        self._attendance = attendance
        self._students = students
        self._usage = usage
        self._tz = tz

    def student_report(self, *, student_id: int, start_date: date, end_date: date) -> list[dict]:
        records = self._attendance.list_for_student(
            student_id=student_id, start_date=start_date, end_date=end_date, statuses=_ATTENDED
        )
        # Several classes or course levels can share a day; the latest login wins.
        attendance_by_date: dict[date, AttendanceRecord] = {}
        for r in sorted(records, key=_login_order):
            attendance_by_date[r.attendance_date] = r

        start_at = datetime.combine(start_date, time.min, tzinfo=self._tz)
        end_at = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=self._tz) - timedelta(microseconds=1)

        topic_by_date: dict[date, dict] = {}
        for u in self._usage.list_for_student(student_id=student_id, start_at=start_at, end_at=end_at):
            day = to_local(u.used_at, self._tz).date()
            # Usages arrive newest first; keep the latest per day.
            if day in topic_by_date or u.topic_id is None or not u.topic_name:
                continue
            topic_by_date[day] = {"id": u.topic_id, "name": u.topic_name}

        entries: list[dict] = []
        for day in sorted(set(attendance_by_date) | set(topic_by_date), reverse=True):
            record = attendance_by_date.get(day)
            login_at: Optional[datetime] = record.login_timestamp if record else None
            entries.append(
                {
                    "date": day.isoformat(),
                    "login_timestamp": to_local(login_at, self._tz).isoformat() if login_at else None,
                    "status": record.status.value if record else None,
                    "topic_learned": topic_by_date.get(day),
                }
            )
        return entries

    def class_report(
        self,
        *,
        class_id: int,
        start_date: date,
        end_date: date,
        student_id: Optional[int] = None,
    ) -> list[dict]:
        entries: list[dict] = []
        for s in self._students.list_active_for_class(class_id, student_id=student_id):
            name = s.display_name or s.username
            for e in self.student_report(student_id=s.student_id, start_date=start_date, end_date=end_date):
                entries.append({"student_id": s.student_id, "student_name": name, "username": s.username, **e})

        entries.sort(key=lambda e: e["student_name"])
        entries.sort(key=lambda e: e["date"], reverse=True)
        return entries
