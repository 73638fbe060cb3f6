from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Store of attendance records.

    Implementations must enforce uniqueness of
    (student_id, class_id, course_level_id, attendance_date), treating a NULL
    course level as a value of its own.
    """

    def get_for_student_class_date(
        self, *, student_id: int, class_id: int, attendance_date: date
    ) -> Optional[AttendanceRecord]:
        """Any record for the day, whatever its course level."""

        raise NotImplementedError

    def get_by_key(
        self, *, student_id: int, class_id: int, course_level_id: Optional[int], attendance_date: date
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_latest_before(self, *, student_id: int, class_id: int, before: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def update_login_timestamp(self, *, attendance_id: int, login_timestamp: datetime) -> bool:
        raise NotImplementedError

    def insert_if_absent(
        self,
        *,
        student_id: int,
        class_id: int,
        course_level_id: Optional[int],
        attendance_date: date,
        status: AttendanceStatus,
        login_timestamp: Optional[datetime] = None,
        class_schedule_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        """Insert a new record.

        Returns None when the unique key is already taken (another writer got
        there first); never raises for that case.
        """

        raise NotImplementedError

    def upsert(
        self,
        *,
        student_id: int,
        class_id: int,
        course_level_id: Optional[int],
        attendance_date: date,
        status: AttendanceStatus,
        login_timestamp: Optional[datetime] = None,
        marked_by: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Create or overwrite the record for the key; returns the stored row.

        Overwrites status, login_timestamp, marked_by and notes, and clears
        class_schedule_id.
        """

        raise NotImplementedError

    def upsert_present(
        self,
        *,
        student_id: int,
        class_id: int,
        course_level_id: Optional[int],
        attendance_date: date,
        login_timestamp: datetime,
    ) -> AttendanceRecord:
        """Create or flip the record for the key to present.

        Only status and login_timestamp change on an existing row; notes,
        marked_by and class_schedule_id are kept.
        """

        raise NotImplementedError

    def list_for_class_date(
        self, *, class_id: int, attendance_date: date, course_level_id: Optional[int] = None
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_dates_for_class(
        self,
        *,
        class_id: int,
        start_date: date,
        end_date: date,
        course_level_id: Optional[int] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[date]:
        """Distinct attendance dates in range, ascending."""

        raise NotImplementedError

    def list_for_class_dates(
        self,
        *,
        class_id: int,
        dates: Sequence[date],
        course_level_id: Optional[int] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(
        self,
        *,
        student_id: int,
        start_date: date,
        end_date: date,
        statuses: Sequence[AttendanceStatus],
    ) -> Sequence[AttendanceRecord]:
        """Records of one student in range with the given statuses, newest first."""

        raise NotImplementedError
