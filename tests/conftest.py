from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from src.school_attendance.school_attendance.attendance.backfill import AbsenceBackfillService
from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.attendance.register import AttendanceRegisterService
from src.school_attendance.school_attendance.attendance.service import AttendanceService
from src.school_attendance.school_attendance.attendance.topics_report import AttendanceTopicsReportService
from src.school_attendance.school_attendance.class_codes.model import ClassCodeUsage
from src.school_attendance.school_attendance.classes.model import (
    CourseLevel,
    SchoolClass,
    Student,
    Tutor,
    TutorAssignment,
    TutorClass,
)
from src.school_attendance.school_attendance.classes.service import ClassDirectoryService
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, RecordStatus, TutorRole
from src.school_attendance.school_attendance.schedules.model import ClassSchedule
from src.school_attendance.school_attendance.schedules.service import ScheduleResolver

NAIROBI = ZoneInfo("Africa/Nairobi")

CLASS_ID = 1
COURSE_LEVEL_ID = 7


@dataclass
class InMemoryStudents:
    students: dict[int, Student] = field(default_factory=dict)

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.students.get(student_id)

    def list_active_for_class(self, class_id: int, *, student_id: Optional[int] = None):
        items = [
            s
            for s in self.students.values()
            if s.class_id == class_id
            and s.status == RecordStatus.ACTIVE
            and (student_id is None or s.student_id == student_id)
        ]
        items.sort(key=lambda s: (s.first_name, s.student_id))
        return items


@dataclass
class InMemoryClasses:
    classes: dict[int, SchoolClass] = field(default_factory=dict)
    enrolled_level: dict[int, int] = field(default_factory=dict)
    course_levels: dict[int, CourseLevel] = field(default_factory=dict)
    tutors: dict[int, list[TutorAssignment]] = field(default_factory=dict)
    assigned: set[tuple[int, int]] = field(default_factory=set)
    tutor_classes: dict[int, list[TutorClass]] = field(default_factory=dict)

    def get_class(self, class_id: int) -> Optional[SchoolClass]:
        return self.classes.get(class_id)

    def get_enrolled_course_level_id(self, class_id: int) -> Optional[int]:
        return self.enrolled_level.get(class_id)

    def get_course_level(self, course_level_id: int) -> Optional[CourseLevel]:
        return self.course_levels.get(course_level_id)

    def list_active_tutors(self, class_id: int):
        return list(self.tutors.get(class_id, []))

    def is_tutor_assigned(self, *, tutor_id: int, class_id: int) -> bool:
        return (tutor_id, class_id) in self.assigned

    def list_classes_for_tutor(self, tutor_id: int):
        return list(self.tutor_classes.get(tutor_id, []))


@dataclass
class InMemorySchedules:
    schedules: list[ClassSchedule] = field(default_factory=list)

    def list_active_for_class(self, class_id: int):
        return [s for s in self.schedules if s.class_id == class_id and s.status == RecordStatus.ACTIVE]

    def list_classes_with_active_schedules(self):
        return sorted({s.class_id for s in self.schedules if s.status == RecordStatus.ACTIVE})


class InMemoryAttendance:
    """Keyed like the real table: (student, class, course level, date), NULL level included."""

    def __init__(self):
        self.rows: dict[tuple, AttendanceRecord] = {}
        self.failing_students: set[int] = set()
        self._id = 0

    @staticmethod
    def _key(student_id, class_id, course_level_id, attendance_date):
        return (student_id, class_id, course_level_id, attendance_date)

    def add(self, **kwargs) -> AttendanceRecord:
        self._id += 1
        rec = AttendanceRecord(attendance_id=self._id, **kwargs)
        self.rows[self._key(rec.student_id, rec.class_id, rec.course_level_id, rec.attendance_date)] = rec
        return rec

    def get_for_student_class_date(self, *, student_id, class_id, attendance_date):
        for rec in self.rows.values():
            if (rec.student_id, rec.class_id, rec.attendance_date) == (student_id, class_id, attendance_date):
                return rec
        return None

    def get_by_key(self, *, student_id, class_id, course_level_id, attendance_date):
        return self.rows.get(self._key(student_id, class_id, course_level_id, attendance_date))

    def get_latest_before(self, *, student_id, class_id, before):
        items = [
            r
            for r in self.rows.values()
            if r.student_id == student_id and r.class_id == class_id and r.attendance_date < before
        ]
        return max(items, key=lambda r: r.attendance_date) if items else None

    def update_login_timestamp(self, *, attendance_id, login_timestamp):
        for key, rec in self.rows.items():
            if rec.attendance_id == attendance_id:
                self.rows[key] = replace(rec, login_timestamp=login_timestamp)
                return True
        return False

    def insert_if_absent(
        self,
        *,
        student_id,
        class_id,
        course_level_id,
        attendance_date,
        status,
        login_timestamp=None,
        class_schedule_id=None,
        notes=None,
    ):
        if student_id in self.failing_students:
            raise RuntimeError("store unavailable")
        if self._key(student_id, class_id, course_level_id, attendance_date) in self.rows:
            return None
        return self.add(
            student_id=student_id,
            class_id=class_id,
            course_level_id=course_level_id,
            attendance_date=attendance_date,
            status=status,
            login_timestamp=login_timestamp,
            class_schedule_id=class_schedule_id,
            notes=notes,
        )

    def upsert(
        self,
        *,
        student_id,
        class_id,
        course_level_id,
        attendance_date,
        status,
        login_timestamp=None,
        marked_by=None,
        notes=None,
    ):
        key = self._key(student_id, class_id, course_level_id, attendance_date)
        existing = self.rows.get(key)
        if existing is None:
            return self.add(
                student_id=student_id,
                class_id=class_id,
                course_level_id=course_level_id,
                attendance_date=attendance_date,
                status=status,
                login_timestamp=login_timestamp,
                marked_by=marked_by,
                notes=notes,
            )
        updated = replace(
            existing,
            status=status,
            login_timestamp=login_timestamp,
            marked_by=marked_by,
            notes=notes,
            class_schedule_id=None,
        )
        self.rows[key] = updated
        return updated

    def upsert_present(self, *, student_id, class_id, course_level_id, attendance_date, login_timestamp):
        key = self._key(student_id, class_id, course_level_id, attendance_date)
        existing = self.rows.get(key)
        if existing is None:
            return self.add(
                student_id=student_id,
                class_id=class_id,
                course_level_id=course_level_id,
                attendance_date=attendance_date,
                status=AttendanceStatus.PRESENT,
                login_timestamp=login_timestamp,
            )
        updated = replace(existing, status=AttendanceStatus.PRESENT, login_timestamp=login_timestamp)
        self.rows[key] = updated
        return updated

    def _filtered(self, class_id, course_level_id, student_id):
        for rec in self.rows.values():
            if rec.class_id != class_id:
                continue
            if course_level_id is not None and rec.course_level_id != course_level_id:
                continue
            if student_id is not None and rec.student_id != student_id:
                continue
            yield rec

    def list_for_class_date(self, *, class_id, attendance_date, course_level_id=None):
        return [r for r in self._filtered(class_id, course_level_id, None) if r.attendance_date == attendance_date]

    def list_dates_for_class(self, *, class_id, start_date, end_date, course_level_id=None, student_id=None):
        return sorted(
            {
                r.attendance_date
                for r in self._filtered(class_id, course_level_id, student_id)
                if start_date <= r.attendance_date <= end_date
            }
        )

    def list_for_class_dates(self, *, class_id, dates, course_level_id=None, student_id=None):
        wanted = set(dates)
        return [r for r in self._filtered(class_id, course_level_id, student_id) if r.attendance_date in wanted]

    def list_for_student(self, *, student_id, start_date, end_date, statuses):
        items = [
            r
            for r in self.rows.values()
            if r.student_id == student_id and start_date <= r.attendance_date <= end_date and r.status in statuses
        ]
        items.sort(key=lambda r: r.attendance_date, reverse=True)
        return items


@dataclass
class InMemoryClassCodeUsage:
    usages: list[ClassCodeUsage] = field(default_factory=list)

    def list_for_student(self, *, student_id, start_at, end_at):
        items = [u for u in self.usages if u.student_id == student_id and start_at <= u.used_at <= end_at]
        items.sort(key=lambda u: u.used_at, reverse=True)
        return items


def monday_class_schedule(**overrides) -> ClassSchedule:
    values = dict(
        schedule_id=100,
        class_id=CLASS_ID,
        day_of_week="monday",
        start_time=time(14, 0),
        end_time=time(15, 0),
    )
    values.update(overrides)
    return ClassSchedule(**values)


@pytest.fixture
def tz():
    return NAIROBI


@pytest.fixture
def fixed_now(tz):
    # Monday, inside the 14:00-15:00 session window and before the late threshold.
    return datetime(2024, 1, 15, 13, 50, tzinfo=tz)


@pytest.fixture
def students_repo():
    return InMemoryStudents(
        {
            1: Student(student_id=1, class_id=CLASS_ID, first_name="Amani", last_name="Otieno", username="amani.o"),
            2: Student(student_id=2, class_id=CLASS_ID, first_name="Baraka", last_name="Mwangi", username="baraka.m"),
            3: Student(student_id=3, class_id=CLASS_ID, first_name="Chebet", last_name="Kiprop", username="chebet.k"),
            4: Student(student_id=4, class_id=None, first_name="Dalia", last_name="Njeri", username="dalia.n"),
        }
    )


@pytest.fixture
def classes_repo():
    lead = Tutor(tutor_id=20, first_name="Grace", middle_name=None, last_name="Wairimu")
    assistant = Tutor(tutor_id=21, first_name="Peter", middle_name="K.", last_name="Ouma")
    return InMemoryClasses(
        classes={
            CLASS_ID: SchoolClass(class_id=CLASS_ID, name="Robotics A", school_id=10, school_name="Hillcrest Primary"),
        },
        enrolled_level={CLASS_ID: COURSE_LEVEL_ID},
        course_levels={
            COURSE_LEVEL_ID: CourseLevel(
                course_level_id=COURSE_LEVEL_ID, name="Level 2", level_number=2, course_name="Robotics"
            ),
        },
        tutors={
            CLASS_ID: [
                TutorAssignment(role=TutorRole.LEAD, tutor=lead),
                TutorAssignment(role=TutorRole.ASSISTANT, tutor=assistant),
            ]
        },
        assigned={(20, CLASS_ID), (21, CLASS_ID)},
    )


@pytest.fixture
def schedules_repo():
    return InMemorySchedules([monday_class_schedule()])


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def usage_repo():
    return InMemoryClassCodeUsage()


@pytest.fixture
def resolver(schedules_repo):
    return ScheduleResolver(schedules_repo)


@pytest.fixture
def attendance_service(attendance_repo, students_repo, classes_repo, resolver, tz):
    return AttendanceService(attendance_repo, students_repo, classes_repo, resolver, tz=tz)


@pytest.fixture
def backfill_service(attendance_repo, students_repo, classes_repo, tz):
    return AbsenceBackfillService(attendance_repo, students_repo, classes_repo, tz=tz)


@pytest.fixture
def directory_service(classes_repo):
    return ClassDirectoryService(classes_repo)


@pytest.fixture
def register_service(attendance_repo, students_repo, directory_service, resolver, backfill_service, tz):
    return AttendanceRegisterService(
        attendance_repo, students_repo, directory_service, resolver, backfill_service, tz=tz
    )


@pytest.fixture
def topics_service(attendance_repo, students_repo, usage_repo, tz):
    return AttendanceTopicsReportService(attendance_repo, students_repo, usage_repo, tz=tz)


@pytest.fixture
def make_schedule():
    return monday_class_schedule
