from __future__ import annotations

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from src.school_attendance.school_attendance.attendance.backfill import sweep_scheduled_classes
from src.school_attendance.school_attendance.core.enums import AttendanceStatus

TZ = ZoneInfo("Africa/Nairobi")
AFTER_SESSION = datetime(2024, 1, 15, 16, 30, tzinfo=TZ)


def test_backfill_marks_every_elapsed_session(backfill_service, attendance_repo, make_schedule):
    created = backfill_service.backfill_absences(1, make_schedule(), date(2024, 1, 8), date(2024, 1, 15), now=AFTER_SESSION)

    assert created == 6
    assert {r.attendance_date for r in attendance_repo.rows.values()} == {date(2024, 1, 8), date(2024, 1, 15)}
    assert all(r.status == AttendanceStatus.ABSENT for r in attendance_repo.rows.values())
    assert all(r.course_level_id == 7 for r in attendance_repo.rows.values())


def test_backfill_twice_creates_no_duplicates(backfill_service, attendance_repo, make_schedule):
    backfill_service.backfill_absences(1, make_schedule(), date(2024, 1, 8), date(2024, 1, 15), now=AFTER_SESSION)

    again = backfill_service.backfill_absences(1, make_schedule(), date(2024, 1, 8), date(2024, 1, 15), now=AFTER_SESSION)

    assert again == 0
    assert len(attendance_repo.rows) == 6


def test_backfill_skips_session_still_open(backfill_service, attendance_repo, make_schedule):
    created = backfill_service.backfill_absences(
        1, make_schedule(), date(2024, 1, 8), date(2024, 1, 15), now=datetime(2024, 1, 15, 15, 59, tzinfo=TZ)
    )

    assert created == 3
    assert {r.attendance_date for r in attendance_repo.rows.values()} == {date(2024, 1, 8)}


def test_backfill_leaves_present_and_manual_records_alone(backfill_service, attendance_repo, make_schedule):
    attendance_repo.add(
        student_id=1,
        class_id=1,
        course_level_id=7,
        attendance_date=date(2024, 1, 15),
        status=AttendanceStatus.PRESENT,
        login_timestamp=datetime(2024, 1, 15, 13, 55, tzinfo=TZ),
    )
    attendance_repo.add(
        student_id=2, class_id=1, course_level_id=7, attendance_date=date(2024, 1, 15), status=AttendanceStatus.EXCUSED
    )

    created = backfill_service.backfill_absences(1, make_schedule(), date(2024, 1, 15), date(2024, 1, 15), now=AFTER_SESSION)

    assert created == 1
    assert attendance_repo.get_by_key(
        student_id=3, class_id=1, course_level_id=7, attendance_date=date(2024, 1, 15)
    ).status == AttendanceStatus.ABSENT
    assert attendance_repo.get_by_key(
        student_id=2, class_id=1, course_level_id=7, attendance_date=date(2024, 1, 15)
    ).status == AttendanceStatus.EXCUSED


def test_backfill_continues_after_a_failing_student(backfill_service, attendance_repo, make_schedule, caplog):
    attendance_repo.failing_students = {2}

    with caplog.at_level(logging.ERROR):
        created = backfill_service.backfill_absences(
            1, make_schedule(), date(2024, 1, 8), date(2024, 1, 15), now=AFTER_SESSION
        )

    assert created == 4
    assert {r.student_id for r in attendance_repo.rows.values()} == {1, 3}
    assert "Error auto-marking absent for student 2" in caplog.text


def test_backfill_with_unrecognised_day_does_nothing(backfill_service, attendance_repo, make_schedule):
    created = backfill_service.backfill_absences(
        1, make_schedule(day_of_week="Funday"), date(2024, 1, 8), date(2024, 1, 15), now=AFTER_SESSION
    )

    assert created == 0
    assert attendance_repo.rows == {}


def test_sweep_covers_every_scheduled_class(backfill_service, resolver, attendance_repo):
    created = sweep_scheduled_classes(backfill_service, resolver, start_date=date(2024, 1, 8), now=AFTER_SESSION)

    assert created == {1: 6}
    assert len(attendance_repo.rows) == 6
