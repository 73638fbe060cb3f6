from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from src.school_attendance.school_attendance.attendance.register import attendance_rate
from src.school_attendance.school_attendance.core.enums import AttendanceStatus
from src.school_attendance.school_attendance.core.exceptions import NotFoundError, ValidationError

TZ = ZoneInfo("Africa/Nairobi")
AFTER_SESSION = datetime(2024, 1, 15, 16, 30, tzinfo=TZ)
JAN_8 = date(2024, 1, 8)
JAN_15 = date(2024, 1, 15)


def _attend(repo, student_id, day, hh=13, mm=50, status=AttendanceStatus.PRESENT):
    repo.add(
        student_id=student_id,
        class_id=1,
        course_level_id=7,
        attendance_date=day,
        status=status,
        login_timestamp=datetime(day.year, day.month, day.day, hh, mm, tzinfo=TZ),
    )


def test_attendance_rate():
    assert attendance_rate(4, 3, 2) == 66.67
    assert attendance_rate(0, 3, 0) == 0.0
    assert attendance_rate(0, 0, 5) == 0.0


def test_register_backfills_and_computes_rate(register_service, attendance_repo):
    for day in (JAN_8, JAN_15):
        _attend(attendance_repo, 1, day)
        _attend(attendance_repo, 2, day, 14, 20, AttendanceStatus.LATE)

    reg = register_service.build_register(
        class_id=1, start_date=JAN_8, end_date=JAN_15, course_level_id=7, now=AFTER_SESSION
    )

    assert reg.dates == [JAN_8, JAN_15]
    assert reg.summary.total_students == 3
    assert reg.summary.total_days == 2
    assert reg.summary.attendance_rate == 66.67
    by_name = {e.student_name: e.attendance for e in reg.entries}
    assert by_name["Chebet Kiprop"] == {JAN_8: AttendanceStatus.ABSENT, JAN_15: AttendanceStatus.ABSENT}
    assert by_name["Baraka Mwangi"][JAN_15] == AttendanceStatus.LATE


def test_register_dates_come_from_stored_records(register_service, attendance_repo):
    # Wednesday has no schedule; a manual mark still adds the date.
    attendance_repo.add(
        student_id=1, class_id=1, course_level_id=7, attendance_date=date(2024, 1, 10), status=AttendanceStatus.PRESENT
    )

    reg = register_service.build_register(
        class_id=1, start_date=JAN_8, end_date=JAN_15, course_level_id=7, now=AFTER_SESSION
    )

    assert reg.dates == [JAN_8, date(2024, 1, 10), JAN_15]
    baraka = next(e for e in reg.entries if e.student_id == 2)
    assert baraka.attendance[date(2024, 1, 10)] is None
    assert baraka.attendance[JAN_8] == AttendanceStatus.ABSENT


def test_register_with_no_dates(register_service):
    reg = register_service.build_register(
        class_id=1, start_date=JAN_15, end_date=JAN_15, now=datetime(2024, 1, 15, 10, 0, tzinfo=TZ)
    )

    assert reg.dates == []
    assert reg.summary.attendance_rate == 0.0
    assert reg.end_date == JAN_15
    assert [e.attendance for e in reg.entries] == [{}, {}, {}]


def test_register_header_and_payload(register_service):
    reg = register_service.build_register(
        class_id=1, start_date=JAN_8, end_date=JAN_15, course_level_id=7, now=AFTER_SESSION
    )
    payload = reg.to_dict()

    assert payload["class_name"] == "Robotics A"
    assert payload["school_name"] == "Hillcrest Primary"
    assert payload["lead_tutor"] == {"id": 20, "name": "Grace Wairimu"}
    assert payload["assistant_tutor"] == {"id": 21, "name": "Peter K. Ouma"}
    assert payload["course_level_name"] == "Level 2"
    assert payload["course_name"] == "Robotics"
    assert payload["date_range"] == {"start_date": "2024-01-08", "end_date": "2024-01-15"}
    assert payload["entries"][0]["student_number"] == "amani.o"
    assert payload["entries"][0]["attendance"]["2024-01-08"] == "absent"


def test_register_payload_omits_missing_optional_fields(register_service, classes_repo):
    classes_repo.tutors = {}

    payload = register_service.build_register(
        class_id=1, start_date=JAN_8, end_date=JAN_15, now=AFTER_SESSION
    ).to_dict()

    assert "lead_tutor" not in payload
    assert "course_level_id" not in payload
    assert "course_name" not in payload


def test_register_for_one_student(register_service):
    reg = register_service.build_register(
        class_id=1, start_date=JAN_8, end_date=JAN_15, student_id=3, now=AFTER_SESSION
    )

    assert [e.student_id for e in reg.entries] == [3]
    assert reg.summary.total_students == 1


def test_register_errors(register_service, schedules_repo):
    with pytest.raises(NotFoundError):
        register_service.build_register(class_id=999, start_date=JAN_8, now=AFTER_SESSION)
    with pytest.raises(NotFoundError):
        register_service.build_register(class_id=1, start_date=JAN_8, student_id=99, now=AFTER_SESSION)
    with pytest.raises(ValidationError):
        register_service.build_register(class_id=1, start_date=JAN_15, end_date=JAN_8, now=AFTER_SESSION)

    schedules_repo.schedules = []
    with pytest.raises(NotFoundError):
        register_service.build_register(class_id=1, start_date=JAN_8, now=AFTER_SESSION)
