from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import fields
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.school_attendance.school_attendance.attendance.hooks import LoginAttendanceHook
from src.school_attendance.school_attendance.container import Container
from src.school_attendance.school_attendance.core.enums import AttendanceStatus

TZ = ZoneInfo("Africa/Nairobi")


class ExplodingService:
    def mark_from_login(self, student_id, login_timestamp):
        raise ConnectionError("database is down")

    def mark_present_for_session(self, student_id, timestamp):
        if student_id == 2:
            raise ConnectionError("database is down")
        return None


def test_login_hook_marks_inline(attendance_service, attendance_repo, fixed_now):
    hook = LoginAttendanceHook(attendance_service)

    assert hook.on_login(1, fixed_now) is None
    assert len(attendance_repo.rows) == 1


def test_login_hook_never_raises(caplog, fixed_now):
    hook = LoginAttendanceHook(ExplodingService())

    with caplog.at_level(logging.WARNING):
        hook.on_login(1, fixed_now)
        hook.on_team_up([1, 2, 3], fixed_now)

    assert "Failed to auto-mark attendance for student 1" in caplog.text
    assert "Failed to mark session attendance for student 2" in caplog.text


def test_login_hook_runs_on_executor(attendance_service, fixed_now):
    with ThreadPoolExecutor(max_workers=1) as executor:
        hook = LoginAttendanceHook(attendance_service, executor=executor)
        record = hook.on_login(1, fixed_now).result(timeout=5)

    assert record.status == AttendanceStatus.PRESENT


def test_team_up_marks_every_teammate(attendance_service, attendance_repo):
    with ThreadPoolExecutor(max_workers=1) as executor:
        hook = LoginAttendanceHook(attendance_service, executor=executor)
        records = hook.on_team_up([1, 2, 99], datetime(2024, 1, 15, 18, 0, tzinfo=TZ)).result(timeout=5)

    assert sorted(r.student_id for r in records) == [1, 2]
    assert all(r.status == AttendanceStatus.PRESENT for r in attendance_repo.rows.values())


def test_login_hook_runs_inline_after_shutdown(attendance_service, attendance_repo, fixed_now, caplog):
    executor = ThreadPoolExecutor(max_workers=1)
    hook = LoginAttendanceHook(attendance_service, executor=executor)
    hook.shutdown()

    with caplog.at_level(logging.WARNING):
        assert hook.on_login(1, fixed_now) is None

    assert len(attendance_repo.rows) == 1
    assert "running inline" in caplog.text


def test_container_close_drains_queued_hooks(attendance_service, attendance_repo, fixed_now):
    executor = ThreadPoolExecutor(max_workers=1)
    hook = LoginAttendanceHook(attendance_service, executor=executor)
    container = Container(**{f.name: None for f in fields(Container) if f.name != "login_hook"}, login_hook=hook)

    future = hook.on_login(1, fixed_now)
    container.close()

    assert future.done()
    assert len(attendance_repo.rows) == 1
    with pytest.raises(RuntimeError):
        executor.submit(print)
