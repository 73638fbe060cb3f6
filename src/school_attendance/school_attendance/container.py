from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional

from .attendance.backfill import AbsenceBackfillService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.hooks import LoginAttendanceHook
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.register import AttendanceRegisterService
from .attendance.service import AttendanceService
from .attendance.topics_report import AttendanceTopicsReportService
from .class_codes.mysql_class_code_repository import MySQLClassCodeUsageRepository
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.mysql_student_repository import MySQLStudentRepository
from .classes.service import ClassDirectoryService
from .common.datetime_utils import school_zone
from .core.constants import DEFAULT_SCHOOL_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleResolver


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    school_tz: tzinfo

    students_repo: MySQLStudentRepository
    classes_repo: MySQLClassRepository
    schedules_repo: MySQLScheduleRepository
    attendance_repo: MySQLAttendanceRepository
    class_code_usage_repo: MySQLClassCodeUsageRepository

    schedule_resolver: ScheduleResolver
    directory_service: ClassDirectoryService
    attendance_service: AttendanceService
    backfill_service: AbsenceBackfillService
    register_service: AttendanceRegisterService
    topics_report_service: AttendanceTopicsReportService
    login_hook: LoginAttendanceHook

    def close(self) -> None:
        """Waits for queued attendance hooks and stops the hook workers."""
        self.login_hook.shutdown(wait=True)


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_SCHOOL_TIMEZONE,
    hook_workers: int = 0,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    tz = school_zone(timezone)

    students_repo = MySQLStudentRepository(conn)
    classes_repo = MySQLClassRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    class_code_usage_repo = MySQLClassCodeUsageRepository(conn)

    schedule_resolver = ScheduleResolver(schedules_repo)
    directory_service = ClassDirectoryService(classes_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        classes_repo,
        schedule_resolver,
        tz=tz,
        strategy_factory=AttendanceStrategyFactory(),
    )
    backfill_service = AbsenceBackfillService(attendance_repo, students_repo, classes_repo, tz=tz)
    register_service = AttendanceRegisterService(
        attendance_repo,
        students_repo,
        directory_service,
        schedule_resolver,
        backfill_service,
        tz=tz,
    )
    topics_report_service = AttendanceTopicsReportService(attendance_repo, students_repo, class_code_usage_repo, tz=tz)

    executor: Optional[ThreadPoolExecutor] = None
    if hook_workers > 0:
        executor = ThreadPoolExecutor(max_workers=hook_workers, thread_name_prefix="attendance-hook")
    login_hook = LoginAttendanceHook(attendance_service, executor=executor)

    return Container(
        conn=conn,
        school_tz=tz,
        students_repo=students_repo,
        classes_repo=classes_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        class_code_usage_repo=class_code_usage_repo,
        schedule_resolver=schedule_resolver,
        directory_service=directory_service,
        attendance_service=attendance_service,
        backfill_service=backfill_service,
        register_service=register_service,
        topics_report_service=topics_report_service,
        login_hook=login_hook,
    )
