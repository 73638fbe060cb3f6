from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.enums import RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from .model import ClassSchedule
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_for_class(self, class_id: int) -> Sequence[ClassSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, class_id, day_of_week, start_time, end_time, status
                FROM class_schedules
                WHERE class_id=%s AND status=%s
                ORDER BY schedule_id ASC
                """,
                (int(class_id), RecordStatus.ACTIVE.value),
            )
            rows = fetchall(cur)

        out: list[ClassSchedule] = []
        for r in rows:
            schedule = self._to_schedule(r)
            if schedule:
                out.append(schedule)
        return out

    def list_classes_with_active_schedules(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT class_id FROM class_schedules WHERE status=%s ORDER BY class_id",
                (RecordStatus.ACTIVE.value,),
            )
            return [int(r["class_id"]) for r in fetchall(cur)]

    @staticmethod
    def _to_schedule(r: dict) -> Optional[ClassSchedule]:
        try:
            start_time = normalize_mysql_time(r["start_time"])
            end_time = normalize_mysql_time(r["end_time"])
        except (TypeError, ValueError):
            logger.warning("Ignoring class schedule %s with malformed times", r.get("schedule_id"))
            return None
        if start_time is None or end_time is None:
            return None

        return ClassSchedule(
            schedule_id=int(r["schedule_id"]),
            class_id=int(r["class_id"]),
            day_of_week=str(r["day_of_week"] or ""),
            start_time=start_time,
            end_time=end_time,
            status=RecordStatus(r["status"]),
        )
