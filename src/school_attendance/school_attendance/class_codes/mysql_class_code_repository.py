from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ClassCodeUsage
from .repository import ClassCodeUsageRepository


class MySQLClassCodeUsageRepository(ClassCodeUsageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_student(self, *, student_id: int, start_at: datetime, end_at: datetime) -> Sequence[ClassCodeUsage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.student_id, u.used_at, t.topic_id, t.name AS topic_name
                FROM student_class_code_usage u
                LEFT JOIN topics t ON t.topic_id = u.topic_id
                WHERE u.student_id=%s AND u.used_at BETWEEN %s AND %s
                ORDER BY u.used_at DESC
                """,
                (int(student_id), to_utc_naive(start_at), to_utc_naive(end_at)),
            )
            return [
                ClassCodeUsage(
                    student_id=int(r["student_id"]),
                    used_at=from_utc_naive(r["used_at"]),
                    topic_id=int(r["topic_id"]) if r.get("topic_id") is not None else None,
                    topic_name=r.get("topic_name"),
                )
                for r in fetchall(cur)
            ]
