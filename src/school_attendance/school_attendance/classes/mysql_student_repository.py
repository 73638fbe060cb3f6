from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, class_id, first_name, last_name, username, status
                FROM students
                WHERE student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            return self._to_student(r) if r else None

    def list_active_for_class(self, class_id: int, *, student_id: Optional[int] = None) -> Sequence[Student]:
        clauses = ["class_id=%s", "status=%s"]
        params: list[object] = [int(class_id), RecordStatus.ACTIVE.value]
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT student_id, class_id, first_name, last_name, username, status
                FROM students
                WHERE {where}
                ORDER BY first_name ASC, student_id ASC
                """,
                tuple(params),
            )
            return [self._to_student(r) for r in fetchall(cur)]

    @staticmethod
    def _to_student(r: dict) -> Student:
        return Student(
            student_id=int(r["student_id"]),
            class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
            first_name=r["first_name"] or "",
            last_name=r.get("last_name") or "",
            username=r["username"],
            status=RecordStatus(r.get("status") or RecordStatus.ACTIVE.value),
        )
