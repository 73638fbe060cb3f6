from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import RecordStatus, TutorRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, one_or_none
from .model import CourseLevel, School, SchoolClass, Tutor, TutorAssignment, TutorClass
from .repository import ClassRepository

ENROLLED = "enrolled"


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_class(self, class_id: int) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.name, c.level, c.status, c.school_id, s.name AS school_name
                FROM classes c
                LEFT JOIN schools s ON s.school_id = c.school_id
                WHERE c.class_id=%s
                """,
                (int(class_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return SchoolClass(
                class_id=int(r["class_id"]),
                name=r["name"],
                school_id=int(r["school_id"]),
                school_name=r.get("school_name") or "",
                level=r.get("level"),
                status=r.get("status"),
            )

    def get_enrolled_course_level_id(self, class_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT course_level_id
                FROM class_course_level_assignments
                WHERE class_id=%s AND enrollment_status=%s
                ORDER BY assignment_id ASC
                LIMIT 1
                """,
                (int(class_id), ENROLLED),
            )
            r = one_or_none(fetchall(cur))
            return int(r["course_level_id"]) if r else None

    def get_course_level(self, course_level_id: int) -> Optional[CourseLevel]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT cl.course_level_id, cl.name, cl.level_number, co.name AS course_name
                FROM course_levels cl
                LEFT JOIN courses co ON co.course_id = cl.course_id
                WHERE cl.course_level_id=%s
                """,
                (int(course_level_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return CourseLevel(
                course_level_id=int(r["course_level_id"]),
                name=r["name"],
                level_number=int(r.get("level_number") or 0),
                course_name=r.get("course_name"),
            )

    def list_active_tutors(self, class_id: int) -> Sequence[TutorAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tca.role, t.tutor_id, t.first_name, t.middle_name, t.last_name
                FROM tutor_class_assignments tca
                LEFT JOIN tutors t ON t.tutor_id = tca.tutor_id
                WHERE tca.class_id=%s AND tca.status=%s
                ORDER BY tca.assignment_id ASC
                """,
                (int(class_id), RecordStatus.ACTIVE.value),
            )
            rows = fetchall(cur)

        out: list[TutorAssignment] = []
        for r in rows:
            try:
                role = TutorRole(r["role"])
            except ValueError:
                continue
            tutor = None
            if r.get("tutor_id") is not None:
                tutor = Tutor(
                    tutor_id=int(r["tutor_id"]),
                    first_name=r.get("first_name") or "",
                    middle_name=r.get("middle_name"),
                    last_name=r.get("last_name") or "",
                )
            out.append(TutorAssignment(role=role, tutor=tutor))
        return out

    def is_tutor_assigned(self, *, tutor_id: int, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS assigned
                FROM tutor_class_assignments
                WHERE tutor_id=%s AND class_id=%s AND status=%s
                LIMIT 1
                """,
                (int(tutor_id), int(class_id), RecordStatus.ACTIVE.value),
            )
            return one_or_none(fetchall(cur)) is not None

    def list_classes_for_tutor(self, tutor_id: int) -> Sequence[TutorClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tca.role,
                       c.class_id, c.name, c.level, c.status,
                       s.school_id, s.name AS school_name, s.code AS school_code
                FROM tutor_class_assignments tca
                JOIN classes c ON c.class_id = tca.class_id
                LEFT JOIN schools s ON s.school_id = c.school_id
                WHERE tca.tutor_id=%s AND tca.status=%s
                ORDER BY c.name ASC
                """,
                (int(tutor_id), RecordStatus.ACTIVE.value),
            )
            rows = fetchall(cur)

        out: list[TutorClass] = []
        for r in rows:
            school = None
            if r.get("school_id") is not None:
                school = School(school_id=int(r["school_id"]), name=r.get("school_name") or "", code=r.get("school_code"))
            out.append(
                TutorClass(
                    class_id=int(r["class_id"]),
                    name=r["name"],
                    level=r.get("level"),
                    status=r.get("status"),
                    role=TutorRole(r["role"]),
                    school=school,
                )
            )
        return out
