from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, student_id, class_id, course_level_id, attendance_date, status,
    login_timestamp, marked_by, class_schedule_id, notes, created_at, updated_at
"""

# course_level_key is the stored COALESCE(course_level_id, 0) column backing the unique key.
_KEY_WHERE = "student_id=%s AND class_id=%s AND course_level_key=COALESCE(%s, 0) AND attendance_date=%s"


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_class_date(
        self, *, student_id: int, class_id: int, attendance_date: date
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND class_id=%s AND attendance_date=%s
                ORDER BY attendance_id ASC
                LIMIT 1
                """,
                (int(student_id), int(class_id), attendance_date),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def get_by_key(
        self, *, student_id: int, class_id: int, course_level_id: Optional[int], attendance_date: date
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {_KEY_WHERE}",
                (int(student_id), int(class_id), course_level_id, attendance_date),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def get_latest_before(self, *, student_id: int, class_id: int, before: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND class_id=%s AND attendance_date < %s
                ORDER BY attendance_date DESC
                LIMIT 1
                """,
                (int(student_id), int(class_id), before),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def update_login_timestamp(self, *, attendance_id: int, login_timestamp: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET login_timestamp=%s WHERE attendance_id=%s",
                (to_utc_naive(login_timestamp), int(attendance_id)),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        student_id, class_id, course_level_id, attendance_date, status,
                        login_timestamp, class_schedule_id, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(student_id),
                        int(class_id),
                        course_level_id,
                        attendance_date,
                        status.value,
                        to_utc_naive(login_timestamp),
                        class_schedule_id,
                        notes,
                    ),
                )
            except IntegrityError as exc:
                if is_duplicate_key(exc):
                    return None
                raise

            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(cur.lastrowid),))
            return self._to_record(fetchone(cur))

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
        key = (int(student_id), int(class_id), course_level_id, attendance_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    student_id, class_id, course_level_id, attendance_date, status,
                    login_timestamp, marked_by, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    login_timestamp=VALUES(login_timestamp),
                    marked_by=VALUES(marked_by),
                    notes=VALUES(notes),
                    class_schedule_id=NULL
                """,
                key + (status.value, to_utc_naive(login_timestamp), marked_by, notes),
            )

            # lastrowid is unreliable after the UPDATE branch; read back by key.
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE {_KEY_WHERE}", key)
            return self._to_record(fetchone(cur))

    def upsert_present(
        self,
        *,
        student_id: int,
        class_id: int,
        course_level_id: Optional[int],
        attendance_date: date,
        login_timestamp: datetime,
    ) -> AttendanceRecord:
        key = (int(student_id), int(class_id), course_level_id, attendance_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    student_id, class_id, course_level_id, attendance_date, status, login_timestamp
                )
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    login_timestamp=VALUES(login_timestamp)
                """,
                key + (AttendanceStatus.PRESENT.value, to_utc_naive(login_timestamp)),
            )

            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE {_KEY_WHERE}", key)
            return self._to_record(fetchone(cur))

    def list_for_class_date(
        self, *, class_id: int, attendance_date: date, course_level_id: Optional[int] = None
    ) -> Sequence[AttendanceRecord]:
        clauses = ["class_id=%s", "attendance_date=%s"]
        params: list[object] = [int(class_id), attendance_date]
        if course_level_id is not None:
            clauses.append("course_level_id=%s")
            params.append(int(course_level_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE {where}", tuple(params))
            return [self._to_record(r) for r in fetchall(cur)]

    def list_dates_for_class(
        self,
        *,
        class_id: int,
        start_date: date,
        end_date: date,
        course_level_id: Optional[int] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[date]:
        clauses = ["class_id=%s", "attendance_date BETWEEN %s AND %s"]
        params: list[object] = [int(class_id), start_date, end_date]
        if course_level_id is not None:
            clauses.append("course_level_id=%s")
            params.append(int(course_level_id))
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT DISTINCT attendance_date
                FROM attendance_records
                WHERE {where}
                ORDER BY attendance_date ASC
                """,
                tuple(params),
            )
            return [r["attendance_date"] for r in fetchall(cur)]

    def list_for_class_dates(
        self,
        *,
        class_id: int,
        dates: Sequence[date],
        course_level_id: Optional[int] = None,
        student_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        if not dates:
            return []

        clauses = ["class_id=%s", f"attendance_date IN ({in_clause(dates)})"]
        params: list[object] = [int(class_id), *dates]
        if course_level_id is not None:
            clauses.append("course_level_id=%s")
            params.append(int(course_level_id))
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY attendance_date ASC, student_id ASC
                """,
                tuple(params),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def list_for_student(
        self,
        *,
        student_id: int,
        start_date: date,
        end_date: date,
        statuses: Sequence[AttendanceStatus],
    ) -> Sequence[AttendanceRecord]:
        if not statuses:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s
                  AND attendance_date BETWEEN %s AND %s
                  AND status IN ({in_clause(statuses)})
                ORDER BY attendance_date DESC
                """,
                (int(student_id), start_date, end_date, *[s.value for s in statuses]),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    @staticmethod
    def _to_record(r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            student_id=int(r["student_id"]),
            class_id=int(r["class_id"]),
            course_level_id=int(r["course_level_id"]) if r.get("course_level_id") is not None else None,
            attendance_date=r["attendance_date"],
            status=AttendanceStatus(r["status"]),
            login_timestamp=from_utc_naive(r.get("login_timestamp")),
            marked_by=int(r["marked_by"]) if r.get("marked_by") is not None else None,
            class_schedule_id=int(r["class_schedule_id"]) if r.get("class_schedule_id") is not None else None,
            notes=r.get("notes"),
            created_at=from_utc_naive(r.get("created_at")),
            updated_at=from_utc_naive(r.get("updated_at")),
        )
