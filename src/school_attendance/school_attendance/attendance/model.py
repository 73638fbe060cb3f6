from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one class on one day."""

    attendance_id: int
    student_id: int
    class_id: int
    course_level_id: Optional[int]
    attendance_date: date
    status: AttendanceStatus
    login_timestamp: Optional[datetime] = None
    marked_by: Optional[int] = None
    class_schedule_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "student_id": self.student_id,
            "class_id": self.class_id,
            "course_level_id": self.course_level_id,
            "attendance_date": self.attendance_date.isoformat(),
            "status": self.status.value,
            "login_timestamp": _iso(self.login_timestamp),
            "marked_by": self.marked_by,
            "class_schedule_id": self.class_schedule_id,
            "notes": self.notes,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class RegisterEntry:
    """One row of the register: a student and their status per register date."""

    student_id: int
    student_name: str
    student_number: str
    attendance: dict[date, Optional[AttendanceStatus]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "student_number": self.student_number,
            "attendance": {d.isoformat(): (s.value if s else None) for d, s in self.attendance.items()},
        }


@dataclass(frozen=True)
class RegisterSummary:
    total_students: int
    total_days: int
    attendance_rate: float


@dataclass(frozen=True)
class AttendanceRegister:
    """Read-model: the student x date matrix returned to reporting."""

    class_id: int
    class_name: str
    school_id: int
    school_name: str
    start_date: date
    end_date: date
    dates: list[date]
    entries: list[RegisterEntry]
    summary: RegisterSummary
    lead_tutor: Optional[dict] = None
    assistant_tutor: Optional[dict] = None
    course_level_id: Optional[int] = None
    course_level_name: Optional[str] = None
    course_name: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict = {
            "class_id": self.class_id,
            "class_name": self.class_name,
            "school_id": self.school_id,
            "school_name": self.school_name,
        }
        optional = {
            "lead_tutor": self.lead_tutor,
            "assistant_tutor": self.assistant_tutor,
            "course_level_id": self.course_level_id,
            "course_level_name": self.course_level_name,
            "course_name": self.course_name,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        out.update(
            {
                "date_range": {"start_date": self.start_date.isoformat(), "end_date": self.end_date.isoformat()},
                "dates": [d.isoformat() for d in self.dates],
                "entries": [e.to_dict() for e in self.entries],
                "summary": {
                    "total_students": self.summary.total_students,
                    "total_days": self.summary.total_days,
                    "attendance_rate": self.summary.attendance_rate,
                },
            }
        )
        return out
