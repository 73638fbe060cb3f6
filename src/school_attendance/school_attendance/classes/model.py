from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import RecordStatus, TutorRole


@dataclass(frozen=True)
class Student:
    """Domain entity owned by class management; read-only here."""

    student_id: int
    class_id: Optional[int]
    first_name: str
    last_name: str
    username: str
    status: RecordStatus = RecordStatus.ACTIVE

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class SchoolClass:
    class_id: int
    name: str
    school_id: int
    school_name: str
    level: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class Tutor:
    tutor_id: int
    first_name: str
    middle_name: Optional[str]
    last_name: str

    @property
    def display_name(self) -> str:
        parts = [self.first_name, self.middle_name or "", self.last_name]
        return " ".join(p.strip() for p in parts if p and p.strip())

    def to_ref(self) -> dict:
        return {"id": self.tutor_id, "name": self.display_name}


@dataclass(frozen=True)
class TutorAssignment:
    role: TutorRole
    tutor: Optional[Tutor]


@dataclass(frozen=True)
class CourseLevel:
    course_level_id: int
    name: str
    level_number: int
    course_name: Optional[str] = None


@dataclass(frozen=True)
class School:
    school_id: int
    name: str
    code: Optional[str] = None


@dataclass(frozen=True)
class TutorClass:
    """Read-model: a class as seen from one tutor's assignment."""

    class_id: int
    name: str
    level: Optional[str]
    status: Optional[str]
    role: TutorRole
    school: Optional[School]
