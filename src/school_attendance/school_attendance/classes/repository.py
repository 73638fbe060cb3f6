from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CourseLevel, SchoolClass, Student, TutorAssignment, TutorClass


class StudentRepository(Protocol):
    """Read-only view over the students table.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_active_for_class(self, class_id: int, *, student_id: Optional[int] = None) -> Sequence[Student]:
        """Active students ordered by first name."""

        raise NotImplementedError


class ClassRepository(Protocol):
    def get_class(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def get_enrolled_course_level_id(self, class_id: int) -> Optional[int]:
        raise NotImplementedError

    def get_course_level(self, course_level_id: int) -> Optional[CourseLevel]:
        raise NotImplementedError

    def list_active_tutors(self, class_id: int) -> Sequence[TutorAssignment]:
        raise NotImplementedError

    def is_tutor_assigned(self, *, tutor_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def list_classes_for_tutor(self, tutor_id: int) -> Sequence[TutorClass]:
        raise NotImplementedError
