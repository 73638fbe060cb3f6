from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import TutorRole
from ..core.exceptions import NotFoundError
from .model import CourseLevel, SchoolClass, Tutor
from .repository import ClassRepository


@dataclass(frozen=True)
class ClassHeader:
    """Header block of an attendance register."""

    school_class: SchoolClass
    lead_tutor: Optional[Tutor]
    assistant_tutor: Optional[Tutor]
    course_level: Optional[CourseLevel]


class ClassDirectoryService:
    """Use cases that read class-management data on behalf of attendance."""

    def __init__(self, classes: ClassRepository):
        self._classes = classes

    def require_class(self, class_id: int) -> SchoolClass:
        school_class = self._classes.get_class(int(class_id))
        if not school_class:
            raise NotFoundError("Class not found")
        return school_class

    def class_header(self, class_id: int, *, course_level_id: Optional[int] = None) -> ClassHeader:
        school_class = self.require_class(class_id)

        lead: Optional[Tutor] = None
        assistant: Optional[Tutor] = None
        for assignment in self._classes.list_active_tutors(school_class.class_id):
            # First active assignment per role wins.
            if assignment.role == TutorRole.LEAD and lead is None:
                lead = assignment.tutor
            elif assignment.role == TutorRole.ASSISTANT and assistant is None:
                assistant = assignment.tutor

        course_level = self._classes.get_course_level(course_level_id) if course_level_id else None

        return ClassHeader(
            school_class=school_class,
            lead_tutor=lead,
            assistant_tutor=assistant,
            course_level=course_level,
        )

    def is_tutor_assigned(self, *, tutor_id: int, class_id: int) -> bool:
        return self._classes.is_tutor_assigned(tutor_id=int(tutor_id), class_id=int(class_id))

    def tutor_classes(self, tutor_id: int) -> list[dict]:
        out: list[dict] = []
        for tc in self._classes.list_classes_for_tutor(int(tutor_id)):
            out.append(
                {
                    "id": tc.class_id,
                    "name": tc.name,
                    "level": tc.level,
                    "status": tc.status,
                    "role": tc.role.value,
                    "school": (
                        {"id": tc.school.school_id, "name": tc.school.name, "code": tc.school.code}
                        if tc.school
                        else None
                    ),
                }
            )
        return out
