"""Academic portal assistants built on `ChatSession`."""

from .catalog import Announcement, Catalog, Course, CourseContent, Exercise, default_catalog
from .curriculum import (
    CurriculumTool,
    add_exercises,
    add_quiz_as_exercises,
    apply_content,
    create_curriculum_session,
    quiz_to_exercises,
)
from .student import AcademicAssistant, StudentTool, create_student_session

__all__ = [
    "AcademicAssistant",
    "Announcement",
    "Catalog",
    "Course",
    "CourseContent",
    "CurriculumTool",
    "Exercise",
    "StudentTool",
    "add_exercises",
    "add_quiz_as_exercises",
    "apply_content",
    "create_curriculum_session",
    "create_student_session",
    "default_catalog",
    "quiz_to_exercises",
]
