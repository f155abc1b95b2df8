"""In-memory course catalog the assistants' tools read from and write to."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Literal, Optional

__all__ = ["Announcement", "Catalog", "Course", "CourseContent", "Exercise", "default_catalog"]

ExerciseType = Literal["multiple_choice", "text_answer"]


@dataclass(slots=True)
class Exercise:
    id: int
    question: str
    answer: str
    type: ExerciseType = "text_answer"
    options: list[str] = field(default_factory=list)

    def is_correct(self, choice: str) -> bool:
        return choice == self.answer


@dataclass(slots=True)
class CourseContent:
    html: str = ""
    js: str = ""


@dataclass(slots=True)
class Course:
    id: int
    name: str
    code: str
    teacher: str
    content: CourseContent = field(default_factory=CourseContent)
    exercises: list[Exercise] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Announcement:
    id: int
    text: str
    date: str


class Catalog:
    """
    Courses plus the schedule and office-hour tables.

    Schedules are keyed by course code, office hours by teacher name.
    """

    def __init__(
        self,
        courses: Iterable[Course] = (),
        schedules: Optional[dict[str, str]] = None,
        office_hours: Optional[dict[str, str]] = None,
        announcements: Iterable[Announcement] = (),
    ) -> None:
        self.courses: list[Course] = list(courses)
        self.schedules = dict(schedules or {})
        self.office_hours = dict(office_hours or {})
        self.announcements: list[Announcement] = list(announcements)

        start = max(
            (ex.id for course in self.courses for ex in course.exercises), default=0
        )
        self._exercise_ids = itertools.count(start + 1)

    def course(self, course_id: int) -> Course:
        for course in self.courses:
            if course.id == course_id:
                return course
        raise KeyError(course_id)

    def find_course(self, name: str) -> Optional[Course]:
        """Case-insensitive exact match on the course name."""
        wanted = name.strip().lower()
        return next((c for c in self.courses if c.name.lower() == wanted), None)

    def schedule_for(self, course: Course) -> Optional[str]:
        return self.schedules.get(course.code)

    def office_hours_for(self, teacher: str) -> Optional[str]:
        return self.office_hours.get(teacher)

    def add_course(self, name: str, code: str, teacher: str) -> Course:
        course = Course(
            id=max((c.id for c in self.courses), default=0) + 1,
            name=name,
            code=code,
            teacher=teacher,
        )
        self.courses.append(course)
        return course

    def remove_course(self, course_id: int) -> None:
        self.courses.remove(self.course(course_id))

    def add_announcement(self, text: str, on: Optional[date] = None) -> Announcement:
        announcement = Announcement(
            id=max((a.id for a in self.announcements), default=0) + 1,
            text=text,
            date=(on or date.today()).isoformat(),
        )
        # newest first
        self.announcements.insert(0, announcement)
        return announcement

    def new_exercise(self, data: dict[str, Any]) -> Exercise:
        """Build an exercise with a fresh id; entries without a type are text answers."""
        return Exercise(
            id=next(self._exercise_ids),
            question=data["question"],
            answer=data["answer"],
            type=data.get("type") or "text_answer",
            options=list(data.get("options") or []),
        )


def default_catalog() -> Catalog:
    """The portal's demo data set."""
    courses = [
        Course(
            id=1,
            name="Cálculo I",
            code="MAT101",
            teacher="Dr. Evelyn",
            content=CourseContent(
                html="<h1>Bem-vindo ao Cálculo I</h1><p>Esta é a introdução ao curso.</p>",
                js='console.log("Hello Cálculo I!");',
            ),
            exercises=[
                Exercise(
                    id=1,
                    type="multiple_choice",
                    question="Qual a derivada de x^2?",
                    options=["2x", "x", "x^2", "2"],
                    answer="2x",
                )
            ],
        ),
        Course(
            id=2,
            name="Introdução à Programação",
            code="CS101",
            teacher="Prof. Ricardo",
            content=CourseContent(
                html=(
                    "<h2>Variáveis em JavaScript</h2><p>Variáveis são usadas para armazenar "
                    "dados. Use <code>let</code>, <code>const</code>, ou <code>var</code>.</p>"
                ),
                js="let x = 10;\nconst PI = 3.14;\nconsole.log(x, PI);",
            ),
            exercises=[
                Exercise(
                    id=2,
                    question='Declare uma constante chamada "GRAVITY" com o valor 9.8',
                    answer="const GRAVITY = 9.8;",
                )
            ],
        ),
        Course(id=3, name="Física Clássica", code="PHY101", teacher="Dr. Monteiro"),
        Course(id=4, name="Comunicação e Escrita", code="LNG101", teacher="Prof. Lúcia"),
    ]
    schedules = {
        "MAT101": "Segundas e Quartas, 10:00 - 12:00, Sala 201",
        "CS101": "Terças e Quintas, 14:00 - 16:00, Laboratório B",
        "PHY101": "Segundas e Sextas, 08:00 - 10:00, Auditório 3",
        "LNG101": "Quartas, 16:00 - 18:00, Sala 105",
    }
    office_hours = {
        "Dr. Evelyn": "Quartas, 13:00 - 15:00, Gabinete 12",
        "Prof. Ricardo": "Quintas, 16:00 - 17:00 (online)",
        "Dr. Monteiro": "Sextas, 10:00 - 11:00, Gabinete 15",
        "Prof. Lúcia": "Terças, 11:00 - 12:00, Sala de Professores",
    }
    announcements = [
        Announcement(1, "Inscrições para o próximo semestre abertas.", "2024-07-20"),
        Announcement(2, "Manutenção do sistema no próximo sábado.", "2024-07-18"),
        Announcement(3, "Palestra sobre carreira em IA na próxima sexta.", "2024-07-15"),
    ]
    return Catalog(courses, schedules, office_hours, announcements)
