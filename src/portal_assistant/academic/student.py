"""The student-facing academic assistant: schedule and office-hour questions."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Optional

from portal_assistant.academic.catalog import Catalog
from portal_assistant.client import BaseAsyncLLM
from portal_assistant.errors import InsufficientCreditsError
from portal_assistant.session import ChatSession, TurnOutcome
from portal_assistant.tools import ToolRegistry
from portal_assistant.types import Message, ToolParameter

__all__ = [
    "AcademicAssistant",
    "StudentTool",
    "STUDENT_GREETING",
    "STUDENT_INSTRUCTION",
    "build_student_registry",
    "create_student_session",
]

logger = logging.getLogger(__name__)

STUDENT_INSTRUCTION = (
    "Você é um assistente acadêmico amigável. Use as ferramentas disponíveis para "
    "responder a perguntas sobre horários de aulas e disponibilidade de professores. "
    "Se a informação não estiver disponível, informe ao usuário."
)
STUDENT_GREETING = (
    "Olá! Como posso ajudar com seus estudos hoje? "
    "Pergunte-me sobre horários de aulas ou de professores."
)


class StudentTool(StrEnum):
    GET_COURSE_SCHEDULE = "getCourseSchedule"
    GET_TEACHER_AVAILABILITY = "getTeacherAvailability"


def build_student_registry(catalog: Catalog) -> ToolRegistry:
    """Bind every `StudentTool` to a lookup over *catalog*. Lookups never raise."""
    registry = ToolRegistry()

    @registry.tool(
        StudentTool.GET_COURSE_SCHEDULE,
        description="Obtém o horário de uma disciplina específica.",
        parameters={
            "courseName": ToolParameter(
                "string", 'O nome da disciplina, ex: "Física Clássica"'
            )
        },
    )
    def get_course_schedule(courseName: str) -> str:
        course = catalog.find_course(str(courseName))
        if course is None:
            return f'Curso "{courseName}" não encontrado.'
        return catalog.schedule_for(course) or f"Não encontrei um horário para {courseName}."

    @registry.tool(
        StudentTool.GET_TEACHER_AVAILABILITY,
        description="Obtém os horários de atendimento de um professor.",
        parameters={
            "teacherName": ToolParameter("string", 'O nome do professor, ex: "Prof. Ricardo"')
        },
    )
    def get_teacher_availability(teacherName: str) -> str:
        return (
            catalog.office_hours_for(str(teacherName))
            or f"Não encontrei horários de atendimento para {teacherName}."
        )

    return registry


def create_student_session(llm: BaseAsyncLLM, catalog: Catalog, **kwargs) -> ChatSession:
    return ChatSession(
        llm,
        build_student_registry(catalog),
        system_instruction=STUDENT_INSTRUCTION,
        greeting=STUDENT_GREETING,
        **kwargs,
    )


class AcademicAssistant:
    """
    Student chat gated by a credit balance.

    Each successful turn costs ``cost`` credits; a failed turn is free. With
    fewer credits than the cost, `send` refuses before anything is appended.
    """

    def __init__(self, session: ChatSession, *, credits: int, cost: int = 1) -> None:
        if cost < 0:
            raise ValueError("cost must be >= 0")
        self.session = session
        self.credits = credits
        self.cost = cost

    @property
    def has_credits(self) -> bool:
        return self.credits >= self.cost

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.session.messages

    async def send(self, text: str) -> Optional[TurnOutcome]:
        """Run one turn; returns None for blank input."""
        if not text.strip():
            return None
        if not self.has_credits:
            raise InsufficientCreditsError(self.credits, self.cost)

        outcome = await self.session.send(text)
        if outcome.ok:
            self.credits -= self.cost
            logger.debug("Charged %d credit(s), %d left", self.cost, self.credits)
        return outcome
