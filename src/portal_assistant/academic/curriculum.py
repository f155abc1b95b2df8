"""
The admin-facing curriculum assistant.

Its tools ask the model for structured JSON (lesson content, exercises, a
multiple-choice quiz), validate it with pydantic and surface the result to the
admin, who can then apply it to a course.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any, Iterable

from pydantic import BaseModel, model_validator

from portal_assistant.academic.catalog import Catalog, Course, Exercise
from portal_assistant.client import BaseAsyncLLM
from portal_assistant.session import ChatSession
from portal_assistant.tools import ToolRegistry
from portal_assistant.types import ToolParameter

__all__ = [
    "CurriculumTool",
    "ExerciseDraft",
    "GeneratedContent",
    "QuizQuestion",
    "CURRICULUM_INSTRUCTION",
    "CURRICULUM_ERROR_TEXT",
    "add_exercises",
    "add_quiz_as_exercises",
    "apply_content",
    "build_curriculum_registry",
    "create_curriculum_session",
    "quiz_to_exercises",
]

logger = logging.getLogger(__name__)

CURRICULUM_INSTRUCTION = (
    "Você é um assistente de design instrucional especialista. Ajude o administrador "
    "a criar conteúdo de curso, exercícios e quizzes. Use as ferramentas disponíveis "
    "para gerar o material solicitado."
)
CURRICULUM_ERROR_TEXT = "Ocorreu um erro ao gerar a resposta."

_JSON_MODE = {"response_format": {"type": "json_object"}}


class CurriculumTool(StrEnum):
    GENERATE_COURSE_CONTENT = "generateCourseContent"
    GENERATE_EXERCISE_QUESTIONS = "generateExerciseQuestions"
    GENERATE_MULTIPLE_CHOICE_QUIZ = "generateMultipleChoiceQuiz"


class GeneratedContent(BaseModel):
    html: str
    js: str


class ExerciseDraft(BaseModel):
    question: str
    answer: str


class QuizQuestion(BaseModel):
    question: str
    options: dict[str, str]
    answer: str

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> "QuizQuestion":
        if self.answer not in self.options:
            raise ValueError(f"answer {self.answer!r} is not one of {sorted(self.options)}")
        return self


class _ExerciseSet(BaseModel):
    exercises: list[ExerciseDraft]


class _Quiz(BaseModel):
    quiz: list[QuizQuestion]


def _count_label(count: Any) -> str:
    try:
        return str(int(count))
    except (TypeError, ValueError):
        return str(count)


async def _generate_json(llm: BaseAsyncLLM, prompt: str) -> str:
    response = await llm.chat([{"role": "user", "content": prompt}], params=_JSON_MODE)
    response.raise_for_error()
    return response.content


def build_curriculum_registry(llm: BaseAsyncLLM) -> ToolRegistry:
    """
    Bind every `CurriculumTool` to a JSON generation call on *llm*.

    Malformed or invalid JSON raises (``pydantic.ValidationError``), which
    fails the turn rather than surfacing half a result.
    """
    registry = ToolRegistry()

    @registry.tool(
        CurriculumTool.GENERATE_COURSE_CONTENT,
        description=(
            "Gera conteúdo de aula em HTML e código de exemplo em JavaScript "
            "para um tópico específico."
        ),
        parameters={
            "topic": ToolParameter(
                "string",
                'O tópico para o qual o conteúdo deve ser gerado, ex: "loops for em javascript"',
            )
        },
        surface_result=True,
        progress=lambda args: f'Gerando conteúdo sobre "{args.get("topic", "")}"...',
    )
    async def generate_course_content(topic: str) -> dict[str, Any]:
        raw = await _generate_json(
            llm,
            f'Gere uma lição em HTML simples e um exemplo de código JavaScript relacionado '
            f'para o tópico: "{topic}". Retorne a resposta como um objeto JSON com as chaves '
            f'"html" e "js". O HTML deve ser bem estruturado e o JS deve ser um exemplo prático.',
        )
        content = GeneratedContent.model_validate_json(raw)
        return {
            "type": "content",
            "summary": f'Aqui está o conteúdo sugerido sobre "{topic}":',
            **content.model_dump(),
        }

    @registry.tool(
        CurriculumTool.GENERATE_EXERCISE_QUESTIONS,
        description=(
            "Gera um número especificado de exercícios com perguntas e respostas para um tópico."
        ),
        parameters={
            "topic": ToolParameter(
                "string", 'O tópico para os exercícios, ex: "Arrays em JavaScript"'
            ),
            "count": ToolParameter("number", "O número de exercícios a serem gerados."),
        },
        surface_result=True,
        progress=lambda args: (
            f'Gerando {_count_label(args.get("count"))} exercícios sobre "{args.get("topic", "")}"...'
        ),
    )
    async def generate_exercise_questions(topic: str, count: float) -> dict[str, Any]:
        count = int(count)
        raw = await _generate_json(
            llm,
            f'Gere {count} exercícios com perguntas e respostas para o tópico: "{topic}". '
            f'Retorne a resposta como um objeto JSON com a chave "exercises", um array de '
            f'objetos onde cada objeto tem as chaves "question" e "answer".',
        )
        drafts = _ExerciseSet.model_validate_json(raw).exercises
        return {
            "type": "exercises",
            "summary": f'Aqui estão {count} exercícios sugeridos sobre "{topic}":',
            "exercises": [d.model_dump() for d in drafts],
        }

    @registry.tool(
        CurriculumTool.GENERATE_MULTIPLE_CHOICE_QUIZ,
        description="Gera um quiz de múltipla escolha com um número especificado de questões.",
        parameters={
            "topic": ToolParameter("string", 'O tópico para o quiz, ex: "Funções em JavaScript"'),
            "count": ToolParameter("number", "O número de questões a serem geradas."),
        },
        surface_result=True,
        progress=lambda args: f'Gerando quiz de múltipla escolha sobre "{args.get("topic", "")}"...',
    )
    async def generate_multiple_choice_quiz(topic: str, count: float) -> dict[str, Any]:
        count = int(count)
        raw = await _generate_json(
            llm,
            f'Gere um quiz de múltipla escolha com {count} questões sobre o tópico: "{topic}". '
            f'Retorne a resposta como um objeto JSON com a chave "quiz", um array de objetos. '
            f'Cada objeto deve ter as chaves: "question" (string), "options" (um objeto com '
            f'chaves "A", "B", "C", "D"), e "answer" (a chave da resposta correta, ex: "B").',
        )
        questions = _Quiz.model_validate_json(raw).quiz
        return {
            "type": "quiz",
            "summary": f'Aqui está um quiz sugerido sobre "{topic}":',
            "quiz": [q.model_dump() for q in questions],
        }

    return registry


def create_curriculum_session(
    llm: BaseAsyncLLM, course_name: str, **kwargs: Any
) -> ChatSession:
    greeting = (
        f"Olá! Como posso ajudar a criar o conteúdo para **{course_name}**? "
        "Peça para gerar conteúdo, exercícios ou um quiz de múltipla escolha sobre um tópico."
    )
    kwargs.setdefault("error_text", CURRICULUM_ERROR_TEXT)
    return ChatSession(
        llm,
        build_curriculum_registry(llm),
        system_instruction=CURRICULUM_INSTRUCTION,
        greeting=greeting,
        **kwargs,
    )


def quiz_to_exercises(quiz: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Turn generated quiz questions into multiple-choice exercise dicts."""
    exercises = []
    for item in quiz:
        question = QuizQuestion.model_validate(item)
        exercises.append(
            {
                "type": "multiple_choice",
                "question": question.question,
                "options": list(question.options.values()),
                "answer": question.options[question.answer],
            }
        )
    return exercises


def apply_content(course: Course, html: str, js: str) -> None:
    course.content.html = html
    course.content.js = js


def add_exercises(
    catalog: Catalog, course: Course, exercises: Iterable[dict[str, Any]]
) -> list[Exercise]:
    added = [catalog.new_exercise(data) for data in exercises]
    course.exercises.extend(added)
    logger.info("Added %d exercise(s) to %s", len(added), course.code)
    return added


def add_quiz_as_exercises(
    catalog: Catalog, course: Course, quiz: Iterable[dict[str, Any]]
) -> list[Exercise]:
    return add_exercises(catalog, course, quiz_to_exercises(quiz))
