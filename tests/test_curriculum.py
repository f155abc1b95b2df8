"""Tests for the curriculum assistant's generation tools."""

import asyncio
import json

import pytest
from pydantic import ValidationError

from conftest import completion
from portal_assistant.academic import (
    CurriculumTool,
    add_exercises,
    add_quiz_as_exercises,
    apply_content,
    create_curriculum_session,
    default_catalog,
    quiz_to_exercises,
)
from portal_assistant.academic.curriculum import CURRICULUM_ERROR_TEXT, build_curriculum_registry
from portal_assistant.types import Sender

QUIZ = [
    {
        "question": "Qual palavra declara uma constante?",
        "options": {"A": "var", "B": "const", "C": "let", "D": "def"},
        "answer": "B",
    }
]


def test_generate_course_content(scripted):
    llm = scripted(completion(json.dumps({"html": "<h1>Loops</h1>", "js": "for(;;){}"})))
    registry = build_curriculum_registry(llm)

    result = asyncio.run(registry.invoke(CurriculumTool.GENERATE_COURSE_CONTENT, {"topic": "loops"}))

    assert result == {
        "type": "content",
        "summary": 'Aqui está o conteúdo sugerido sobre "loops":',
        "html": "<h1>Loops</h1>",
        "js": "for(;;){}",
    }
    assert llm.requests[0]["params"]["response_format"] == {"type": "json_object"}


def test_generate_exercises_accepts_float_counts(scripted):
    drafts = [{"question": "q1", "answer": "a1"}, {"question": "q2", "answer": "a2"}]
    llm = scripted(completion(json.dumps({"exercises": drafts})))
    registry = build_curriculum_registry(llm)

    result = asyncio.run(
        registry.invoke(CurriculumTool.GENERATE_EXERCISE_QUESTIONS, {"topic": "arrays", "count": 2.0})
    )

    assert result["type"] == "exercises"
    assert result["exercises"] == drafts
    assert "Gere 2 exercícios" in llm.requests[0]["messages"][0]["content"]


def test_generate_quiz(scripted):
    llm = scripted(completion(json.dumps({"quiz": QUIZ})))
    registry = build_curriculum_registry(llm)

    result = asyncio.run(
        registry.invoke(CurriculumTool.GENERATE_MULTIPLE_CHOICE_QUIZ, {"topic": "js", "count": 1})
    )

    assert result["type"] == "quiz"
    assert result["quiz"] == QUIZ


def test_invalid_json_propagates(scripted):
    registry = build_curriculum_registry(scripted(completion("isto não é json")))

    with pytest.raises(ValidationError):
        asyncio.run(registry.invoke(CurriculumTool.GENERATE_COURSE_CONTENT, {"topic": "x"}))


def test_quiz_answer_must_be_an_option(scripted):
    bad = [{**QUIZ[0], "answer": "E"}]
    registry = build_curriculum_registry(scripted(completion(json.dumps({"quiz": bad}))))

    with pytest.raises(ValidationError):
        asyncio.run(
            registry.invoke(CurriculumTool.GENERATE_MULTIPLE_CHOICE_QUIZ, {"topic": "x", "count": 1})
        )


def test_session_surfaces_generated_content(scripted):
    llm = scripted(
        completion(tool_calls=[("c1", "generateCourseContent", {"topic": "loops"})]),
        completion(json.dumps({"html": "<p>x</p>", "js": ""})),
        completion("Conteúdo gerado."),
    )
    session = create_curriculum_session(llm, "Introdução à Programação")

    outcome = asyncio.run(session.send("Crie uma aula sobre loops"))

    assert outcome.ok
    assert "**Introdução à Programação**" in session.messages[0].text
    assert [m.sender for m in session.messages] == [
        Sender.ASSISTANT,
        Sender.USER,
        Sender.ASSISTANT,
        Sender.TOOL_RESULT,
        Sender.ASSISTANT,
    ]
    assert session.messages[2].text == 'Gerando conteúdo sobre "loops"...'
    assert session.messages[3].data["html"] == "<p>x</p>"


def test_invalid_generation_fails_the_turn(scripted):
    llm = scripted(
        completion(tool_calls=[("c1", "generateCourseContent", {"topic": "loops"})]),
        completion("{quebrado"),
    )
    session = create_curriculum_session(llm, "Cálculo I")

    outcome = asyncio.run(session.send("gera"))

    assert isinstance(outcome.error, ValidationError)
    assert session.messages[-1].sender is Sender.ERROR
    assert session.messages[-1].text == CURRICULUM_ERROR_TEXT


def test_quiz_to_exercises():
    assert quiz_to_exercises(QUIZ) == [
        {
            "type": "multiple_choice",
            "question": "Qual palavra declara uma constante?",
            "options": ["var", "const", "let", "def"],
            "answer": "const",
        }
    ]


def test_applying_results_to_a_course():
    catalog = default_catalog()
    course = catalog.course(2)

    apply_content(course, "<h1>novo</h1>", "let y = 1;")
    added = add_exercises(catalog, course, [{"question": "q", "answer": "a"}])
    quiz = add_quiz_as_exercises(catalog, course, QUIZ)

    assert course.content.html == "<h1>novo</h1>"
    assert added[0].type == "text_answer"
    assert quiz[0].type == "multiple_choice"
    assert quiz[0].is_correct("const")
    ids = [ex.id for ex in course.exercises]
    assert len(ids) == len(set(ids))
    assert min(added[0].id, quiz[0].id) > 2


def test_progress_notes_name_the_request():
    """Each generation tool announces what it is about to generate."""
    registry = build_curriculum_registry(None)

    def note(tool, args):
        return registry.declaration(tool).progress_message(args)

    assert note(CurriculumTool.GENERATE_COURSE_CONTENT, {"topic": "loops"}) == (
        'Gerando conteúdo sobre "loops"...'
    )
    assert note(CurriculumTool.GENERATE_EXERCISE_QUESTIONS, {"topic": "arrays", "count": 3.0}) == (
        'Gerando 3 exercícios sobre "arrays"...'
    )
    assert note(CurriculumTool.GENERATE_MULTIPLE_CHOICE_QUIZ, {"topic": "js", "count": 2}) == (
        'Gerando quiz de múltipla escolha sobre "js"...'
    )
