"""Tests for the terminal front end's argument parsing and rendering."""

import io
import json

from portal_assistant.cli import build_parser, print_message
from portal_assistant.types import Message


def test_chat_arguments():
    args = build_parser().parse_args(["chat", "--role", "admin", "--course", "Cálculo I"])

    assert args.command == "chat"
    assert args.role == "admin"
    assert args.course == "Cálculo I"
    assert args.credits is None


def test_assistant_messages_are_rendered_as_html():
    out = io.StringIO()
    print_message(Message.assistant("# Oi\n* **a**"), out)
    assert out.getvalue() == "<h1>Oi</h1><ul><li><strong>a</strong></li></ul>\n"


def test_tool_results_are_printed_as_json():
    out = io.StringIO()
    print_message(Message.tool_result("Quiz", {"type": "quiz", "quiz": []}), out)

    summary, payload = out.getvalue().split("\n", 1)
    assert summary == "Quiz"
    assert json.loads(payload) == {"type": "quiz", "quiz": []}


def test_user_messages_are_not_echoed():
    out = io.StringIO()
    print_message(Message.user("oi"), out)
    assert out.getvalue() == ""
