"""Interactive terminal front end for the student and curriculum assistants."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from portal_assistant.academic import (
    AcademicAssistant,
    create_curriculum_session,
    create_student_session,
    default_catalog,
)
from portal_assistant.client import create_llm
from portal_assistant.config import DEFAULT_MODELS, AppConfig, Provider
from portal_assistant.errors import InsufficientCreditsError
from portal_assistant.markdown import markdown_to_html
from portal_assistant.session import ChatSession
from portal_assistant.types import Message, Sender

logger = logging.getLogger("portal_assistant.cli")

_QUIT = {"exit", "quit", ":q"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="portal_assistant")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    chat = commands.add_parser("chat", help="talk to an assistant")
    chat.add_argument("--role", choices=("student", "admin"), default="student")
    chat.add_argument("--credits", type=int, help="starting credits (student only)")
    chat.add_argument("--course", help="course the curriculum assistant works on (admin only)")
    chat.add_argument("--provider", choices=[p.value for p in Provider])
    chat.add_argument("--model")

    serve = commands.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=4242)
    return parser


def print_message(message: Message, out=None) -> None:
    out = out or sys.stdout
    if message.sender is Sender.TOOL_RESULT:
        print(message.text, file=out)
        print(json.dumps(message.data, ensure_ascii=False, indent=2), file=out)
    elif message.sender is Sender.USER:
        return
    else:
        print(markdown_to_html(message.text), file=out)


async def _read_line(prompt: str) -> Optional[str]:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


async def run_chat(args: argparse.Namespace, config: AppConfig) -> int:
    provider = Provider(args.provider) if args.provider else config.provider
    model = args.model or (config.model if provider is config.provider else DEFAULT_MODELS[provider])
    catalog = default_catalog()

    async with create_llm(provider, model) as llm:
        assistant: Optional[AcademicAssistant] = None
        if args.role == "admin":
            course = catalog.find_course(args.course) if args.course else catalog.courses[0]
            if course is None:
                print(f"Unknown course: {args.course}", file=sys.stderr)
                return 2
            session: ChatSession = create_curriculum_session(llm, course.name)
        else:
            session = create_student_session(llm, catalog)
            credits = args.credits if args.credits is not None else config.new_user_starting_credits
            assistant = AcademicAssistant(session, credits=credits, cost=config.assistant_credit_cost)

        for message in session.messages:
            print_message(message)

        while True:
            text = await _read_line("> ")
            if text is None or text.strip().lower() in _QUIT:
                return 0
            if not text.strip():
                continue

            seen = len(session.messages)
            if assistant is not None:
                try:
                    await assistant.send(text)
                except InsufficientCreditsError as exc:
                    print(f"[{exc}]")
                    continue
            else:
                await session.send(text)

            for message in session.messages[seen:]:
                print_message(message)
            if assistant is not None:
                print(f"[créditos: {assistant.credits}]")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = AppConfig.from_env()
    if args.command == "serve":
        from portal_assistant.server import create_app

        create_app(config).run(host=args.host, port=args.port)
        return 0
    try:
        return asyncio.run(run_chat(args, config))
    except KeyboardInterrupt:
        return 130
    except RuntimeError as exc:
        # missing API key
        logger.error("%s", exc)
        return 1
