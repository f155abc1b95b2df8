"""Shared fixtures: a scripted LLM that returns real ChatCompletion objects."""

import json
from typing import Any, Sequence

import pytest
from openai.types.chat.chat_completion import ChatCompletion, Choice
from openai.types.chat.chat_completion_message import ChatCompletionMessage
from openai.types.chat.chat_completion_message_tool_call import (
    ChatCompletionMessageToolCall,
    Function as ToolCallFunction,
)

from portal_assistant.adapters.openai import OpenAIRequestAdapter
from portal_assistant.client import BaseAsyncLLM


def completion(content: str | None = None, tool_calls: Sequence[tuple] = ()) -> ChatCompletion:
    """
    Build a ChatCompletion. *tool_calls* holds ``(id, name, arguments)`` tuples;
    dict arguments are JSON-encoded, strings are sent as-is.
    """
    calls = [
        ChatCompletionMessageToolCall(
            id=call_id,
            type="function",
            function=ToolCallFunction(
                name=name,
                arguments=args if isinstance(args, str) else json.dumps(args),
            ),
        )
        for call_id, name, args in tool_calls
    ]
    message = ChatCompletionMessage(
        role="assistant", content=content, tool_calls=calls or None
    )
    return ChatCompletion(
        id="cmpl-test",
        choices=[
            Choice(
                finish_reason="tool_calls" if calls else "stop",
                index=0,
                message=message,
            )
        ],
        created=0,
        model="test-model",
        object="chat.completion",
    )


class ScriptedLLM(BaseAsyncLLM):
    """Replays a fixed list of completions (or raises the exceptions in it)."""

    def __init__(self, script: Sequence[Any], model: str = "test-model") -> None:
        super().__init__(model=model)
        self.script = list(script)
        self.requests: list[dict[str, Any]] = []
        self._adapter = OpenAIRequestAdapter()

    @property
    def adapter(self) -> OpenAIRequestAdapter:
        return self._adapter

    async def _chat_impl(self, messages, params):
        self.requests.append({"messages": [dict(m) for m in messages], "params": params})
        if not self.script:
            raise AssertionError("ScriptedLLM ran out of scripted responses")
        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        return step


@pytest.fixture
def scripted():
    """Factory fixture: ``scripted(completion(...), ...)`` returns a ScriptedLLM."""

    def make(*steps):
        return ScriptedLLM(steps)

    return make
