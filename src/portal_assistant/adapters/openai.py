"""OpenAI chat-completions adapter (also used for Gemini's compatible endpoint)."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from openai.types.chat import ChatCompletion

from portal_assistant.response import ChatResponse
from portal_assistant.types import ChatMessage, ToolCallRequest, ToolCallResult

logger = logging.getLogger(__name__)


def encode_result(result: Any) -> str:
    """Tool results are always sent back as a ``{"result": ...}`` JSON object."""
    return json.dumps({"result": result}, ensure_ascii=False, default=str)


class OpenAIRequestAdapter:
    """Pure transformations between generic chat messages and OpenAI's wire format."""

    def to_provider(
        self, messages: Sequence[ChatMessage], params: dict[str, Any]
    ) -> dict[str, Any]:
        """Convert generic messages and normalized params to request arguments."""
        wire_messages: list[dict[str, Any]] = []
        for msg in messages:
            wire: dict[str, Any] = {"role": msg["role"]}

            if msg.get("tool_calls"):
                wire["tool_calls"] = msg["tool_calls"]
                # content must be null when tool_calls is present
                wire["content"] = msg.get("content")
            else:
                wire["content"] = msg.get("content") if msg.get("content") is not None else ""

            if msg.get("tool_call_id"):
                wire["tool_call_id"] = msg["tool_call_id"]
            if msg.get("name"):
                wire["name"] = msg["name"]

            wire_messages.append(wire)

        request = {k: v for k, v in params.items() if k != "extra" and v is not None}
        for k, v in (params.get("extra") or {}).items():
            request.setdefault(k, v)

        if not request.get("tools"):
            request.pop("tools", None)
            request.pop("tool_choice", None)

        return {"messages": wire_messages, **request}

    def from_provider(self, raw: ChatCompletion) -> ChatResponse:
        """Convert a ChatCompletion to a ChatResponse."""
        if not raw.choices or not raw.choices[0].message:
            return ChatResponse(content="", raw=raw)

        message = raw.choices[0].message
        tool_calls: list[ToolCallRequest] | None = None

        if message.tool_calls:
            tool_calls = []
            for tc in message.tool_calls:
                tool_calls.append(
                    ToolCallRequest(
                        id=tc.id,
                        name=tc.function.name,
                        arguments=self._parse_arguments(tc.function.arguments),
                    )
                )

        return ChatResponse(content=message.content or "", tool_calls=tool_calls, raw=raw)

    @staticmethod
    def _parse_arguments(raw_args: Any) -> dict[str, Any]:
        """Tool arguments arrive as a JSON string; bad or empty JSON becomes ``{}``."""
        if isinstance(raw_args, dict):
            return raw_args
        if not isinstance(raw_args, str) or not raw_args.strip():
            return {}
        try:
            parsed = json.loads(raw_args)
        except json.JSONDecodeError:
            logger.warning("Bad JSON in tool call arguments: %s", raw_args)
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def assistant_message_from(self, raw: ChatCompletion) -> ChatMessage:
        """Replayable assistant message, including any tool calls."""
        if not raw.choices or not raw.choices[0].message:
            return {"role": "assistant", "content": ""}

        message = raw.choices[0].message
        chat_message: ChatMessage = {"role": "assistant", "content": message.content}

        if message.tool_calls:
            chat_message["tool_calls"] = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {
                        "name": tc.function.name,
                        "arguments": tc.function.arguments,
                    },
                }
                for tc in message.tool_calls
            ]
        elif chat_message["content"] is None:
            chat_message["content"] = ""

        return chat_message

    def tool_result_message(self, result: ToolCallResult) -> ChatMessage:
        return {
            "role": "tool",
            "tool_call_id": result.id,
            "name": result.name,
            "content": encode_result(result.result),
        }
