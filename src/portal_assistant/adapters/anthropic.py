"""Anthropic messages adapter."""

from __future__ import annotations

from typing import Any, Sequence

from anthropic.types import Message

from portal_assistant.adapters.openai import OpenAIRequestAdapter, encode_result
from portal_assistant.response import ChatResponse
from portal_assistant.types import ChatMessage, ToolCallRequest, ToolCallResult

_DEFAULT_MAX_TOKENS = 4096


def _replay_input(function: dict[str, Any]) -> dict[str, Any]:
    if "input" in function:
        return function["input"]
    return OpenAIRequestAdapter._parse_arguments(function.get("arguments"))


class AnthropicRequestAdapter:
    """Converts the generic (OpenAI-shaped) history and params to Anthropic's format."""

    def to_provider(
        self, messages: Sequence[ChatMessage], params: dict[str, Any]
    ) -> dict[str, Any]:
        system_prompt = ""
        wire_messages: list[dict[str, Any]] = []

        for msg in messages:
            role = msg["role"]
            if role == "system":
                system_prompt = msg.get("content") or ""
                continue

            if role == "tool":
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg["tool_call_id"],
                    "content": msg.get("content", ""),
                }
                # all results of one round go into a single user turn
                previous = wire_messages[-1] if wire_messages else None
                if previous and previous.get("_tool_results"):
                    previous["content"].append(block)
                else:
                    wire_messages.append(
                        {"role": "user", "content": [block], "_tool_results": True}
                    )
                continue

            content = self._content_of(msg)
            if role == "assistant" and isinstance(content, str) and not content.strip():
                # Anthropic rejects empty assistant turns
                continue
            wire_messages.append({"role": role, "content": content})

        for wire in wire_messages:
            wire.pop("_tool_results", None)

        request = {k: v for k, v in params.items() if k != "extra" and v is not None}
        extras = params.get("extra") or {}

        request.setdefault("max_tokens", _DEFAULT_MAX_TOKENS)
        # JSON mode has no Anthropic equivalent; prompts already ask for JSON
        request.pop("response_format", None)
        request.pop("seed", None)

        if "stop" in request:
            stop = request.pop("stop")
            request["stop_sequences"] = stop if isinstance(stop, list) else [stop]

        if request.get("tools"):
            request["tools"] = [self._convert_tool(tool) for tool in request["tools"]]
        else:
            request.pop("tools", None)
        request.pop("tool_choice", None)

        for k, v in extras.items():
            request.setdefault(k, v)

        payload: dict[str, Any] = {"messages": wire_messages, **request}
        if system_prompt:
            payload["system"] = system_prompt
        return payload

    @staticmethod
    def _content_of(msg: ChatMessage) -> Any:
        """Assistant tool calls replayed from history become tool_use blocks."""
        tool_calls = msg.get("tool_calls")
        if not tool_calls:
            content = msg.get("content")
            return "" if content is None else content

        blocks: list[dict[str, Any]] = []
        if msg.get("content"):
            blocks.append({"type": "text", "text": msg["content"]})
        for call in tool_calls:
            blocks.append(
                {
                    "type": "tool_use",
                    "id": call["id"],
                    "name": call["function"]["name"],
                    "input": _replay_input(call["function"]),
                }
            )
        return blocks

    @staticmethod
    def _convert_tool(tool: dict[str, Any]) -> dict[str, Any]:
        if tool.get("type") != "function":
            return tool
        func = tool["function"]
        return {
            "name": func["name"],
            "description": func.get("description", ""),
            "input_schema": func.get("parameters", {"type": "object", "properties": {}}),
        }

    def from_provider(self, raw: Message) -> ChatResponse:
        text_parts: list[str] = []
        tool_calls: list[ToolCallRequest] = []

        for block in raw.content or []:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    ToolCallRequest(
                        id=block.id,
                        name=block.name,
                        arguments=dict(block.input) if hasattr(block.input, "items") else {},
                    )
                )

        return ChatResponse(content="".join(text_parts), tool_calls=tool_calls or None, raw=raw)

    def assistant_message_from(self, raw: Message) -> ChatMessage:
        """
        Store the assistant turn in the generic shape so the history stays
        provider-neutral; ``input`` keeps the decoded arguments for replay.
        """
        text_parts: list[str] = []
        tool_calls: list[dict[str, Any]] = []

        for block in raw.content or []:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    {
                        "id": block.id,
                        "type": "function",
                        "function": {
                            "name": block.name,
                            "input": dict(block.input) if hasattr(block.input, "items") else {},
                        },
                    }
                )

        chat_message: ChatMessage = {"role": "assistant", "content": "".join(text_parts)}
        if tool_calls:
            chat_message["tool_calls"] = tool_calls
        return chat_message

    def tool_result_message(self, result: ToolCallResult) -> ChatMessage:
        return {
            "role": "tool",
            "tool_call_id": result.id,
            "name": result.name,
            "content": encode_result(result.result),
        }
