"""Gemini adapter.

Gemini is reached through its OpenAI-compatible endpoint, so the wire format
is the OpenAI one. Gemini rejects an empty ``description`` on a function
declaration, so blank descriptions are dropped before sending.
"""

from __future__ import annotations

from typing import Any, Sequence

from portal_assistant.types import ChatMessage

from .openai import OpenAIRequestAdapter


class GeminiRequestAdapter(OpenAIRequestAdapter):
    def to_provider(
        self, messages: Sequence[ChatMessage], params: dict[str, Any]
    ) -> dict[str, Any]:
        request = super().to_provider(messages, params)
        if "tools" in request:
            request["tools"] = [self._strip_blank_description(t) for t in request["tools"]]
        return request

    @staticmethod
    def _strip_blank_description(tool: dict[str, Any]) -> dict[str, Any]:
        func = tool.get("function")
        if not func or func.get("description"):
            return tool
        return {**tool, "function": {k: v for k, v in func.items() if k != "description"}}
