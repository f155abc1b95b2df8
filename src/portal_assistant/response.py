from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from portal_assistant.errors import ProviderError
from portal_assistant.types import ToolCallRequest

__all__ = ["ChatResponse", "FinalAnswer", "ToolCalls", "ModelReply", "reply_from"]


@dataclass
class ChatResponse:
    """Unified response object for all LLM providers."""

    content: str
    tool_calls: list[ToolCallRequest] | None = None
    raw: Any = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def raise_for_error(self) -> None:
        if self.is_error:
            raise ProviderError(self.error or "unknown provider error")


@dataclass(frozen=True, slots=True)
class FinalAnswer:
    """The model answered in natural language."""

    text: str
    raw: Any = None


@dataclass(frozen=True, slots=True)
class ToolCalls:
    """The model asked for one or more local tools to run."""

    calls: tuple[ToolCallRequest, ...]
    raw: Any = None
    text: str = ""

    def __post_init__(self) -> None:
        if not self.calls:
            raise ValueError("ToolCalls needs at least one request")


ModelReply = Union[FinalAnswer, ToolCalls]


def reply_from(response: ChatResponse) -> ModelReply:
    """
    Classify a provider response as either a final answer or a batch of tool calls.

    Raises:
        ProviderError: if *response* carries an error.
    """
    response.raise_for_error()
    if response.tool_calls:
        return ToolCalls(tuple(response.tool_calls), raw=response.raw, text=response.content)
    return FinalAnswer(response.content, raw=response.raw)
