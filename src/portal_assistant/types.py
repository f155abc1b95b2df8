"""
Provider-neutral dataclasses shared by the conversation, the tool registry
and the dispatch loop.

Everything provider-specific lives in `portal_assistant.adapters`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

__all__ = [
    "ChatMessage",
    "Message",
    "Sender",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolDeclaration",
    "ToolParameter",
]

# Provider-level message (role/content dicts) kept for model context.
ChatMessage = dict[str, Any]

_JSON_TYPES = frozenset({"string", "number", "integer", "boolean", "object", "array"})


class Sender(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    ERROR = "error"
    TOOL_RESULT = "tool_result"


@dataclass(frozen=True, slots=True)
class Message:
    """One displayed entry of a conversation."""

    sender: Sender
    text: str
    data: Optional[dict[str, Any]] = None

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(Sender.USER, text)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(Sender.ASSISTANT, text)

    @classmethod
    def error(cls, text: str) -> "Message":
        return cls(Sender.ERROR, text)

    @classmethod
    def tool_result(cls, text: str, data: dict[str, Any]) -> "Message":
        return cls(Sender.TOOL_RESULT, text, data)


@dataclass(frozen=True, slots=True)
class ToolParameter:
    type: str
    description: str = ""
    required: bool = True

    def __post_init__(self) -> None:
        if self.type not in _JSON_TYPES:
            raise ValueError(f"Unsupported parameter type {self.type!r}")


@dataclass(frozen=True, slots=True)
class ToolDeclaration:
    """Declarative description of a host-side tool, as shown to the model."""

    name: str
    description: str
    parameters: Mapping[str, ToolParameter] = field(default_factory=dict)
    # also show the structured result to the user as a tool_result message
    surface_result: bool = False
    # builds a note shown to the user before the tool runs
    progress: Optional[Callable[[Mapping[str, Any]], str]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def required(self) -> list[str]:
        return [name for name, p in self.parameters.items() if p.required]

    def progress_message(self, arguments: Mapping[str, Any]) -> Optional[str]:
        return self.progress(arguments) if self.progress else None

    def to_json_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                name: {"type": p.type, "description": p.description}
                for name, p in self.parameters.items()
            },
            "required": self.required,
        }

    def to_openai_tool(self) -> dict[str, Any]:
        """OpenAI/Gemini ``tools`` entry; the Anthropic adapter converts from this shape."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.to_json_schema(),
            },
        }


@dataclass(frozen=True, slots=True)
class ToolCallRequest:
    """A model-agnostic request emitted by the LLM to call a local tool."""

    id: str
    name: str
    arguments: dict[str, Any]


@dataclass(frozen=True, slots=True)
class ToolCallResult:
    """Payload sent back to the LLM after the tool finished running."""

    id: str  # must match the request id
    name: str
    result: Any
