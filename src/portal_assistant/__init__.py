"""
portal-assistant: tool-calling chat assistants for an academic portal.
"""

import logging

from .client import AnthropicLLM, BaseAsyncLLM, GeminiLLM, OpenAILLM, create_llm
from .config import AppConfig, Provider, get_api_key
from .conversation import ConversationStore
from .errors import (
    InsufficientCreditsError,
    PortalAssistantError,
    ProviderError,
    ToolArgumentError,
    TurnInProgressError,
    UnknownToolError,
)
from .markdown import markdown_to_html
from .response import ChatResponse, FinalAnswer, ModelReply, ToolCalls, reply_from
from .session import ChatSession, TurnOutcome
from .tools import ToolRegistry
from .types import (
    ChatMessage,
    Message,
    Sender,
    ToolCallRequest,
    ToolCallResult,
    ToolDeclaration,
    ToolParameter,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AnthropicLLM",
    "AppConfig",
    "BaseAsyncLLM",
    "ChatMessage",
    "ChatResponse",
    "ChatSession",
    "ConversationStore",
    "FinalAnswer",
    "GeminiLLM",
    "InsufficientCreditsError",
    "Message",
    "ModelReply",
    "OpenAILLM",
    "PortalAssistantError",
    "Provider",
    "ProviderError",
    "Sender",
    "ToolArgumentError",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolCalls",
    "ToolDeclaration",
    "ToolParameter",
    "ToolRegistry",
    "TurnInProgressError",
    "TurnOutcome",
    "UnknownToolError",
    "create_llm",
    "get_api_key",
    "markdown_to_html",
    "reply_from",
]
