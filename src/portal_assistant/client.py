"""
Async LLM clients with a single ``chat()`` entry point.

Provider failures never escape ``chat()``: they come back as a
`ChatResponse` whose ``error`` is set, so callers decide how a failed
request ends their turn.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, Self, Sequence

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from portal_assistant.adapters import (
    AnthropicRequestAdapter,
    GeminiRequestAdapter,
    OpenAIRequestAdapter,
)
from portal_assistant.config import Provider, get_api_key
from portal_assistant.errors import classify_error
from portal_assistant.params import normalize_params
from portal_assistant.response import ChatResponse
from portal_assistant.types import ChatMessage, ToolCallResult

__all__ = [
    "RequestAdapter",
    "BaseAsyncLLM",
    "OpenAILLM",
    "GeminiLLM",
    "AnthropicLLM",
    "create_llm",
]


class RequestAdapter(Protocol):
    """Converts between the generic chat format and a provider's wire format."""

    def to_provider(
        self, messages: Sequence[ChatMessage], params: dict[str, Any]
    ) -> dict[str, Any]: ...

    def from_provider(self, raw: Any) -> ChatResponse: ...

    def assistant_message_from(self, raw: Any) -> ChatMessage: ...

    def tool_result_message(self, result: ToolCallResult) -> ChatMessage: ...


class BaseAsyncLLM(ABC):
    """
    Abstract base class for async-first LLM wrappers.

    Subclasses implement `_chat_impl` (one raw provider call) and expose the
    matching `adapter`.
    """

    def __init__(
        self,
        model: str,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.model = model
        self.logger = logger or logging.getLogger(__name__)
        self.name = name or self.__class__.__name__

    @abstractmethod
    async def _chat_impl(
        self,
        messages: Sequence[ChatMessage],
        params: dict[str, Any],
    ) -> Any:
        """
        Send *messages* to the provider and return its raw response.

        Args:
            messages: Conversation history in the generic format.
            params: Normalized request parameters.
        """
        ...

    @property
    @abstractmethod
    def adapter(self) -> RequestAdapter:
        """Request adapter for this provider."""
        ...

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        *,
        params: dict[str, Any] | None = None,
    ) -> ChatResponse:
        """Send a chat request and return a single response (possibly an error one)."""
        normalized = normalize_params(params)
        try:
            raw = await self._chat_impl(messages, normalized)
            return self.adapter.from_provider(raw)
        except Exception as exc:
            return self._wrap_error(exc)

    def _wrap_error(self, exc: Exception) -> ChatResponse:
        err = classify_error(exc, self.logger)
        return ChatResponse(content="", error=str(err))

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """Close the underlying HTTP client. Safe to call multiple times."""
        client = getattr(self, "_client", None)
        close = getattr(client, "close", None)
        if close:
            await close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class OpenAILLM(BaseAsyncLLM):
    """
    OpenAI chat-completions client.

    Use ``OpenAILLM.from_client`` to wrap an existing ``AsyncOpenAI``.
    """

    _provider_label = "OpenAI"

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(model=model, logger=logger, name=name)
        self._client = AsyncOpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = self._make_adapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncOpenAI,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        if not isinstance(client, AsyncOpenAI):
            raise TypeError(
                f"{cls.__name__}.from_client expects AsyncOpenAI; got {type(client).__name__}"
            )
        self = cls.__new__(cls)  # bypass __init__
        BaseAsyncLLM.__init__(self, model=model, logger=logger, name=name)
        self._client = client
        self._adapter = self._make_adapter()
        return self

    def _make_adapter(self) -> OpenAIRequestAdapter:
        return OpenAIRequestAdapter()

    @property
    def adapter(self) -> RequestAdapter:
        return self._adapter

    async def _chat_impl(
        self,
        messages: Sequence[ChatMessage],
        params: dict[str, Any],
    ) -> Any:
        args = {"model": self.model, **self._adapter.to_provider(messages, params)}
        self._log(
            f"Sending {len(messages)} messages to {self._provider_label} model {self.model}",
            logging.DEBUG,
        )
        return await self._client.chat.completions.create(**args)


_DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


class GeminiLLM(OpenAILLM):
    """Gemini through its OpenAI-compatible endpoint."""

    _provider_label = "Gemini"

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: str = _DEFAULT_GEMINI_BASE_URL,
    ) -> None:
        super().__init__(
            model,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            logger=logger,
            name=name,
            base_url=base_url,
        )

    def _make_adapter(self) -> OpenAIRequestAdapter:
        return GeminiRequestAdapter()


class AnthropicLLM(BaseAsyncLLM):
    """Anthropic messages client."""

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(model=model, logger=logger, name=name)
        self._client = AsyncAnthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = AnthropicRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncAnthropic,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        if not isinstance(client, AsyncAnthropic):
            raise TypeError(
                f"AnthropicLLM.from_client expects AsyncAnthropic; got {type(client).__name__}"
            )
        self = cls.__new__(cls)  # bypass __init__
        BaseAsyncLLM.__init__(self, model=model, logger=logger, name=name)
        self._client = client
        self._adapter = AnthropicRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        return self._adapter

    async def _chat_impl(
        self,
        messages: Sequence[ChatMessage],
        params: dict[str, Any],
    ) -> Any:
        args = {"model": self.model, **self._adapter.to_provider(messages, params)}
        self._log(
            f"Sending {len(messages)} messages to Anthropic model {self.model}",
            logging.DEBUG,
        )
        return await self._client.messages.create(**args)


_LLM_REGISTRY: dict[Provider, type[OpenAILLM] | type[AnthropicLLM]] = {
    Provider.OPENAI: OpenAILLM,
    Provider.ANTHROPIC: AnthropicLLM,
    Provider.GEMINI: GeminiLLM,
}


def create_llm(
    provider: Provider,
    model: str,
    *,
    api_key: str | None = None,
    client: AsyncOpenAI | AsyncAnthropic | None = None,
    logger: logging.Logger | None = None,
    **provider_kwargs: Any,
) -> BaseAsyncLLM:
    """
    Factory for any supported LLM.

    Args:
        provider: Which provider to use.
        model: Model identifier, e.g. "gemini-2.5-flash".
        api_key: Overrides the environment lookup done by `get_api_key`.
        client: Pre-configured SDK client to wrap instead of building one
            (``AsyncOpenAI`` for OpenAI and Gemini, ``AsyncAnthropic`` for Anthropic).
        logger: Optional custom logger.
        **provider_kwargs: Passed through to the constructor (timeout, max_retries, base_url).
    """
    try:
        llm_cls = _LLM_REGISTRY[Provider(provider)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    if client is not None:
        return llm_cls.from_client(model, client, logger=logger)

    key = api_key or get_api_key(Provider(provider))
    return llm_cls(model, api_key=key, logger=logger, **provider_kwargs)
