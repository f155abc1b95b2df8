"""
Exception hierarchy for portal-assistant.

Provider SDK failures are folded into a single `ProviderError` with a short,
user-safe message; the original exception stays reachable through
``original_exc`` and ``__cause__`` for full tracebacks.
"""

from __future__ import annotations

import importlib
import logging
from typing import Final, Optional, Type

__all__: tuple[str, ...] = (
    "PortalAssistantError",
    "ProviderError",
    "UnknownToolError",
    "ToolArgumentError",
    "TurnInProgressError",
    "InsufficientCreditsError",
    "classify_error",
)


class PortalAssistantError(Exception):
    """Base class for every error raised by this package."""


class ProviderError(PortalAssistantError, RuntimeError):
    """The model provider could not produce a usable response.

    Attributes:
        original_exc: The underlying SDK exception, if any.
    """

    def __init__(self, message: str, original_exc: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        if original_exc is not None:
            self.__cause__ = original_exc


class UnknownToolError(PortalAssistantError, LookupError):
    """A tool call named a tool that is not in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name!r}")
        self.name = name


class ToolArgumentError(PortalAssistantError, TypeError):
    """A tool call is missing an argument its declaration marks as required."""

    def __init__(self, name: str, missing: list[str]) -> None:
        super().__init__(f"Tool {name!r} missing required arguments: {', '.join(missing)}")
        self.name = name
        self.missing = missing


class TurnInProgressError(PortalAssistantError):
    """`send` was called while the previous turn of the session is still running."""


class InsufficientCreditsError(PortalAssistantError):
    def __init__(self, credits: int, cost: int) -> None:
        super().__init__(f"Not enough credits: have {credits}, need {cost}")
        self.credits = credits
        self.cost = cost


def _import_exception(path: str) -> Type[BaseException]:
    """Import an SDK exception type by dotted path."""
    module_name, _, attr = path.rpartition(".")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


_RATE_LIMIT_ERRORS: Final[tuple[Type[BaseException], ...]] = (
    _import_exception("openai.RateLimitError"),
    _import_exception("anthropic.RateLimitError"),
)

_CONN_ERRORS: Final[tuple[Type[BaseException], ...]] = (
    _import_exception("openai.APIConnectionError"),
    _import_exception("anthropic.APIConnectionError"),
    TimeoutError,
    ConnectionError,
)

_API_ERRORS: Final[tuple[Type[BaseException], ...]] = (
    _import_exception("openai.APIError"),
    _import_exception("anthropic.APIError"),
)


def classify_error(
    exc: BaseException,
    logger: Optional[logging.Logger] = None,
) -> ProviderError:
    """Wrap an SDK exception in a ProviderError with a concise message."""
    log = logger or logging.getLogger(__name__)

    # rate-limit and connection errors subclass APIError, so order matters
    if isinstance(exc, _RATE_LIMIT_ERRORS):
        msg = "Rate limit exceeded, retry later"
    elif isinstance(exc, _CONN_ERRORS):
        msg = "Connection problem, unable to reach the LLM provider"
    elif isinstance(exc, _API_ERRORS):
        status = getattr(exc, "status_code", "unknown")
        msg = f"Provider reported an error ({status})"
    else:
        msg = exc.__class__.__name__

    log.warning("Wrapping provider exception: %s", msg, exc_info=exc)
    return ProviderError(f"{msg}: {exc}", exc)
