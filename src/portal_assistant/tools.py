"""
Registry of host-side tools the model may call.

A registry is filled once, when its session is built, and is read-only
afterwards from the dispatch loop's point of view. Each assistant names its
tools with a `StrEnum`, so the set of identifiers a session accepts is closed.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Optional

from portal_assistant.errors import ToolArgumentError, UnknownToolError
from portal_assistant.types import ToolDeclaration, ToolParameter

__all__ = ["ToolRegistry", "ToolHandler"]

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class _Entry:
    declaration: ToolDeclaration
    handler: ToolHandler


class ToolRegistry:
    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    def declare(
        self,
        name: str,
        handler: ToolHandler,
        *,
        description: str,
        parameters: Optional[Mapping[str, ToolParameter]] = None,
        surface_result: bool = False,
        progress: Optional[Callable[[Mapping[str, Any]], str]] = None,
    ) -> ToolDeclaration:
        """Register *handler* under *name* and return its declaration."""
        name = str(name)
        if name in self._entries:
            raise ValueError(f"Tool {name!r} is already declared")

        declaration = ToolDeclaration(
            name=name,
            description=description,
            parameters=parameters or {},
            surface_result=surface_result,
            progress=progress,
        )
        self._entries[name] = _Entry(declaration, handler)
        return declaration

    def tool(
        self,
        name: str,
        *,
        description: str,
        parameters: Optional[Mapping[str, ToolParameter]] = None,
        surface_result: bool = False,
        progress: Optional[Callable[[Mapping[str, Any]], str]] = None,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of `declare`."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.declare(
                name,
                handler,
                description=description,
                parameters=parameters,
                surface_result=surface_result,
                progress=progress,
            )
            return handler

        return decorator

    def declarations(self) -> list[ToolDeclaration]:
        return [entry.declaration for entry in self._entries.values()]

    def declaration(self, name: str) -> ToolDeclaration:
        try:
            return self._entries[name].declaration
        except KeyError:
            raise UnknownToolError(name) from None

    def openai_tools(self) -> list[dict[str, Any]]:
        return [d.to_openai_tool() for d in self.declarations()]

    async def invoke(self, name: str, arguments: Mapping[str, Any]) -> Any:
        """
        Run the tool called *name* with *arguments* and return its value unchanged.

        Only the presence of required arguments is checked; values are passed
        through as the model produced them. Arguments the declaration does not
        name are dropped before the call. Exceptions raised by the handler
        propagate.

        Raises:
            UnknownToolError: no tool is registered under *name*.
            ToolArgumentError: a required argument is missing.
        """
        try:
            entry = self._entries[name]
        except KeyError:
            raise UnknownToolError(name) from None

        missing = [p for p in entry.declaration.required if p not in arguments]
        if missing:
            raise ToolArgumentError(name, missing)

        declared = entry.declaration.parameters
        kwargs = {k: v for k, v in arguments.items() if k in declared}
        undeclared = sorted(k for k in arguments if k not in declared)
        if undeclared:
            logger.debug("Dropping undeclared arguments for %s: %s", name, undeclared)

        logger.debug("Invoking tool %s with %s", name, kwargs)
        result = entry.handler(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[ToolDeclaration]:
        return iter(self.declarations())

    def __len__(self) -> int:
        return len(self._entries)
