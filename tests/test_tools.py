"""Tests for the tool registry."""

import asyncio

import pytest

from portal_assistant.errors import ToolArgumentError, UnknownToolError
from portal_assistant.tools import ToolRegistry
from portal_assistant.types import ToolParameter


@pytest.fixture
def registry():
    registry = ToolRegistry()

    @registry.tool(
        "echo",
        description="Echo the text",
        parameters={
            "text": ToolParameter("string", "what to echo"),
            "times": ToolParameter("integer", "repeat count", required=False),
        },
    )
    def echo(text, times=1):
        return text * times

    return registry


class TestDeclaration:
    """Declaring tools and exporting their schemas."""

    def test_declarations_and_schema(self, registry):
        """A declaration becomes an OpenAI function tool with its required list."""
        (declaration,) = registry.declarations()

        assert declaration.name == "echo"
        assert declaration.required == ["text"]
        assert registry.openai_tools() == [
            {
                "type": "function",
                "function": {
                    "name": "echo",
                    "description": "Echo the text",
                    "parameters": {
                        "type": "object",
                        "properties": {
                            "text": {"type": "string", "description": "what to echo"},
                            "times": {"type": "integer", "description": "repeat count"},
                        },
                        "required": ["text"],
                    },
                },
            }
        ]
        assert "echo" in registry
        assert len(registry) == 1

    def test_duplicate_names_are_rejected(self, registry):
        """A name can only be declared once per registry."""
        with pytest.raises(ValueError):
            registry.declare("echo", lambda: None, description="again")

    def test_bad_parameter_type(self):
        """Parameter types are limited to JSON-schema primitives."""
        with pytest.raises(ValueError):
            ToolParameter("str")

    def test_progress_message(self):
        """A declared progress callback renders a note from the call arguments."""
        registry = ToolRegistry()
        declaration = registry.declare(
            "slow",
            lambda topic: topic,
            description="slow work",
            parameters={"topic": ToolParameter("string")},
            progress=lambda args: f"Working on {args['topic']}...",
        )

        assert declaration.progress_message({"topic": "loops"}) == "Working on loops..."
        assert registry.declare("fast", lambda: 1, description="x").progress_message({}) is None


class TestInvoke:
    """Running registered tools."""

    def test_invoke_returns_value_unchanged(self, registry):
        """The handler's return value comes back as-is."""
        assert asyncio.run(registry.invoke("echo", {"text": "ab", "times": 2})) == "abab"

    def test_invoke_awaits_async_handlers(self):
        """Coroutine handlers are awaited."""
        registry = ToolRegistry()

        async def double(n):
            return n * 2

        registry.declare(
            "double", double, description="x2", parameters={"n": ToolParameter("number")}
        )

        assert asyncio.run(registry.invoke("double", {"n": 4})) == 8

    def test_undeclared_arguments_are_dropped(self, registry):
        """Extra keys the model invents never reach the handler."""
        result = asyncio.run(
            registry.invoke("echo", {"text": "ab", "semester": "2024", "times": 1})
        )

        assert result == "ab"

    def test_unknown_tool(self, registry):
        """Unregistered names raise UnknownToolError carrying the name."""
        with pytest.raises(UnknownToolError) as info:
            asyncio.run(registry.invoke("nope", {}))
        assert info.value.name == "nope"

    def test_missing_required_argument(self, registry):
        """A missing required argument raises before the handler runs."""
        with pytest.raises(ToolArgumentError):
            asyncio.run(registry.invoke("echo", {"times": 3}))
