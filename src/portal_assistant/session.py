"""
One chat conversation with a model that can call local tools.

A `ChatSession` is built once per conversation and passed wherever the
conversation is driven from. It owns three things: the displayed
`ConversationStore`, the provider-level message history that gives the model
its context, and the loading flag that keeps turns from overlapping.

A turn (`ChatSession.send`) runs at most one tool round:

    user text -> model -> [tool calls -> local tools -> results -> model] -> answer

The reply that follows the tool results is final even if it asks for more
tools, which keeps the number of model calls per turn at two or fewer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from portal_assistant.client import BaseAsyncLLM
from portal_assistant.conversation import ConversationStore
from portal_assistant.errors import TurnInProgressError, UnknownToolError
from portal_assistant.params import merge_params
from portal_assistant.response import FinalAnswer, ToolCalls, reply_from
from portal_assistant.tools import ToolRegistry
from portal_assistant.types import ChatMessage, Message, ToolCallRequest, ToolCallResult

__all__ = ["ChatSession", "TurnOutcome", "DEFAULT_ERROR_TEXT"]

DEFAULT_ERROR_TEXT = "Desculpe, não consegui processar sua solicitação. Tente novamente."


@dataclass(frozen=True)
class TurnOutcome:
    """What one call to `ChatSession.send` produced."""

    reply: Message
    tool_results: tuple[ToolCallResult, ...] = ()
    skipped_calls: tuple[ToolCallRequest, ...] = ()
    error: Optional[BaseException] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None


class ChatSession:
    def __init__(
        self,
        llm: BaseAsyncLLM,
        registry: Optional[ToolRegistry] = None,
        *,
        system_instruction: Optional[str] = None,
        params: Optional[dict[str, Any]] = None,
        store: Optional[ConversationStore] = None,
        greeting: Optional[str] = None,
        report_unknown_tools: bool = False,
        error_text: str = DEFAULT_ERROR_TEXT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Args:
            llm: Client used for every model request of this conversation.
            registry: Tools offered to the model; may be empty.
            system_instruction: Sent as the first (system) message of the history.
            params: Default request params (temperature, max_tokens, ...).
            store: Displayed history; a fresh one is created when omitted.
            greeting: Assistant message shown before the first turn. It is
                displayed only and never sent to the model.
            report_unknown_tools: Feed an error result back to the model for
                tool names the registry does not know, instead of only
                skipping them.
            error_text: Text of the error message appended when a turn fails.
        """
        self.llm = llm
        self.registry = registry or ToolRegistry()
        self.system_instruction = system_instruction
        self.params = dict(params or {})
        self.store = store if store is not None else ConversationStore()
        self.greeting = greeting
        self.report_unknown_tools = report_unknown_tools
        self.error_text = error_text
        self.logger = logger or logging.getLogger(__name__)

        self._history: list[ChatMessage] = []
        self._busy = False
        self._start()

    def _start(self) -> None:
        self._history = []
        if self.system_instruction:
            self._history.append({"role": "system", "content": self.system_instruction})
        if self.greeting:
            self.store.append(Message.assistant(self.greeting))

    @property
    def busy(self) -> bool:
        """True while a turn is outstanding."""
        return self._busy

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.store.snapshot()

    @property
    def history(self) -> tuple[ChatMessage, ...]:
        """Provider-level history sent to the model (read-only copy)."""
        return tuple(self._history)

    def reset(self) -> None:
        """Start the conversation over: clears both histories and re-shows the greeting."""
        if self._busy:
            raise TurnInProgressError("Cannot reset while a turn is running")
        self.store.reset()
        self._start()

    async def send(self, text: str) -> TurnOutcome:
        """
        Drive one user turn to completion.

        Failures of the model request or of a tool are not raised: they end
        the turn with a single error message in the store and are reported
        through `TurnOutcome.error`. The user's message stays in the store.

        Raises:
            TurnInProgressError: the previous turn of this session has not finished.
        """
        if self._busy:
            raise TurnInProgressError("A turn is already in progress for this session")

        self._busy = True
        checkpoint = len(self._history)
        try:
            self.store.append(Message.user(text))
            self._history.append({"role": "user", "content": text})
            try:
                return await self._run_turn()
            except Exception as exc:
                self.logger.exception("Turn failed: %s", exc)
                # the next turn must not replay a half-finished exchange
                del self._history[checkpoint:]
                reply = Message.error(self.error_text)
                self.store.append(reply)
                return TurnOutcome(reply=reply, error=exc)
        finally:
            self._busy = False

    def _request_params(self) -> dict[str, Any]:
        if not len(self.registry):
            return merge_params(self.params, None)
        return merge_params(self.params, {"tools": self.registry.openai_tools()})

    async def _run_turn(self) -> TurnOutcome:
        params = self._request_params()

        match reply_from(await self.llm.chat(self._history, params=params)):
            case FinalAnswer(text=text):
                return self._finish(text)
            case ToolCalls() as first:
                return await self._tool_round(first, params)

    async def _tool_round(self, first: ToolCalls, params: dict[str, Any]) -> TurnOutcome:
        adapter = self.llm.adapter
        results, skipped = await self._resolve(first)

        if not results:
            # nothing to feed back; whatever text came with the calls is the answer
            return self._finish(first.text, skipped=skipped)

        # every replayed tool call needs a matching result, so skipped calls are left out
        answered = {result.id for result in results}
        assistant = adapter.assistant_message_from(first.raw)
        assistant["tool_calls"] = [
            tc for tc in assistant.get("tool_calls", []) if tc["id"] in answered
        ]
        self._history.append(assistant)
        for result in results:
            self._history.append(adapter.tool_result_message(result))

        second = await self.llm.chat(self._history, params=params)
        second.raise_for_error()
        if second.tool_calls:
            self.logger.info(
                "Model asked for %d more tool call(s) after the tool round; ignoring",
                len(second.tool_calls),
            )
        return self._finish(second.content, results=results, skipped=skipped)

    async def _resolve(
        self, reply: ToolCalls
    ) -> tuple[list[ToolCallResult], list[ToolCallRequest]]:
        """Run each requested tool in order; unknown names are skipped, not fatal."""
        results: list[ToolCallResult] = []
        skipped: list[ToolCallRequest] = []

        for call in reply.calls:
            if call.name in self.registry:
                note = self.registry.declaration(call.name).progress_message(call.arguments)
                if note:
                    self.store.append(Message.assistant(note))
            try:
                value = await self.registry.invoke(call.name, call.arguments)
            except UnknownToolError:
                self.logger.warning("Model requested unknown tool %r; skipping", call.name)
                skipped.append(call)
                if self.report_unknown_tools:
                    results.append(
                        ToolCallResult(call.id, call.name, {"error": f"Unknown tool: {call.name}"})
                    )
                continue

            results.append(ToolCallResult(call.id, call.name, value))
            if self.registry.declaration(call.name).surface_result:
                self.store.append(self._surface(call, value))

        return results, skipped

    @staticmethod
    def _surface(call: ToolCallRequest, value: Any) -> Message:
        if isinstance(value, dict):
            return Message.tool_result(str(value.get("summary") or call.name), value)
        return Message.tool_result(call.name, {"result": value})

    def _finish(
        self,
        text: str,
        *,
        results: list[ToolCallResult] | None = None,
        skipped: list[ToolCallRequest] | None = None,
    ) -> TurnOutcome:
        # stored as plain text so unanswered tool calls never reach the next request.
        # Anthropic rejects empty assistant turns.
        if text.strip():
            self._history.append({"role": "assistant", "content": text})
        reply = Message.assistant(text)
        self.store.append(reply)
        return TurnOutcome(
            reply=reply,
            tool_results=tuple(results or ()),
            skipped_calls=tuple(skipped or ()),
        )
