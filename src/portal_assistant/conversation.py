from __future__ import annotations

from typing import Iterable, Iterator, Optional

from portal_assistant.types import Message

__all__ = ["ConversationStore"]


class ConversationStore:
    """
    Ordered, append-only history of the messages shown for one chat session.

    Messages are never edited or removed individually; `reset` clears the
    whole history when the owning session starts over.
    """

    def __init__(self, messages: Optional[Iterable[Message]] = None) -> None:
        self._messages: list[Message] = list(messages or ())

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def reset(self) -> None:
        self._messages.clear()

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(messages={len(self)})"
