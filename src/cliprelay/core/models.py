"""Core data models for cliprelay."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """A single committed message in the conversation."""

    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> Turn:
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> Turn:
        return cls(role=Role.ASSISTANT, content=content)


@dataclass
class Conversation:
    """Ordered, append-only sequence of turns.

    Insertion order is the conversation order and is replayed verbatim
    into the prompt.
    """

    turns: list[Turn] = field(default_factory=list)

    def append(self, turn: Turn) -> None:
        self.turns.append(turn)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.turns)

    def __len__(self) -> int:
        return len(self.turns)

    @property
    def last(self) -> Turn | None:
        return self.turns[-1] if self.turns else None
