"""Prompt formatter: render the conversation for the external agent."""

from __future__ import annotations

from collections.abc import Iterable

from cliprelay.core.models import Role, Turn

HEADER = "Generate the next assistant message to be appended to this conversation."
PLACEHOLDER = "[your generated message will go here]"

_MARKERS = {
    Role.USER: "[USER]",
    Role.ASSISTANT: "[ASSISTANT]",
}


def format_prompt(conversation: Iterable[Turn]) -> str:
    """Render header, every turn in order, and a trailing reply slot.

    Pure and deterministic: the same conversation always yields the same
    prompt.
    """
    parts = [HEADER, "\n\n"]
    for turn in conversation:
        parts.append(f"{_MARKERS[turn.role]}\n\n{turn.content}\n\n")
    parts.append(f"{_MARKERS[Role.ASSISTANT]}\n\n{PLACEHOLDER}")
    return "".join(parts)
