"""Terminal rendering and operator acknowledgement."""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Iterable
from typing import IO

import click

from cliprelay.core.models import Role, Turn

log = logging.getLogger(__name__)

_PREFIX = {Role.USER: ">", Role.ASSISTANT: "|"}
_COLOR = {Role.USER: "bright_black", Role.ASSISTANT: "yellow"}


def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap text, collapsing whitespace runs; long words are never split."""
    return textwrap.wrap(
        " ".join(text.split()), width=width, break_long_words=False, break_on_hyphens=False
    )


class Console:
    """Line-oriented output sink plus the operator's Enter-key signal."""

    def __init__(
        self,
        wrap_width: int = 70,
        clear_screen: bool = True,
        input_stream: IO[str] | None = None,
    ) -> None:
        self.wrap_width = wrap_width
        self.clear_screen = clear_screen
        self._input = input_stream

    def show_conversation(self, turns: Iterable[Turn]) -> None:
        if self.clear_screen:
            click.clear()
        click.echo("=== Conversation ===\n")
        for turn in turns:
            prefix = _PREFIX[turn.role]
            for line in wrap_text(turn.content, self.wrap_width):
                click.echo(click.style(f"{prefix} {line}", fg=_COLOR[turn.role]))
            click.echo()

    def info(self, text: str) -> None:
        click.echo(click.style(text, fg="yellow"))

    def error(self, text: str) -> None:
        click.echo(click.style(text, fg="red"))

    def acknowledge(self, message: str) -> None:
        """Show message and block until the operator presses Enter.

        A closed input stream counts as an acknowledgement.
        """
        self.info(message)
        stream = self._input or click.get_text_stream("stdin")
        line = stream.readline()
        if not line:
            log.debug("Input stream closed; treating as acknowledgement")
