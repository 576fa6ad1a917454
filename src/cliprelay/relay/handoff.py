"""Handoff state machine: prompt out over the clipboard, reply back in.

    Idle -> AwaitingPaste -> Resolved | Abandoned -> Idle

Every entry to AwaitingPaste ends in a terminal state within
``max_attempts`` operator acknowledgements, and the completion sentinel is
written on the way back to Idle no matter how the handoff ended.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from cliprelay.clipboard.base import ClipboardChannel, ClipboardError
from cliprelay.core.models import Turn
from cliprelay.core.prompt import format_prompt
from cliprelay.core.transcript import has_reserved, strip_reserved
from cliprelay.relay.console import Console
from cliprelay.relay.session import COMPLETED, LOADING, RelaySession, is_candidate

log = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_SETTLE_DELAY = 0.5

PASTE_PROMPT = "Prompt copied to clipboard! Paste the response and hit Enter..."
RETRY_PROMPT = "Copy the response to the clipboard and hit Enter to retry (attempt {attempt}/{total})..."


class HandoffState(str, Enum):
    IDLE = "idle"
    AWAITING_PASTE = "awaiting_paste"
    RESOLVED = "resolved"
    ABANDONED = "abandoned"


@dataclass
class HandoffResult:
    """Outcome of one handoff cycle."""

    state: HandoffState
    attempts: int = 0
    reply: Turn | None = None
    error: str | None = None


class HandoffMachine:
    """Turn a detected operator message into a committed assistant turn."""

    def __init__(
        self,
        session: RelaySession,
        clipboard: ClipboardChannel,
        console: Console,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.session = session
        self.clipboard = clipboard
        self.console = console
        self.max_attempts = max_attempts
        self.settle_delay = settle_delay
        self._sleep = sleep
        self._state = HandoffState.IDLE

    @property
    def state(self) -> HandoffState:
        return self._state

    def run(self, message: str) -> HandoffResult:
        """Run one full cycle for ``message``. Never raises on handoff failures."""
        content = _clean(message, "user message")
        if not is_candidate(content):
            log.debug("Ignoring non-message content: %r", content)
            return HandoffResult(state=HandoffState.IDLE)

        result = HandoffResult(state=HandoffState.ABANDONED)
        try:
            self._enter_awaiting(content)
            reply = self._await_paste(result)
            if reply is not None:
                turn = Turn.assistant(reply)
                self.session.commit(turn)
                result.reply = turn
                result.state = HandoffState.RESOLVED
                self.console.show_conversation(self.session.conversation)
            else:
                log.warning(
                    "No usable reply after %d attempts; message left unanswered",
                    result.attempts,
                )
        except Exception as e:
            log.exception("Handoff failed")
            self.console.error(f"Error processing input: {e}")
            result.error = str(e)
        finally:
            self._state = result.state
            log.info("Handoff %s after %d attempt(s)", result.state.value, result.attempts)
            self._write_completed()
            self._state = HandoffState.IDLE
        return result

    def _enter_awaiting(self, content: str) -> None:
        self._state = HandoffState.AWAITING_PASTE
        self.session.commit(Turn.user(content))
        self.session.write_input(LOADING)
        self.clipboard.write(format_prompt(self.session.conversation))
        log.info("Prompt handed off (%d turns)", len(self.session.conversation))
        self.console.show_conversation(self.session.conversation)

    def _await_paste(self, result: HandoffResult) -> str | None:
        for attempt in range(1, self.max_attempts + 1):
            result.attempts = attempt
            if attempt == 1:
                self.console.acknowledge(PASTE_PROMPT)
            else:
                self.console.acknowledge(
                    RETRY_PROMPT.format(attempt=attempt, total=self.max_attempts)
                )

            # Give the host clipboard time to propagate the paste.
            self._sleep(self.settle_delay)

            try:
                text = self.clipboard.read()
            except ClipboardError as e:
                log.warning("Clipboard read failed (attempt %d/%d): %s", attempt, self.max_attempts, e)
                self.console.error(f"Error reading clipboard: {e}")
                continue

            reply = _clean(text, "clipboard reply")
            if reply:
                return reply
            log.warning("Clipboard blank (attempt %d/%d)", attempt, self.max_attempts)
            self.console.error("Error: Clipboard is empty. Please try again.")
        return None

    def _write_completed(self) -> None:
        try:
            self.session.write_input(COMPLETED)
        except OSError as e:
            log.error("Failed to write completion sentinel: %s", e)
            self.console.error(f"Error updating {self.session.input_path.name}: {e}")


def _clean(text: str, what: str) -> str:
    if has_reserved(text):
        log.warning("Stripping reserved delimiter characters from %s", what)
        text = strip_reserved(text)
    return text.strip()
