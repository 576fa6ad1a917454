"""Relay session: the conversation and watch state owned by one run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from cliprelay.core.fileutil import atomic_write, mtime_ns
from cliprelay.core.models import Conversation, Turn
from cliprelay.core.transcript import TranscriptStore

log = logging.getLogger(__name__)

LOADING = "Loading..."
COMPLETED = "Processing completed!"

# Contents the relay writes itself; never treated as operator input.
SENTINELS = frozenset({"", LOADING, COMPLETED})


def is_candidate(content: str) -> bool:
    """True if watched-file content is a new operator message."""
    return content.strip() not in SENTINELS


@dataclass
class RelaySession:
    """State threaded through the watch loop and the handoff machine."""

    store: TranscriptStore
    conversation: Conversation
    input_path: Path
    last_mtime: int | None = None

    @classmethod
    def open(cls, store: TranscriptStore, input_path: Path) -> RelaySession:
        """Load the transcript and take the input file's current mtime as baseline."""
        conversation = store.load()
        return cls(
            store=store,
            conversation=conversation,
            input_path=input_path,
            last_mtime=mtime_ns(input_path),
        )

    def commit(self, turn: Turn) -> None:
        """Persist a turn, then add it to the in-memory conversation."""
        self.store.append(turn)
        self.conversation.append(turn)

    def read_input(self) -> str:
        return self.input_path.read_text(encoding="utf-8").strip()

    def write_input(self, text: str) -> None:
        atomic_write(self.input_path, text, secure=False)
        log.debug("Input file set to %r", text)
