"""Transcript store: append-only encode/decode of turns on disk.

Format: a flat stream of ``role FIELD_SEP content RECORD_SEP`` units.
No escaping is performed; content carrying a reserved code point is
rejected at encode time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from cliprelay.core.fileutil import append_text
from cliprelay.core.models import Conversation, Role, Turn

log = logging.getLogger(__name__)

# Same byte values as transcripts written by earlier versions of the tool.
FIELD_SEP = "\u001e"
RECORD_SEP = "\u001f"

RESERVED = (FIELD_SEP, RECORD_SEP)

_RECORD_SEP_BYTES = RECORD_SEP.encode("ascii")

DEFAULT_GREETING = "Hello! How can I help you today?"

_ROLES = {r.value: r for r in Role}


class ReservedDelimiterError(ValueError):
    """Content contains one of the reserved structural code points."""


def has_reserved(text: str) -> bool:
    return any(sep in text for sep in RESERVED)


def strip_reserved(text: str) -> str:
    """Remove reserved delimiter code points from text."""
    for sep in RESERVED:
        text = text.replace(sep, "")
    return text


def encode_turn(turn: Turn) -> str:
    if has_reserved(turn.content):
        raise ReservedDelimiterError(
            f"{turn.role.value} content contains a reserved delimiter"
        )
    return f"{turn.role.value}{FIELD_SEP}{turn.content}{RECORD_SEP}"


def encode(turns: Iterable[Turn]) -> str:
    return "".join(encode_turn(t) for t in turns)


def decode(data: str) -> list[Turn]:
    """Parse transcript text into turns, skipping malformed records."""
    return _decode_records(data.split(RECORD_SEP))


def decode_bytes(data: bytes) -> list[Turn]:
    """Parse raw transcript bytes.

    Records are split before decoding, so a record holding invalid UTF-8 is
    skipped without losing the records around it.
    """
    records: list[str | None] = []
    for chunk in data.split(_RECORD_SEP_BYTES):
        try:
            records.append(chunk.decode("utf-8"))
        except UnicodeDecodeError:
            records.append(None)
    return _decode_records(records)


def _decode_records(records: Iterable[str | None]) -> list[Turn]:
    turns: list[Turn] = []
    for index, record in enumerate(records):
        if record is not None and not record.strip():
            continue
        turn = None if record is None else _decode_record(record)
        if turn is None:
            log.debug("Skipping malformed transcript record #%d", index)
            continue
        turns.append(turn)
    return turns


def _decode_record(record: str) -> Turn | None:
    parts = record.split(FIELD_SEP)
    if len(parts) != 2:
        return None
    # Whitespace between records lands before the role; content is verbatim.
    role_str, content = parts[0].strip(), parts[1]
    if not role_str or not content.strip():
        return None
    role = _ROLES.get(role_str)
    if role is None:
        return None
    return Turn(role=role, content=content)


class TranscriptStore:
    """Durable, append-only conversation record.

    ``append`` never reads the file back, so it is safe to call any number
    of times, across restarts, without touching prior content.
    """

    def __init__(self, path: Path, greeting: str | None = DEFAULT_GREETING) -> None:
        self.path = path
        self.greeting = greeting or DEFAULT_GREETING

    def load(self) -> Conversation:
        """Load the conversation, seeding and persisting a greeting if empty."""
        data = b""
        if self.path.exists():
            data = self.path.read_bytes()

        conversation = Conversation(decode_bytes(data))
        if not len(conversation):
            greeting = Turn.assistant(self.greeting)
            self.append(greeting)
            conversation.append(greeting)
            log.info("Seeded empty transcript with greeting: %s", self.path)
        else:
            log.info("Loaded %d turns from %s", len(conversation), self.path)
        return conversation

    def append(self, turn: Turn) -> None:
        append_text(self.path, encode_turn(turn))
        log.debug("Appended %s turn (%d chars)", turn.role.value, len(turn.content))
