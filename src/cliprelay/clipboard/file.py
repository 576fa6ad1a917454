"""File-based clipboard for hosts without a reachable system clipboard.

The prompt is written to a plain text file; the operator replaces the
file's content with the agent's reply before acknowledging.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cliprelay.clipboard.base import ClipboardEmpty, ClipboardUnavailable
from cliprelay.core.fileutil import atomic_write

log = logging.getLogger(__name__)


class FileClipboard:
    """Clipboard channel backed by a single text file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def name(self) -> str:
        return "file"

    def write(self, text: str) -> None:
        try:
            atomic_write(self.path, text)
        except OSError as e:
            raise ClipboardUnavailable(f"Failed to write clipboard file {self.path}: {e}") from e
        log.debug("Wrote %d chars to clipboard file %s", len(text), self.path)

    def read(self) -> str:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ClipboardEmpty(f"Clipboard file not found: {self.path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ClipboardUnavailable(f"Failed to read clipboard file {self.path}: {e}") from e
        if not text:
            raise ClipboardEmpty("Clipboard file is empty")
        return text
