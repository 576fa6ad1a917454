"""System clipboard backend using pyperclip."""

from __future__ import annotations

import logging

import pyperclip

from cliprelay.clipboard.base import ClipboardEmpty, ClipboardUnavailable

log = logging.getLogger(__name__)


class SystemClipboard:
    """Read/write the host OS clipboard through pyperclip."""

    @property
    def name(self) -> str:
        return "system"

    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardUnavailable(f"System clipboard not available: {e}") from e
        log.debug("Copied %d chars to system clipboard", len(text))

    def read(self) -> str:
        try:
            text = pyperclip.paste()
        except pyperclip.PyperclipException as e:
            raise ClipboardUnavailable(f"System clipboard not available: {e}") from e
        if not text:
            raise ClipboardEmpty("Clipboard holds no text")
        return text

    def is_available(self) -> bool:
        """Check whether pyperclip found a working clipboard mechanism."""
        try:
            pyperclip.paste()
            return True
        except pyperclip.PyperclipException:
            return False
