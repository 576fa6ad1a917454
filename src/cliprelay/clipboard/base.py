"""ClipboardChannel Protocol and error types."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class ClipboardError(Exception):
    """Base class for clipboard channel failures."""


class ClipboardUnavailable(ClipboardError):
    """The platform clipboard service cannot be reached."""


class ClipboardEmpty(ClipboardError):
    """The clipboard holds no text-representable content."""


@runtime_checkable
class ClipboardChannel(Protocol):
    """Contract for the text clipboard the operator pastes through.

    A ``read`` reflects whatever the operator put there last, never
    necessarily the preceding ``write``.

    Implementations: SystemClipboard (pyperclip), FileClipboard.
    """

    @property
    def name(self) -> str:
        """Backend ID: 'system', 'file'."""
        ...

    def write(self, text: str) -> None:
        """Place text on the clipboard. Raises ClipboardUnavailable."""
        ...

    def read(self) -> str:
        """Return clipboard text. Raises ClipboardEmpty or ClipboardUnavailable."""
        ...
