"""Clipboard channel backends."""

from __future__ import annotations

from pathlib import Path

from cliprelay.clipboard.base import (
    ClipboardChannel,
    ClipboardEmpty,
    ClipboardError,
    ClipboardUnavailable,
)

__all__ = [
    "ClipboardChannel",
    "ClipboardEmpty",
    "ClipboardError",
    "ClipboardUnavailable",
    "create_clipboard",
]


def create_clipboard(config: dict, home: Path) -> ClipboardChannel:
    """Build the clipboard backend named in the ``clipboard`` config section."""
    from cliprelay.core.config import resolve_path

    clip_cfg = config.get("clipboard", {})
    backend = clip_cfg.get("backend", "system")

    if backend == "system":
        from cliprelay.clipboard.system import SystemClipboard

        return SystemClipboard()
    if backend == "file":
        from cliprelay.clipboard.file import FileClipboard

        return FileClipboard(resolve_path(home, clip_cfg.get("fallback_file", ".agent/clipboard.txt")))
    raise ValueError(f"Unknown clipboard backend: {backend!r}")
