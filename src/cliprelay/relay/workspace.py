"""Relay home layout and first-run bootstrap."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from cliprelay.core.config import AGENT_DIR, DEFAULTS, resolve_path
from cliprelay.core.fileutil import ensure_dir, touch_empty

log = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Resolved paths for one relay home."""

    home: Path
    input_path: Path
    transcript_path: Path
    log_path: Path

    @property
    def agent_dir(self) -> Path:
        return self.home / AGENT_DIR

    @classmethod
    def from_config(cls, home: Path, config: dict) -> Workspace:
        return cls(
            home=home,
            input_path=resolve_path(home, config.get("input_file", DEFAULTS["input_file"])),
            transcript_path=resolve_path(
                home, config.get("transcript_file", DEFAULTS["transcript_file"])
            ),
            log_path=resolve_path(home, config.get("log_file", DEFAULTS["log_file"])),
        )


def init_workspace(ws: Workspace) -> list[Path]:
    """Create the agent dir, transcript and input files if missing.

    Returns the paths that were created. Raises OSError on failure.
    """
    created: list[Path] = []
    if not ws.agent_dir.exists():
        ensure_dir(ws.agent_dir)
        created.append(ws.agent_dir)
    for path in (ws.transcript_path, ws.input_path):
        if touch_empty(path):
            created.append(path)
    for path in created:
        log.info("Created %s", path)
    return created
