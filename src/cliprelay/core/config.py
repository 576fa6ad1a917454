"""Configuration loader for cliprelay."""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path

import yaml

log = logging.getLogger(__name__)

AGENT_DIR = ".agent"

DEFAULTS: dict = {
    "input_file": "input.md",
    "transcript_file": ".agent/conversation.txt",
    "log_file": ".agent/relay.log",
    "log_level": "info",
    "greeting": "Hello! How can I help you today?",
    "watch": {
        "backend": "poll",  # poll | watchdog
        "poll_interval": 0.1,
    },
    "handoff": {
        "max_attempts": 5,
        "settle_delay": 0.5,
    },
    "clipboard": {
        "backend": "system",  # system | file
        "fallback_file": ".agent/clipboard.txt",
    },
    "display": {
        "wrap_width": 70,
        "clear_screen": True,
    },
}


def resolve_home() -> Path:
    """Resolve the relay home: CLIPRELAY_HOME env var > current directory."""
    env_home = os.environ.get("CLIPRELAY_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path.cwd().resolve()


def config_path(home: Path | None = None) -> Path:
    """Return the path to config.yaml."""
    if home is None:
        home = resolve_home()
    return home / AGENT_DIR / "config.yaml"


def load_config(path: Path | None = None) -> dict:
    """Load config.yaml and merge with defaults.

    Args:
        path: Explicit path to config.yaml. If None, uses default location.

    Returns:
        Merged configuration dict.
    """
    if path is None:
        path = config_path()

    user_config: dict = {}
    if path.exists():
        try:
            raw = path.read_text(encoding="utf-8")
            user_config = yaml.safe_load(raw) or {}
            if not isinstance(user_config, dict):
                log.warning("Ignoring non-mapping config at %s", path)
                user_config = {}
        except Exception:
            log.warning("Failed to read config at %s, using defaults", path, exc_info=True)

    return _deep_merge(copy.deepcopy(DEFAULTS), user_config)


def resolve_path(home: Path, value: str) -> Path:
    """Resolve a config path value relative to the relay home."""
    p = Path(value).expanduser()
    return p if p.is_absolute() else home / p


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
