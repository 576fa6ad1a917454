"""CLI command for the relay loop: cliprelay run."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from cliprelay.core.config import config_path, load_config, resolve_home
from cliprelay.core.fileutil import ensure_dir
from cliprelay.core.transcript import TranscriptStore
from cliprelay.relay.workspace import Workspace, init_workspace

log = logging.getLogger(__name__)


def _setup_logging(log_path: Path, level: str) -> None:
    """Send diagnostics to the log file only; the terminal belongs to the relay."""
    ensure_dir(log_path.parent)
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.FileHandler(str(log_path), encoding="utf-8")],
    )


def _fatal(message: str) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    raise SystemExit(1)


@click.command("run")
@click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override CLIPRELAY_HOME (defaults to the current directory).",
)
def run_cmd(home: Path | None) -> None:
    """Watch input.md and relay each new message through the clipboard.

    \b
    Loop:
      1. Save input.md with your message.
      2. The full conversation is copied to the clipboard as a prompt.
      3. Paste it into the agent, copy the agent's reply, hit Enter.
      4. The reply is appended to .agent/conversation.txt.

    Runs until interrupted (Ctrl+C).
    """
    home_path = (home or resolve_home()).expanduser().resolve()
    config = load_config(config_path(home_path))
    ws = Workspace.from_config(home_path, config)

    try:
        _setup_logging(ws.log_path, config.get("log_level", "info"))
        init_workspace(ws)
    except OSError as e:
        _fatal(f"failed to initialize {ws.agent_dir}: {e}")

    log.info("Relay starting (home=%s)", home_path)

    from cliprelay.clipboard import create_clipboard
    from cliprelay.relay.console import Console
    from cliprelay.relay.handoff import HandoffMachine
    from cliprelay.relay.session import RelaySession
    from cliprelay.relay.watcher import create_watcher

    store = TranscriptStore(ws.transcript_path, greeting=config.get("greeting"))
    try:
        session = RelaySession.open(store, ws.input_path)
    except (OSError, ValueError) as e:
        _fatal(f"failed to load transcript {ws.transcript_path}: {e}")

    display_cfg = config.get("display", {})
    console = Console(
        wrap_width=int(display_cfg.get("wrap_width", 70)),
        clear_screen=bool(display_cfg.get("clear_screen", True)),
    )

    handoff_cfg = config.get("handoff", {})
    try:
        clipboard = create_clipboard(config, home_path)
        handoff = HandoffMachine(
            session,
            clipboard,
            console,
            max_attempts=int(handoff_cfg.get("max_attempts", 5)),
            settle_delay=float(handoff_cfg.get("settle_delay", 0.5)),
        )
    except ValueError as e:
        _fatal(str(e))

    watching = f"Watching for changes to {ws.input_path.name}..."

    def on_message(message: str) -> None:
        handoff.run(message)
        console.info(watching)

    try:
        watcher = create_watcher(config, session, on_message)
    except ValueError as e:
        _fatal(str(e))

    console.show_conversation(session.conversation)
    console.info(watching)

    try:
        watcher.run()
    except KeyboardInterrupt:
        click.echo("\nStopped.")
    except RuntimeError as e:
        _fatal(str(e))
    finally:
        watcher.stop()
        log.info("Relay stopped")
