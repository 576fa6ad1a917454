"""CLI command for printing the transcript: cliprelay show."""

from __future__ import annotations

from pathlib import Path

import click

from cliprelay.core.config import config_path, load_config, resolve_home
from cliprelay.core.transcript import TranscriptStore
from cliprelay.relay.console import Console
from cliprelay.relay.workspace import Workspace


@click.command("show")
@click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override CLIPRELAY_HOME (defaults to the current directory).",
)
def show_cmd(home: Path | None) -> None:
    """Print the conversation stored in the transcript."""
    home_path = (home or resolve_home()).expanduser().resolve()
    config = load_config(config_path(home_path))
    ws = Workspace.from_config(home_path, config)

    if not ws.transcript_path.exists():
        click.echo(f"No transcript at {ws.transcript_path}. Run 'cliprelay init' first.")
        return

    conversation = TranscriptStore(ws.transcript_path, greeting=config.get("greeting")).load()
    display_cfg = config.get("display", {})
    Console(wrap_width=int(display_cfg.get("wrap_width", 70)), clear_screen=False).show_conversation(
        conversation
    )
