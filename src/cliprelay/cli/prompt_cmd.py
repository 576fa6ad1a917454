"""CLI command for rendering the current prompt: cliprelay prompt."""

from __future__ import annotations

from pathlib import Path

import click

from cliprelay.core.config import config_path, load_config, resolve_home
from cliprelay.core.prompt import format_prompt
from cliprelay.core.transcript import TranscriptStore
from cliprelay.relay.workspace import Workspace


@click.command("prompt")
@click.option("--copy", "copy_", is_flag=True, help="Also place the prompt on the clipboard.")
@click.option(
    "--home",
    type=click.Path(path_type=Path),
    default=None,
    help="Override CLIPRELAY_HOME (defaults to the current directory).",
)
def prompt_cmd(copy_: bool, home: Path | None) -> None:
    """Print the prompt the relay would send for the current transcript.

    Useful to re-send the last prompt after a handoff was abandoned.
    """
    home_path = (home or resolve_home()).expanduser().resolve()
    config = load_config(config_path(home_path))
    ws = Workspace.from_config(home_path, config)

    if not ws.transcript_path.exists():
        click.echo(f"No transcript at {ws.transcript_path}. Run 'cliprelay init' first.")
        return

    conversation = TranscriptStore(ws.transcript_path, greeting=config.get("greeting")).load()
    prompt = format_prompt(conversation)
    click.echo(prompt)

    if copy_:
        from cliprelay.clipboard import ClipboardError, create_clipboard

        try:
            create_clipboard(config, home_path).write(prompt)
        except (ClipboardError, ValueError) as e:
            click.echo(click.style(f"Error: {e}", fg="red"), err=True)
            raise SystemExit(1) from e
        click.echo(click.style("\nPrompt copied to clipboard.", fg="yellow"))
