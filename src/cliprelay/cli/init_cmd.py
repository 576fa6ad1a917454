"""CLI command for initializing a relay home."""

from __future__ import annotations

import logging
from pathlib import Path

import click
import yaml

from cliprelay.core.config import DEFAULTS, config_path, load_config, resolve_home
from cliprelay.relay.workspace import Workspace, init_workspace

log = logging.getLogger(__name__)


@click.command("init")
@click.argument("path", required=False, type=click.Path(path_type=Path), default=None)
def init_cmd(path: Path | None) -> None:
    """Initialize a relay home.

    Creates .agent/, an empty transcript, an empty input.md and a default
    .agent/config.yaml. PATH defaults to CLIPRELAY_HOME or the current
    directory. Existing files are left untouched.
    """
    home = (path or resolve_home()).expanduser().resolve()
    cfg_path = config_path(home)

    ws = Workspace.from_config(home, load_config(cfg_path))
    try:
        created = init_workspace(ws)
        if not cfg_path.exists():
            cfg_path.write_text(
                yaml.dump(DEFAULTS, default_flow_style=False, allow_unicode=True, sort_keys=False),
                encoding="utf-8",
            )
            created.append(cfg_path)
    except OSError as e:
        click.echo(click.style(f"Error: failed to initialize {home}: {e}", fg="red"), err=True)
        raise SystemExit(1) from e

    if not created:
        click.echo(f"Relay home already initialized at {home}")
        return

    click.echo(f"Initialized relay home at {home}")
    for p in created:
        click.echo(f"  created {p.relative_to(home)}")
    click.echo()
    click.echo("Next steps:")
    click.echo("  cliprelay run        Start watching input.md")
