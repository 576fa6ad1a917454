"""CLI entry point for cliprelay."""

import click

from cliprelay import __version__
from cliprelay.cli.init_cmd import init_cmd
from cliprelay.cli.prompt_cmd import prompt_cmd
from cliprelay.cli.run_cmd import run_cmd
from cliprelay.cli.show_cmd import show_cmd


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="cliprelay")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """cliprelay — relay input.md to a chat agent through the clipboard.

    With no command, runs the relay loop in the current directory.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(run_cmd)


cli.add_command(run_cmd)
cli.add_command(init_cmd)
cli.add_command(show_cmd)
cli.add_command(prompt_cmd)


if __name__ == "__main__":
    cli()
