"""Ordinal CLI - ordinal command."""

import click

from ordinal.cli.check import check_command
from ordinal.cli.init import init_command
from ordinal.cli.parents import add_parent_command
from ordinal.cli.show import show_command
from ordinal.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="ordinal")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Ordinal - index maintenance for ordered collections."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    # Until a command loads the config, only warnings are shown
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(init_command, name="init")
cli.add_command(add_parent_command, name="add-parent")
cli.add_command(show_command, name="show")
cli.add_command(check_command, name="check")


if __name__ == "__main__":
    cli()
