"""ordinal show command - list active items of a parent in order."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ordinal.cli.utils import db_option, open_engine


@click.command()
@click.argument("parent_id")
@db_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show_command(parent_id: str, db_path: Path | None, as_json: bool) -> None:
    """Show the active items of PARENT_ID in index order."""
    with open_engine(db_path) as engine:
        items = engine.list_active(parent_id)

    if as_json:
        click.echo(json.dumps([item.to_dict() for item in items], indent=2))
        return

    console = Console(highlight=False)
    if not items:
        console.print(f"{parent_id}: no active items")
        return

    table = Table(title=f"{parent_id} ({len(items)} active)", box=None, pad_edge=False)
    table.add_column("index", style="cyan", justify="right")
    table.add_column("public id", no_wrap=True)
    table.add_column("payload", overflow="fold")
    for item in items:
        payload = "" if item.payload is None else json.dumps(item.payload)
        table.add_row(str(item.index), item.public_id, payload)
    console.print(table)
