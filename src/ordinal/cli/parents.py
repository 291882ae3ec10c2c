"""ordinal add-parent command."""

from pathlib import Path

import click

from ordinal.cli.utils import db_option, open_engine


@click.command()
@click.argument("parent_id")
@db_option
def add_parent_command(parent_id: str, db_path: Path | None) -> None:
    """Register PARENT_ID as the owner of an ordered collection."""
    with open_engine(db_path) as engine:
        parent = engine.create_parent(parent_id)
    click.echo(f"Parent {parent.id} (created {parent.created_at.isoformat()})")
