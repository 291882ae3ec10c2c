"""ordinal init command - create tables and indexes."""

from pathlib import Path

import click

from ordinal.cli.utils import db_option, open_engine
from ordinal.store.indexes import create_additional_indexes


@click.command()
@db_option
def init_command(db_path: Path | None) -> None:
    """Create the ordering tables and secondary indexes.

    Safe to run repeatedly; existing tables are left untouched.
    """
    with open_engine(db_path) as engine:
        engine.db.create_all()
        create_additional_indexes(engine.db.engine)
        click.echo(f"Initialized {engine.db.url}")
