"""CLI utilities."""

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click

from ordinal.config.loader import load_config
from ordinal.core.errors import OrdinalError
from ordinal.core.logging import configure_logging
from ordinal.ordering.ops import OrderingEngine

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database file (default: from config, .ordinal/ordinal.db)",
)


@contextmanager
def open_engine(db_path: Path | None) -> Generator[OrderingEngine, None, None]:
    """Build an OrderingEngine for the current directory and close it afterwards.

    Logging is reconfigured from the loaded config; the group's -v flag
    forces DEBUG. Engine and config errors are reported as click errors
    (exit code 1).
    """
    overrides: dict[str, Any] = {}
    if db_path is not None:
        overrides["database"] = {"path": str(db_path.resolve()), "url": None}

    try:
        config = load_config(project_root=Path.cwd(), **overrides)
        configure_logging(config.logging, level="DEBUG" if _verbose() else None)
        engine = OrderingEngine.from_config(config, Path.cwd())
    except OrdinalError as e:
        raise click.ClickException(str(e)) from e

    try:
        yield engine
    except OrdinalError as e:
        raise click.ClickException(str(e)) from e
    finally:
        engine.db.dispose()


def _verbose() -> bool:
    ctx = click.get_current_context(silent=True)
    return bool(ctx is not None and (ctx.obj or {}).get("verbose"))
