"""ordinal check command - verify dense ordering per parent."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ordinal.cli.utils import db_option, open_engine
from ordinal.ordering.invariant import InvariantReport


@click.command()
@click.argument("parent_ids", nargs=-1)
@db_option
@click.option("--fix", is_flag=True, help="Compact parents that fail the check")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check_command(
    parent_ids: tuple[str, ...], db_path: Path | None, fix: bool, as_json: bool
) -> None:
    """Check that active indices are unique and dense.

    PARENT_IDS default to every active parent. Exits with status 1 when a
    parent fails and --fix is not given.
    """
    with open_engine(db_path) as engine:
        targets = list(parent_ids) or engine.list_parent_ids()
        reports = []
        for parent_id in targets:
            report = engine.check(parent_id)
            if fix and not report.passed:
                engine.compact(parent_id)
                report = engine.check(parent_id)
                report.compacted = True
            reports.append(report)

    failed = [r for r in reports if not r.passed]

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in reports], indent=2))
    else:
        _print_reports(reports)

    if failed:
        raise SystemExit(1)


def _print_reports(reports: list[InvariantReport]) -> None:
    table = Table(box=None, pad_edge=False)
    table.add_column("status")
    table.add_column("parent", no_wrap=True)
    table.add_column("active", justify="right")
    table.add_column("duplicates")
    table.add_column("gaps")
    table.add_column("compacted")
    for r in reports:
        table.add_row(
            "[green]ok[/green]" if r.passed else "[red]FAIL[/red]",
            r.parent_id,
            str(r.active_count),
            ", ".join(str(d.index) for d in r.duplicates),
            ", ".join(str(g) for g in r.gaps),
            "yes" if r.compacted else "",
        )
    Console(highlight=False).print(table)
