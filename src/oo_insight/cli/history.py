"""History CLI command -- list saved analysis runs."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import OOInsightError
from ..logging_config import setup_logging
from ..persistence import ResultsDB, list_runs
from . import app
from ._common import console, resolve_config


@app.command()
def history(
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Results database (default: from config)",
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Maximum number of runs to list",
        min=1,
        max=1000,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List past analysis runs stored in the results database.

    [bold cyan]Examples:[/bold cyan]

      oo-insight history

      oo-insight history --db results.db --json
    """
    logger = setup_logging()

    try:
        db_path = Path(db) if db is not None else Path(resolve_config().database)
    except OOInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not db_path.exists():
        console.print(
            "[yellow]No history found.[/yellow] "
            "Run [bold]oo-insight analyze --save[/bold] first to record a run."
        )
        raise typer.Exit(0)

    with ResultsDB(db_path) as results_db:
        runs = list_runs(results_db.conn, limit=limit)

    if not runs:
        console.print("[yellow]No runs recorded yet.[/yellow]")
        raise typer.Exit(0)

    if json_output:
        print(json.dumps(runs, indent=2))
    else:
        _output_rich(runs)


def _output_rich(runs: list[dict]) -> None:
    """Human-readable Rich table output."""
    from rich.table import Table

    table = Table(title="Analysis History", show_lines=False, pad_edge=True)
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Timestamp", style="green")
    table.add_column("Entities", justify="right")
    table.add_column("Findings", justify="right", style="yellow")

    for r in runs:
        ts = r["timestamp"][:19].replace("T", " ")
        table.add_row(
            str(r["id"]), r["project_name"], ts, str(r["entity_count"]), str(r["finding_count"])
        )
    console.print(table)
