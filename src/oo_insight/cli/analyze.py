"""Analyze command: collect metrics, run detectors, optionally save."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..analysis import AnalysisEngine, AnalysisResult
from ..exceptions import OOInsightError
from ..logging_config import setup_logging
from ..model import load_corpus
from ..persistence import ResultsDB, save_run
from . import app
from ._common import console, resolve_config


@app.command()
def analyze(
    corpus: Path = typer.Argument(
        ...,
        help="Linked corpus document (JSON)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    save: bool = typer.Option(
        False,
        "--save",
        help="Save the run to the results database",
    ),
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Results database (default: from config)",
    ),
    diagnostics: Optional[Path] = typer.Option(
        None,
        "--diagnostics",
        help="Append unresolved names to this JSON-lines file",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append log records to this file",
    ),
):
    """
    Collect metrics over a corpus and report design smells.

    [bold cyan]Examples:[/bold cyan]

      oo-insight analyze corpus.json

      oo-insight analyze corpus.json --json

      oo-insight analyze corpus.json --save --db results.db
    """
    logger = setup_logging(
        verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None
    )

    try:
        settings = resolve_config(config=config, db=db, diagnostics=diagnostics, verbose=verbose)
        loaded = load_corpus(corpus)
        result = AnalysisEngine(settings).run(loaded)

        if save:
            with ResultsDB(settings.database) as results_db:
                run_id = save_run(results_db.conn, result, corpus.stem)
            logger.info(f"Run saved (id={run_id})")
            if not json_output:
                console.print(f"[dim]Saved as run {run_id} in {settings.database}[/dim]")

        if json_output:
            print(json.dumps(result.to_dict(), indent=2))
        else:
            _output_rich(result)

    except OOInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _output_rich(result: AnalysisResult) -> None:
    """Human-readable Rich table output."""
    from rich.table import Table

    console.print(
        f"[bold]{len(result.project_paths)}[/bold] projects, "
        f"[bold]{result.entity_count}[/bold] entities analyzed"
    )

    if not result.findings:
        console.print("[green]No design smells found.[/green]")
    else:
        table = Table(title="Design Smells", show_lines=False, pad_edge=True)
        table.add_column("Class", style="cyan")
        table.add_column("Smell", style="yellow")
        table.add_column("Project", style="dim")
        for f in result.findings:
            table.add_row(f.entity_path, f.defect_name, f.project_path)
        console.print(table)

    unresolved = result.unresolved.to_dict()
    if unresolved:
        console.print(
            f"[dim]{len(unresolved)} classes have attribute receivers of unknown type "
            f"(use -v for details)[/dim]"
        )
