"""Stats command: finalized sample statistics per metric."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..analysis import AnalysisEngine
from ..exceptions import OOInsightError
from ..logging_config import setup_logging
from ..metrics.metric import SAMPLE_METRICS, Metric
from ..model import load_corpus
from . import app
from ._common import console, resolve_config


@app.command()
def stats(
    corpus: Path = typer.Argument(
        ...,
        help="Linked corpus document (JSON)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    metric: Optional[str] = typer.Option(
        None,
        "--metric",
        "-m",
        help="Only show this metric (e.g. CLASS_WMC)",
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
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show quartiles and Tukey outlier bounds for each metric.

    [bold cyan]Examples:[/bold cyan]

      oo-insight stats corpus.json

      oo-insight stats corpus.json --metric CLASS_WMC
    """
    logger = setup_logging()

    selected = None
    if metric is not None:
        try:
            selected = Metric.from_name(metric)
        except KeyError:
            console.print(f"[red]Unknown metric:[/red] {metric}")
            raise typer.Exit(2)
        if selected not in SAMPLE_METRICS:
            console.print(f"[yellow]{selected} is not a sampled metric.[/yellow]")
            raise typer.Exit(2)

    try:
        settings = resolve_config(config=config)
        result = AnalysisEngine(settings).run(load_corpus(corpus))
    except OOInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    sample_sets = [s for s in result.samples if selected is None or s.metric is selected]

    if json_output:
        print(json.dumps({str(s.metric): s.to_dict() for s in sample_sets}, indent=2))
        return

    from rich.table import Table

    table = Table(title="Metric Statistics", show_lines=False, pad_edge=True)
    table.add_column("Metric", style="bold")
    table.add_column("N", justify="right")
    for label in ("Q1", "Median", "Q3", "IQR", "Mild", "Extreme"):
        table.add_column(label, justify="right")

    for s in sample_sets:
        st = s.stats
        if st is None:
            table.add_row(str(s.metric), "0", *("-",) * 6, style="dim")
            continue
        table.add_row(
            str(s.metric),
            str(st.count),
            f"{st.q1:.2f}",
            f"{st.median:.2f}",
            f"{st.q3:.2f}",
            f"{st.iqr:.2f}",
            f"{st.mild_lower:.1f}..{st.mild_upper:.1f}",
            f"{st.extreme_lower:.1f}..{st.extreme_upper:.1f}",
        )
    console.print(table)
