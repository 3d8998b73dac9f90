"""CLI entry point; registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="oo-insight",
    help="OO Insight - object-oriented metrics and design smell detection",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]OO Insight[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Analyze a linked corpus for OO metrics and design smells."""


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .history import history as _history  # noqa: F401, E402
from .stats import stats as _stats  # noqa: F401, E402
