"""Persistence of finished analysis runs."""

from .database import ResultsDB
from .reader import list_runs, load_findings, load_metric_stats, load_store
from .writer import save_run

__all__ = [
    "ResultsDB",
    "list_runs",
    "load_findings",
    "load_metric_stats",
    "load_store",
    "save_run",
]
