"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    db: Optional[Path] = None,
    diagnostics: Optional[Path] = None,
    verbose: bool = False,
) -> AnalysisConfig:
    """Build the analysis config from CLI options."""
    overrides = {}
    if db is not None:
        overrides["database"] = str(db)
    if diagnostics is not None:
        overrides["diagnostics_file"] = str(diagnostics)
    if verbose:
        overrides["verbose"] = True
    return load_config(config_file=config, **overrides)
