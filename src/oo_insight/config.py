"""Configuration loading and management for OO Insight.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.oo-insight.toml)
    3. Project config (./oo-insight.toml)
    4. Explicit config file
    5. Environment variables (OO_INSIGHT_* prefix)
    6. CLI overrides (passed as kwargs)

Example config file::

    detectors = ["refused_bequest"]
    diagnostics_file = "unresolved.jsonl"

    [percentiles]
    CLASS_WMC = [10, 25]

    [detector_options.refused_bequest]
    member_threshold = 3
    override_threshold = 3

Example:
    >>> config = load_config(verbose=True)
    >>> config.verbosity
    'verbose'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError
from .logging_config import get_logger
from .metrics.metric import SAMPLE_METRICS, Metric

logger = get_logger(__name__)

# Type aliases for clarity
Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "OO_INSIGHT_"


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one analysis run.

    Attributes:
        percentiles: Metric name -> percentiles of interest. Only these
            percentiles can be queried on the finalized sample sets.
        detectors: Names of the detectors to run after collection.
        detector_options: Detector name -> raw option mapping. Values are
            parsed leniently by the detector itself.
        diagnostics_file: JSON-lines file receiving unresolved names.
        database: sqlite file used when results are saved.
        verbosity: Logging verbosity level.
    """

    percentiles: dict[str, list[int]] = field(default_factory=dict)
    detectors: list[str] = field(default_factory=lambda: ["refused_bequest"])
    detector_options: dict[str, dict[str, Any]] = field(default_factory=dict)
    diagnostics_file: Optional[str] = None
    database: str = ".oo-insight/history.db"
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name, values in self.percentiles.items():
            try:
                metric = Metric.from_name(name)
            except KeyError:
                raise InvalidConfigError(f"percentiles.{name}", values, "unknown metric") from None
            if metric not in SAMPLE_METRICS:
                raise InvalidConfigError(
                    f"percentiles.{name}", values, "metric has no sample set"
                )
            if not isinstance(values, (list, tuple, set, frozenset)):
                raise InvalidConfigError(f"percentiles.{name}", values, "expected a list")
            for p in values:
                if isinstance(p, bool) or not isinstance(p, int) or not 0 <= p <= 100:
                    raise InvalidConfigError(
                        f"percentiles.{name}", p, "percentiles must be integers in 0..100"
                    )

        from .detectors.registry import DETECTORS

        for name in self.detectors:
            if name not in DETECTORS:
                known = ", ".join(sorted(DETECTORS))
                raise InvalidConfigError("detectors", name, f"known detectors: {known}")

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "expected quiet/normal/verbose")

    def required_percentiles(self) -> dict[Metric, frozenset[int]]:
        """Percentiles of interest keyed by metric, ready for finalization."""
        return {Metric.from_name(name): frozenset(values) for name, values in self.percentiles.items()}

    def options_for(self, detector: str) -> Mapping[str, Any]:
        return self.detector_options.get(detector, {})


def resolve_int_option(options: Mapping[str, Any], key: str, default: int) -> int:
    """Read an integer option, falling back to ``default``.

    Absent values fall back silently, unparsable ones with a warning.
    Never raises.
    """
    raw = options.get(key)
    if raw is None:
        return default
    if isinstance(raw, bool):
        logger.warning(f"Option {key}={raw!r} is not an integer, using default {default}")
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.warning(f"Option {key}={raw!r} is not an integer, using default {default}")
        return default


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is missing or invalid
    """
    merged: dict = {}

    # 1. Global config
    global_config = Path.home() / ".oo-insight.toml"
    if global_config.exists():
        _merge(merged, _load_toml_file(global_config), global_config)

    # 2. Project config
    project_config = Path.cwd() / "oo-insight.toml"
    if project_config.exists():
        _merge(merged, _load_toml_file(project_config), project_config)

    # 3. Explicit config file (highest priority from files)
    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _load_toml_file(config_file), config_file)

    # 4. Environment variables
    merged.update(_load_env_vars())

    # 5. CLI overrides; verbosity flags become the verbosity string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _merge(merged: dict, loaded: dict, source: Path) -> None:
    """Merge one config file; table-valued keys merge one level deep."""
    for key, value in loaded.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    logger.debug(f"Loaded configuration from {source}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from OO_INSIGHT_* environment variables.

    Supported environment variables:
        OO_INSIGHT_DIAGNOSTICS_FILE: path
        OO_INSIGHT_DATABASE: path
        OO_INSIGHT_VERBOSITY: quiet/normal/verbose
        OO_INSIGHT_DETECTORS: comma-separated detector names

    Returns:
        Dict of field_name -> parsed_value for any OO_INSIGHT_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)
    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if env_value is None:
            continue
        parsed = _parse_env_value(env_value, type_hints.get(field_name))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns:
        Parsed value or None if the type is not settable from the environment
    """
    origin = getattr(type_hint, "__origin__", None)

    # Handle Optional[X] which is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    # Lists of strings: comma-separated
    if origin is list and getattr(type_hint, "__args__", ()) == (str,):
        return [item.strip() for item in value.split(",") if item.strip()]

    # Mappings are too complex for env vars
    if origin is dict:
        return None

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If TOML support is missing or parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}") from e
