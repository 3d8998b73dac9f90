"""Detector registry: name -> detector class."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from .refused_bequest import RefusedBequestDetector

if TYPE_CHECKING:
    from ..context import AnalysisContext
    from .protocols import Detector

DETECTORS: dict[str, type] = {
    RefusedBequestDetector.name: RefusedBequestDetector,
}


def build_detectors(
    context: AnalysisContext, names: Optional[Iterable[str]] = None
) -> list[Detector]:
    """Instantiate detectors with their configured options.

    Detectors open the store namespaces they read on construction, so
    build them before collection starts.

    Args:
        context: Run context; options come from ``context.config``.
        names: Detector names (default: the configured detectors).

    Raises:
        KeyError: For an unknown detector name.
    """
    selected = list(names) if names is not None else list(context.config.detectors)
    detectors = []
    for name in selected:
        detector_cls = DETECTORS[name]
        detectors.append(detector_cls(context, context.config.options_for(name)))
    return detectors
