"""Run detectors over every class of the corpus."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from ..exceptions import InvalidSequenceError
from ..logging_config import get_logger
from .models import Finding

if TYPE_CHECKING:
    from ..context import AnalysisContext
    from .protocols import Detector

logger = get_logger(__name__)


def run_detectors(context: AnalysisContext, detectors: Iterable[Detector]) -> set[Finding]:
    """Apply each detector to each class, cheap check first.

    Raises:
        InvalidSequenceError: If collection has not been terminated yet.
    """
    if not context.finalized:
        raise InvalidSequenceError(
            "run_detectors", "metric collection must be terminated before detection"
        )

    findings: set[Finding] = set()
    for detector in detectors:
        candidates = confirmed = 0
        for project in context.corpus.projects:
            for cls in project.classes():
                if not detector.is_preliminarily_defective(cls):
                    continue
                candidates += 1
                if detector.confirm_defect(cls.full_path, project.path):
                    confirmed += 1
                    findings.add(Finding(cls.full_path, detector.defect_name, project.path))
        logger.info(f"{detector.name}: {confirmed} of {candidates} candidates confirmed")
    return findings
