"""Design smell detectors."""

from .models import Finding
from .protocols import Detector
from .refused_bequest import RefusedBequestDetector
from .registry import DETECTORS, build_detectors
from .runner import run_detectors
from ..metrics.coupling import parse_coupling_entry

__all__ = [
    "DETECTORS",
    "Detector",
    "Finding",
    "RefusedBequestDetector",
    "build_detectors",
    "parse_coupling_entry",
    "run_detectors",
]
