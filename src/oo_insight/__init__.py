"""
OO Insight - object-oriented metrics and design smell detection

Collects size, complexity and coupling metrics over a linked corpus of
classes, modules and subroutines, derives project-wide statistical
baselines from them, and flags design smells such as Refused Bequest.
"""

__version__ = "0.1.0"

from .analysis import AnalysisEngine, AnalysisResult
from .config import AnalysisConfig, load_config
from .detectors import Finding
from .model import Corpus, load_corpus

__all__ = [
    "AnalysisConfig",
    "AnalysisEngine",
    "AnalysisResult",
    "Corpus",
    "Finding",
    "load_config",
    "load_corpus",
]
