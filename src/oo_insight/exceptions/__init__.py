"""Exception hierarchy for OO Insight."""

from .analysis import (
    AnalysisError,
    CollectionFinishedError,
    CorpusFormatError,
    InvalidSequenceError,
    NamespaceKindError,
    SamplesFinalizedError,
    StoreFrozenError,
    UnknownNamespaceError,
    UnknownPercentileError,
)
from .base import OOInsightError
from .config import ConfigurationError, InvalidConfigError

__all__ = [
    "OOInsightError",
    "AnalysisError",
    "InvalidSequenceError",
    "CollectionFinishedError",
    "SamplesFinalizedError",
    "StoreFrozenError",
    "UnknownPercentileError",
    "UnknownNamespaceError",
    "NamespaceKindError",
    "CorpusFormatError",
    "ConfigurationError",
    "InvalidConfigError",
]
