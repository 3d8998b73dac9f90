"""Analysis-related exceptions: API ordering, store namespaces, corpus input."""

from typing import Iterable, Optional

from .base import OOInsightError


class AnalysisError(OOInsightError):
    """Base class for analysis-related errors."""
    pass


class InvalidSequenceError(AnalysisError):
    """Raised when analysis operations are called out of order.

    These are programming errors: the caller corrupted the
    collect -> finalize -> detect ordering and must stop.
    """

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Invalid call to {operation}",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason


class CollectionFinishedError(InvalidSequenceError):
    """Raised when entities are registered after collection has terminated."""

    def __init__(self, operation: str = "register"):
        super().__init__(operation, "metric collection has already been terminated")


class SamplesFinalizedError(InvalidSequenceError):
    """Raised when a sample is added to an already finalized sample set."""

    def __init__(self, metric: str):
        super().__init__("add", f"samples for {metric} are already finalized")
        self.metric = metric


class StoreFrozenError(InvalidSequenceError):
    """Raised when the data store is written after it became read-only."""

    def __init__(self, namespace: str):
        super().__init__("add", f"data store is read-only, cannot write {namespace}")
        self.namespace = namespace


class UnknownPercentileError(AnalysisError):
    """Raised when a percentile is queried that was not requested at finalize time."""

    def __init__(self, metric: str, percentile: int, requested: Iterable[int]):
        requested_str = ", ".join(str(p) for p in sorted(requested)) or "none"
        super().__init__(
            f"Percentile {percentile} was not requested for {metric}",
            details={"metric": metric, "requested": requested_str},
        )
        self.metric = metric
        self.percentile = percentile


class UnknownNamespaceError(AnalysisError):
    """Raised when a data store namespace is used before being opened."""

    def __init__(self, namespace: str):
        super().__init__(f"Data store namespace not opened: {namespace}")
        self.namespace = namespace


class NamespaceKindError(AnalysisError):
    """Raised when a namespace is opened or read with a conflicting value kind."""

    def __init__(self, namespace: str, expected: str, actual: str):
        super().__init__(
            f"Namespace {namespace} holds {actual} values, not {expected}",
            details={"namespace": namespace, "expected": expected, "actual": actual},
        )
        self.namespace = namespace


class CorpusFormatError(AnalysisError):
    """Raised when a linked corpus document cannot be turned into entities."""

    def __init__(self, reason: str, location: Optional[str] = None):
        details = {"reason": reason}
        if location:
            details["location"] = location
        super().__init__(f"Malformed corpus: {reason}", details=details)
        self.reason = reason
        self.location = location
