"""Run-scoped infrastructure: the data store shared by collector and detectors."""

from .store import DataStore, FloatMap, IntMap, StrSetMap, ValueKind

__all__ = [
    "DataStore",
    "FloatMap",
    "IntMap",
    "StrSetMap",
    "ValueKind",
]
