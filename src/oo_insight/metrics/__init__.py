"""Metric identifiers, sample statistics, collection and coupling."""

from .collector import MetricsCollector
from .coupling import CouplingResolver, format_coupling_entry, parse_coupling_entry
from .metric import Metric
from .samples import (
    FloatMetricSamples,
    IntMetricSamples,
    MetricSamples,
    SampleRegistry,
    SampleStatistics,
)

__all__ = [
    "CouplingResolver",
    "FloatMetricSamples",
    "IntMetricSamples",
    "Metric",
    "MetricSamples",
    "MetricsCollector",
    "SampleRegistry",
    "SampleStatistics",
    "format_coupling_entry",
    "parse_coupling_entry",
]
