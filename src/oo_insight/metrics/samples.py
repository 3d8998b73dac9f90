"""Metric sample sets: append-only observations with after-the-fact statistics.

Each metric kind owns one sample set. During collection the set only
accepts new observations; ``finalize`` sorts the observations once and
computes Tukey-style descriptive statistics:

    Q1, median, Q3          linear interpolation on the sorted samples
    IQR = Q3 - Q1
    mild bounds             [Q1 - 1.5 IQR, Q3 + 1.5 IQR]
    extreme bounds          [Q1 - 3 IQR,   Q3 + 3 IQR]

Percentile membership queries (``is_in_top`` / ``is_in_bottom``) must be
declared up front: only the percentiles passed to ``finalize`` can be
asked about afterwards.

Usage:
    samples = IntMetricSamples(Metric.CLASS_WMC)
    for wmc in (3, 5, 8, 40):
        samples.add(wmc)
    samples.finalize({10})
    samples.is_in_top(10, 40)      # True
    samples.is_mild_outlier(40)    # True
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Mapping, Optional, Union

import numpy as np

from ..exceptions import SamplesFinalizedError, UnknownPercentileError
from ..logging_config import get_logger
from .metric import FLOAT_SAMPLE_METRICS, INT_SAMPLE_METRICS, Metric

logger = get_logger(__name__)

Number = Union[int, float]

MILD_OUTLIER_FACTOR = 1.5
EXTREME_OUTLIER_FACTOR = 3.0


@dataclass(frozen=True)
class SampleStatistics:
    """Descriptive statistics of one finalized sample set."""

    count: int
    minimum: float
    maximum: float
    mean: float
    q1: float
    median: float
    q3: float
    iqr: float
    mild_lower: float
    mild_upper: float
    extreme_lower: float
    extreme_upper: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def percentile_rank(percentile: int, count: int) -> int:
    """1-based rank ``ceil(percentile / 100 * count)`` clamped to ``1..count``."""
    rank = -(-percentile * count // 100)
    return min(max(rank, 1), count)


class MetricSamples:
    """Append-only samples for one metric plus statistics once finalized.

    Subclasses only decide the numeric representation of a sample.
    """

    kind = "number"

    def __init__(self, metric: Metric) -> None:
        self.metric = metric
        self._values: list[Number] = []
        self._finalized = False
        self._requested: frozenset[int] = frozenset()
        self._bottom: dict[int, Number] = {}
        self._top: dict[int, Number] = {}
        self.stats: Optional[SampleStatistics] = None

    def _coerce(self, value: Number) -> Number:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # collection
    # ------------------------------------------------------------------

    def add(self, value: Number) -> None:
        """Append one observation. Duplicates are kept."""
        if self._finalized:
            raise SamplesFinalizedError(str(self.metric))
        self._values.append(self._coerce(value))

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> tuple[Number, ...]:
        """Samples in insertion order, or sorted ascending once finalized."""
        return tuple(self._values)

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def requested_percentiles(self) -> frozenset[int]:
        return self._requested

    # ------------------------------------------------------------------
    # finalization
    # ------------------------------------------------------------------

    def finalize(self, percentiles: Iterable[int] = ()) -> Optional[SampleStatistics]:
        """Sort the samples and compute statistics and percentile boundaries.

        Args:
            percentiles: Percentiles (0-100) that will be queried with
                ``is_in_top`` / ``is_in_bottom`` later on.

        Returns:
            The computed statistics, or None for an empty sample set.
        """
        if self._finalized:
            raise SamplesFinalizedError(str(self.metric))

        requested = frozenset(int(p) for p in percentiles)
        for p in requested:
            if not 0 <= p <= 100:
                raise ValueError(f"percentile must be within 0..100, got {p}")

        self._finalized = True
        self._requested = requested
        self._values.sort()

        if not self._values:
            logger.debug(f"No samples collected for {self.metric}; statistics left empty")
            return None

        data = np.asarray(self._values, dtype=float)
        q1, median, q3 = (float(q) for q in np.percentile(data, [25, 50, 75]))
        iqr = q3 - q1

        self.stats = SampleStatistics(
            count=len(self._values),
            minimum=float(data[0]),
            maximum=float(data[-1]),
            mean=float(np.mean(data)),
            q1=q1,
            median=median,
            q3=q3,
            iqr=iqr,
            mild_lower=q1 - MILD_OUTLIER_FACTOR * iqr,
            mild_upper=q3 + MILD_OUTLIER_FACTOR * iqr,
            extreme_lower=q1 - EXTREME_OUTLIER_FACTOR * iqr,
            extreme_upper=q3 + EXTREME_OUTLIER_FACTOR * iqr,
        )

        n = len(self._values)
        for p in requested:
            rank = percentile_rank(p, n)
            self._bottom[p] = self._values[rank - 1]
            # top set is the last `rank` samples
            self._top[p] = self._values[n - rank]

        return self.stats

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def is_mild_outlier(self, value: Number) -> bool:
        if self.stats is None:
            return False
        return value < self.stats.mild_lower or value > self.stats.mild_upper

    def is_extreme_outlier(self, value: Number) -> bool:
        if self.stats is None:
            return False
        return value < self.stats.extreme_lower or value > self.stats.extreme_upper

    def is_in_top(self, percentile: int, value: Number) -> bool:
        """True if ``value`` belongs to the top ``percentile`` percent."""
        boundary = self._boundary(self._top, percentile)
        return boundary is not None and value >= boundary

    def is_in_bottom(self, percentile: int, value: Number) -> bool:
        """True if ``value`` belongs to the bottom ``percentile`` percent."""
        boundary = self._boundary(self._bottom, percentile)
        return boundary is not None and value <= boundary

    def percentile_value(self, percentile: int) -> Optional[Number]:
        """Sample at rank ``ceil(percentile / 100 * N)``."""
        return self._boundary(self._bottom, percentile)

    def _boundary(self, boundaries: dict[int, Number], percentile: int) -> Optional[Number]:
        if percentile not in self._requested:
            raise UnknownPercentileError(str(self.metric), percentile, self._requested)
        return boundaries.get(percentile)

    def to_dict(self) -> dict:
        return {
            "metric": str(self.metric),
            "kind": self.kind,
            "count": len(self._values),
            "stats": self.stats.to_dict() if self.stats else None,
            "percentiles": {str(p): self._bottom.get(p) for p in sorted(self._requested)},
        }


class IntMetricSamples(MetricSamples):
    """Integer-valued samples (LOC, counts, complexities)."""

    kind = "int"

    def _coerce(self, value: Number) -> int:
        return int(value)


class FloatMetricSamples(MetricSamples):
    """Real-valued samples (ratios such as AMW)."""

    kind = "float"

    def _coerce(self, value: Number) -> float:
        return float(value)


class SampleRegistry:
    """The fixed set of sample sets of one analysis run, keyed by metric."""

    def __init__(self) -> None:
        self._samples: dict[Metric, MetricSamples] = {}
        for metric in INT_SAMPLE_METRICS:
            self._samples[metric] = IntMetricSamples(metric)
        for metric in FLOAT_SAMPLE_METRICS:
            self._samples[metric] = FloatMetricSamples(metric)

    def __getitem__(self, metric: Metric) -> MetricSamples:
        return self._samples[metric]

    def __contains__(self, metric: object) -> bool:
        return metric in self._samples

    def __iter__(self):
        return iter(self._samples.values())

    def add(self, metric: Metric, value: Number) -> None:
        self._samples[metric].add(value)

    def finalize_all(
        self, required_percentiles: Optional[Mapping[Metric, Iterable[int]]] = None
    ) -> None:
        """Finalize every sample set, tracking the requested percentiles per metric."""
        required = required_percentiles or {}
        for metric, samples in self._samples.items():
            samples.finalize(required.get(metric, ()))

    @property
    def finalized(self) -> bool:
        return all(s.finalized for s in self._samples.values())

    def to_dict(self) -> dict[str, dict]:
        return {str(m): s.to_dict() for m, s in self._samples.items()}
