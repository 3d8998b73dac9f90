"""Metric identifiers.

A ``Metric`` names either a sample set (a distribution of observations
across the whole run) or a data store namespace (a per-entity lookup
table), and often both: ``CLASS_WMC`` is sampled for statistics and also
stored per class path for detectors.
"""

from __future__ import annotations

from enum import Enum


class Metric(Enum):
    """All metric kinds known to the collector."""

    # ── class size / shape ──────────────────────────────────────────
    CLASS_LOC = "CLASS_LOC"
    CLASS_SUPERCLASSES = "CLASS_SUPERCLASSES"
    CLASS_METHODS = "CLASS_METHODS"
    CLASS_METHODS_AND_VARS = "CLASS_METHODS_AND_VARS"
    CLASS_ACCESSORS = "CLASS_ACCESSORS"
    CLASS_LCOM = "CLASS_LCOM"
    CLASS_METHODS_NO_PARAMS = "CLASS_METHODS_NO_PARAMS"
    CLASS_PUBLIC_FIELDS = "CLASS_PUBLIC_FIELDS"
    CLASS_PRIVATE_FIELDS = "CLASS_PRIVATE_FIELDS"
    CLASS_PROTECTED_FIELDS = "CLASS_PROTECTED_FIELDS"

    # ── class complexity ────────────────────────────────────────────
    CLASS_WMC = "CLASS_WMC"
    CLASS_AMW = "CLASS_AMW"
    CLASS_AVG_CC = "CLASS_AVG_CC"
    CLASS_AVG_LOC = "CLASS_AVG_LOC"

    # ── class relations (store only) ────────────────────────────────
    CLASS_PARENTS = "CLASS_PARENTS"
    CLASS_DEF_METHODS = "CLASS_DEF_METHODS"
    CLASS_FIELDNAMES = "CLASS_FIELDNAMES"
    CLASS_REF_CLS_NAMES = "CLASS_REF_CLS_NAMES"
    CLASS_REF_METHOD_NAMES = "CLASS_REF_METHOD_NAMES"
    CLASS_REF_VAR_NAMES = "CLASS_REF_VAR_NAMES"
    CLASS_REF_VAR_PATHS = "CLASS_REF_VAR_PATHS"
    CLASS_PROTECTED_FIELDS_NAMES = "CLASS_PROTECTED_FIELDS_NAMES"
    CLASS_REF_CLS_COUNT = "CLASS_REF_CLS_COUNT"
    CLASS_REF_VAR_COUNT = "CLASS_REF_VAR_COUNT"
    CLASS_COUPLING = "CLASS_COUPLING"

    # ── subroutines ─────────────────────────────────────────────────
    SUBROUTINE_LOC = "SUBROUTINE_LOC"
    SUBROUTINE_PARAMS = "SUBROUTINE_PARAMS"
    SUBROUTINE_AID = "SUBROUTINE_AID"
    SUBROUTINE_CC = "SUBROUTINE_CC"
    SUBROUTINE_AVG_CC = "SUBROUTINE_AVG_CC"

    # ── project ─────────────────────────────────────────────────────
    PROJECT_LOC = "PROJECT_LOC"
    PROJECT_CC = "PROJECT_CC"
    PROJECT_GLOBAL_CC = "PROJECT_GLOBAL_CC"
    PROJECT_AVG_LOC = "PROJECT_AVG_LOC"
    PROJECT_AVG_AMW = "PROJECT_AVG_AMW"

    @classmethod
    def from_name(cls, name: str) -> "Metric":
        """Look up a metric by its (case-insensitive) name.

        Raises:
            KeyError: If no metric has that name.
        """
        return cls[name.strip().upper()]

    def __str__(self) -> str:
        return self.value


# Sample sets created at collector start-up. The set is fixed for a run.
INT_SAMPLE_METRICS: tuple[Metric, ...] = (
    Metric.CLASS_LOC,
    Metric.CLASS_SUPERCLASSES,
    Metric.CLASS_METHODS,
    Metric.CLASS_METHODS_AND_VARS,
    Metric.CLASS_ACCESSORS,
    Metric.CLASS_LCOM,
    Metric.CLASS_METHODS_NO_PARAMS,
    Metric.CLASS_PUBLIC_FIELDS,
    Metric.CLASS_PRIVATE_FIELDS,
    Metric.CLASS_WMC,
    Metric.SUBROUTINE_LOC,
    Metric.SUBROUTINE_PARAMS,
    Metric.SUBROUTINE_AID,
    Metric.SUBROUTINE_CC,
    Metric.SUBROUTINE_AVG_CC,
    Metric.PROJECT_LOC,
    Metric.PROJECT_CC,
    Metric.PROJECT_GLOBAL_CC,
    Metric.PROJECT_AVG_LOC,
)

FLOAT_SAMPLE_METRICS: tuple[Metric, ...] = (
    Metric.CLASS_AMW,
    Metric.PROJECT_AVG_AMW,
)

SAMPLE_METRICS: tuple[Metric, ...] = INT_SAMPLE_METRICS + FLOAT_SAMPLE_METRICS

# Separator between referencing class and referenced field in CLASS_REF_VAR_PATHS.
REF_PATH_SEPARATOR = " > "
