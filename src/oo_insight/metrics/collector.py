"""Metric collector: one pass over the entity graph feeding samples and store.

The collector is side-effecting and not idempotent: every entity must be
registered exactly once per run, in traversal order (module, its
classes each followed by their methods, then free functions). The
lifecycle of one run is::

    collector = MetricsCollector(context)
    for project in corpus.projects:
        for entity in iter_entities(project):
            collector.register(entity)
        collector.project_data(project)
    collector.terminate_collecting(required_percentiles)

After ``terminate_collecting`` the sample sets are finalized, the data
store is read-only and further registrations raise
``CollectionFinishedError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Optional

from ..exceptions import CollectionFinishedError
from ..infrastructure.store import ValueKind
from ..logging_config import get_logger
from ..model.entities import Class, Entity, EntityKind, Module, Project, Subroutine
from .coupling import CouplingResolver
from .metric import REF_PATH_SEPARATOR, Metric

if TYPE_CHECKING:
    from ..context import AnalysisContext

logger = get_logger(__name__)

# Namespaces written by the collector, keyed by full path.
STORE_NAMESPACES: dict[Metric, ValueKind] = {
    Metric.CLASS_PARENTS: ValueKind.STR_SET,
    Metric.CLASS_DEF_METHODS: ValueKind.STR_SET,
    Metric.CLASS_FIELDNAMES: ValueKind.STR_SET,
    Metric.CLASS_REF_CLS_NAMES: ValueKind.STR_SET,
    Metric.CLASS_REF_METHOD_NAMES: ValueKind.STR_SET,
    Metric.CLASS_REF_VAR_NAMES: ValueKind.STR_SET,
    Metric.CLASS_REF_VAR_PATHS: ValueKind.STR_SET,
    Metric.CLASS_PROTECTED_FIELDS_NAMES: ValueKind.STR_SET,
    Metric.CLASS_COUPLING: ValueKind.STR_SET,
    Metric.CLASS_REF_CLS_COUNT: ValueKind.INT,
    Metric.CLASS_REF_VAR_COUNT: ValueKind.INT,
    Metric.CLASS_PROTECTED_FIELDS: ValueKind.INT,
    Metric.CLASS_WMC: ValueKind.INT,
    Metric.CLASS_AMW: ValueKind.FLOAT,
    Metric.CLASS_LOC: ValueKind.INT,
    Metric.CLASS_METHODS: ValueKind.INT,
    # per project
    Metric.CLASS_AVG_LOC: ValueKind.INT,
    Metric.PROJECT_AVG_LOC: ValueKind.INT,
    Metric.CLASS_AVG_CC: ValueKind.FLOAT,
    Metric.PROJECT_AVG_AMW: ValueKind.FLOAT,
}


def nonzero(n: int) -> int:
    """Substitute 1 for a zero denominator."""
    return n if n != 0 else 1


@dataclass
class _ProjectTotals:
    """Running per-project accumulators, reset after ``project_data``."""

    project_loc: int = 0
    project_cc: int = 0
    class_loc: int = 0
    class_cc: int = 0
    amw_sum: float = 0.0
    class_count: int = 0
    module_count: int = 0
    subroutine_count: int = 0


class MetricsCollector:
    """Single-pass collector of per-entity metrics.

    Args:
        context: Run context providing the corpus, data store, sample
            sets and diagnostics sink.
    """

    def __init__(self, context: AnalysisContext) -> None:
        self.context = context
        self.store = context.store
        self.samples = context.samples
        self.coupling = CouplingResolver(context.corpus, context.store, context.diagnostics)

        for namespace, kind in STORE_NAMESPACES.items():
            self.store.open_namespace(namespace, kind)

        self._totals = _ProjectTotals()
        # Free-function CC over the whole run, not reset per project
        self._global_sub_cc = 0
        self._current_class: Optional[Class] = None
        self._current_module: Optional[Module] = None
        self._finished = False

        self._visitors: dict[EntityKind, Callable[[Entity], None]] = {
            EntityKind.MODULE: self._visit_module,
            EntityKind.CLASS: self._visit_class,
            EntityKind.SUBROUTINE: self._visit_subroutine,
        }

    @property
    def finished(self) -> bool:
        return self._finished

    # ------------------------------------------------------------------
    # traversal
    # ------------------------------------------------------------------

    def register(self, entity: Entity) -> None:
        """Visit one module, class or subroutine.

        Raises:
            CollectionFinishedError: If collection was already terminated.
            TypeError: For entities the collector does not visit.
        """
        if self._finished:
            raise CollectionFinishedError("register")
        visitor = self._visitors.get(getattr(entity, "kind", None))
        if visitor is None:
            raise TypeError(f"cannot register {type(entity).__name__}")
        visitor(entity)

    def _visit_module(self, module: Module) -> None:
        self._current_module = module
        self._current_class = None
        self._totals.project_loc += module.loc
        self._totals.module_count += 1

    def _visit_class(self, cls: Class) -> None:
        path = cls.full_path
        wmc = cls.wmc
        amw = wmc / nonzero(cls.nom)
        fields = cls.defined_vars_incl_parents
        # only in-corpus parents count
        parents = {p.full_path for p in self.context.corpus.superclasses_of(cls)}

        # ── samples ────────────────────────────────────────────────────
        self.samples.add(Metric.CLASS_LOC, cls.loc)
        self.samples.add(Metric.CLASS_SUPERCLASSES, len(parents))
        self.samples.add(Metric.CLASS_METHODS, cls.nom)
        self.samples.add(Metric.CLASS_METHODS_AND_VARS, cls.nom + len(fields))
        self.samples.add(Metric.CLASS_ACCESSORS, cls.accessor_count)
        self.samples.add(Metric.CLASS_LCOM, cls.lcom)
        self.samples.add(Metric.CLASS_METHODS_NO_PARAMS, cls.no_param_method_count)
        self.samples.add(Metric.CLASS_PUBLIC_FIELDS, sum(1 for v in fields if v.is_public))
        self.samples.add(Metric.CLASS_PRIVATE_FIELDS, sum(1 for v in fields if v.is_private))
        self.samples.add(Metric.CLASS_WMC, wmc)
        self.samples.add(Metric.CLASS_AMW, amw)

        # ── store: relations ───────────────────────────────────────────
        protected = cls.protected_variables
        ref_paths = {
            f"{var.owner}{REF_PATH_SEPARATOR}{var.name}"
            for var in cls.referenced_variables
            if var.owner != path
        }
        self.store.add(Metric.CLASS_PARENTS, path, parents)
        self.store.add(Metric.CLASS_DEF_METHODS, path, cls.subroutine_names)
        self.store.add(Metric.CLASS_FIELDNAMES, path, cls.variable_names)
        self.store.add(Metric.CLASS_REF_CLS_NAMES, path, cls.referenced_class_names)
        self.store.add(Metric.CLASS_REF_METHOD_NAMES, path, cls.referenced_method_names)
        self.store.add(Metric.CLASS_REF_VAR_NAMES, path, cls.referenced_variable_names)
        self.store.add(Metric.CLASS_REF_VAR_PATHS, path, ref_paths)
        self.store.add(Metric.CLASS_PROTECTED_FIELDS_NAMES, path, {v.name for v in protected})

        # ── store: scalars ─────────────────────────────────────────────
        self.store.add(Metric.CLASS_REF_CLS_COUNT, path, len(cls.referenced_class_names))
        self.store.add(Metric.CLASS_REF_VAR_COUNT, path, len(cls.referenced_variable_names))
        self.store.add(Metric.CLASS_PROTECTED_FIELDS, path, len(protected))
        self.store.add(Metric.CLASS_WMC, path, wmc)
        self.store.add(Metric.CLASS_AMW, path, amw)
        self.store.add(Metric.CLASS_LOC, path, cls.loc)
        self.store.add(Metric.CLASS_METHODS, path, cls.nom)

        self.coupling.process(cls, self._current_module)

        self._totals.project_cc += wmc
        self._totals.class_loc += cls.loc
        self._totals.class_cc += wmc
        self._totals.amw_sum += amw
        self._totals.class_count += 1
        self._current_class = cls

    def _visit_subroutine(self, sub: Subroutine) -> None:
        self.samples.add(Metric.SUBROUTINE_LOC, sub.loc)
        self.samples.add(Metric.SUBROUTINE_PARAMS, sub.param_count)
        self.samples.add(Metric.SUBROUTINE_AID, sub.aid)
        self.samples.add(Metric.SUBROUTINE_CC, sub.cc)
        self._global_sub_cc += sub.cc
        self._totals.subroutine_count += 1

        current = self._current_class
        if sub.is_method:
            if current is not None and sub.parent_class == current.full_path:
                current.add_subroutine(sub)
        else:
            self._current_class = None

    # ------------------------------------------------------------------
    # finalization
    # ------------------------------------------------------------------

    def project_data(self, project: Project) -> None:
        """Write per-project averages and start a fresh set of accumulators.

        Must be called once per project after all of its entities were
        registered, and before ``terminate_collecting``.
        """
        if self._finished:
            raise CollectionFinishedError("project_data")

        t = self._totals
        path = project.path
        classes = nonzero(t.class_count)

        avg_project_loc = t.project_loc // classes
        avg_class_loc = t.class_loc // classes
        avg_class_cc = t.class_cc / classes
        avg_amw = t.amw_sum / classes

        self.samples.add(Metric.PROJECT_LOC, t.project_loc)
        self.samples.add(Metric.PROJECT_CC, t.project_cc)
        self.samples.add(Metric.SUBROUTINE_AVG_CC, round(t.project_cc / nonzero(t.subroutine_count)))
        self.samples.add(Metric.PROJECT_AVG_LOC, avg_project_loc)
        self.samples.add(Metric.PROJECT_AVG_AMW, avg_amw)

        self.store.add(Metric.PROJECT_AVG_LOC, path, avg_project_loc)
        self.store.add(Metric.CLASS_AVG_LOC, path, avg_class_loc)
        self.store.add(Metric.CLASS_AVG_CC, path, avg_class_cc)
        self.store.add(Metric.PROJECT_AVG_AMW, path, avg_amw)

        logger.debug(
            f"Project {path}: {t.module_count} modules, {t.class_count} classes, "
            f"avg class LOC {avg_class_loc}, avg class CC {avg_class_cc:.2f}, avg AMW {avg_amw:.2f}"
        )

        self._totals = _ProjectTotals()
        self._current_class = None
        self._current_module = None

    def terminate_collecting(
        self, required_percentiles: Optional[Mapping[Metric, Iterable[int]]] = None
    ) -> None:
        """Finalize all sample sets and make the data store read-only.

        Args:
            required_percentiles: Percentiles of interest per metric; only
                these can be queried afterwards.
        """
        if self._finished:
            raise CollectionFinishedError("terminate_collecting")
        self.samples.add(Metric.PROJECT_GLOBAL_CC, self._global_sub_cc)
        self.samples.finalize_all(required_percentiles)
        self.store.freeze()
        self._finished = True
        logger.debug("Metric collection terminated")

    # ------------------------------------------------------------------
    # queries on finalized samples
    # ------------------------------------------------------------------

    def is_mild_outlier(self, metric: Metric, value: float) -> bool:
        return self.samples[metric].is_mild_outlier(value)

    def is_extreme_outlier(self, metric: Metric, value: float) -> bool:
        return self.samples[metric].is_extreme_outlier(value)

    def is_in_top(self, metric: Metric, percentile: int, value: float) -> bool:
        return self.samples[metric].is_in_top(percentile, value)

    def is_in_bottom(self, metric: Metric, percentile: int, value: float) -> bool:
        return self.samples[metric].is_in_bottom(percentile, value)
