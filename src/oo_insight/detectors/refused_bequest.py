"""REFUSED_BEQUEST: a complex subclass that ignores what it inherits.

Scope: CLASS
Precondition: at least one in-corpus superclass

Following Lanza & Marinescu, a class refuses its parents' bequest when
it is not small and simple:

    (AMW > avg AMW  OR  WMC > avg class CC)  AND  LOC >= avg class LOC

and it ignores the inherited interface:

    (parents' protected fields > member_threshold
        AND used inherited members / inherited members < 1/3)
    OR overridden parent methods > override_threshold

Averages are per project. A missing average makes its comparison false.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..config import resolve_int_option
from ..infrastructure.store import ValueKind
from ..logging_config import get_logger
from ..metrics.metric import Metric
from ..model.entities import Class

if TYPE_CHECKING:
    from ..context import AnalysisContext

logger = get_logger(__name__)

DEFAULT_MEMBER_THRESHOLD = 3
DEFAULT_OVERRIDE_THRESHOLD = 3
USAGE_RATIO = 1 / 3


class RefusedBequestDetector:
    """Detects subclasses that are complex yet barely use their parents."""

    name = "refused_bequest"
    defect_name = "Refused (Parent) Bequest"

    # Namespaces read by confirm_defect
    reads: dict[Metric, ValueKind] = {
        Metric.CLASS_PARENTS: ValueKind.STR_SET,
        Metric.CLASS_DEF_METHODS: ValueKind.STR_SET,
        Metric.CLASS_FIELDNAMES: ValueKind.STR_SET,
        Metric.CLASS_REF_METHOD_NAMES: ValueKind.STR_SET,
        Metric.CLASS_REF_VAR_NAMES: ValueKind.STR_SET,
        Metric.CLASS_PROTECTED_FIELDS: ValueKind.INT,
        Metric.CLASS_WMC: ValueKind.INT,
        Metric.CLASS_METHODS: ValueKind.INT,
        Metric.CLASS_LOC: ValueKind.INT,
        Metric.CLASS_AVG_LOC: ValueKind.INT,
        Metric.CLASS_AVG_CC: ValueKind.FLOAT,
        Metric.PROJECT_AVG_AMW: ValueKind.FLOAT,
    }

    def __init__(self, context: AnalysisContext, options: Optional[Mapping[str, Any]] = None) -> None:
        options = options or {}
        self.store = context.store
        self.corpus = context.corpus
        self.member_threshold = resolve_int_option(
            options, "member_threshold", DEFAULT_MEMBER_THRESHOLD
        )
        self.override_threshold = resolve_int_option(
            options, "override_threshold", DEFAULT_OVERRIDE_THRESHOLD
        )
        for namespace, kind in self.reads.items():
            self.store.open_namespace(namespace, kind)
        logger.debug(
            f"{self.name}: member threshold {self.member_threshold}, "
            f"override threshold {self.override_threshold}"
        )

    def is_preliminarily_defective(self, cls: Class) -> bool:
        """Only classes inheriting from an analyzed class qualify."""
        return bool(self.corpus.superclasses_of(cls))

    def confirm_defect(self, entity_path: str, project_path: str) -> bool:
        complex_ = self.is_complex(entity_path, project_path)
        ignores = self.ignores_bequest(entity_path)
        if complex_ and ignores:
            logger.debug(f"{entity_path} refuses its parents' bequest")
        return complex_ and ignores

    # ------------------------------------------------------------------
    # ignores bequest
    # ------------------------------------------------------------------

    def ignores_bequest(self, path: str) -> bool:
        return (
            self.few_protected_parent_members(path) and self.refuses_parent_usage(path)
        ) or self.overrides_parent_methods(path)

    def _parents(self, path: str) -> frozenset[str]:
        return self.store.get(Metric.CLASS_PARENTS, path, frozenset())

    def _union(self, namespace: Metric, paths: frozenset[str]) -> set[str]:
        merged: set[str] = set()
        for parent in paths:
            merged |= self.store.get(namespace, parent, frozenset())
        return merged

    def few_protected_parent_members(self, path: str) -> bool:
        """Parents together declare more protected fields than the threshold."""
        total = 0
        for parent in self._parents(path):
            total += self.store.get(Metric.CLASS_PROTECTED_FIELDS, parent, 0)
        return total > self.member_threshold

    def refuses_parent_usage(self, path: str) -> bool:
        """Less than a third of the inherited fields and methods are used."""
        parents = self._parents(path)
        parent_fields = self._union(Metric.CLASS_FIELDNAMES, parents)
        parent_methods = self._union(Metric.CLASS_DEF_METHODS, parents)

        referenced = self.store.get(Metric.CLASS_REF_VAR_NAMES, path, frozenset())
        called = self.store.get(Metric.CLASS_REF_METHOD_NAMES, path, frozenset())

        used = len(referenced & parent_fields) + len(called & parent_methods)
        total = len(parent_fields) + len(parent_methods)
        return used / max(total, 1) < USAGE_RATIO

    def overrides_parent_methods(self, path: str) -> bool:
        parent_methods = self._union(Metric.CLASS_DEF_METHODS, self._parents(path))
        own = self.store.get(Metric.CLASS_DEF_METHODS, path, frozenset())
        return len(own & parent_methods) > self.override_threshold

    # ------------------------------------------------------------------
    # complexity
    # ------------------------------------------------------------------

    def is_complex(self, path: str, project_path: str) -> bool:
        return (
            self.amw_above_average(path, project_path) or self.wmc_above_average(path, project_path)
        ) and self.size_above_average(path, project_path)

    def amw_above_average(self, path: str, project_path: str) -> bool:
        avg = self.store.get(Metric.PROJECT_AVG_AMW, project_path)
        wmc = self.store.get(Metric.CLASS_WMC, path)
        nom = self.store.get(Metric.CLASS_METHODS, path)
        if avg is None or wmc is None or nom is None:
            return False
        return wmc / max(nom, 1) > avg

    def wmc_above_average(self, path: str, project_path: str) -> bool:
        avg = self.store.get(Metric.CLASS_AVG_CC, project_path)
        wmc = self.store.get(Metric.CLASS_WMC, path)
        if avg is None or wmc is None:
            return False
        return wmc > avg

    def size_above_average(self, path: str, project_path: str) -> bool:
        avg = self.store.get(Metric.CLASS_AVG_LOC, project_path)
        loc = self.store.get(Metric.CLASS_LOC, path)
        if avg is None or loc is None:
            return False
        return loc >= avg
