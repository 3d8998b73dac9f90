"""Coupling heuristic: resolve attribute receivers to in-corpus classes.

For a class whose methods access ``x.y`` on some variable ``x`` that is
not one of its fields, the heuristic guesses the type of ``x`` from the
assignments ``x = SomeClass(...)`` found in the class body (first) and
in its methods (second), maps ``SomeClass`` to an analyzed class through
the module's import tables, and counts how often ``x`` is used. The
result is stored under ``CLASS_COUPLING`` as composite entries::

    "<target class path>&ref=<occurrences>"

which a downstream detector splits again with ``parse_coupling_entry``
to check for mutual coupling between two classes.

Resolution is best effort. Receivers that cannot be typed are reported
to the diagnostics sink; receivers that are library imports are dropped
silently.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from ..diagnostics import UnresolvedNameLog
from ..infrastructure.store import DataStore
from ..model.corpus import Corpus
from ..model.entities import Assign, Class, Module
from .metric import Metric

COUPLING_SEPARATOR = "&ref="
SELF_ALIASES = ("self", "cls")

# Leading dotted name of a call expression: "Helper()", "pkg.Helper(1, 2)"
_CALLEE = re.compile(r"^\s*([A-Za-z_][\w.]*)\s*\(")


def format_coupling_entry(target_path: str, count: int) -> str:
    return f"{target_path}{COUPLING_SEPARATOR}{count}"


def parse_coupling_entry(entry: str) -> tuple[str, int]:
    """Split a ``<target>&ref=<count>`` entry into ``(target, count)``.

    Raises:
        ValueError: If the entry has no separator or a non-integer count.
    """
    target, sep, count = entry.rpartition(COUPLING_SEPARATOR)
    if not sep or not target:
        raise ValueError(f"not a coupling entry: {entry!r}")
    return target, int(count)


def strip_self(name: str) -> str:
    """``self.a.b`` -> ``a.b``; other names are returned unchanged."""
    head, sep, rest = name.partition(".")
    if sep and rest and head.lower() in SELF_ALIASES:
        return rest
    return name


def type_name_of(value: str) -> str:
    """Type name guessed from an assigned value expression.

    ``Helper()`` gives ``Helper``. Values that are not a call are returned
    stripped, so they can only resolve if they literally name a class.
    """
    match = _CALLEE.match(value)
    return match.group(1) if match else value.strip()


@dataclass
class CouplingData:
    """Intermediate result of the heuristic for one class."""

    unknown: set[str] = field(default_factory=set)
    declared_types: dict[str, str] = field(default_factory=dict)
    resolved: dict[str, Class] = field(default_factory=dict)
    unresolved: set[str] = field(default_factory=set)
    occurrences: dict[str, int] = field(default_factory=dict)

    def entries(self) -> set[str]:
        return {
            format_coupling_entry(self.resolved[var].full_path, count)
            for var, count in self.occurrences.items()
        }


class CouplingResolver:
    """Compute and store coupling counts for classes of one corpus.

    Args:
        corpus: Arena used to look up modules and imported classes.
        store: Receives the ``CLASS_COUPLING`` entries.
        diagnostics: Receives the names that could not be typed.
    """

    def __init__(self, corpus: Corpus, store: DataStore, diagnostics: UnresolvedNameLog) -> None:
        self.corpus = corpus
        self.store = store
        self.diagnostics = diagnostics

    def process(self, cls: Class, module: Optional[Module] = None) -> Optional[CouplingData]:
        """Run the heuristic for one class and store its coupling entries.

        Returns:
            The intermediate data, or None when the class accesses no
            attribute of a non-field receiver.
        """
        module = module or self.corpus.module_of(cls)

        referenced_list: list[str] = []
        called: set[str] = set()
        method_assigns: list[Assign] = []
        for sub in cls.subroutines.values():
            referenced_list.extend(strip_self(n) for n in sub.referenced_var_names)
            called.update(strip_self(n) for n in sub.called_names)
            method_assigns.extend(sub.assigns)
        referenced = set(referenced_list)

        if not referenced:
            return None

        data = CouplingData()
        for name in referenced:
            receiver, sep, _ = name.partition(".")
            if sep and receiver and receiver.lower() not in SELF_ALIASES:
                data.unknown.add(receiver)
        if not data.unknown:
            return None

        # Class body before method bodies; first assignment to a name wins.
        for assign in (*cls.assigns, *method_assigns):
            target = strip_self(assign.name)
            if target in data.unknown and target not in data.declared_types:
                data.declared_types[target] = type_name_of(assign.value)

        if module is not None:
            for var, type_name in data.declared_types.items():
                target_cls = self._resolve_type(module, type_name)
                if target_cls is not None:
                    data.resolved[var] = target_cls

        data.unresolved = data.unknown - set(data.resolved)
        if module is not None:
            data.unresolved -= module.library_imports
        if data.unresolved:
            self.diagnostics.report(cls.full_path, data.unresolved)

        data.occurrences = self._count(data.resolved, called, referenced_list)
        if data.occurrences:
            self.store.add(Metric.CLASS_COUPLING, cls.full_path, data.entries())
        return data

    def _resolve_type(self, module: Module, type_name: str) -> Optional[Class]:
        """Map a type name to an in-corpus class through the module's imports."""
        path = module.class_imports.get(type_name)
        if path is not None:
            found = self.corpus.cls(path)
            if found is not None:
                return found

        # "mod.Cls" where mod is an imported module
        mod_alias, sep, cls_name = type_name.rpartition(".")
        if sep:
            imported = self._imported_module(module, mod_alias)
            return imported.get_class(cls_name) if imported else None

        for alias, mod_path in module.module_imports.items():
            if alias != type_name:
                continue
            imported = self.corpus.module(mod_path)
            if imported is None:
                continue
            found = imported.get_class(type_name)
            if found is not None:
                return found
            original = module.import_alias(type_name)
            if original is not None and imported.get_class(original) is not None:
                return imported.get_class(original)
        return None

    def _imported_module(self, module: Module, alias: str) -> Optional[Module]:
        path = module.module_imports.get(alias)
        return self.corpus.module(path) if path is not None else None

    @staticmethod
    def _count(resolved: dict[str, Class], called: set[str], referenced_list: list[str]) -> dict[str, int]:
        """Occurrences of each resolved receiver.

        Distinct called names add one each. Distinct referenced names add
        their full occurrence count when repeated, one otherwise. A
        referenced name that is also a called name was already counted.
        """
        repeats = Counter(referenced_list)
        occurrences: dict[str, int] = {}
        for var in sorted(resolved):
            prefix = f"{var}."
            count = sum(1 for name in called if name.startswith(prefix))
            for name, seen in repeats.items():
                if name.startswith(prefix) and name not in called:
                    count += seen if seen >= 2 else 1
            if count:
                occurrences[var] = count
        return occurrences
