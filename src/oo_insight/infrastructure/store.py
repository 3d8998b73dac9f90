"""DataStore: namespaced per-entity lookup tables shared across one analysis run.

The store is independent of the in-memory entity graph, so a detector can
look up facts about *other* classes (parents, coupling targets) by full
path without re-traversing the tree.

Each namespace is opened explicitly (usually named after a ``Metric``)
and holds exactly one kind of value:

    INT      full path -> int          (overwrites)
    FLOAT    full path -> float        (overwrites)
    STR_SET  full path -> set of str   (union-merges into an existing set)

A missing key is a normal outcome and is reported as ``None``, never as
zero or an empty set.

Lifecycle:
    open namespaces -> write during collection -> ``freeze()`` once
    statistics are finalized -> read-only queries from detectors.
    A new ``DataStore`` is created for every run.

Usage:
    store = DataStore()
    store.open_namespace(Metric.CLASS_PARENTS, ValueKind.STR_SET)
    store.add(Metric.CLASS_PARENTS, "zoo.Dog", {"zoo.Animal"})
    store.get(Metric.CLASS_PARENTS, "zoo.Dog")   # frozenset({'zoo.Animal'})
    store.get(Metric.CLASS_PARENTS, "zoo.Cat")   # None
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from ..exceptions import NamespaceKindError, StoreFrozenError, UnknownNamespaceError
from ..logging_config import get_logger

logger = get_logger(__name__)

NamespaceName = Union[str, Enum]


class ValueKind(Enum):
    """The value type held by one namespace."""

    INT = "int"
    FLOAT = "float"
    STR_SET = "str_set"


def _name(namespace: NamespaceName) -> str:
    return namespace.value if isinstance(namespace, Enum) else str(namespace)


class ScalarMap:
    """Full path -> scalar value. Later writes overwrite earlier ones."""

    kind = ValueKind.INT

    def __init__(self, name: str) -> None:
        self.name = name
        self._values: dict[str, Any] = {}

    def _coerce(self, value: Any) -> Any:
        return int(value)

    def add(self, key: str, value: Any) -> None:
        self._values[key] = self._coerce(value)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(self._values.items())

    def load(self, entries: Mapping[str, Any]) -> None:
        """Replace the whole namespace content."""
        self._values = {key: self._coerce(value) for key, value in entries.items()}

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)


class IntMap(ScalarMap):
    kind = ValueKind.INT


class FloatMap(ScalarMap):
    kind = ValueKind.FLOAT

    def _coerce(self, value: Any) -> float:
        return float(value)


class StrSetMap:
    """Full path -> set of strings. Writes union-merge into the existing set."""

    kind = ValueKind.STR_SET

    def __init__(self, name: str) -> None:
        self.name = name
        self._values: dict[str, set[str]] = {}

    def add(self, key: str, values: Union[str, Iterable[str]]) -> None:
        if isinstance(values, str):
            values = (values,)
        self._values.setdefault(key, set()).update(values)

    def get(self, key: str, default: Any = None) -> Optional[frozenset[str]]:
        values = self._values.get(key)
        if values is None:
            return default
        return frozenset(values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def items(self) -> Iterator[tuple[str, frozenset[str]]]:
        return ((key, frozenset(values)) for key, values in self._values.items())

    def load(self, entries: Mapping[str, Iterable[str]]) -> None:
        self._values = {key: set(values) for key, values in entries.items()}

    def to_dict(self) -> dict[str, list[str]]:
        return {key: sorted(values) for key, values in self._values.items()}


Namespace = Union[IntMap, FloatMap, StrSetMap]

_NAMESPACE_TYPES: dict[ValueKind, type] = {
    ValueKind.INT: IntMap,
    ValueKind.FLOAT: FloatMap,
    ValueKind.STR_SET: StrSetMap,
}


class DataStore:
    """Namespaced key -> value index for one analysis run.

    Writes are serialized through a lock so that string-set union merges
    stay atomic if collection is ever parallelized across classes.
    """

    def __init__(self) -> None:
        self._namespaces: dict[str, Namespace] = {}
        self._frozen = False
        self._lock = threading.RLock()

    # -----------------------------------------------------------------
    # Namespace management
    # -----------------------------------------------------------------

    def open_namespace(self, namespace: NamespaceName, kind: ValueKind) -> Namespace:
        """Open (or return the already open) namespace of the given kind.

        Raises:
            NamespaceKindError: If the namespace is already open with another kind.
        """
        name = _name(namespace)
        with self._lock:
            existing = self._namespaces.get(name)
            if existing is not None:
                if existing.kind is not kind:
                    raise NamespaceKindError(name, kind.value, existing.kind.value)
                return existing
            created = _NAMESPACE_TYPES[kind](name)
            self._namespaces[name] = created
            return created

    def namespace(self, namespace: NamespaceName) -> Namespace:
        name = _name(namespace)
        try:
            return self._namespaces[name]
        except KeyError:
            raise UnknownNamespaceError(name) from None

    def is_open(self, namespace: NamespaceName) -> bool:
        return _name(namespace) in self._namespaces

    def int_map(self, namespace: NamespaceName) -> IntMap:
        return self._typed(namespace, ValueKind.INT)

    def float_map(self, namespace: NamespaceName) -> FloatMap:
        return self._typed(namespace, ValueKind.FLOAT)

    def set_map(self, namespace: NamespaceName) -> StrSetMap:
        return self._typed(namespace, ValueKind.STR_SET)

    def _typed(self, namespace: NamespaceName, kind: ValueKind) -> Any:
        ns = self.namespace(namespace)
        if ns.kind is not kind:
            raise NamespaceKindError(ns.name, kind.value, ns.kind.value)
        return ns

    def namespaces(self) -> dict[str, ValueKind]:
        """All open namespaces and their value kinds."""
        return {name: ns.kind for name, ns in self._namespaces.items()}

    # -----------------------------------------------------------------
    # Values
    # -----------------------------------------------------------------

    def add(self, namespace: NamespaceName, key: str, value: Any) -> None:
        """Write a value: overwrite for scalars, union-merge for string sets."""
        ns = self.namespace(namespace)
        with self._lock:
            if self._frozen:
                raise StoreFrozenError(ns.name)
            ns.add(key, value)

    def get(self, namespace: NamespaceName, key: str, default: Any = None) -> Any:
        """Read a value; ``default`` (None) when the key was never written."""
        return self.namespace(namespace).get(key, default)

    def has(self, namespace: NamespaceName, key: str) -> bool:
        return key in self.namespace(namespace)

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the store read-only (detection phase)."""
        with self._lock:
            self._frozen = True
        logger.debug(f"Data store frozen with {len(self._namespaces)} namespaces")

    def reset(self) -> None:
        """Drop every namespace and make the store writable again."""
        with self._lock:
            self._namespaces.clear()
            self._frozen = False

    # -----------------------------------------------------------------
    # Bulk export / reload (persistence collaborator contract)
    # -----------------------------------------------------------------

    def dump(self) -> dict[str, dict[str, Any]]:
        """Every namespace with its kind and full key/value contents."""
        return {
            name: {"kind": ns.kind.value, "entries": ns.to_dict()}
            for name, ns in sorted(self._namespaces.items())
        }

    def load_namespace(
        self, namespace: NamespaceName, kind: ValueKind, entries: Mapping[str, Any]
    ) -> None:
        """Replace a namespace's full contents, opening it if needed."""
        ns = self.open_namespace(namespace, kind)
        with self._lock:
            if self._frozen:
                raise StoreFrozenError(ns.name)
            ns.load(entries)

    @classmethod
    def from_dump(cls, dump: Mapping[str, Mapping[str, Any]]) -> "DataStore":
        """Rebuild a store from the output of ``dump``."""
        store = cls()
        for name, content in dump.items():
            store.load_namespace(name, ValueKind(content["kind"]), content["entries"])
        return store
