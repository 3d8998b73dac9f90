"""Entity model consumed by the metric collector.

The entities are produced by an external linking stage and arrive fully
cross-linked. Cross references (superclasses, imports) are stored as
full-path strings and resolved through the ``Corpus`` arena, so cyclic
relations (mutual imports, classes coupled both ways) need no owning
pointers.

    Project
        └── Module
                ├── Class
                │       ├── Subroutine (methods)
                │       ├── Variable   (declared fields)
                │       └── Assign
                └── Subroutine (free functions)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Union


class EntityKind(Enum):
    """The closed set of entity kinds the collector dispatches over."""

    PROJECT = "project"
    MODULE = "module"
    CLASS = "class"
    SUBROUTINE = "subroutine"


class Visibility(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"

    @classmethod
    def from_name(cls, name: str) -> "Visibility":
        """Classify a Python attribute name by its underscore convention."""
        bare = name.rsplit(".", 1)[-1]
        if bare.startswith("__") and not bare.endswith("__"):
            return cls.PRIVATE
        if bare.startswith("_") and not bare.endswith("__"):
            return cls.PROTECTED
        return cls.PUBLIC


@dataclass(frozen=True)
class Variable:
    """A field declared on (or inherited by) a class."""

    name: str
    owner: str  # full path of the declaring class
    visibility: Visibility = Visibility.PUBLIC

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC

    @property
    def is_protected(self) -> bool:
        return self.visibility is Visibility.PROTECTED

    @property
    def is_private(self) -> bool:
        return self.visibility is Visibility.PRIVATE


@dataclass(frozen=True)
class Assign:
    """``name = value`` with the value expression rendered as source text."""

    name: str
    value: str


@dataclass(eq=False)
class Subroutine:
    """A method or a free function.

    ``referenced_var_names`` and ``called_names`` preserve duplicates and
    source order; the ``*_set`` properties give the distinct names.
    ``param_count`` excludes the implicit ``self``/``cls`` parameter.
    """

    kind: ClassVar[EntityKind] = EntityKind.SUBROUTINE

    full_path: str
    name: str
    loc: int = 0
    param_count: int = 0
    cc: int = 1
    aid: int = 0  # access of imported data
    referenced_var_names: list[str] = field(default_factory=list)
    called_names: list[str] = field(default_factory=list)
    assigns: list[Assign] = field(default_factory=list)
    is_function: bool = True
    parent_class: Optional[str] = None

    @property
    def referenced_var_name_set(self) -> set[str]:
        return set(self.referenced_var_names)

    @property
    def called_name_set(self) -> set[str]:
        return set(self.called_names)

    @property
    def is_method(self) -> bool:
        return self.parent_class is not None


@dataclass(eq=False)
class Class:
    """A class definition with everything the collector derives metrics from."""

    kind: ClassVar[EntityKind] = EntityKind.CLASS

    full_path: str
    name: str
    module: str  # full path of the enclosing module
    loc: int = 0
    lcom: int = 0
    superclasses: dict[str, str] = field(default_factory=dict)  # name -> in-corpus class path
    subroutines: dict[str, Subroutine] = field(default_factory=dict)
    variables: list[Variable] = field(default_factory=list)
    inherited_variables: list[Variable] = field(default_factory=list)
    assigns: list[Assign] = field(default_factory=list)
    referenced_class_names: set[str] = field(default_factory=set)
    referenced_method_names: set[str] = field(default_factory=set)
    referenced_variable_names: set[str] = field(default_factory=set)
    referenced_variables: list[Variable] = field(default_factory=list)

    def add_subroutine(self, subroutine: Subroutine) -> None:
        """Attach a method; re-attaching the same name replaces it."""
        self.subroutines[subroutine.name] = subroutine

    @property
    def nom(self) -> int:
        """Number of methods."""
        return len(self.subroutines)

    @property
    def wmc(self) -> int:
        """Weighted method count: sum of the methods' cyclomatic complexity."""
        return sum(sub.cc for sub in self.subroutines.values())

    @property
    def superclass_count(self) -> int:
        return len(self.superclasses)

    @property
    def subroutine_names(self) -> set[str]:
        return set(self.subroutines)

    @property
    def variable_names(self) -> set[str]:
        return {v.name for v in self.variables}

    @property
    def protected_variables(self) -> list[Variable]:
        return [v for v in self.variables if v.is_protected]

    @property
    def defined_vars_incl_parents(self) -> list[Variable]:
        """Declared plus inherited fields, one per name (own declaration wins)."""
        seen: dict[str, Variable] = {}
        for var in (*self.variables, *self.inherited_variables):
            seen.setdefault(var.name, var)
        return list(seen.values())

    @property
    def accessor_count(self) -> int:
        """Methods that look like getters or setters."""
        count = 0
        for name in self.subroutines:
            bare = name.lstrip("_").lower()
            if bare.startswith(("get", "set")):
                count += 1
        return count

    @property
    def no_param_method_count(self) -> int:
        return sum(1 for sub in self.subroutines.values() if sub.param_count == 0)


@dataclass(eq=False)
class Module:
    """A source file with its classes, free functions and import tables.

    Import tables only hold in-corpus targets; names imported from
    libraries outside the corpus are kept in ``library_imports``.
    """

    kind: ClassVar[EntityKind] = EntityKind.MODULE

    path: str
    name: str
    loc: int = 0
    classes: dict[str, Class] = field(default_factory=dict)
    functions: list[Subroutine] = field(default_factory=list)
    class_imports: dict[str, str] = field(default_factory=dict)  # alias -> class path
    module_imports: dict[str, str] = field(default_factory=dict)  # alias -> module path
    import_aliases: dict[str, str] = field(default_factory=dict)  # alias -> original name
    library_imports: set[str] = field(default_factory=set)

    @property
    def full_path(self) -> str:
        return self.path

    def add_class(self, cls: Class) -> None:
        self.classes[cls.name] = cls

    def get_class(self, name: str) -> Optional[Class]:
        return self.classes.get(name)

    def import_alias(self, name: str) -> Optional[str]:
        """Original name recorded for an import alias, if any."""
        return self.import_aliases.get(name)


@dataclass(eq=False)
class Project:
    kind: ClassVar[EntityKind] = EntityKind.PROJECT

    path: str
    version: str = ""
    modules: list[Module] = field(default_factory=list)

    @property
    def full_path(self) -> str:
        return self.path

    def classes(self) -> list[Class]:
        return [cls for module in self.modules for cls in module.classes.values()]


Entity = Union[Project, Module, Class, Subroutine]
