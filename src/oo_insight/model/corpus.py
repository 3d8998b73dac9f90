"""Corpus: the arena that indexes every entity of a run by full path."""

from __future__ import annotations

from typing import Iterator, Optional

from ..exceptions import CorpusFormatError
from ..logging_config import get_logger
from .entities import Class, Entity, Module, Project

logger = get_logger(__name__)


class Corpus:
    """All projects of one analysis run, addressable by full path.

    Cross references between entities are plain path strings; ``Corpus``
    turns them back into entities. A path that is not part of the corpus
    resolves to None.
    """

    def __init__(self, projects: Optional[list[Project]] = None) -> None:
        self.projects: list[Project] = []
        self.modules: dict[str, Module] = {}
        self.classes: dict[str, Class] = {}
        for project in projects or []:
            self.add_project(project)

    def add_project(self, project: Project) -> None:
        """Index a project's modules and classes.

        Raises:
            CorpusFormatError: If a module or class path is already taken.
        """
        for module in project.modules:
            if module.path in self.modules:
                raise CorpusFormatError("duplicate module path", module.path)
            self.modules[module.path] = module
            for cls in module.classes.values():
                if cls.full_path in self.classes:
                    raise CorpusFormatError("duplicate class path", cls.full_path)
                self.classes[cls.full_path] = cls
        self.projects.append(project)

    def module(self, path: str) -> Optional[Module]:
        return self.modules.get(path)

    def cls(self, path: str) -> Optional[Class]:
        return self.classes.get(path)

    def module_of(self, cls: Class) -> Optional[Module]:
        return self.modules.get(cls.module)

    def superclasses_of(self, cls: Class) -> list[Class]:
        return [c for c in (self.classes.get(p) for p in cls.superclasses.values()) if c]

    def drop_external_references(self) -> int:
        """Remove superclass and import references that point outside the corpus.

        Detectors rely on "has a parent" meaning "inherits from an analyzed
        class", so external parents must not survive linking.

        Returns:
            Number of references dropped.
        """
        dropped = 0
        for cls in self.classes.values():
            for name, path in list(cls.superclasses.items()):
                if path not in self.classes:
                    del cls.superclasses[name]
                    dropped += 1
        for module in self.modules.values():
            for alias, path in list(module.class_imports.items()):
                if path not in self.classes:
                    del module.class_imports[alias]
                    module.library_imports.add(alias)
                    dropped += 1
            for alias, path in list(module.module_imports.items()):
                if path not in self.modules:
                    del module.module_imports[alias]
                    module.library_imports.add(alias)
                    dropped += 1
        if dropped:
            logger.debug(f"Dropped {dropped} references to entities outside the corpus")
        return dropped


def iter_entities(project: Project) -> Iterator[Entity]:
    """Yield a project's entities in collection order.

    Each module comes first, then each of its classes followed by that
    class's methods, then the module's free functions.
    """
    for module in project.modules:
        yield module
        for cls in module.classes.values():
            yield cls
            yield from cls.subroutines.values()
        yield from module.functions
