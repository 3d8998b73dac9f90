"""Entity model: linked projects, modules, classes and subroutines."""

from .corpus import Corpus, iter_entities
from .entities import (
    Assign,
    Class,
    Entity,
    EntityKind,
    Module,
    Project,
    Subroutine,
    Variable,
    Visibility,
)
from .loader import corpus_from_dict, load_corpus

__all__ = [
    "Assign",
    "Class",
    "Corpus",
    "Entity",
    "EntityKind",
    "Module",
    "Project",
    "Subroutine",
    "Variable",
    "Visibility",
    "corpus_from_dict",
    "iter_entities",
    "load_corpus",
]
