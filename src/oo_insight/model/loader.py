"""Build a ``Corpus`` from the JSON document written by the linking stage.

Document layout (keys not listed are ignored)::

    {"projects": [
        {"path": "zoo", "version": "1.0", "modules": [
            {"path": "zoo/dog.py", "name": "zoo.dog", "loc": 40,
             "class_imports": {"Animal": "zoo.animal.Animal"},
             "module_imports": {"helpers": "zoo/helpers.py"},
             "import_aliases": {"H": "Helper"},
             "library_imports": ["os"],
             "classes": [
                {"name": "Dog", "full_path": "zoo.dog.Dog", "loc": 30, "lcom": 2,
                 "superclasses": {"Animal": "zoo.animal.Animal"},
                 "variables": [{"name": "_tail"}],
                 "inherited_variables": [{"name": "_energy", "owner": "zoo.animal.Animal"}],
                 "assigns": [{"name": "self.helper", "value": "Helper()"}],
                 "referenced_class_names": [], "referenced_method_names": [],
                 "referenced_variable_names": [], "referenced_variables": [],
                 "methods": [<subroutine>, ...]}],
             "functions": [<subroutine>, ...]}]}]}

    <subroutine> = {"name": "bark", "full_path": "zoo.dog.Dog.bark", "loc": 5,
                    "params": 0, "cc": 1, "aid": 0,
                    "referenced_var_names": [], "called_names": [],
                    "assigns": []}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

from ..exceptions import CorpusFormatError
from ..logging_config import get_logger
from .corpus import Corpus
from .entities import Assign, Class, Module, Project, Subroutine, Variable, Visibility

logger = get_logger(__name__)


def load_corpus(path: Union[str, Path]) -> Corpus:
    """Read and link a corpus document from disk.

    Raises:
        CorpusFormatError: If the file is missing, not JSON, or malformed.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CorpusFormatError(f"cannot read corpus file: {e}", str(path)) from e
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorpusFormatError(f"invalid JSON at line {e.lineno}", str(path)) from e
    return corpus_from_dict(document)


def corpus_from_dict(document: Any) -> Corpus:
    """Turn an already decoded corpus document into a linked ``Corpus``."""
    if not isinstance(document, dict) or not isinstance(document.get("projects"), list):
        raise CorpusFormatError("top level must be an object with a 'projects' list")

    corpus = Corpus()
    for index, raw_project in enumerate(document["projects"]):
        corpus.add_project(_project(raw_project, f"projects[{index}]"))
    corpus.drop_external_references()

    logger.debug(
        f"Loaded corpus: {len(corpus.projects)} projects, "
        f"{len(corpus.modules)} modules, {len(corpus.classes)} classes"
    )
    return corpus


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _require(raw: Any, key: str, where: str) -> Any:
    if not isinstance(raw, dict):
        raise CorpusFormatError("expected an object", where)
    if key not in raw:
        raise CorpusFormatError(f"missing required key '{key}'", where)
    return raw[key]


def _str(raw: dict, key: str, where: str, default: Optional[str] = None) -> str:
    value = raw.get(key, default) if default is not None else _require(raw, key, where)
    if not isinstance(value, str):
        raise CorpusFormatError(f"'{key}' must be a string", where)
    return value


def _int(raw: dict, key: str, where: str, default: int = 0) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise CorpusFormatError(f"'{key}' must be an integer", where)
    return value


def _str_list(raw: dict, key: str, where: str) -> list[str]:
    value = raw.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise CorpusFormatError(f"'{key}' must be a list of strings", where)
    return list(value)


def _str_map(raw: dict, key: str, where: str) -> dict[str, str]:
    value = raw.get(key, {})
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise CorpusFormatError(f"'{key}' must map strings to strings", where)
    return dict(value)


def _objects(raw: dict, key: str, where: str) -> list[Any]:
    value = raw.get(key, [])
    if not isinstance(value, list):
        raise CorpusFormatError(f"'{key}' must be a list", where)
    return value


# ---------------------------------------------------------------------------
# Entity builders
# ---------------------------------------------------------------------------


def _project(raw: Any, where: str) -> Project:
    project = Project(path=_str(raw, "path", where), version=str(raw.get("version", "")))
    for index, raw_module in enumerate(_objects(raw, "modules", where)):
        project.modules.append(_module(raw_module, f"{where}.modules[{index}]"))
    return project


def _module(raw: Any, where: str) -> Module:
    path = _str(raw, "path", where)
    module = Module(
        path=path,
        name=_str(raw, "name", where, default=path),
        loc=_int(raw, "loc", where),
        class_imports=_str_map(raw, "class_imports", where),
        module_imports=_str_map(raw, "module_imports", where),
        import_aliases=_str_map(raw, "import_aliases", where),
        library_imports=set(_str_list(raw, "library_imports", where)),
    )
    for index, raw_class in enumerate(_objects(raw, "classes", where)):
        module.add_class(_class(raw_class, module, f"{where}.classes[{index}]"))
    for index, raw_function in enumerate(_objects(raw, "functions", where)):
        module.functions.append(
            _subroutine(raw_function, module.name, None, f"{where}.functions[{index}]")
        )
    return module


def _class(raw: Any, module: Module, where: str) -> Class:
    name = _str(raw, "name", where)
    full_path = _str(raw, "full_path", where, default=f"{module.name}.{name}")
    cls = Class(
        full_path=full_path,
        name=name,
        module=module.path,
        loc=_int(raw, "loc", where),
        lcom=_int(raw, "lcom", where),
        superclasses=_str_map(raw, "superclasses", where),
        variables=_variables(raw, "variables", full_path, where),
        inherited_variables=_variables(raw, "inherited_variables", full_path, where),
        assigns=_assigns(raw, where),
        referenced_class_names=set(_str_list(raw, "referenced_class_names", where)),
        referenced_method_names=set(_str_list(raw, "referenced_method_names", where)),
        referenced_variable_names=set(_str_list(raw, "referenced_variable_names", where)),
        referenced_variables=_variables(raw, "referenced_variables", full_path, where),
    )
    for index, raw_method in enumerate(_objects(raw, "methods", where)):
        cls.add_subroutine(_subroutine(raw_method, full_path, full_path, f"{where}.methods[{index}]"))
    return cls


def _subroutine(raw: Any, owner: str, parent_class: Optional[str], where: str) -> Subroutine:
    name = _str(raw, "name", where)
    return Subroutine(
        full_path=_str(raw, "full_path", where, default=f"{owner}.{name}"),
        name=name,
        loc=_int(raw, "loc", where),
        param_count=_int(raw, "params", where),
        cc=_int(raw, "cc", where, default=1),
        aid=_int(raw, "aid", where),
        referenced_var_names=_str_list(raw, "referenced_var_names", where),
        called_names=_str_list(raw, "called_names", where),
        assigns=_assigns(raw, where),
        is_function=parent_class is None,
        parent_class=parent_class,
    )


def _variables(raw: dict, key: str, default_owner: str, where: str) -> list[Variable]:
    variables = []
    for index, item in enumerate(_objects(raw, key, where)):
        item_where = f"{where}.{key}[{index}]"
        name = _str(item, "name", item_where)
        visibility = item.get("visibility")
        try:
            resolved = Visibility(visibility) if visibility else Visibility.from_name(name)
        except ValueError:
            raise CorpusFormatError(f"unknown visibility '{visibility}'", item_where) from None
        variables.append(
            Variable(
                name=name,
                owner=_str(item, "owner", item_where, default=default_owner),
                visibility=resolved,
            )
        )
    return variables


def _assigns(raw: dict, where: str) -> list[Assign]:
    return [
        Assign(
            name=_str(item, "name", f"{where}.assigns[{index}]"),
            value=_str(item, "value", f"{where}.assigns[{index}]", default=""),
        )
        for index, item in enumerate(_objects(raw, "assigns", where))
    ]
