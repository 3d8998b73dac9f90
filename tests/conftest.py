"""Shared fixtures: small linked corpora exercising the collector and detectors."""

import json

import pytest

from oo_insight.config import AnalysisConfig
from oo_insight.context import AnalysisContext
from oo_insight.metrics.collector import MetricsCollector
from oo_insight.model import corpus_from_dict, iter_entities


def method(name, owner, cc=1, loc=5, params=0, referenced=(), called=(), assigns=()):
    return {
        "name": name,
        "full_path": f"{owner}.{name}",
        "loc": loc,
        "params": params,
        "cc": cc,
        "referenced_var_names": list(referenced),
        "called_names": list(called),
        "assigns": [{"name": n, "value": v} for n, v in assigns],
    }


def zoo_document(dog_refs=(), dog_calls=()):
    """``Dog(Animal)``: Dog overrides ``eat``, adds ``bark`` and is the complex one.

    Animal declares four protected fields and the methods ``eat`` and ``sleep``.
    """
    animal = "zoo.animal.Animal"
    dog = "zoo.dog.Dog"
    return {
        "projects": [
            {
                "path": "zoo",
                "version": "1.0",
                "modules": [
                    {
                        "path": "zoo/animal.py",
                        "name": "zoo.animal",
                        "loc": 30,
                        "classes": [
                            {
                                "name": "Animal",
                                "full_path": animal,
                                "loc": 20,
                                "lcom": 1,
                                "variables": [
                                    {"name": "_energy"},
                                    {"name": "_hunger"},
                                    {"name": "_age"},
                                    {"name": "_weight"},
                                ],
                                "methods": [method("eat", animal), method("sleep", animal)],
                            }
                        ],
                    },
                    {
                        "path": "zoo/dog.py",
                        "name": "zoo.dog",
                        "loc": 70,
                        "class_imports": {"Animal": animal},
                        "classes": [
                            {
                                "name": "Dog",
                                "full_path": dog,
                                "loc": 60,
                                "lcom": 3,
                                "superclasses": {"Animal": animal},
                                "variables": [{"name": "_tail"}, {"name": "name"}],
                                "inherited_variables": [
                                    {"name": "_energy", "owner": animal},
                                    {"name": "_hunger", "owner": animal},
                                ],
                                "referenced_variable_names": list(dog_refs),
                                "referenced_method_names": list(dog_calls),
                                "methods": [
                                    method("eat", dog, cc=5, loc=25, params=1),
                                    method("bark", dog, cc=7, loc=30),
                                ],
                            }
                        ],
                    },
                ],
            }
        ]
    }


def coupling_document():
    """``Service`` holds a ``Helper``; ``Counter`` holds a plain integer."""
    service = "app.service.Service"
    counter = "app.service.Counter"
    return {
        "projects": [
            {
                "path": "app",
                "modules": [
                    {
                        "path": "helpers.py",
                        "name": "helpers",
                        "loc": 10,
                        "classes": [
                            {
                                "name": "Helper",
                                "full_path": "helpers.Helper",
                                "loc": 8,
                                "methods": [method("process", "helpers.Helper")],
                            }
                        ],
                    },
                    {
                        "path": "app/service.py",
                        "name": "app.service",
                        "loc": 40,
                        "class_imports": {"Helper": "helpers.Helper"},
                        "library_imports": ["np"],
                        "classes": [
                            {
                                "name": "Service",
                                "full_path": service,
                                "loc": 20,
                                "methods": [
                                    method(
                                        "__init__",
                                        service,
                                        assigns=[("self.helper", "Helper()")],
                                    ),
                                    method(
                                        "run",
                                        service,
                                        referenced=["self.helper.process"],
                                        called=["self.helper.process"],
                                    ),
                                ],
                            },
                            {
                                "name": "Counter",
                                "full_path": counter,
                                "loc": 12,
                                "assigns": [{"name": "x", "value": "3"}],
                                "methods": [
                                    method(
                                        "tick",
                                        counter,
                                        referenced=["x.foo", "np.zeros"],
                                        called=["x.foo", "np.zeros"],
                                    )
                                ],
                            },
                        ],
                    },
                ],
            }
        ]
    }


def collect(context):
    """Run the full collection phase over every project of the context's corpus."""
    collector = MetricsCollector(context)
    for project in context.corpus.projects:
        for entity in iter_entities(project):
            collector.register(entity)
        collector.project_data(project)
    collector.terminate_collecting(context.config.required_percentiles())
    return collector


@pytest.fixture
def zoo_corpus():
    return corpus_from_dict(zoo_document())


@pytest.fixture
def coupling_corpus():
    return corpus_from_dict(coupling_document())


@pytest.fixture
def zoo_context(zoo_corpus):
    return AnalysisContext(corpus=zoo_corpus, config=AnalysisConfig())


@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "zoo.json"
    path.write_text(json.dumps(zoo_document()))
    return path


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Keep user and project config files and OO_INSIGHT_* variables out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in ("DATABASE", "DIAGNOSTICS_FILE", "VERBOSITY", "DETECTORS"):
        monkeypatch.delenv(f"OO_INSIGHT_{key}", raising=False)
    return tmp_path


@pytest.fixture
def make_zoo():
    """Builder for zoo corpora with custom Dog references."""

    def _make(dog_refs=(), dog_calls=()):
        return corpus_from_dict(zoo_document(dog_refs, dog_calls))

    return _make


@pytest.fixture
def make_method():
    return method


@pytest.fixture
def run_collection():
    return collect
