"""Tests for the coupling heuristic (receiver type resolution and counting)."""

import pytest

from oo_insight.diagnostics import UnresolvedNameLog
from oo_insight.infrastructure import DataStore, ValueKind
from oo_insight.metrics.coupling import (
    CouplingResolver,
    format_coupling_entry,
    parse_coupling_entry,
    strip_self,
    type_name_of,
)
from oo_insight.metrics.metric import Metric
from oo_insight.model import Assign, Class, Corpus, Module, Project, Subroutine

SERVICE = "app.service.Service"
COUNTER = "app.service.Counter"


def _library():
    helper = Class(full_path="lib.Helper", name="Helper", module="lib.py")
    other = Class(full_path="lib.Other", name="Other", module="lib.py")
    return Module(path="lib.py", name="lib", classes={"Helper": helper, "Other": other})


def _client(*subroutines, assigns=(), **imports):
    cls = Class(full_path="app.Client", name="Client", module="app.py", assigns=list(assigns))
    for sub in subroutines:
        cls.add_subroutine(sub)
    module = Module(path="app.py", name="app", classes={"Client": cls}, **imports)
    return cls, module


def _sub(name, referenced=(), called=(), assigns=()):
    return Subroutine(
        full_path=f"app.Client.{name}",
        name=name,
        referenced_var_names=list(referenced),
        called_names=list(called),
        assigns=[Assign(n, v) for n, v in assigns],
        parent_class="app.Client",
    )


def _resolve(cls, module):
    corpus = Corpus([Project(path="p", modules=[_library(), module])])
    store = DataStore()
    store.open_namespace(Metric.CLASS_COUPLING, ValueKind.STR_SET)
    log = UnresolvedNameLog()
    data = CouplingResolver(corpus, store, log).process(cls)
    return data, store, log


class TestScenarios:
    def test_attribute_holding_imported_class(self, coupling_corpus, run_collection):
        from oo_insight.context import AnalysisContext

        context = AnalysisContext(corpus=coupling_corpus)
        run_collection(context)
        assert context.store.get(Metric.CLASS_COUPLING, SERVICE) == frozenset(
            {"helpers.Helper&ref=1"}
        )

    def test_non_class_value_stays_unresolved(self, coupling_corpus, run_collection):
        from oo_insight.context import AnalysisContext

        context = AnalysisContext(corpus=coupling_corpus)
        run_collection(context)
        assert context.diagnostics.names_for(COUNTER) == {"x"}
        assert context.store.get(Metric.CLASS_COUPLING, COUNTER) is None

    def test_library_imports_are_not_reported(self, coupling_corpus, run_collection):
        from oo_insight.context import AnalysisContext

        context = AnalysisContext(corpus=coupling_corpus)
        run_collection(context)
        assert "np" not in context.diagnostics.names_for(COUNTER)


class TestResolution:
    def test_class_body_assignment_wins(self):
        cls, module = _client(
            _sub("__init__", assigns=[("h", "Other()")]),
            _sub("run", referenced=["h.go"], called=["h.go"]),
            assigns=[Assign("h", "Helper()"), Assign("h", "Other()")],
            class_imports={"Helper": "lib.Helper", "Other": "lib.Other"},
        )
        data, store, _ = _resolve(cls, module)
        assert data.resolved["h"].full_path == "lib.Helper"
        assert store.get(Metric.CLASS_COUPLING, "app.Client") == frozenset({"lib.Helper&ref=1"})

    def test_method_assignment_fills_gaps(self):
        cls, module = _client(
            _sub("__init__", assigns=[("self.o", "Other(1, 2)")]),
            _sub("run", referenced=["self.o.x"]),
            assigns=[Assign("h", "Helper()")],
            class_imports={"Helper": "lib.Helper", "Other": "lib.Other"},
        )
        data, _, _ = _resolve(cls, module)
        assert set(data.resolved) == {"o"}
        assert data.resolved["o"].full_path == "lib.Other"

    def test_precedence_independent_of_method_order(self):
        first = _sub("a", assigns=[("h", "Other()")])
        second = _sub("b", referenced=["h.go"], called=["h.go"], assigns=[("h", "Other()")])
        for order in ((first, second), (second, first)):
            cls, module = _client(
                *order,
                assigns=[Assign("h", "Helper()")],
                class_imports={"Helper": "lib.Helper", "Other": "lib.Other"},
            )
            data, _, _ = _resolve(cls, module)
            assert data.resolved["h"].full_path == "lib.Helper"

    def test_dotted_module_import(self):
        cls, module = _client(
            _sub("run", referenced=["h.go"], assigns=[("h", "lib.Helper()")]),
            module_imports={"lib": "lib.py"},
        )
        data, _, _ = _resolve(cls, module)
        assert data.resolved["h"].full_path == "lib.Helper"

    def test_aliased_module_import(self):
        cls, module = _client(
            _sub("run", referenced=["h.go"], assigns=[("h", "H()")]),
            module_imports={"H": "lib.py"},
            import_aliases={"H": "Helper"},
        )
        data, _, _ = _resolve(cls, module)
        assert data.resolved["h"].full_path == "lib.Helper"

    def test_unimported_class_is_unresolved(self):
        cls, module = _client(_sub("run", referenced=["h.go"], assigns=[("h", "Helper()")]))
        data, store, log = _resolve(cls, module)
        assert data.resolved == {}
        assert log.names_for("app.Client") == {"h"}
        assert store.get(Metric.CLASS_COUPLING, "app.Client") is None


class TestCounting:
    def test_repeated_reference_adds_full_count(self):
        cls, module = _client(
            _sub("run", referenced=["h.data", "h.data", "h.data"], assigns=[("h", "Helper()")]),
            class_imports={"Helper": "lib.Helper"},
        )
        data, _, _ = _resolve(cls, module)
        assert data.occurrences == {"h": 3}

    def test_distinct_references_add_one_each(self):
        cls, module = _client(
            _sub("run", referenced=["h.a", "h.b"], assigns=[("h", "Helper()")]),
            class_imports={"Helper": "lib.Helper"},
        )
        data, _, _ = _resolve(cls, module)
        assert data.occurrences == {"h": 2}

    def test_called_and_referenced_name_counted_once(self):
        cls, module = _client(
            _sub("run", referenced=["h.go", "h.size"], called=["h.go"], assigns=[("h", "Helper()")]),
            class_imports={"Helper": "lib.Helper"},
        )
        data, _, _ = _resolve(cls, module)
        assert data.occurrences == {"h": 2}

    def test_prefix_must_end_at_dot(self):
        cls, module = _client(
            _sub("run", referenced=["h.go", "hx.go"], assigns=[("h", "Helper()")]),
            class_imports={"Helper": "lib.Helper"},
        )
        data, _, _ = _resolve(cls, module)
        assert data.occurrences == {"h": 1}


class TestEarlyExit:
    def test_no_referenced_names(self):
        cls, module = _client(_sub("run", called=["h.go"]))
        data, store, _ = _resolve(cls, module)
        assert data is None
        assert store.get(Metric.CLASS_COUPLING, "app.Client") is None

    def test_only_self_attributes(self):
        cls, module = _client(_sub("run", referenced=["self.count", "self.total"]))
        data, _, log = _resolve(cls, module)
        assert data is None
        assert len(log) == 0


class TestHelpers:
    def test_parse_entry(self):
        assert parse_coupling_entry("lib.Helper&ref=12") == ("lib.Helper", 12)

    def test_format_parse_agree(self):
        assert parse_coupling_entry(format_coupling_entry("a.B", 3)) == ("a.B", 3)

    @pytest.mark.parametrize("entry", ["lib.Helper", "&ref=3", "lib.Helper&ref=x"])
    def test_parse_invalid(self, entry):
        with pytest.raises(ValueError):
            parse_coupling_entry(entry)

    def test_strip_self(self):
        assert strip_self("self.a.b") == "a.b"
        assert strip_self("cls.registry") == "registry"
        assert strip_self("other.a") == "other.a"
        assert strip_self("self") == "self"

    def test_type_name_of(self):
        assert type_name_of("Helper()") == "Helper"
        assert type_name_of("  pkg.Helper(a, b=1)") == "pkg.Helper"
        assert type_name_of("3") == "3"
        assert type_name_of("Helper") == "Helper"
