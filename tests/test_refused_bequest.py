"""Tests for the Refused Bequest detector and the detector runner."""

import pytest

from oo_insight.config import AnalysisConfig
from oo_insight.context import AnalysisContext
from oo_insight.detectors import Finding, RefusedBequestDetector, run_detectors
from oo_insight.detectors.refused_bequest import (
    DEFAULT_MEMBER_THRESHOLD,
    DEFAULT_OVERRIDE_THRESHOLD,
)
from oo_insight.exceptions import InvalidSequenceError
from oo_insight.infrastructure import DataStore
from oo_insight.metrics.metric import Metric
from oo_insight.model import Class, Corpus, Module, Project

DOG = "zoo.dog.Dog"
ANIMAL = "zoo.animal.Animal"


def _detect(corpus, run_collection, **options):
    context = AnalysisContext(corpus=corpus)
    detector = RefusedBequestDetector(context, options)
    run_collection(context)
    return context, detector


class TestThresholds:
    def test_defaults(self, zoo_context):
        detector = RefusedBequestDetector(zoo_context)
        assert detector.member_threshold == DEFAULT_MEMBER_THRESHOLD == 3
        assert detector.override_threshold == DEFAULT_OVERRIDE_THRESHOLD == 3

    def test_unparsable_falls_back(self, zoo_context):
        detector = RefusedBequestDetector(
            zoo_context, {"member_threshold": "lots", "override_threshold": None}
        )
        assert detector.member_threshold == 3
        assert detector.override_threshold == 3

    def test_explicit_values(self, zoo_context):
        detector = RefusedBequestDetector(
            zoo_context, {"member_threshold": "5", "override_threshold": 0}
        )
        assert detector.member_threshold == 5
        assert detector.override_threshold == 0


class TestPreliminaryCheck:
    def test_requires_in_corpus_parent(self, zoo_context):
        detector = RefusedBequestDetector(zoo_context)
        assert detector.is_preliminarily_defective(zoo_context.corpus.cls(DOG))
        assert not detector.is_preliminarily_defective(zoo_context.corpus.cls(ANIMAL))


class TestIgnoresBequest:
    def test_dog_ignores_everything(self, zoo_corpus, run_collection):
        _, detector = _detect(zoo_corpus, run_collection, override_threshold=0)
        assert detector.few_protected_parent_members(DOG)
        assert detector.refuses_parent_usage(DOG)
        assert detector.overrides_parent_methods(DOG)
        assert detector.ignores_bequest(DOG)

    def test_override_threshold_is_strict(self, zoo_corpus, run_collection):
        _, detector = _detect(zoo_corpus, run_collection, override_threshold=1)
        assert not detector.overrides_parent_methods(DOG)

    def test_member_threshold_is_strict(self, zoo_corpus, run_collection):
        _, detector = _detect(zoo_corpus, run_collection, member_threshold=4)
        assert not detector.few_protected_parent_members(DOG)

    def test_using_parent_members(self, make_zoo, run_collection):
        corpus = make_zoo(dog_refs=["_energy", "_hunger"], dog_calls=["sleep"])
        _, detector = _detect(corpus, run_collection)
        # 3 used of 6 inherited members
        assert not detector.refuses_parent_usage(DOG)
        assert not detector.ignores_bequest(DOG)

    def test_class_without_parents_uses_guarded_ratio(self, zoo_corpus, run_collection):
        _, detector = _detect(zoo_corpus, run_collection)
        assert detector.refuses_parent_usage(ANIMAL)
        assert not detector.few_protected_parent_members(ANIMAL)


class TestComplexity:
    def test_dog_above_all_averages(self, zoo_corpus, run_collection):
        _, detector = _detect(zoo_corpus, run_collection)
        assert detector.amw_above_average(DOG, "zoo")
        assert detector.wmc_above_average(DOG, "zoo")
        assert detector.size_above_average(DOG, "zoo")
        assert detector.is_complex(DOG, "zoo")

    def test_animal_below_averages(self, zoo_corpus, run_collection):
        _, detector = _detect(zoo_corpus, run_collection)
        assert not detector.is_complex(ANIMAL, "zoo")

    def test_missing_baseline_is_false(self, zoo_corpus, run_collection):
        _, detector = _detect(zoo_corpus, run_collection)
        assert not detector.amw_above_average(DOG, "other-project")
        assert not detector.wmc_above_average(DOG, "other-project")
        assert not detector.size_above_average(DOG, "other-project")
        assert not detector.confirm_defect(DOG, "other-project")

    def test_missing_class_data_is_false(self, zoo_context):
        detector = RefusedBequestDetector(zoo_context)
        assert not detector.is_complex("nowhere.Ghost", "zoo")
        assert not detector.ignores_bequest("nowhere.Ghost")


class TestConfirmDefect:
    def test_dog_refuses_bequest(self, zoo_corpus, run_collection):
        _, detector = _detect(zoo_corpus, run_collection, member_threshold=3, override_threshold=0)
        assert detector.confirm_defect(DOG, "zoo")

    def test_dog_using_parents_but_overriding(self, make_zoo, run_collection):
        corpus = make_zoo(dog_refs=["_energy", "_hunger"], dog_calls=["sleep"])
        _, detector = _detect(corpus, run_collection, override_threshold=0)
        assert detector.confirm_defect(DOG, "zoo")

    def test_dog_using_parents_without_overrides(self, make_zoo, run_collection):
        corpus = make_zoo(dog_refs=["_energy", "_hunger"], dog_calls=["sleep"])
        _, detector = _detect(corpus, run_collection)
        assert not detector.confirm_defect(DOG, "zoo")


class _SpyDetector(RefusedBequestDetector):
    def __init__(self, context, options=None):
        super().__init__(context, options)
        self.confirmed_paths = []

    def confirm_defect(self, entity_path, project_path):
        self.confirmed_paths.append(entity_path)
        return super().confirm_defect(entity_path, project_path)


class TestRunner:
    def test_findings(self, zoo_corpus, run_collection):
        context, detector = _detect(zoo_corpus, run_collection)
        findings = run_detectors(context, [detector])
        assert findings == {Finding(DOG, "Refused (Parent) Bequest", "zoo")}

    def test_classes_without_parents_never_confirmed(self, zoo_corpus, run_collection):
        context = AnalysisContext(corpus=zoo_corpus)
        spy = _SpyDetector(context)
        run_collection(context)
        run_detectors(context, [spy])
        assert spy.confirmed_paths == [DOG]

    def test_refuses_to_run_before_finalization(self, zoo_context):
        detector = RefusedBequestDetector(zoo_context)
        with pytest.raises(InvalidSequenceError):
            run_detectors(zoo_context, [detector])

    def test_no_classes_no_findings(self, run_collection):
        context = AnalysisContext(corpus=Corpus(), config=AnalysisConfig())
        detector = RefusedBequestDetector(context)
        run_collection(context)
        assert run_detectors(context, [detector]) == set()


class TestStoreOnly:
    def test_confirm_reads_only_the_store(self):
        """A reloaded store is enough to confirm a defect."""
        store = DataStore()
        context = AnalysisContext(corpus=Corpus(), store=store)
        detector = RefusedBequestDetector(context, {"override_threshold": 0})
        store.add(Metric.CLASS_PARENTS, "a.Child", {"a.Base"})
        store.add(Metric.CLASS_PROTECTED_FIELDS, "a.Base", 5)
        store.add(Metric.CLASS_FIELDNAMES, "a.Base", {"_a", "_b", "_c", "_d", "_e"})
        store.add(Metric.CLASS_DEF_METHODS, "a.Base", {"run"})
        store.add(Metric.CLASS_DEF_METHODS, "a.Child", {"run"})
        store.add(Metric.CLASS_WMC, "a.Child", 10)
        store.add(Metric.CLASS_METHODS, "a.Child", 1)
        store.add(Metric.CLASS_LOC, "a.Child", 100)
        store.add(Metric.CLASS_AVG_LOC, "a", 50)
        store.add(Metric.CLASS_AVG_CC, "a", 4.0)
        store.add(Metric.PROJECT_AVG_AMW, "a", 2.0)
        store.freeze()
        assert detector.confirm_defect("a.Child", "a")


class TestExternalParents:
    """Parents outside the corpus never count, however the corpus was built."""

    @pytest.fixture
    def analyzed(self, run_collection):
        module = Module(path="app.py", name="app", loc=10)
        module.add_class(
            Class(full_path="app.Widget", name="Widget", module="app.py", loc=10,
                  superclasses={"Base": "ext.Base"})
        )
        context = AnalysisContext(corpus=Corpus([Project(path="app", modules=[module])]))
        detector = RefusedBequestDetector(context)
        run_collection(context)
        return context, detector

    def test_not_a_candidate(self, analyzed):
        context, detector = analyzed
        widget = context.corpus.cls("app.Widget")
        assert not detector.is_preliminarily_defective(widget)
        assert run_detectors(context, [detector]) == set()

    def test_collected_parent_data_agrees(self, analyzed):
        context, _ = analyzed
        assert context.store.get(Metric.CLASS_PARENTS, "app.Widget") == frozenset()
        assert context.samples[Metric.CLASS_SUPERCLASSES].values == (0,)
