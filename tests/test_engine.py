"""Tests for the end-to-end analysis engine."""

from oo_insight import AnalysisConfig, AnalysisEngine, Finding
from oo_insight.metrics.metric import Metric
from oo_insight.model import Corpus

DOG = "zoo.dog.Dog"


class TestAnalysisEngine:
    def test_refused_bequest_found(self, zoo_corpus):
        config = AnalysisConfig(detector_options={"refused_bequest": {"override_threshold": 0}})
        result = AnalysisEngine(config).run(zoo_corpus)
        assert result.findings == [Finding(DOG, "Refused (Parent) Bequest", "zoo")]

    def test_default_thresholds(self, zoo_corpus):
        result = AnalysisEngine().run(zoo_corpus)
        assert [f.entity_path for f in result.findings] == [DOG]

    def test_no_detectors(self, zoo_corpus):
        result = AnalysisEngine(AnalysisConfig(detectors=[])).run(zoo_corpus)
        assert result.findings == []
        assert result.store.frozen

    def test_counts_entities(self, zoo_corpus):
        result = AnalysisEngine().run(zoo_corpus)
        # project excluded: 2 modules, 2 classes, 4 methods
        assert result.entity_count == 8
        assert result.project_paths == ["zoo"]

    def test_project_averages_in_store(self, zoo_corpus):
        result = AnalysisEngine().run(zoo_corpus)
        assert result.store.get(Metric.CLASS_AVG_LOC, "zoo") == 40
        assert result.store.get(Metric.PROJECT_AVG_AMW, "zoo") == 3.5

    def test_requested_percentiles(self, zoo_corpus):
        config = AnalysisConfig(percentiles={"CLASS_WMC": [10, 90]})
        result = AnalysisEngine(config).run(zoo_corpus)
        wmc = result.samples[Metric.CLASS_WMC]
        assert wmc.is_in_top(10, 12)
        assert wmc.is_in_bottom(10, 2)

    def test_each_run_is_independent(self, zoo_corpus):
        engine = AnalysisEngine()
        first = engine.run(zoo_corpus)
        second = engine.run(zoo_corpus)
        assert first.store is not second.store
        assert first.findings == second.findings

    def test_empty_corpus(self):
        result = AnalysisEngine().run(Corpus())
        assert result.findings == []
        assert result.entity_count == 0


class TestAnalysisResult:
    def test_to_dict(self, coupling_corpus):
        result = AnalysisEngine().run(coupling_corpus)
        data = result.to_dict()
        assert data["projects"] == ["app"]
        assert data["findings"] == []
        assert data["unresolved"] == {"app.service.Counter": ["x"]}
        assert "CLASS_WMC" in data["statistics"]

    def test_diagnostics_file(self, coupling_corpus, tmp_path):
        path = tmp_path / "out" / "unresolved.jsonl"
        AnalysisEngine(AnalysisConfig(diagnostics_file=str(path))).run(coupling_corpus)
        assert path.read_text().strip() == '{"class": "app.service.Counter", "names": ["x"]}'
