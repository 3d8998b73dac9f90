"""Tests for the oo-insight command line."""

import json

import pytest
from typer.testing import CliRunner

from oo_insight import __version__
from oo_insight.cli import app

runner = CliRunner()


@pytest.fixture
def workspace(isolated_config, corpus_file):
    """Corpus file inside an isolated working directory."""
    return corpus_file


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestAnalyze:
    def test_json_output(self, workspace):
        result = runner.invoke(app, ["analyze", str(workspace), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["projects"] == ["zoo"]
        assert data["findings"] == [
            {
                "entity_path": "zoo.dog.Dog",
                "defect_name": "Refused (Parent) Bequest",
                "project_path": "zoo",
            }
        ]

    def test_table_output(self, workspace):
        result = runner.invoke(app, ["analyze", str(workspace)])
        assert result.exit_code == 0
        assert "zoo.dog.Dog" in result.stdout
        assert "Refused (Parent) Bequest" in result.stdout

    def test_config_file_thresholds(self, workspace, tmp_path):
        config = tmp_path / "strict.toml"
        config.write_text("[detector_options.refused_bequest]\nmember_threshold = 10\n")
        result = runner.invoke(app, ["analyze", str(workspace), "-c", str(config), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["findings"] == []

    def test_missing_corpus(self, isolated_config):
        result = runner.invoke(app, ["analyze", "absent.json"])
        assert result.exit_code == 2

    def test_malformed_corpus(self, isolated_config):
        bad = isolated_config / "bad.json"
        bad.write_text('{"projects": "nope"}')
        result = runner.invoke(app, ["analyze", str(bad)])
        assert result.exit_code == 1

    def test_save_then_history(self, workspace, tmp_path):
        db = tmp_path / "runs.db"
        saved = runner.invoke(app, ["analyze", str(workspace), "--save", "--db", str(db)])
        assert saved.exit_code == 0
        assert db.exists()

        listed = runner.invoke(app, ["history", "--db", str(db), "--json"])
        assert listed.exit_code == 0
        runs = json.loads(listed.stdout)
        assert len(runs) == 1
        assert runs[0]["project_name"] == "zoo"
        assert runs[0]["finding_count"] == 1

    def test_log_file(self, workspace, tmp_path):
        log_file = tmp_path / "analysis.log"
        result = runner.invoke(
            app, ["analyze", str(workspace), "-v", "--log-file", str(log_file)]
        )
        assert result.exit_code == 0
        assert "Analysis finished" in log_file.read_text()

    def test_diagnostics_option(self, workspace, tmp_path):
        diagnostics = tmp_path / "unresolved.jsonl"
        result = runner.invoke(
            app, ["analyze", str(workspace), "--diagnostics", str(diagnostics), "--json"]
        )
        assert result.exit_code == 0
        # the zoo corpus references no attribute chains
        assert not diagnostics.exists()


class TestHistory:
    def test_no_database(self, isolated_config):
        result = runner.invoke(app, ["history", "--db", "missing.db"])
        assert result.exit_code == 0
        assert "No history found" in result.stdout

    def test_invalid_project_config(self, isolated_config):
        (isolated_config / "oo-insight.toml").write_text("colour = 'blue'\n")
        result = runner.invoke(app, ["history"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout


class TestStats:
    def test_single_metric(self, workspace):
        result = runner.invoke(app, ["stats", str(workspace), "--metric", "CLASS_WMC", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert list(data) == ["CLASS_WMC"]
        assert data["CLASS_WMC"]["count"] == 2
        assert data["CLASS_WMC"]["stats"]["maximum"] == 12

    def test_all_metrics_table(self, workspace):
        result = runner.invoke(app, ["stats", str(workspace)])
        assert result.exit_code == 0
        assert "Metric Statistics" in result.stdout

    def test_unknown_metric(self, workspace):
        result = runner.invoke(app, ["stats", str(workspace), "--metric", "BOGUS"])
        assert result.exit_code == 2

    def test_store_only_metric(self, workspace):
        result = runner.invoke(app, ["stats", str(workspace), "-m", "CLASS_PARENTS"])
        assert result.exit_code == 2
