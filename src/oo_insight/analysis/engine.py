"""Analysis engine: collect, finalize, detect.

Phases:
  Build detectors (they open the namespaces they read)
       → Collect: register every entity of every project in order,
         per-project averages after each project
       → Finalize: sample statistics, store becomes read-only
       → Detect: cheap pre-filter, then confirmation from the store
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..config import AnalysisConfig
from ..context import AnalysisContext
from ..detectors.models import Finding
from ..detectors.registry import build_detectors
from ..detectors.runner import run_detectors
from ..diagnostics import UnresolvedNameLog
from ..infrastructure.store import DataStore
from ..logging_config import get_logger
from ..metrics.collector import MetricsCollector
from ..metrics.samples import SampleRegistry
from ..model.corpus import Corpus, iter_entities

logger = get_logger(__name__)


@dataclass
class AnalysisResult:
    """Everything one run produced, ready for display or persistence."""

    findings: list[Finding] = field(default_factory=list)
    store: DataStore = field(default_factory=DataStore)
    samples: SampleRegistry = field(default_factory=SampleRegistry)
    unresolved: UnresolvedNameLog = field(default_factory=UnresolvedNameLog)
    project_paths: list[str] = field(default_factory=list)
    entity_count: int = 0

    def to_dict(self) -> dict:
        return {
            "projects": self.project_paths,
            "entities": self.entity_count,
            "findings": [f.to_dict() for f in self.findings],
            "statistics": self.samples.to_dict(),
            "unresolved": self.unresolved.to_dict(),
        }


class AnalysisEngine:
    """Runs one independent analysis pass over a corpus."""

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self.config = config or AnalysisConfig()

    def run(self, corpus: Corpus) -> AnalysisResult:
        """Analyze every project of the corpus with a fresh context."""
        context = AnalysisContext.create(corpus, self.config)
        detectors = build_detectors(context)
        collector = MetricsCollector(context)

        entity_count = 0
        for project in corpus.projects:
            for entity in iter_entities(project):
                collector.register(entity)
                entity_count += 1
            collector.project_data(project)
            logger.info(f"Collected metrics for project {project.path}")

        collector.terminate_collecting(self.config.required_percentiles())

        findings = sorted(run_detectors(context, detectors))
        logger.info(
            f"Analysis finished: {entity_count} entities, {len(findings)} findings, "
            f"{len(context.diagnostics)} classes with unresolved names"
        )

        return AnalysisResult(
            findings=findings,
            store=context.store,
            samples=context.samples,
            unresolved=context.diagnostics,
            project_paths=[p.path for p in corpus.projects],
            entity_count=entity_count,
        )
