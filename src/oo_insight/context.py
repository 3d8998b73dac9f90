"""Run-scoped analysis context.

Everything one analysis run shares (data store, corpus, sample sets,
diagnostics, configuration) travels in an ``AnalysisContext`` that is
passed explicitly to the collector, the coupling heuristic and the
detectors. A new context is created for every run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import AnalysisConfig
from .diagnostics import UnresolvedNameLog
from .infrastructure.store import DataStore
from .metrics.samples import SampleRegistry
from .model.corpus import Corpus


@dataclass
class AnalysisContext:
    corpus: Corpus
    config: AnalysisConfig = field(default_factory=AnalysisConfig)
    store: DataStore = field(default_factory=DataStore)
    samples: SampleRegistry = field(default_factory=SampleRegistry)
    diagnostics: UnresolvedNameLog = field(default_factory=UnresolvedNameLog)

    @classmethod
    def create(cls, corpus: Corpus, config: AnalysisConfig) -> "AnalysisContext":
        """Fresh context for one run, with the diagnostics file from config."""
        return cls(
            corpus=corpus,
            config=config,
            diagnostics=UnresolvedNameLog(config.diagnostics_file),
        )

    @property
    def finalized(self) -> bool:
        """True once samples are finalized and the store is read-only."""
        return self.store.frozen and self.samples.finalized
