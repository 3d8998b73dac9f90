"""Analysis pipeline entry point."""

from .engine import AnalysisEngine, AnalysisResult

__all__ = ["AnalysisEngine", "AnalysisResult"]
