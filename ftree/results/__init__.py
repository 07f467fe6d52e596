"""Result artifacts returned by ``analyze()``."""

from ftree.results.artifacts import AnalysisResult, CutSetRecord

__all__ = ["AnalysisResult", "CutSetRecord"]
