"""Analysis engines: cut-set generation, probability, orchestration."""

from ftree.analysis.context import analyze
from ftree.analysis.cut_sets import (
    CutSetGenerator,
    CutSetResult,
    generate_cut_sets,
    minimize_cut_sets,
)
from ftree.analysis.probability import (
    ImportanceRecord,
    ProbabilityAnalysis,
    prob_and,
    prob_or,
    rare_event_probability,
)
from ftree.analysis.superset import Superset

__all__ = [
    "analyze",
    "CutSetGenerator",
    "CutSetResult",
    "generate_cut_sets",
    "minimize_cut_sets",
    "ImportanceRecord",
    "ProbabilityAnalysis",
    "prob_and",
    "prob_or",
    "rare_event_probability",
    "Superset",
]
