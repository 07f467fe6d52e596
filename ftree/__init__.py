"""ftree: fault tree analysis library.

Builds a gate graph over failure events, validates it, generates minimal cut
sets, and computes the top-event probability exactly (truncated
inclusion-exclusion), with the rare-event approximation, or by Monte Carlo
sampling of failure models.

Primary API:
    FaultTree - Gates under one top event; add_gate() then validate()
    analyze() - Cut sets, probability, importance and simulation in one call
    AnalysisConfig - Limits, modes and simulation settings

Example:
    from ftree import AnalysisConfig, FaultTree, analyze

    tree = FaultTree.from_declarations(
        "pump",
        gates=[("top", "or", ["valve", "power"]), ("power", "and", ["grid", "diesel"])],
        primary_events=[
            ("valve", "basic", 1e-3),
            ("grid", "basic", 1e-2),
            ("diesel", "basic", 5e-2),
        ],
    )
    result = analyze(tree, AnalysisConfig(limit_order=3))
    print(result.probability, result.warnings)
"""

from __future__ import annotations

from ftree import logging
from ftree._version import __version__
from ftree.analysis import (
    CutSetGenerator,
    CutSetResult,
    ProbabilityAnalysis,
    analyze,
    generate_cut_sets,
    prob_and,
    prob_or,
)
from ftree.config import AnalysisConfig
from ftree.exceptions import (
    CycleDetected,
    DanglingGate,
    DuplicateDefinition,
    InvalidArgument,
    MissingProbability,
    UndefinedNode,
    ValidationError,
)
from ftree.model import BasicEvent, EventGraph, FaultTree, Gate, HouseEvent
from ftree.monte_carlo import MonteCarloSimulator, SimulationSummary
from ftree.results import AnalysisResult, CutSetRecord
from ftree.types.base import EventKind, GateType

__all__ = [
    # Version
    "__version__",
    # Model
    "FaultTree",
    "EventGraph",
    "Gate",
    "BasicEvent",
    "HouseEvent",
    "GateType",
    "EventKind",
    # Analysis (primary API)
    "analyze",
    "AnalysisConfig",
    "CutSetGenerator",
    "CutSetResult",
    "generate_cut_sets",
    "ProbabilityAnalysis",
    "prob_and",
    "prob_or",
    "MonteCarloSimulator",
    # Results
    "AnalysisResult",
    "CutSetRecord",
    "SimulationSummary",
    # Errors
    "ValidationError",
    "DuplicateDefinition",
    "DanglingGate",
    "CycleDetected",
    "UndefinedNode",
    "MissingProbability",
    "InvalidArgument",
    # Utilities
    "logging",
]
