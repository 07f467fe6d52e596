"""End-to-end analysis of one fault tree.

``analyze()`` chains the engines: validation (if needed), minimal cut set
generation, point-estimate probability with importance and optional bounds,
and optional Monte Carlo simulation. Every truncation or approximation is
logged and also returned in ``AnalysisResult.warnings``.
"""

from __future__ import annotations

import time
from typing import Dict, List, Optional

from ftree.analysis.cut_sets import CutSetGenerator, CutSetResult
from ftree.analysis.probability import ProbabilityAnalysis
from ftree.config import DEFAULT_CONFIG, AnalysisConfig
from ftree.exceptions import MissingProbability
from ftree.logging import get_logger
from ftree.model.fault_tree import FaultTree
from ftree.monte_carlo.simulation import MonteCarloSimulator
from ftree.results.artifacts import AnalysisResult, CutSetRecord

logger = get_logger(__name__)


def _event_values(tree: FaultTree, event_ids: List[str], which: str) -> Dict[str, float]:
    return {
        event_id: getattr(tree.basic_events[event_id], which)() for event_id in event_ids
    }


def _check_probabilities(tree: FaultTree, event_ids: List[str]) -> None:
    missing = [
        tree.basic_events[event_id].name
        for event_id in event_ids
        if not tree.basic_events[event_id].has_probability
    ]
    if missing:
        raise MissingProbability(missing, tree.name)
    for event_id in event_ids:
        tree.basic_events[event_id].validate()


def analyze(tree: FaultTree, config: Optional[AnalysisConfig] = None) -> AnalysisResult:
    """Run the configured analysis on ``tree``.

    Args:
        tree: Fault tree; validated here if it has not been already.
        config: Analysis settings; ``DEFAULT_CONFIG`` when omitted.

    Returns:
        The analysis result.

    Raises:
        ValidationError: The tree structure is invalid.
        MissingProbability: Probabilities are requested but missing.
        InvalidArgument: A probability expression is out of domain.
    """
    config = config or DEFAULT_CONFIG
    start = time.perf_counter()
    if not tree.is_validated:
        tree.validate()
    warnings: List[str] = list(tree.warnings)

    generated: CutSetResult = CutSetGenerator(tree, config.limit_order).generate()
    warnings.extend(generated.warnings)
    cut_sets = generated.cut_sets
    names = {event_id: event.name for event_id, event in tree.basic_events.items()}

    result = AnalysisResult(
        tree_name=tree.name,
        top_event=tree.top_event.name,
        cut_sets=[],
        limit_order=config.limit_order,
        truncated_order=generated.truncated,
        rare_event=config.rare_event and config.probability,
    )

    if not config.probability:
        result.cut_sets = [
            CutSetRecord(tuple(sorted(s)), tuple(names[i] for i in sorted(s)))
            for s in cut_sets
        ]
        result.warnings = warnings
        return result

    member_ids = sorted({event_id for cut_set in cut_sets for event_id in cut_set})
    _check_probabilities(tree, member_ids)
    probabilities = _event_values(tree, member_ids, "mean")

    analysis = ProbabilityAnalysis(
        cut_sets,
        probabilities,
        rare_event=config.rare_event,
        nsums=config.nsums,
        names=names,
    )
    result.probability = analysis.top_event_probability()
    result.truncated_terms = analysis.truncated
    result.cut_sets = [
        CutSetRecord(tuple(sorted(s)), tuple(names[i] for i in sorted(s)), p)
        for s, p in analysis.cut_set_probabilities()
    ]
    if config.importance:
        result.importance = analysis.importance(result.probability)
    warnings.extend(analysis.warnings)

    if config.compute_bounds:
        bounds = []
        for which in ("low", "high"):
            bound_analysis = ProbabilityAnalysis(
                cut_sets,
                _event_values(tree, member_ids, which),
                rare_event=config.rare_event,
                nsums=config.nsums,
            )
            bounds.append(bound_analysis.top_event_probability())
        result.bounds = (bounds[0], bounds[1])
        logger.info(f"Top-event probability bounds: [{bounds[0]:.6g}, {bounds[1]:.6g}]")

    if config.rare_event:
        message = (
            "Rare-event approximation used; the top-event probability is an "
            "upper-bound estimate."
        )
        warnings.append(message)
        logger.warning(message)

    if config.num_trials > 0:
        simulator = MonteCarloSimulator(
            tree, cut_sets, nsums=config.nsums, seed=config.seed
        )
        result.simulation = simulator.run(config.num_trials, config.parallelism)
        if result.simulation.truncated and not result.truncated_terms:
            message = (
                f"Simulation equation truncated after {config.nsums} terms; the "
                "sampled estimate is approximate."
            )
            warnings.append(message)
            logger.warning(message)

    result.warnings = warnings
    logger.info(
        f"Analysis of '{tree.name}' finished in {time.perf_counter() - start:.3f}s: "
        f"P(top)={result.probability:.6g}, {len(cut_sets)} minimal cut sets"
    )
    return result
