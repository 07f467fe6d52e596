"""Result artifacts of a fault tree analysis.

- `CutSetRecord`: one minimal cut set with display names and probability
- `AnalysisResult`: everything one ``analyze()`` run produces, with a
  JSON-serializable ``to_dict()`` and pandas views for tabular reporting
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from ftree.analysis.probability import ImportanceRecord
from ftree.monte_carlo.results import SimulationSummary


@dataclass(frozen=True)
class CutSetRecord:
    """A minimal cut set.

    Attributes:
        event_ids: Member basic event ids, sorted.
        names: Member display names, in the order of ``event_ids``.
        probability: Product of member probabilities, None if not computed.
    """

    event_ids: tuple[str, ...]
    names: tuple[str, ...]
    probability: Optional[float] = None

    @property
    def order(self) -> int:
        return len(self.event_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events": list(self.names),
            "order": self.order,
            "probability": self.probability,
        }


@dataclass
class AnalysisResult:
    """Output of one analysis run.

    Attributes:
        tree_name: Name of the analyzed tree.
        top_event: Display name of the top event.
        cut_sets: Minimal cut sets; ordered by probability when computed,
            otherwise by order.
        limit_order: Order limit used during generation.
        truncated_order: True if sets above ``limit_order`` were dropped.
        probability: Top-event probability, None if not computed.
        rare_event: Whether the rare-event approximation was used.
        truncated_terms: True if inclusion-exclusion was cut by ``nsums``.
        bounds: ``(low, high)`` top-event probability, if computed.
        importance: Basic events ranked by contribution.
        simulation: Monte Carlo summary, if simulation ran.
        warnings: Every truncation, approximation and structural notice.
    """

    tree_name: str
    top_event: str
    cut_sets: List[CutSetRecord]
    limit_order: int
    truncated_order: bool = False
    probability: Optional[float] = None
    rare_event: bool = False
    truncated_terms: bool = False
    bounds: Optional[tuple[float, float]] = None
    importance: List[ImportanceRecord] = field(default_factory=list)
    simulation: Optional[SimulationSummary] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def max_order(self) -> int:
        return max((record.order for record in self.cut_sets), default=0)

    @property
    def is_exact(self) -> bool:
        """True if neither truncation nor the rare-event approximation applied."""
        return not (self.truncated_order or self.truncated_terms or self.rare_event)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary of JSON-serializable primitives."""
        return {
            "tree": self.tree_name,
            "top_event": self.top_event,
            "limit_order": self.limit_order,
            "max_order": self.max_order,
            "truncated_order": self.truncated_order,
            "probability": self.probability,
            "rare_event": self.rare_event,
            "truncated_terms": self.truncated_terms,
            "bounds": list(self.bounds) if self.bounds is not None else None,
            "cut_sets": [record.to_dict() for record in self.cut_sets],
            "importance": [
                {
                    "event": record.name,
                    "contribution": record.contribution,
                    "relative": record.relative,
                    "cut_sets": record.cut_set_count,
                }
                for record in self.importance
            ],
            "simulation": self.simulation.to_dict() if self.simulation else None,
            "warnings": list(self.warnings),
        }

    def cut_sets_dataframe(self) -> pd.DataFrame:
        """One row per cut set: members, order and probability."""
        if not self.cut_sets:
            return pd.DataFrame(columns=["events", "order", "probability"])
        return pd.DataFrame(
            [
                {
                    "events": " * ".join(record.names),
                    "order": record.order,
                    "probability": record.probability,
                }
                for record in self.cut_sets
            ]
        )

    def importance_dataframe(self) -> pd.DataFrame:
        """One row per basic event, ranked by contribution."""
        columns = ["event", "contribution", "relative", "cut_sets"]
        if not self.importance:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame(
            [
                {
                    "event": record.name,
                    "contribution": record.contribution,
                    "relative": record.relative,
                    "cut_sets": record.cut_set_count,
                }
                for record in self.importance
            ],
            columns=columns,
        )
