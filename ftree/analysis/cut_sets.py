"""Minimal cut set generation by top-down expansion of the gate graph.

Every gate is expanded once into a list of minimal cut sets over basic
events; results are cached per gate id, so a sub-graph shared by several
parents costs one expansion. Sets larger than ``limit_order`` are dropped
as soon as they appear. Supersets of smaller sets only grow when ANDed with
anything else, so dropping them early never loses a minimal set within the
limit; it does mean the result is "minimal cut sets up to order N" and the
caller must report that when a dropped set might have been minimal. A
dropped set that contains a kept cut set could not have been, so only the
others are counted. The count may still include sets that would only have
been absorbed after growing further up the tree.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence, Set

from ftree.analysis.superset import Superset
from ftree.logging import get_logger
from ftree.model.event import Gate
from ftree.model.fault_tree import FaultTree
from ftree.types.base import EventKind, GateType

logger = get_logger(__name__)

CutSet = FrozenSet[str]


def minimize_cut_sets(sets: Iterable[CutSet]) -> List[CutSet]:
    """Drop duplicates and every set that strictly contains another.

    Returns:
        Minimal sets ordered by size, then lexicographically by members.
    """
    ordered = sorted(set(sets), key=lambda s: (len(s), sorted(s)))
    minimal: List[CutSet] = []
    for candidate in ordered:
        if not any(kept <= candidate for kept in minimal):
            minimal.append(candidate)
    return minimal


@dataclass
class CutSetResult:
    """Minimal cut sets of a tree, up to a limit order.

    Attributes:
        cut_sets: Minimal cut sets ordered by size. ``[frozenset()]`` means
            the top event is certain; ``[]`` means it cannot occur.
        limit_order: The order limit used.
        discarded: Number of distinct candidate sets dropped for exceeding
            the limit that contain none of the kept cut sets.
        warnings: Messages the caller must surface with the results.
    """

    cut_sets: List[CutSet]
    limit_order: int
    discarded: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        """True if the order limit may have dropped a minimal cut set."""
        return self.discarded > 0

    @property
    def max_order(self) -> int:
        """Size of the largest cut set, 0 if there are none."""
        return max((len(s) for s in self.cut_sets), default=0)

    def __len__(self) -> int:
        return len(self.cut_sets)


class CutSetGenerator:
    """Expands a validated fault tree into minimal cut sets.

    Args:
        tree: Validated fault tree. Validation runs here if it has not yet.
        limit_order: Largest cut set size to keep.
    """

    def __init__(self, tree: FaultTree, limit_order: int = 20) -> None:
        if limit_order < 1:
            raise ValueError(f"limit_order must be at least 1, got {limit_order}")
        if not tree.is_validated:
            tree.validate()
        self.tree = tree
        self.limit_order = limit_order
        self.discarded = 0
        self._dropped: Set[CutSet] = set()
        self._expanded: Dict[str, List[CutSet]] = {}

    def _child_options(self, child_id: str) -> List[Superset]:
        """Alternatives a child contributes to its parent's expansion."""
        tree = self.tree
        if child_id in tree.basic_events:
            branch = Superset()
            branch.insert_primary(child_id)
            return [branch]
        if child_id in tree.house_events:
            branch = Superset()
            branch.insert_house(tree.house_events[child_id].state)
            return [branch]
        return [Superset(s) for s in self._expanded[child_id]]

    def _cross(self, children: Sequence[List[Superset]]) -> List[Superset]:
        """AND together one alternative from each child, in every way."""
        branches = [Superset()]
        for options in children:
            crossed: Dict[CutSet, Superset] = {}
            for branch in branches:
                for option in options:
                    merged = branch.union(option)
                    if merged.null:
                        continue
                    if merged.order > self.limit_order:
                        self._dropped.add(merged.to_frozenset())
                        continue
                    crossed.setdefault(merged.to_frozenset(), merged)
            branches = list(crossed.values())
            if not branches:
                break
        return branches

    def _combine(self, gate: Gate) -> List[CutSet]:
        children = [self._child_options(child_id) for child_id in gate.children]
        match gate.gate_type:
            case GateType.OR:
                branches = [b for options in children for b in options if not b.null]
            case GateType.AND:
                branches = self._cross(children)
            case GateType.ATLEAST:
                branches = []
                for combo in itertools.combinations(children, gate.vote_number):
                    branches.extend(self._cross(combo))
            case _:
                raise ValueError(f"Unsupported gate type {gate.gate_type!r}")
        return minimize_cut_sets(b.to_frozenset() for b in branches)

    def _expand(self, root: Gate) -> List[CutSet]:
        """Post-order expansion of ``root`` with an explicit stack."""
        graph = self.tree.graph
        stack: List[str] = [root.id]
        while stack:
            gate_id = stack[-1]
            if gate_id in self._expanded:
                stack.pop()
                continue
            gate: Gate = graph.nodes[gate_id]  # type: ignore[assignment]
            pending = [
                child_id
                for child_id in gate.children
                if child_id not in self._expanded
                and graph.nodes[child_id].kind is EventKind.GATE
            ]
            if pending:
                stack.extend(pending)
                continue
            self._expanded[gate_id] = self._combine(gate)
            stack.pop()
            logger.debug(
                f"Expanded gate '{gate.name}' into {len(self._expanded[gate_id])} sets"
            )
        return self._expanded[root.id]

    def expand_sets(self, gate: Gate, out: List[Superset]) -> None:
        """Append the minimal expansion of ``gate`` to ``out``, one Superset per set."""
        out.extend(Superset(s) for s in self._expand(gate))

    def generate(self) -> CutSetResult:
        """Expand the top event and return its minimal cut sets."""
        start = time.perf_counter()
        branches: List[Superset] = []
        self.expand_sets(self.tree.top_event, branches)
        cut_sets = minimize_cut_sets(b.to_frozenset() for b in branches)
        self.discarded = sum(
            1 for dropped in self._dropped if not any(kept <= dropped for kept in cut_sets)
        )

        result = CutSetResult(cut_sets, self.limit_order, self.discarded)
        if result.truncated:
            message = (
                f"{self.discarded} candidate cut sets above order {self.limit_order} "
                f"were discarded; results are minimal cut sets up to order "
                f"{self.limit_order}."
            )
            result.warnings.append(message)
            logger.warning(message)

        logger.info(
            f"Generated {len(cut_sets)} minimal cut sets for '{self.tree.name}' "
            f"(max order {result.max_order}, limit {self.limit_order}) in "
            f"{time.perf_counter() - start:.3f}s"
        )
        return result


def generate_cut_sets(tree: FaultTree, limit_order: int = 20) -> CutSetResult:
    """Convenience wrapper around ``CutSetGenerator(tree, limit_order).generate()``."""
    return CutSetGenerator(tree, limit_order).generate()
