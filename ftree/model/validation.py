"""Structural checks for a fault tree's gate graph.

Provides cycle detection over gate children, collection of the primary
events under a set of gates, and arity checks for gates whose shape is legal
but suspicious.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ftree.exceptions import CycleDetected, UndefinedNode
from ftree.model.event import BasicEvent, Gate, HouseEvent
from ftree.model.graph import EventGraph
from ftree.types.base import EventKind, GateType


def check_cyclicity(
    graph: EventGraph, top_id: str, tree_name: Optional[str] = None
) -> List[str]:
    """Walk every gate reachable from the top and fail on the first cycle.

    Depth-first with an explicit stack of child iterators. ``path`` holds the
    gates on the current descent and ``on_path`` their positions in it, so a
    cycle is reported as a slice of ``path`` without copying it per step.
    Gates already fully explored are skipped, which keeps shared sub-graphs
    linear.

    Args:
        graph: Arena resolving ids to nodes.
        top_id: Id of the top gate.
        tree_name: Used in error messages.

    Returns:
        Ids of all reachable gates in discovery order, top first.

    Raises:
        CycleDetected: A gate is reachable from itself. ``path`` runs from the
            first occurrence of the gate through its repetition.
    """
    top = graph.nodes[top_id]
    path: List[str] = [top_id]
    on_path: Dict[str, int] = {top_id: 0}
    explored: Set[str] = set()
    discovered: List[str] = [top_id]
    stack: List[Iterator[str]] = [iter(top.children)]  # type: ignore[union-attr]

    while stack:
        child_id = next(stack[-1], None)
        if child_id is None:
            stack.pop()
            finished = path.pop()
            del on_path[finished]
            explored.add(finished)
            continue

        node = graph.nodes.get(child_id)
        if node is None or node.kind is not EventKind.GATE:
            continue
        if child_id in on_path:
            cycle = path[on_path[child_id] :] + [child_id]
            raise CycleDetected([graph.display_name(i) for i in cycle], tree_name)
        if child_id in explored:
            continue

        on_path[child_id] = len(path)
        path.append(child_id)
        discovered.append(child_id)
        stack.append(iter(node.children))  # type: ignore[union-attr]

    return discovered


def gather_primary_events(
    graph: EventGraph,
    gate_ids: Iterable[str],
    tree_name: Optional[str] = None,
) -> Tuple[Dict[str, BasicEvent], Dict[str, HouseEvent]]:
    """Classify the non-gate children of the given gates.

    Args:
        graph: Arena resolving ids to nodes.
        gate_ids: Every gate known to the tree.
        tree_name: Used in error messages.

    Returns:
        ``(basic_events, house_events)`` keyed by id.

    Raises:
        UndefinedNode: A child is neither a known gate nor a declared
            primary event.
    """
    known = set(gate_ids)
    basic: Dict[str, BasicEvent] = {}
    house: Dict[str, HouseEvent] = {}

    for gate_id in known:
        gate = graph.nodes[gate_id]
        for child_id in gate.children:  # type: ignore[union-attr]
            if child_id in known:
                continue
            node = graph.nodes.get(child_id)
            kind = None if node is None else node.kind
            match kind:
                case EventKind.BASIC:
                    basic[child_id] = node  # type: ignore[assignment]
                case EventKind.HOUSE:
                    house[child_id] = node  # type: ignore[assignment]
                case _:
                    where = f" in '{tree_name}' tree" if tree_name else ""
                    raise UndefinedNode(
                        child_id,
                        f"Node with id '{child_id}' was not defined{where}.",
                        tree_name,
                    )
    return basic, house


def check_gates(gates: Iterable[Gate]) -> List[str]:
    """Report gates that are well-defined but degenerate.

    AND/OR gates with a single child and ATLEAST gates voting 1 or n out of
    n behave like simpler gates and usually indicate an input mistake.

    Returns:
        One warning message per offending gate, sorted by gate id.
    """
    problems: List[str] = []
    for gate in sorted(gates, key=lambda g: g.id):
        num_children = len(gate.children)
        match gate.gate_type:
            case GateType.AND | GateType.OR:
                if num_children < 2:
                    problems.append(
                        f"{gate.gate_type.name} gate '{gate.name}' has "
                        f"{num_children} child(ren); expected at least 2."
                    )
            case GateType.ATLEAST:
                if gate.vote_number in (1, num_children):
                    problems.append(
                        f"ATLEAST gate '{gate.name}' votes {gate.vote_number} out of "
                        f"{num_children}; it reduces to an "
                        f"{'OR' if gate.vote_number == 1 else 'AND'} gate."
                    )
    return problems
