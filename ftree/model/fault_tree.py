"""FaultTree: the gates under one top event and their primary events."""

from __future__ import annotations

import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ftree.exceptions import DanglingGate, DuplicateDefinition, ValidationError
from ftree.logging import get_logger
from ftree.model.event import (
    BasicEvent,
    Gate,
    HouseEvent,
    PrimaryEvent,
    primary_event_from_declaration,
)
from ftree.model.graph import EventGraph
from ftree.model.validation import check_cyclicity, check_gates, gather_primary_events

logger = get_logger(__name__)

Declaration = Union[Sequence[Any], Mapping[str, Any]]


class FaultTree:
    """Gates reachable from a top event, built incrementally then validated.

    The first gate added becomes the top event. Every later gate must have a
    parent that is already part of the tree, so parents are added before
    their children. ``validate()`` runs once all gates are in: it rejects
    cycles, registers gates reachable only as children ("implicit" gates),
    and rebuilds the primary-event indices. After that the tree is treated as
    read-only.

    Attributes:
        name: Name of the tree, used in messages.
        graph: Arena resolving ids to nodes; may be shared with other trees.
        top_event_id: Id of the top gate, None until the first ``add_gate``.
        inter_events: Intermediate gates by id, explicit and implicit.
        implicit_gates: Gates found only as children during validation.
        primary_events: Primary events under this tree (after validation).
        basic_events: Basic events under this tree (after validation).
        house_events: House events under this tree (after validation).
        warnings: Non-fatal structural findings from the last validation.
    """

    def __init__(self, name: str, graph: Optional[EventGraph] = None) -> None:
        self.name = name
        self.graph = graph if graph is not None else EventGraph()
        self.top_event_id: Optional[str] = None
        self.inter_events: Dict[str, Gate] = {}
        self.implicit_gates: Dict[str, Gate] = {}
        self.primary_events: Dict[str, PrimaryEvent] = {}
        self.basic_events: Dict[str, BasicEvent] = {}
        self.house_events: Dict[str, HouseEvent] = {}
        self.warnings: List[str] = []
        self._validated = False

    def __repr__(self) -> str:
        return (
            f"FaultTree(name={self.name!r}, top={self.top_event_id!r}, "
            f"gates={len(self.gates)}, validated={self._validated})"
        )

    @property
    def top_event(self) -> Gate:
        """The top gate.

        Raises:
            ValidationError: No gate has been added yet.
        """
        if self.top_event_id is None:
            raise ValidationError(f"Fault tree '{self.name}' has no top event.", self.name)
        return self.graph.nodes[self.top_event_id]  # type: ignore[return-value]

    @property
    def gates(self) -> Dict[str, Gate]:
        """All known gates including the top, keyed by id."""
        gates: Dict[str, Gate] = {}
        if self.top_event_id is not None:
            gates[self.top_event_id] = self.top_event
        gates.update(self.inter_events)
        return gates

    @property
    def is_validated(self) -> bool:
        return self._validated

    def _register(self, gate: Gate) -> None:
        if self.graph.nodes.get(gate.id) is not gate:
            self.graph.add(gate)

    def add_gate(self, gate: Gate) -> None:
        """Add a gate; the first one added becomes the top event.

        The gate is also registered in the arena unless already there.

        Raises:
            DuplicateDefinition: The id already names the top or an
                intermediate gate, or another node in the arena.
            DanglingGate: No gate lists this one as a child, or none of the
                gates that do is part of the tree yet.
        """
        if self.top_event_id is None:
            self._register(gate)
            self.top_event_id = gate.id
            self._validated = False
            logger.debug(f"Fault tree '{self.name}': top event '{gate.name}'")
            return

        if gate.id == self.top_event_id or gate.id in self.inter_events:
            raise DuplicateDefinition(
                gate.id, f"Trying to doubly define a gate '{gate.name}'.", self.name
            )

        parents = self.graph.parents_of(gate.id)
        if not parents:
            raise DanglingGate(
                gate.id,
                f"Gate '{gate.name}' is a dangling gate in '{self.name}' fault tree: "
                "no gate lists it as a child.",
                self.name,
            )
        if not any(p == self.top_event_id or p in self.inter_events for p in parents):
            raise DanglingGate(
                gate.id,
                f"Gate '{gate.name}' has no pre-declared parent gate in '{self.name}' "
                "fault tree. This gate is a dangling gate.",
                self.name,
            )

        self._register(gate)
        self.inter_events[gate.id] = gate
        self._validated = False

    def add_primary_event(self, event: PrimaryEvent) -> None:
        """Declare a primary event in the arena.

        Raises:
            DuplicateDefinition: Another node already uses the id.
        """
        self.graph.add(event)
        self._validated = False

    def validate(self) -> None:
        """Check the structure and rebuild the primary-event indices.

        Cycles are checked first; gates reached only as children are
        registered as implicit gates; then every non-gate child of every
        known gate must be a declared primary event.

        Raises:
            ValidationError: No top event.
            CycleDetected: A gate is its own ancestor.
            UndefinedNode: A child was never declared.
        """
        start = time.perf_counter()
        top = self.top_event

        reachable = check_cyclicity(self.graph, top.id, self.name)
        for gate_id in reachable[1:]:
            if gate_id not in self.inter_events:
                gate = self.graph.nodes[gate_id]
                logger.debug(f"Fault tree '{self.name}': implicit gate '{gate.name}'")
                self.implicit_gates[gate_id] = gate  # type: ignore[assignment]
                self.inter_events[gate_id] = gate  # type: ignore[assignment]

        self.primary_events.clear()
        self.basic_events.clear()
        self.house_events.clear()
        basic, house = gather_primary_events(self.graph, self.gates, self.name)
        self.basic_events.update(basic)
        self.house_events.update(house)
        self.primary_events.update(basic)
        self.primary_events.update(house)

        self.warnings = check_gates(self.gates.values())
        for message in self.warnings:
            logger.warning(message)

        self._validated = True
        logger.info(
            f"Validated fault tree '{self.name}': {len(self.gates)} gates "
            f"({len(self.implicit_gates)} implicit), {len(self.basic_events)} basic "
            f"and {len(self.house_events)} house events in "
            f"{time.perf_counter() - start:.3f}s"
        )

    @classmethod
    def from_declarations(
        cls,
        name: str,
        gates: Iterable[Declaration],
        primary_events: Iterable[Declaration] = (),
        *,
        validate: bool = True,
    ) -> "FaultTree":
        """Build a tree from already-parsed declarations.

        Gates are added in the given order, so the top comes first and
        parents precede children. See ``Gate.from_declaration`` and
        ``primary_event_from_declaration`` for the accepted shapes.

        Args:
            name: Tree name.
            gates: Gate declarations, top first.
            primary_events: Basic and house event declarations.
            validate: Run ``validate()`` before returning.

        Returns:
            The populated tree.
        """
        tree = cls(name)
        for declaration in primary_events:
            tree.add_primary_event(primary_event_from_declaration(declaration))

        # Gates go into the arena first so parents are derivable from any order
        built = [Gate.from_declaration(declaration) for declaration in gates]
        for gate in built:
            tree.graph.add(gate)
        for gate in built:
            tree.add_gate(gate)

        if validate:
            tree.validate()
        return tree
