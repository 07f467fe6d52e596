"""Arena of declared events addressed by id."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Set

from ftree.exceptions import DuplicateDefinition
from ftree.model.event import BasicEvent, Event, Gate, HouseEvent, normalize_id
from ftree.types.base import EventKind


@dataclass
class EventGraph:
    """Container of every declared gate and primary event.

    Nodes only know their children. The parent index is derived on demand by
    a pass over the gates' child lists and cached until the next mutation.

    Attributes:
        nodes: Mapping from event id to node.
    """

    nodes: Dict[str, Event] = field(default_factory=dict)
    _parents_cache: Optional[Dict[str, Set[str]]] = field(
        default=None, init=False, repr=False
    )

    def add(self, node: Event) -> None:
        """Add a node keyed by its id.

        Raises:
            DuplicateDefinition: Another node already uses the id.
        """
        existing = self.nodes.get(node.id)
        if existing is not None:
            raise DuplicateDefinition(
                node.id, f"Trying to doubly define an event '{node.name}'."
            )
        self.nodes[node.id] = node
        self._parents_cache = None

    def get(self, node_id: str) -> Optional[Event]:
        """Return the node with the given id or name, or None."""
        return self.nodes.get(normalize_id(node_id))

    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, str) and normalize_id(node_id) in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def gates(self) -> Iterator[Gate]:
        for node in self.nodes.values():
            if node.kind is EventKind.GATE:
                yield node  # type: ignore[misc]

    def basic_events(self) -> Iterator[BasicEvent]:
        for node in self.nodes.values():
            if node.kind is EventKind.BASIC:
                yield node  # type: ignore[misc]

    def house_events(self) -> Iterator[HouseEvent]:
        for node in self.nodes.values():
            if node.kind is EventKind.HOUSE:
                yield node  # type: ignore[misc]

    def parents_index(self) -> Dict[str, Set[str]]:
        """Map each referenced child id to the ids of gates listing it."""
        if self._parents_cache is None:
            index: Dict[str, Set[str]] = {}
            for gate in self.gates():
                for child in gate.children:
                    index.setdefault(child, set()).add(gate.id)
            self._parents_cache = index
        return self._parents_cache

    def parents_of(self, node_id: str) -> Set[str]:
        """Ids of the gates that list ``node_id`` as a child."""
        return set(self.parents_index().get(normalize_id(node_id), ()))

    def display_name(self, node_id: str) -> str:
        """Original spelling of a node's name, or the id if undeclared."""
        node = self.nodes.get(node_id)
        return node.name if node is not None else node_id
