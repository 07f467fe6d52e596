"""Event nodes of a fault tree: gates, basic events and house events.

Nodes are plain dataclasses tagged with an ``EventKind``. Gates store only the
ids of their children; nodes never hold references to each other, so the
same gate can sit under several parents without creating reference cycles.

Ids are case-folded names. The ``name`` attribute keeps the original
spelling for messages and reports.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Sequence, Union

from ftree.exceptions import InvalidArgument
from ftree.expression.base import Expression, SampleMemo, as_expression
from ftree.types.base import EventKind, GateType, clamp_probability


def normalize_id(name: str) -> str:
    """Return the canonical id for an event name."""
    return name.strip().lower()


@dataclass
class Gate:
    """Logical combinator over an ordered list of child events.

    Attributes:
        name: Display name.
        gate_type: Logical operator. Strings are parsed case-insensitively.
        children: Child ids in declaration order (normalized on init).
        vote_number: Required for ATLEAST gates: minimum number of children
            that must occur. Must be None for other gate types.
        attrs: Free-form metadata carried through from the declaration.
        id: Canonical id derived from ``name``.
    """

    kind: ClassVar[EventKind] = EventKind.GATE

    name: str
    gate_type: GateType
    children: List[str] = field(default_factory=list)
    vote_number: Optional[int] = None
    attrs: Dict[str, Any] = field(default_factory=dict)
    id: str = field(init=False)

    def __post_init__(self) -> None:
        self.id = normalize_id(self.name)
        if isinstance(self.gate_type, str):
            self.gate_type = GateType.from_string(self.gate_type)

        children = [normalize_id(child) for child in self.children]
        seen = set()
        for child in children:
            if child in seen:
                raise ValueError(f"Gate '{self.name}' lists child '{child}' twice.")
            seen.add(child)
        self.children = children

        if self.gate_type == GateType.ATLEAST:
            if self.vote_number is None:
                raise ValueError(f"ATLEAST gate '{self.name}' requires a vote_number.")
            if not 1 <= self.vote_number <= len(self.children):
                raise ValueError(
                    f"ATLEAST gate '{self.name}': vote_number={self.vote_number} "
                    f"must be within [1, {len(self.children)}]."
                )
        elif self.vote_number is not None:
            raise ValueError(
                f"Gate '{self.name}' of type {self.gate_type.name} takes no vote_number."
            )

    @classmethod
    def from_declaration(cls, declaration: Union[Sequence[Any], Mapping[str, Any]]) -> "Gate":
        """Build a gate from ``(id, type, children[, vote_number])`` or a mapping.

        Mappings use the keys ``id``, ``type``, ``children`` and optionally
        ``vote_number`` and ``attrs``.
        """
        if isinstance(declaration, Mapping):
            return cls(
                name=declaration["id"],
                gate_type=declaration["type"],
                children=list(declaration.get("children", [])),
                vote_number=declaration.get("vote_number"),
                attrs=dict(declaration.get("attrs", {})),
            )
        if len(declaration) not in (3, 4):
            raise ValueError(
                "Gate declaration must be (id, type, children[, vote_number]), "
                f"got {len(declaration)} fields."
            )
        vote_number = declaration[3] if len(declaration) == 4 else None
        return cls(declaration[0], declaration[1], list(declaration[2]), vote_number)


@dataclass
class BasicEvent:
    """Leaf failure event with a probability.

    Attributes:
        name: Display name.
        probability: A number or an ``Expression``; numbers are wrapped into
            constant expressions. None means not yet assigned.
        attrs: Free-form metadata.
        id: Canonical id derived from ``name``.
    """

    kind: ClassVar[EventKind] = EventKind.BASIC

    name: str
    probability: Union[Expression, float, None] = None
    attrs: Dict[str, Any] = field(default_factory=dict)
    id: str = field(init=False)

    def __post_init__(self) -> None:
        self.id = normalize_id(self.name)
        if self.probability is not None:
            self.probability = as_expression(self.probability)

    @property
    def expression(self) -> Optional[Expression]:
        """The probability expression, or None if unassigned."""
        return self.probability  # type: ignore[return-value]

    @property
    def has_probability(self) -> bool:
        return self.probability is not None

    def _require_expression(self) -> Expression:
        if self.probability is None:
            raise ValueError(f"Basic event '{self.name}' has no probability.")
        return self.probability  # type: ignore[return-value]

    def validate(self) -> None:
        """Validate the expression tree and the resulting probability.

        Raises:
            InvalidArgument: A parameter is out of domain or the best-estimate
                probability is outside [0, 1].
        """
        expression = self._require_expression()
        expression.validate()
        value = expression.mean()
        if not 0 <= value <= 1:
            raise InvalidArgument(
                f"Basic event '{self.name}': probability {value} is outside [0, 1]."
            )

    def mean(self) -> float:
        return self._require_expression().mean()

    # Deviates can overshoot [0, 1]; bounds and samples are clipped back into it

    def low(self) -> float:
        return clamp_probability(self._require_expression().low())

    def high(self) -> float:
        return clamp_probability(self._require_expression().high())

    def sample(self, rng: random.Random, memo: Optional[SampleMemo] = None) -> float:
        return clamp_probability(self._require_expression().sample(rng, memo))


_TRUE_WORDS = frozenset({"true", "yes", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "off", "0"})


def parse_house_state(value: Any, name: str = "") -> bool:
    """Interpret a house event state.

    Accepts booleans, the integers 0 and 1, and the words true/false,
    yes/no, on/off (any case).

    Raises:
        ValueError: Any other value.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"House event '{name}': state must be a boolean, got {value!r}.")


@dataclass
class HouseEvent:
    """Leaf event with a fixed boolean state.

    Attributes:
        name: Display name.
        state: True if the event has occurred.
        attrs: Free-form metadata.
        id: Canonical id derived from ``name``.
    """

    kind: ClassVar[EventKind] = EventKind.HOUSE

    name: str
    state: bool = False
    attrs: Dict[str, Any] = field(default_factory=dict)
    id: str = field(init=False)

    def __post_init__(self) -> None:
        self.id = normalize_id(self.name)
        self.state = parse_house_state(self.state, self.name)


#: Any node of the event graph.
Event = Union[Gate, BasicEvent, HouseEvent]

#: Leaf nodes.
PrimaryEvent = Union[BasicEvent, HouseEvent]


def primary_event_from_declaration(
    declaration: Union[Sequence[Any], Mapping[str, Any]],
) -> PrimaryEvent:
    """Build a primary event from ``(id, kind, value)`` or a mapping.

    ``kind`` is ``"basic"`` (value: number, Expression or None) or
    ``"house"`` (value: boolean state). Mappings use the keys ``id``,
    ``kind``, ``value`` and optionally ``attrs``.
    """
    if isinstance(declaration, Mapping):
        name = declaration["id"]
        kind = declaration["kind"]
        value = declaration.get("value")
        attrs = dict(declaration.get("attrs", {}))
    else:
        if len(declaration) != 3:
            raise ValueError(
                "Primary event declaration must be (id, kind, value), "
                f"got {len(declaration)} fields."
            )
        name, kind, value = declaration
        attrs = {}

    if isinstance(kind, str):
        kind = EventKind.from_string(kind)

    match kind:
        case EventKind.BASIC:
            return BasicEvent(name, value, attrs)
        case EventKind.HOUSE:
            return HouseEvent(name, False if value is None else value, attrs)
        case _:
            raise ValueError(f"'{name}': {kind.name.lower()} is not a primary event kind.")
