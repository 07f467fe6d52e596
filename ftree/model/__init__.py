"""Event model: nodes, the arena that owns them, and the fault tree."""

from ftree.model.event import (
    BasicEvent,
    Event,
    Gate,
    HouseEvent,
    PrimaryEvent,
    normalize_id,
    parse_house_state,
    primary_event_from_declaration,
)
from ftree.model.fault_tree import FaultTree
from ftree.model.graph import EventGraph

__all__ = [
    "BasicEvent",
    "Event",
    "EventGraph",
    "FaultTree",
    "Gate",
    "HouseEvent",
    "PrimaryEvent",
    "normalize_id",
    "parse_house_state",
    "primary_event_from_declaration",
]
