"""Shared enums, aliases and probability helpers."""

from ftree.types.base import (
    PROB_EPSILON,
    EventKind,
    ExpressionKind,
    GateType,
    Probability,
    clamp_probability,
)

__all__ = [
    "EventKind",
    "ExpressionKind",
    "GateType",
    "Probability",
    "PROB_EPSILON",
    "clamp_probability",
]
