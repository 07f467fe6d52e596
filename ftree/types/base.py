"""Base enums shared by the event model and the analysis engines."""

from __future__ import annotations

from enum import IntEnum
from typing import Union

#: Scalar probability or parameter value.
Probability = Union[int, float]

#: Round-off tolerance: results this close outside [0, 1] are clamped silently.
PROB_EPSILON = 1e-12


def clamp_probability(value: Probability) -> float:
    """Clip a value into [0, 1]."""
    return min(1.0, max(0.0, float(value)))


class GateType(IntEnum):
    """Logical operator of a gate."""

    #: All children must occur.
    AND = 1
    #: Any child occurring is sufficient.
    OR = 2
    #: At least ``vote_number`` children must occur (k-out-of-n).
    ATLEAST = 3

    @classmethod
    def from_string(cls, value: str) -> "GateType":
        """Parse a case-insensitive gate type name.

        Args:
            value: Gate type name (e.g., "and", "Or", "ATLEAST").

        Returns:
            The corresponding GateType member.

        Raises:
            ValueError: If the string doesn't match any member.
        """
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid gate type '{value}'. Valid values are: {valid}"
            ) from None


class EventKind(IntEnum):
    """Tag of an event node. Dispatch on this instead of on Python types."""

    GATE = 1
    BASIC = 2
    HOUSE = 3

    @classmethod
    def from_string(cls, value: str) -> "EventKind":
        """Parse a case-insensitive event kind name."""
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(e.name.lower() for e in cls)
            raise ValueError(
                f"Invalid event kind '{value}'. Valid values are: {valid}"
            ) from None


class ExpressionKind(IntEnum):
    """Closed set of expression node variants."""

    CONSTANT = 1
    UNIFORM = 2
    NORMAL = 3
    LOGNORMAL = 4
    EXPONENTIAL = 5
    GLM = 6
    WEIBULL = 7
    PERIODIC_TEST = 8
