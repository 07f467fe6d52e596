"""Shared fixtures: small fault trees with known cut sets and probabilities."""

from __future__ import annotations

import pytest

from ftree import FaultTree


@pytest.fixture
def or_tree() -> FaultTree:
    """TOP = B1 | B2 with P(B1)=0.1, P(B2)=0.2."""
    return FaultTree.from_declarations(
        "or_tree",
        gates=[("TOP", "or", ["B1", "B2"])],
        primary_events=[("B1", "basic", 0.1), ("B2", "basic", 0.2)],
    )


@pytest.fixture
def shared_tree() -> FaultTree:
    """TOP = (A | B) & (A | C); gate children share A.

    Minimal cut sets: {a}, {b, c}.
    P(top) = 0.1 + 0.2 * 0.3 - 0.1 * 0.2 * 0.3 = 0.154.
    """
    return FaultTree.from_declarations(
        "shared_tree",
        gates=[
            ("TOP", "and", ["G1", "G2"]),
            ("G1", "or", ["A", "B"]),
            ("G2", "or", ["A", "C"]),
        ],
        primary_events=[("A", "basic", 0.1), ("B", "basic", 0.2), ("C", "basic", 0.3)],
    )


@pytest.fixture
def deep_tree() -> FaultTree:
    """TOP = X | (Y & Z & W) with a third-order cut set."""
    return FaultTree.from_declarations(
        "deep_tree",
        gates=[("TOP", "or", ["X", "G"]), ("G", "and", ["Y", "Z", "W"])],
        primary_events=[
            ("X", "basic", 0.01),
            ("Y", "basic", 0.1),
            ("Z", "basic", 0.1),
            ("W", "basic", 0.1),
        ],
    )
