"""Exception types raised by fault tree construction, validation and evaluation.

Structural problems derive from ``ValidationError`` and expression domain
problems raise ``InvalidArgument``. Both subclass ``ValueError`` so callers that
only care about bad input can catch that.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class ValidationError(ValueError):
    """Base class for structural errors in a fault tree.

    Attributes:
        tree_name: Name of the fault tree the error belongs to, if known.
    """

    def __init__(self, message: str, tree_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.tree_name = tree_name


class DuplicateDefinition(ValidationError):
    """A gate id is registered twice in the same tree."""

    def __init__(self, node_id: str, message: str, tree_name: Optional[str] = None):
        super().__init__(message, tree_name)
        self.node_id = node_id


class DanglingGate(ValidationError):
    """A gate has no parent already known to the tree."""

    def __init__(self, node_id: str, message: str, tree_name: Optional[str] = None):
        super().__init__(message, tree_name)
        self.node_id = node_id


class UndefinedNode(ValidationError):
    """A child id resolves neither to a gate nor to a declared primary event."""

    def __init__(self, node_id: str, message: str, tree_name: Optional[str] = None):
        super().__init__(message, tree_name)
        self.node_id = node_id


class CycleDetected(ValidationError):
    """A gate is reachable from itself.

    Attributes:
        path: Display names from the first occurrence of the repeated gate
            through its repetition, e.g. ``["A", "B", "A"]``.
    """

    def __init__(self, path: Iterable[str], tree_name: Optional[str] = None):
        self.path: List[str] = list(path)
        where = f" in '{tree_name}' fault tree" if tree_name else ""
        super().__init__(
            f"Detected a cycle{where}: {'->'.join(self.path)}", tree_name
        )


class MissingProbability(ValidationError):
    """Probability analysis was requested but basic events lack probabilities."""

    def __init__(self, node_ids: Iterable[str], tree_name: Optional[str] = None):
        self.node_ids: List[str] = sorted(node_ids)
        super().__init__(
            "Basic events without probability: " + ", ".join(self.node_ids),
            tree_name,
        )


class InvalidArgument(ValueError):
    """An expression parameter lies outside its legal domain."""
