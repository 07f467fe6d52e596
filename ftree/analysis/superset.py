"""Superset: accumulator for one AND-branch during cut-set expansion."""

from __future__ import annotations

from typing import FrozenSet, Iterable


class Superset:
    """Basic-event ids joined by AND, plus the folded state of house events.

    A house event set to TRUE is neutral in an AND-branch and is not stored.
    One set to FALSE makes the whole branch impossible; the branch is then
    marked ``null`` and must be dropped by whoever collects it.
    """

    __slots__ = ("primes", "null")

    def __init__(self, primes: Iterable[str] = (), null: bool = False) -> None:
        self.primes: set[str] = set(primes)
        self.null = null

    def __repr__(self) -> str:
        if self.null:
            return "Superset(null)"
        return f"Superset({sorted(self.primes)})"

    @property
    def order(self) -> int:
        """Number of basic events in the branch."""
        return len(self.primes)

    def insert_primary(self, basic_id: str) -> None:
        self.primes.add(basic_id)

    def insert_house(self, state: bool) -> None:
        if not state:
            self.null = True

    def insert_set(self, other: "Superset") -> None:
        """AND another branch into this one in place."""
        if other.null:
            self.null = True
        self.primes |= other.primes

    def union(self, other: "Superset") -> "Superset":
        """Return a new branch equal to ``self AND other``."""
        merged = Superset(self.primes, self.null)
        merged.insert_set(other)
        return merged

    def copy(self) -> "Superset":
        return Superset(self.primes, self.null)

    def to_frozenset(self) -> FrozenSet[str]:
        return frozenset(self.primes)
