"""Top-event probability from minimal cut sets.

Basic events are independent, so a cut set's probability is the product of
its members' probabilities. The probability of the union of cut sets is
computed by inclusion-exclusion:

    P(C1 | ... | Cn) = sum P(Ci) - sum P(Ci & Cj) + sum P(Ci & Cj & Ck) - ...

where the probability of an intersection is the product over the union of
the members. The full series has ``2**n - 1`` terms. Terms are produced
lazily, all singles first, then pairs, then triples, and the series stops
after ``nsums`` terms; the partial sum is then an approximation whose
truncation must be reported.

The rare-event approximation keeps only the first-order terms.
"""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from typing import (
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
)

from ftree.logging import get_logger
from ftree.types.base import PROB_EPSILON, Probability, clamp_probability

logger = get_logger(__name__)

CutSet = FrozenSet[str]

#: Default budget of inclusion-exclusion terms.
DEFAULT_NSUMS = 1_000_000


class Term(NamedTuple):
    """One signed term of the inclusion-exclusion series."""

    sign: int
    members: CutSet


def prob_and(cut_set: Iterable[str], probabilities: Mapping[str, Probability]) -> float:
    """Probability that every event of ``cut_set`` occurs (independence)."""
    return math.prod(probabilities[event_id] for event_id in cut_set)


def iter_inclusion_exclusion_terms(cut_sets: Sequence[CutSet]) -> Iterator[Term]:
    """Lazily yield the series terms in increasing combination size.

    Each call starts a fresh series. Nothing beyond the consumed terms is
    materialized, so stopping early costs only what was consumed.
    """
    for size in range(1, len(cut_sets) + 1):
        sign = 1 if size % 2 else -1
        for combo in itertools.combinations(cut_sets, size):
            yield Term(sign, frozenset().union(*combo))


def inclusion_exclusion_terms(
    cut_sets: Sequence[CutSet], nsums: int = DEFAULT_NSUMS
) -> Tuple[List[Term], bool]:
    """Collect at most ``nsums`` series terms.

    Returns:
        ``(terms, truncated)``; ``truncated`` is True if terms were left out.
    """
    if nsums < 1:
        raise ValueError(f"nsums must be at least 1, got {nsums}")
    series = iter_inclusion_exclusion_terms(cut_sets)
    terms = list(itertools.islice(series, nsums))
    truncated = next(series, None) is not None
    return terms, truncated


def prob_or(
    cut_sets: Sequence[CutSet],
    probabilities: Mapping[str, Probability],
    nsums: int = DEFAULT_NSUMS,
) -> float:
    """Probability of the union of ``cut_sets`` by truncated inclusion-exclusion."""
    terms, _ = inclusion_exclusion_terms(cut_sets, nsums)
    return sum(term.sign * prob_and(term.members, probabilities) for term in terms)


def rare_event_probability(
    cut_sets: Sequence[CutSet], probabilities: Mapping[str, Probability]
) -> float:
    """Sum of cut set probabilities; an upper bound of the exact union."""
    return sum(prob_and(cut_set, probabilities) for cut_set in cut_sets)


@dataclass
class ImportanceRecord:
    """Contribution of one basic event to the top event.

    Attributes:
        event_id: Basic event id.
        name: Display name.
        contribution: Sum of the probabilities of cut sets containing it.
        relative: ``contribution`` divided by the top-event probability.
        cut_set_count: Number of cut sets containing it.
    """

    event_id: str
    name: str
    contribution: float
    relative: float
    cut_set_count: int


@dataclass
class ProbabilityAnalysis:
    """Point-estimate probability calculations over one set of cut sets.

    Attributes:
        cut_sets: Minimal cut sets.
        probabilities: Probability of each basic event by id.
        rare_event: Use the rare-event approximation instead of
            inclusion-exclusion.
        nsums: Term budget for inclusion-exclusion.
        names: Display names by id, for importance records.
        truncated: True if the last inclusion-exclusion sum was cut by ``nsums``.
        warnings: Truncation and clamping notices from the last calculation.
    """

    cut_sets: Sequence[CutSet]
    probabilities: Mapping[str, Probability]
    rare_event: bool = False
    nsums: int = DEFAULT_NSUMS
    names: Mapping[str, str] = field(default_factory=dict)
    truncated: bool = False
    warnings: List[str] = field(default_factory=list)

    def prob_and(self, cut_set: Iterable[str]) -> float:
        return prob_and(cut_set, self.probabilities)

    def prob_or(self, cut_sets: Optional[Sequence[CutSet]] = None) -> float:
        """Inclusion-exclusion within the term budget; records truncation."""
        cut_sets = self.cut_sets if cut_sets is None else cut_sets
        terms, truncated = inclusion_exclusion_terms(cut_sets, self.nsums)
        self.truncated = truncated
        if truncated:
            self._warn(
                f"Inclusion-exclusion truncated after {self.nsums} terms for "
                f"{len(cut_sets)} cut sets; the top-event probability is approximate."
            )
        logger.debug(f"Summed {len(terms)} inclusion-exclusion terms")
        return sum(term.sign * self.prob_and(term.members) for term in terms)

    def top_event_probability(self) -> float:
        """Top-event probability in the configured mode, clamped to [0, 1]."""
        if self.rare_event:
            value = rare_event_probability(self.cut_sets, self.probabilities)
            if value > 1:
                self._warn(
                    f"Rare-event approximation gives {value:.6g} > 1; the "
                    "approximation is not valid for these probabilities."
                )
        else:
            value = self.prob_or()
        return self._clamp(value)

    def cut_set_probabilities(self) -> List[Tuple[CutSet, float]]:
        """Cut sets with their probabilities, most probable first."""
        pairs = [(cut_set, self.prob_and(cut_set)) for cut_set in self.cut_sets]
        pairs.sort(key=lambda pair: (-pair[1], len(pair[0]), sorted(pair[0])))
        return pairs

    def importance(self, total: Optional[float] = None) -> List[ImportanceRecord]:
        """Rank basic events by their summed cut set probabilities.

        Args:
            total: Top-event probability used for relative contributions.
                Computed when omitted.
        """
        if total is None:
            total = self.top_event_probability()
        contribution: Dict[str, float] = {}
        counts: Dict[str, int] = {}
        for cut_set in self.cut_sets:
            value = self.prob_and(cut_set)
            for event_id in cut_set:
                contribution[event_id] = contribution.get(event_id, 0.0) + value
                counts[event_id] = counts.get(event_id, 0) + 1

        records = [
            ImportanceRecord(
                event_id=event_id,
                name=self.names.get(event_id, event_id),
                contribution=value,
                relative=value / total if total > 0 else 0.0,
                cut_set_count=counts[event_id],
            )
            for event_id, value in contribution.items()
        ]
        records.sort(key=lambda r: (-r.contribution, r.event_id))
        return records

    def _clamp(self, value: float) -> float:
        clamped = clamp_probability(value)
        if abs(clamped - value) > PROB_EPSILON:
            self._warn(f"Top-event probability {value:.6g} clamped to {clamped}.")
        return clamped

    def _warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)
            logger.warning(message)
