"""Monte Carlo sampling of the top-event probability.

The inclusion-exclusion equation over the minimal cut sets is built once.
Each trial draws one value from every basic event's expression and evaluates
the equation with those values, giving one sample of the top-event
probability. Trials are grouped in fixed-size chunks; each chunk has its own
random stream derived from the master seed and its index, so results do not
depend on the number of threads or on scheduling.

Performance characteristics:
Time complexity: O(T + N * (E + S)), where T is the one-time equation build
(bounded by ``nsums``), N the number of trials, E the number of basic events
and S the total size of the merged equation terms.

Parallelism: trials share the read-only tree, expressions and equation.
Workers only write to the accumulator, which is guarded by a lock.
"""

from __future__ import annotations

import math
import random
import threading
import time
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ftree.analysis.probability import DEFAULT_NSUMS, CutSet, inclusion_exclusion_terms
from ftree.logging import get_logger
from ftree.model.event import BasicEvent
from ftree.model.fault_tree import FaultTree
from ftree.monte_carlo.results import SimulationSummary
from ftree.seed_manager import SeedManager

logger = get_logger(__name__)

#: Trials per chunk; fixed so the random streams do not depend on parallelism.
DEFAULT_CHUNK_SIZE = 1000


@dataclass(frozen=True)
class SimulationEquation:
    """Inclusion-exclusion series with identical terms merged.

    Attributes:
        terms: ``(coefficient, member ids)`` pairs with non-zero coefficient.
        num_series_terms: Number of series terms before merging.
        truncated: True if the series was cut by the term budget.
    """

    terms: Tuple[Tuple[int, Tuple[str, ...]], ...]
    num_series_terms: int
    truncated: bool

    @classmethod
    def build(cls, cut_sets: Sequence[CutSet], nsums: int = DEFAULT_NSUMS) -> "SimulationEquation":
        series, truncated = inclusion_exclusion_terms(cut_sets, nsums)
        merged: Dict[CutSet, int] = defaultdict(int)
        for term in series:
            merged[term.members] += term.sign
        terms = tuple(
            (coefficient, tuple(sorted(members)))
            for members, coefficient in sorted(
                merged.items(), key=lambda item: (len(item[0]), sorted(item[0]))
            )
            if coefficient != 0
        )
        return cls(terms, len(series), truncated)

    @property
    def positive_terms(self) -> List[Tuple[str, ...]]:
        return [members for coefficient, members in self.terms if coefficient > 0]

    @property
    def negative_terms(self) -> List[Tuple[str, ...]]:
        return [members for coefficient, members in self.terms if coefficient < 0]

    def evaluate(self, values: Mapping[str, float]) -> float:
        """Value of the series for the given basic event values."""
        return sum(
            coefficient * math.prod(values[event_id] for event_id in members)
            for coefficient, members in self.terms
        )


class _SampleAccumulator:
    """Running sum and count shared by the workers, plus per-chunk samples."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total = 0.0
        self.count = 0
        self.chunks: Dict[int, np.ndarray] = {}

    def add(self, chunk_index: int, samples: np.ndarray) -> None:
        with self._lock:
            self.total += float(samples.sum())
            self.count += len(samples)
            self.chunks[chunk_index] = samples

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0

    def ordered_samples(self) -> np.ndarray:
        if not self.chunks:
            return np.empty(0)
        return np.concatenate([self.chunks[i] for i in sorted(self.chunks)])


class MonteCarloSimulator:
    """Samples the top-event probability of a tree from its minimal cut sets.

    Attributes:
        tree: Validated fault tree providing the basic events.
        equation: Precomputed inclusion-exclusion equation.
        seed_manager: Derives one seed per chunk.
        chunk_size: Trials per chunk.
    """

    def __init__(
        self,
        tree: FaultTree,
        cut_sets: Sequence[CutSet],
        *,
        nsums: int = DEFAULT_NSUMS,
        seed: Optional[int] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
        self.tree = tree
        self.seed_manager = SeedManager(seed)
        self.chunk_size = chunk_size

        build_start = time.time()
        self.equation = SimulationEquation.build(cut_sets, nsums)
        member_ids = sorted({event_id for cut_set in cut_sets for event_id in cut_set})
        self._events: Dict[str, BasicEvent] = {
            event_id: tree.basic_events[event_id] for event_id in member_ids
        }
        logger.debug(
            f"Built simulation equation: {len(self.equation.terms)} merged terms from "
            f"{self.equation.num_series_terms} series terms in "
            f"{time.time() - build_start:.3f}s"
        )

    def sample_once(self, rng: random.Random) -> float:
        """Run one trial and return its top-event probability sample."""
        memo: Dict[int, float] = {}
        values = {
            event_id: event.sample(rng, memo) for event_id, event in self._events.items()
        }
        return self.equation.evaluate(values)

    def _run_chunk(self, chunk: Tuple[int, int], accumulator: _SampleAccumulator) -> int:
        chunk_index, num_trials = chunk
        rng = self.seed_manager.create_random_state("monte_carlo", "chunk", chunk_index)
        samples = np.fromiter(
            (self.sample_once(rng) for _ in range(num_trials)),
            dtype=float,
            count=num_trials,
        )
        accumulator.add(chunk_index, samples)
        return chunk_index

    def _chunks(self, num_trials: int) -> List[Tuple[int, int]]:
        chunks = []
        for index, start in enumerate(range(0, num_trials, self.chunk_size)):
            chunks.append((index, min(self.chunk_size, num_trials - start)))
        return chunks

    def run(self, num_trials: int, parallelism: int = 1) -> SimulationSummary:
        """Run ``num_trials`` trials and summarize the samples.

        Args:
            num_trials: Number of trials, at least 1.
            parallelism: Worker threads.

        Returns:
            Summary statistics of the sampled top-event probability.
        """
        if num_trials < 1:
            raise ValueError(f"num_trials must be at least 1, got {num_trials}")
        if parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {parallelism}")

        chunks = self._chunks(num_trials)
        accumulator = _SampleAccumulator()
        workers = min(parallelism, len(chunks))
        logger.info(
            f"Running {num_trials} Monte Carlo trials for '{self.tree.name}' in "
            f"{len(chunks)} chunks with {workers} workers"
        )

        start_time = time.time()
        if workers == 1:
            for chunk in chunks:
                self._run_chunk(chunk, accumulator)
        else:
            completed = 0
            with ThreadPoolExecutor(max_workers=workers) as pool:
                for _ in pool.map(lambda c: self._run_chunk(c, accumulator), chunks):
                    completed += 1
                    # Show approx 10% increments
                    step = max(1, len(chunks) // 10)
                    if completed % step == 0:
                        logger.debug(f"Simulation progress: {completed}/{len(chunks)} chunks")

        elapsed = time.time() - start_time
        logger.info(
            f"Simulation completed in {elapsed:.2f}s, mean {accumulator.mean:.6g}"
        )
        return SimulationSummary.from_samples(
            accumulator.ordered_samples(),
            truncated=self.equation.truncated,
        )
