"""Tests for the Monte Carlo simulator and its equation."""

import numpy as np
import pytest

from ftree import FaultTree
from ftree.analysis import generate_cut_sets, prob_or
from ftree.expression import LogNormalDeviate, UniformDeviate
from ftree.monte_carlo import MonteCarloSimulator, SimulationEquation


@pytest.fixture
def uncertain_tree() -> FaultTree:
    return FaultTree.from_declarations(
        "uncertain",
        gates=[("top", "or", ["b1", "b2"])],
        primary_events=[("b1", "basic", UniformDeviate(0.0, 0.2)), ("b2", "basic", 0.2)],
    )


def _simulator(tree, **kwargs):
    return MonteCarloSimulator(tree, generate_cut_sets(tree).cut_sets, **kwargs)


class TestSimulationEquation:
    def test_identical_terms_merged(self):
        sets = [frozenset("ab"), frozenset("ac"), frozenset("bc")]
        equation = SimulationEquation.build(sets)
        assert equation.num_series_terms == 7
        assert equation.terms == (
            (1, ("a", "b")),
            (1, ("a", "c")),
            (1, ("b", "c")),
            (-2, ("a", "b", "c")),
        )
        assert equation.positive_terms == [("a", "b"), ("a", "c"), ("b", "c")]
        assert equation.negative_terms == [("a", "b", "c")]
        assert not equation.truncated

    def test_terms_with_same_members_merge(self):
        sets = [frozenset("ab"), frozenset("b"), frozenset("a")]
        equation = SimulationEquation.build(sets)
        coefficients = {members: c for c, members in equation.terms}
        assert coefficients == {("a",): 1, ("b",): 1, ("a", "b"): 1 - 3 + 1}

    def test_cancelling_terms_dropped(self):
        equation = SimulationEquation.build([frozenset("ab"), frozenset("a")])
        assert equation.terms == ((1, ("a",)),)
        assert equation.num_series_terms == 3

    def test_evaluate_matches_inclusion_exclusion(self):
        sets = [frozenset("ab"), frozenset("ac"), frozenset("bc")]
        values = {"a": 0.1, "b": 0.2, "c": 0.3}
        equation = SimulationEquation.build(sets)
        assert equation.evaluate(values) == pytest.approx(prob_or(sets, values))

    def test_truncated_flag(self):
        sets = [frozenset("a"), frozenset("b"), frozenset("c")]
        assert SimulationEquation.build(sets, nsums=4).truncated


class TestMonteCarloSimulator:
    def test_mean_converges(self, uncertain_tree):
        summary = _simulator(uncertain_tree, seed=2024).run(20000)
        assert summary.num_trials == 20000
        assert summary.mean == pytest.approx(0.28, abs=0.01)
        assert 0.2 <= summary.min <= summary.max <= 0.36 + 1e-12
        assert summary.quantiles[0.05] < summary.quantiles[0.5] < summary.quantiles[0.95]

    def test_constant_probabilities_give_point_estimate(self, or_tree):
        summary = _simulator(or_tree, seed=1).run(500)
        assert summary.mean == pytest.approx(0.28)
        assert summary.std == pytest.approx(0.0, abs=1e-12)

    def test_same_seed_independent_of_parallelism(self, uncertain_tree):
        serial = _simulator(uncertain_tree, seed=11).run(5500, parallelism=1)
        parallel = _simulator(uncertain_tree, seed=11).run(5500, parallelism=4)
        assert np.array_equal(serial.samples, parallel.samples)
        assert serial.mean == parallel.mean

    def test_different_seeds_differ(self, uncertain_tree):
        first = _simulator(uncertain_tree, seed=1).run(1000)
        second = _simulator(uncertain_tree, seed=2).run(1000)
        assert not np.array_equal(first.samples, second.samples)

    def test_chunking(self, or_tree):
        simulator = _simulator(or_tree, seed=0)
        assert simulator._chunks(2500) == [(0, 1000), (1, 1000), (2, 500)]
        assert _simulator(or_tree, chunk_size=7)._chunks(7) == [(0, 7)]

    def test_shared_parameter_sampled_once_per_trial(self):
        """Two events sharing a deviate see the same draw in a trial."""
        shared = LogNormalDeviate(0.01, 3.0, 0.95)
        tree = FaultTree.from_declarations(
            "ccf",
            gates=[("top", "and", ["a", "b"])],
            primary_events=[("a", "basic", shared), ("b", "basic", shared)],
        )
        simulator = _simulator(tree, seed=3)
        summary = simulator.run(200)
        # P(a & b) = x * x for the common draw x
        rng = simulator.seed_manager.create_random_state("monte_carlo", "chunk", 0)
        x = shared.sample(rng, {})
        assert summary.samples[0] == pytest.approx(min(1.0, x) ** 2)

    @pytest.mark.parametrize(
        "num_trials, parallelism, message",
        [(0, 1, "num_trials"), (10, 0, "parallelism")],
    )
    def test_invalid_run_arguments(self, or_tree, num_trials, parallelism, message):
        with pytest.raises(ValueError, match=message):
            _simulator(or_tree).run(num_trials, parallelism)

    def test_invalid_chunk_size(self, or_tree):
        with pytest.raises(ValueError, match="chunk_size"):
            _simulator(or_tree, chunk_size=0)
