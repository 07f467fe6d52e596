"""Tests for minimal cut set generation."""

import pytest

from ftree import FaultTree
from ftree.analysis import CutSetGenerator, Superset, generate_cut_sets, minimize_cut_sets


def _sets(*members):
    return [frozenset(m) for m in members]


class TestMinimizeCutSets:
    def test_removes_supersets_and_duplicates(self):
        result = minimize_cut_sets(_sets("abc", "ab", "ab", "d", "bd"))
        assert result == _sets("d", "ab")

    def test_empty_set_absorbs_everything(self):
        assert minimize_cut_sets(_sets("", "a", "bc")) == [frozenset()]

    def test_ordering_by_size_then_members(self):
        assert minimize_cut_sets(_sets("cd", "b", "ab", "a")) == _sets("a", "b", "cd")


class TestCutSetGenerator:
    def test_or_tree(self, or_tree):
        result = generate_cut_sets(or_tree)
        assert result.cut_sets == _sets(["b1"], ["b2"])
        assert not result.truncated
        assert result.warnings == []
        assert result.max_order == 1
        assert len(result) == 2

    def test_shared_subgraph(self, shared_tree):
        assert generate_cut_sets(shared_tree).cut_sets == _sets("a", "bc")

    def test_non_minimal_branch_removed(self):
        tree = FaultTree.from_declarations(
            "t",
            gates=[
                ("top", "or", ["g1", "g2"]),
                ("g1", "and", ["a", "b"]),
                ("g2", "and", ["a", "b", "c"]),
            ],
            primary_events=[(x, "basic", 0.1) for x in "abc"],
        )
        assert generate_cut_sets(tree).cut_sets == _sets("ab")

    def test_atleast_gate(self):
        tree = FaultTree.from_declarations(
            "t",
            gates=[("top", "atleast", ["a", "b", "c"], 2)],
            primary_events=[(x, "basic", 0.1) for x in "abc"],
        )
        assert generate_cut_sets(tree).cut_sets == _sets("ab", "ac", "bc")

    def test_limit_order_discards_and_warns(self, deep_tree, caplog):
        result = generate_cut_sets(deep_tree, limit_order=2)
        assert result.cut_sets == _sets("x")
        assert result.truncated
        assert result.discarded == 1
        assert len(result.warnings) == 1
        assert "up to order 2" in result.warnings[0]
        assert "up to order 2" in caplog.text

    def test_dropped_set_covered_by_kept_set_is_not_reported(self, caplog):
        """{a, b, c} is dropped at order 2 but {a} would have absorbed it anyway."""
        tree = FaultTree.from_declarations(
            "t",
            gates=[("top", "or", ["a", "g"]), ("g", "and", ["a", "b", "c"])],
            primary_events=[(x, "basic", 0.1) for x in "abc"],
        )
        result = generate_cut_sets(tree, limit_order=2)
        assert result.cut_sets == _sets("a")
        assert result.discarded == 0
        assert not result.truncated
        assert result.warnings == []
        assert "discarded" not in caplog.text

    def test_only_uncovered_dropped_sets_are_counted(self):
        tree = FaultTree.from_declarations(
            "t",
            gates=[
                ("top", "or", ["a", "g1", "g2"]),
                ("g1", "and", ["a", "b", "c"]),
                ("g2", "and", ["d", "e", "f"]),
            ],
            primary_events=[(x, "basic", 0.1) for x in "abcdef"],
        )
        result = generate_cut_sets(tree, limit_order=2)
        assert result.cut_sets == _sets("a")
        assert result.discarded == 1
        assert result.truncated

    def test_limit_order_keeps_sets_at_limit(self, deep_tree):
        result = generate_cut_sets(deep_tree, limit_order=3)
        assert result.cut_sets == _sets("x", "wyz")
        assert not result.truncated

    def test_invalid_limit_order(self, or_tree):
        with pytest.raises(ValueError, match="limit_order"):
            CutSetGenerator(or_tree, limit_order=0)

    def test_validates_tree_if_needed(self):
        tree = FaultTree.from_declarations(
            "t",
            gates=[("top", "or", ["a", "b"])],
            primary_events=[("a", "basic", 0.1), ("b", "basic", 0.2)],
            validate=False,
        )
        assert not tree.is_validated
        assert len(generate_cut_sets(tree)) == 2
        assert tree.is_validated

    def test_expand_sets_appends(self, shared_tree):
        generator = CutSetGenerator(shared_tree)
        out = [Superset(["z"])]
        generator.expand_sets(shared_tree.gates["g1"], out)
        assert [s.to_frozenset() for s in out] == _sets("z", "a", "b")

    def test_wide_and_of_ors(self):
        """An AND of k two-way ORs has 2**k minimal cut sets of order k."""
        k = 6
        gates = [("top", "and", [f"g{i}" for i in range(k)])]
        gates += [(f"g{i}", "or", [f"x{i}", f"y{i}"]) for i in range(k)]
        events = [(f"{p}{i}", "basic", 0.1) for i in range(k) for p in "xy"]
        tree = FaultTree.from_declarations("wide", gates, events)
        result = generate_cut_sets(tree)
        assert len(result) == 2**k
        assert {len(s) for s in result.cut_sets} == {k}


class TestHouseEvents:
    @pytest.mark.parametrize(
        "gate_type, state, expected",
        [
            ("and", True, [frozenset({"a"})]),
            ("and", False, []),
            ("or", True, [frozenset()]),
            ("or", False, [frozenset({"a"})]),
        ],
    )
    def test_folding(self, gate_type, state, expected):
        tree = FaultTree.from_declarations(
            "t",
            gates=[("top", gate_type, ["a", "h"])],
            primary_events=[("a", "basic", 0.1), ("h", "house", state)],
        )
        assert generate_cut_sets(tree).cut_sets == expected

    def test_false_house_removes_branch(self):
        tree = FaultTree.from_declarations(
            "t",
            gates=[("top", "or", ["g", "b"]), ("g", "and", ["a", "h"])],
            primary_events=[("a", "basic", 0.1), ("b", "basic", 0.1), ("h", "house", False)],
        )
        assert generate_cut_sets(tree).cut_sets == _sets("b")
