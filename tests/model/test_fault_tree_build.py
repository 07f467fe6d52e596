"""Tests for incremental fault tree construction and validation."""

import pytest

from ftree import FaultTree
from ftree.exceptions import (
    CycleDetected,
    DanglingGate,
    DuplicateDefinition,
    UndefinedNode,
    ValidationError,
)
from ftree.model import BasicEvent, Gate, HouseEvent


class TestAddGate:
    def test_first_gate_is_top(self):
        tree = FaultTree("t")
        top = Gate("Top", "or", ["a", "b"])
        tree.add_gate(top)
        assert tree.top_event is top
        assert tree.top_event_id == "top"
        assert tree.inter_events == {}
        assert not tree.is_validated

    def test_no_top_event(self):
        with pytest.raises(ValidationError, match="has no top event"):
            FaultTree("empty").top_event

    def test_child_gate_registered(self):
        tree = FaultTree("t")
        tree.add_gate(Gate("top", "or", ["g1", "b"]))
        g1 = Gate("g1", "and", ["a", "b"])
        tree.add_gate(g1)
        assert tree.inter_events == {"g1": g1}
        assert set(tree.gates) == {"top", "g1"}

    def test_duplicate_gate(self):
        tree = FaultTree("t")
        tree.add_gate(Gate("top", "or", ["g1", "b"]))
        tree.add_gate(Gate("g1", "and", ["a", "b"]))
        with pytest.raises(DuplicateDefinition) as exc_info:
            tree.add_gate(tree.inter_events["g1"])
        assert exc_info.value.node_id == "g1"
        assert exc_info.value.tree_name == "t"

    def test_dangling_gate_without_parent(self):
        tree = FaultTree("t")
        tree.add_gate(Gate("top", "or", ["a", "b"]))
        with pytest.raises(DanglingGate, match="no gate lists it"):
            tree.add_gate(Gate("orphan", "and", ["a", "b"]))

    def test_dangling_gate_parent_not_yet_in_tree(self):
        with pytest.raises(DanglingGate, match="no pre-declared parent"):
            FaultTree.from_declarations(
                "t",
                gates=[
                    ("top", "or", ["g1", "a"]),
                    ("g2", "and", ["a", "b"]),
                    ("g1", "or", ["g2", "b"]),
                ],
                primary_events=[("a", "basic", 0.1), ("b", "basic", 0.2)],
            )

    def test_duplicate_declaration(self):
        with pytest.raises(DuplicateDefinition):
            FaultTree.from_declarations(
                "t",
                gates=[("top", "or", ["a", "b"]), ("TOP", "and", ["a", "b"])],
                primary_events=[("a", "basic", 0.1), ("b", "basic", 0.2)],
            )


class TestValidate:
    def test_collects_primary_events(self, shared_tree):
        assert shared_tree.is_validated
        assert set(shared_tree.basic_events) == {"a", "b", "c"}
        assert shared_tree.house_events == {}
        assert set(shared_tree.primary_events) == {"a", "b", "c"}
        assert shared_tree.warnings == []

    def test_house_events_collected(self):
        tree = FaultTree.from_declarations(
            "t",
            gates=[("top", "and", ["a", "h"])],
            primary_events=[("a", "basic", 0.1), ("h", "house", True)],
        )
        assert set(tree.house_events) == {"h"}
        assert isinstance(tree.primary_events["h"], HouseEvent)

    def test_unreferenced_primary_events_ignored(self):
        tree = FaultTree.from_declarations(
            "t",
            gates=[("top", "or", ["a", "b"])],
            primary_events=[
                ("a", "basic", 0.1),
                ("b", "basic", 0.2),
                ("unused", "basic", 0.3),
            ],
        )
        assert "unused" not in tree.basic_events

    def test_implicit_gate(self):
        tree = FaultTree("t")
        top = Gate("top", "or", ["g1", "b"])
        g1 = Gate("G1", "and", ["a", "b"])
        tree.graph.add(g1)
        tree.add_primary_event(BasicEvent("a", 0.1))
        tree.add_primary_event(BasicEvent("b", 0.2))
        tree.add_gate(top)
        tree.validate()

        assert tree.implicit_gates == {"g1": g1}
        assert "g1" in tree.inter_events
        assert set(tree.basic_events) == {"a", "b"}

    def test_undefined_child(self):
        with pytest.raises(UndefinedNode) as exc_info:
            FaultTree.from_declarations(
                "T",
                gates=[("top", "or", ["b1", "Missing"])],
                primary_events=[("b1", "basic", 0.1)],
            )
        assert exc_info.value.node_id == "missing"
        assert str(exc_info.value) == "Node with id 'missing' was not defined in 'T' tree."

    def test_cycle(self):
        with pytest.raises(CycleDetected) as exc_info:
            FaultTree.from_declarations(
                "cyc",
                gates=[
                    ("top", "or", ["A", "x"]),
                    ("A", "and", ["B", "x"]),
                    ("B", "or", ["A", "y"]),
                ],
                primary_events=[("x", "basic", 0.1), ("y", "basic", 0.1)],
            )
        assert exc_info.value.path == ["A", "B", "A"]
        assert "A->B->A" in str(exc_info.value)

    def test_cycle_through_top(self):
        with pytest.raises(CycleDetected) as exc_info:
            FaultTree.from_declarations(
                "cyc",
                gates=[("Top", "or", ["G", "x"]), ("G", "and", ["Top", "x"])],
                primary_events=[("x", "basic", 0.1)],
            )
        assert exc_info.value.path == ["Top", "G", "Top"]

    def test_degenerate_gates_warn(self):
        tree = FaultTree.from_declarations(
            "t",
            gates=[("top", "or", ["g"]), ("g", "atleast", ["a", "b", "c"], 1)],
            primary_events=[("a", "basic", 0.1), ("b", "basic", 0.1), ("c", "basic", 0.1)],
        )
        assert len(tree.warnings) == 2
        assert "expected at least 2" in tree.warnings[1]
        assert "reduces to an OR gate" in tree.warnings[0]
        assert tree.is_validated

    def test_revalidation_after_change(self, or_tree):
        or_tree.add_primary_event(BasicEvent("b3", 0.3))
        assert not or_tree.is_validated
        or_tree.validate()
        assert or_tree.is_validated

    def test_repr(self, or_tree):
        assert "or_tree" in repr(or_tree)
