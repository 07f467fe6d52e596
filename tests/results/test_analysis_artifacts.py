"""Tests for analysis result artifacts."""

import json

import pandas as pd
import pytest

from ftree import AnalysisConfig, analyze
from ftree.results import AnalysisResult, CutSetRecord


class TestCutSetRecord:
    def test_order_and_dict(self):
        record = CutSetRecord(("a", "b"), ("A", "B"), 0.02)
        assert record.order == 2
        assert record.to_dict() == {"events": ["A", "B"], "order": 2, "probability": 0.02}

    def test_frozen(self):
        record = CutSetRecord(("a",), ("A",))
        with pytest.raises(AttributeError):
            record.probability = 0.5  # type: ignore[misc]


class TestAnalysisResult:
    def test_empty_result(self):
        result = AnalysisResult("t", "TOP", [], limit_order=3)
        assert result.max_order == 0
        assert result.is_exact
        assert result.cut_sets_dataframe().empty
        assert list(result.importance_dataframe().columns) == [
            "event",
            "contribution",
            "relative",
            "cut_sets",
        ]

    def test_to_dict_round_trips_through_json(self, shared_tree):
        config = AnalysisConfig(compute_bounds=True, num_trials=1000, seed=5)
        data = json.loads(json.dumps(analyze(shared_tree, config).to_dict()))
        assert data["tree"] == "shared_tree"
        assert data["top_event"] == "TOP"
        assert data["max_order"] == 2
        assert data["probability"] == pytest.approx(0.154)
        assert data["bounds"] == pytest.approx([0.154, 0.154])
        assert data["cut_sets"][0] == {"events": ["A"], "order": 1, "probability": 0.1}
        assert data["importance"][0]["event"] == "A"
        assert data["simulation"]["num_trials"] == 1000

    def test_cut_sets_dataframe(self, shared_tree):
        frame = analyze(shared_tree).cut_sets_dataframe()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame["events"]) == ["A", "B * C"]
        assert list(frame["order"]) == [1, 2]
        assert frame["probability"].tolist() == pytest.approx([0.1, 0.06])

    def test_importance_dataframe(self, or_tree):
        frame = analyze(or_tree).importance_dataframe()
        assert list(frame["event"]) == ["B2", "B1"]
        assert frame["relative"].iloc[0] == pytest.approx(0.2 / 0.28)
        assert frame["cut_sets"].tolist() == [1, 1]

    def test_is_exact_flags(self):
        assert not AnalysisResult("t", "T", [], 1, truncated_order=True).is_exact
        assert not AnalysisResult("t", "T", [], 1, truncated_terms=True).is_exact
        assert not AnalysisResult("t", "T", [], 1, rare_event=True).is_exact
