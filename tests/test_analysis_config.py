"""Tests for AnalysisConfig defaults, validation and loading."""

import pytest

from ftree.config import DEFAULT_CONFIG, AnalysisConfig


def test_defaults():
    """Defaults match the documented limits and modes."""
    config = AnalysisConfig()
    assert config.limit_order == 20
    assert config.nsums == 1_000_000
    assert config.rare_event is False
    assert config.probability is True
    assert config.num_trials == 0
    assert config.parallelism == 1
    assert config.seed is None
    assert DEFAULT_CONFIG == config


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit_order": 0},
        {"nsums": 0},
        {"num_trials": -1},
        {"parallelism": 0},
        {"num_trials": 10, "probability": False},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        AnalysisConfig(**kwargs)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="Unrecognized analysis settings: bogus"):
        AnalysisConfig.from_dict({"limit_order": 3, "bogus": 1})


def test_from_yaml():
    config = AnalysisConfig.from_yaml(
        """
        limit_order: 4
        nsums: 100
        rare_event: true
        num_trials: 500
        seed: 11
        """
    )
    assert config.limit_order == 4
    assert config.nsums == 100
    assert config.rare_event is True
    assert config.num_trials == 500
    assert config.seed == 11
    assert AnalysisConfig.from_dict(config.to_dict()) == config


def test_from_yaml_empty_and_non_mapping():
    assert AnalysisConfig.from_yaml("") == AnalysisConfig()
    with pytest.raises(ValueError, match="must map to a dictionary"):
        AnalysisConfig.from_yaml("- 1\n- 2\n")


def test_from_yaml_boolean_keys_are_rejected_as_names():
    """YAML 1.1 boolean keys become strings and are reported as unknown."""
    with pytest.raises(ValueError, match="Unrecognized analysis settings: True"):
        AnalysisConfig.from_yaml("yes: 1\n")
