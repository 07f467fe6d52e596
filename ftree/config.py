"""Configuration of a fault tree analysis run."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Optional

import yaml

from ftree.utils.yaml_utils import normalize_yaml_dict_keys


@dataclass
class AnalysisConfig:
    """Settings for cut-set generation, probability and simulation.

    Attributes:
        limit_order: Largest cut set size kept. Larger sets are dropped and
            the results become "minimal cut sets up to this order".
        nsums: Budget of inclusion-exclusion terms, shared by the exact
            probability and the simulation equation.
        rare_event: Use the rare-event approximation for the top event.
        probability: Compute probabilities (otherwise cut sets only).
        importance: Rank basic events by contribution.
        compute_bounds: Also compute the top-event probability with every
            basic event at its low and at its high value.
        num_trials: Monte Carlo trials; 0 disables simulation.
        parallelism: Worker threads for the simulation.
        seed: Master seed for reproducible simulation.
    """

    limit_order: int = 20
    nsums: int = 1_000_000
    rare_event: bool = False
    probability: bool = True
    importance: bool = True
    compute_bounds: bool = False
    num_trials: int = 0
    parallelism: int = 1
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.limit_order < 1:
            raise ValueError(f"limit_order must be at least 1, got {self.limit_order}")
        if self.nsums < 1:
            raise ValueError(f"nsums must be at least 1, got {self.nsums}")
        if self.num_trials < 0:
            raise ValueError(f"num_trials must be non-negative, got {self.num_trials}")
        if self.parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {self.parallelism}")
        if self.num_trials and not self.probability:
            raise ValueError("Simulation requires probability analysis to be enabled")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unrecognized analysis settings: {', '.join(unknown)}. "
                f"Valid settings are: {', '.join(sorted(known))}"
            )
        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "AnalysisConfig":
        """Build a config from a YAML mapping of settings."""
        data = yaml.safe_load(yaml_str)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("Analysis settings YAML must map to a dictionary at top-level.")
        return cls.from_dict(normalize_yaml_dict_keys(data))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Global default configuration instance
DEFAULT_CONFIG = AnalysisConfig()
