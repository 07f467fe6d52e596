"""Summary of Monte Carlo samples of the top-event probability."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np

#: Quantiles reported by default.
DEFAULT_QUANTILES = (0.05, 0.5, 0.95)


@dataclass
class SimulationSummary:
    """Statistics of the sampled top-event probability.

    Attributes:
        num_trials: Number of samples.
        mean: Sample mean; the simulation's estimate.
        std: Sample standard deviation (ddof=1, 0 for a single sample).
        std_error: Standard error of the mean.
        min: Smallest sample.
        max: Largest sample.
        quantiles: Mapping of quantile level to sample quantile.
        truncated: True if the sampled equation was cut by the term budget.
        samples: The raw samples in chunk order.
    """

    num_trials: int
    mean: float
    std: float
    std_error: float
    min: float
    max: float
    quantiles: Dict[float, float] = field(default_factory=dict)
    truncated: bool = False
    samples: np.ndarray = field(default_factory=lambda: np.empty(0), repr=False)

    @classmethod
    def from_samples(
        cls,
        samples: np.ndarray,
        truncated: bool = False,
        quantiles: tuple[float, ...] = DEFAULT_QUANTILES,
    ) -> "SimulationSummary":
        """Summarize an array of samples.

        Raises:
            ValueError: If ``samples`` is empty.
        """
        samples = np.asarray(samples, dtype=float)
        n = len(samples)
        if n == 0:
            raise ValueError("Cannot summarize an empty sample")

        std = float(samples.std(ddof=1)) if n > 1 else 0.0
        return cls(
            num_trials=n,
            mean=float(samples.mean()),
            std=std,
            std_error=std / n**0.5,
            min=float(samples.min()),
            max=float(samples.max()),
            quantiles={q: float(np.quantile(samples, q)) for q in quantiles},
            truncated=truncated,
            samples=samples,
        )

    @property
    def variance(self) -> float:
        return self.std**2

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable representation without the raw samples."""
        return {
            "num_trials": self.num_trials,
            "mean": self.mean,
            "std": self.std,
            "std_error": self.std_error,
            "min": self.min,
            "max": self.max,
            "quantiles": {str(q): v for q, v in self.quantiles.items()},
            "truncated": self.truncated,
        }
