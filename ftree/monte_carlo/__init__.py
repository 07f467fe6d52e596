"""Monte Carlo simulation of the top-event probability.

``MonteCarloSimulator`` samples the basic events' expressions and evaluates
the precomputed inclusion-exclusion equation once per trial;
``SimulationSummary`` holds the resulting statistics.
"""

from .results import SimulationSummary
from .simulation import MonteCarloSimulator, SimulationEquation

__all__ = [
    "MonteCarloSimulator",
    "SimulationEquation",
    "SimulationSummary",
]
