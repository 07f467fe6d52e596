"""Failure models described with exponential formulas.

All rates are hourly and all times are in hours. Each model is a closed-form
function of its arguments; the four value paths (mean, low, high, sample)
only differ in which value of each argument they feed into the formula.

Validation only checks best estimates, so a bound or a draw of an uncertain
parameter can fall outside its domain (a negative rate, a non-positive
Weibull scale or test interval). The formulas clip such values to the
nearest meaningful limit instead of failing mid-simulation.
"""

from __future__ import annotations

import itertools
import math
import random

from ftree.expression.base import Expression, SampleMemo, _require, as_expression
from ftree.types.base import ExpressionKind


def _exp_cdf(rate: float, time: float) -> float:
    return -math.expm1(-max(rate, 0.0) * max(time, 0.0))


class ExponentialExpression(Expression):
    """Negative exponential failure: ``1 - exp(-lambda * t)``.

    Increasing in both the rate and the time, so the bounds combine the
    arguments' lows and highs directly.
    """

    kind = ExpressionKind.EXPONENTIAL

    def __init__(self, rate: "Expression | float", time: "Expression | float") -> None:
        self.rate = as_expression(rate)
        self.time = as_expression(time)
        super().__init__(self.rate, self.time)

    def check(self) -> None:
        _require(self.rate.mean() >= 0, f"Exponential: negative failure rate ({self.rate.mean()}).")
        _require(self.time.mean() >= 0, f"Exponential: negative mission time ({self.time.mean()}).")

    def mean(self) -> float:
        return _exp_cdf(self.rate.mean(), self.time.mean())

    def low(self) -> float:
        return _exp_cdf(self.rate.low(), self.time.low())

    def high(self) -> float:
        return _exp_cdf(self.rate.high(), self.time.high())

    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        return _exp_cdf(self.rate.sample(rng, memo), self.time.sample(rng, memo))


class GlmExpression(Expression):
    """Exponential with failure on demand and repair.

    ``(lambda - (lambda - gamma * (lambda + mu)) * exp(-(lambda + mu) * t)) / (lambda + mu)``

    The formula is increasing in ``gamma`` but not monotone in the rates, so
    the bounds are the extremes over the corners of the argument box.
    """

    kind = ExpressionKind.GLM

    def __init__(
        self,
        gamma: "Expression | float",
        rate: "Expression | float",
        repair_rate: "Expression | float",
        time: "Expression | float",
    ) -> None:
        self.gamma = as_expression(gamma)
        self.rate = as_expression(rate)
        self.repair_rate = as_expression(repair_rate)
        self.time = as_expression(time)
        super().__init__(self.gamma, self.rate, self.repair_rate, self.time)

    def check(self) -> None:
        gamma = self.gamma.mean()
        _require(0 <= gamma <= 1, f"GLM: demand failure probability out of [0, 1] ({gamma}).")
        _require(self.rate.mean() >= 0, f"GLM: negative failure rate ({self.rate.mean()}).")
        _require(
            self.repair_rate.mean() >= 0,
            f"GLM: negative repair rate ({self.repair_rate.mean()}).",
        )
        _require(self.time.mean() >= 0, f"GLM: negative mission time ({self.time.mean()}).")

    @staticmethod
    def compute(gamma: float, rate: float, repair_rate: float, time: float) -> float:
        """Evaluate the GLM formula for plain numbers."""
        gamma = min(1.0, max(0.0, gamma))
        rate, repair_rate = max(rate, 0.0), max(repair_rate, 0.0)
        time = max(time, 0.0)
        total = rate + repair_rate
        if total == 0:
            return gamma
        return (rate - (rate - gamma * total) * math.exp(-total * time)) / total

    def mean(self) -> float:
        return self.compute(
            self.gamma.mean(), self.rate.mean(), self.repair_rate.mean(), self.time.mean()
        )

    def _corner_values(self) -> list[float]:
        ranges = [(arg.low(), arg.high()) for arg in self.args]
        return [self.compute(*corner) for corner in itertools.product(*ranges)]

    def low(self) -> float:
        return max(0.0, min(self._corner_values()))

    def high(self) -> float:
        return min(1.0, max(self._corner_values()))

    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        return self.compute(*(arg.sample(rng, memo) for arg in self.args))


class WeibullExpression(Expression):
    """Weibull failure with scale ``alpha``, shape ``beta`` and time shift ``t0``.

    ``1 - exp(-((t - t0) / alpha) ** beta)`` for ``t > t0``, zero before.
    """

    kind = ExpressionKind.WEIBULL

    def __init__(
        self,
        scale: "Expression | float",
        shape: "Expression | float",
        time_shift: "Expression | float",
        time: "Expression | float",
    ) -> None:
        self.scale = as_expression(scale)
        self.shape = as_expression(shape)
        self.time_shift = as_expression(time_shift)
        self.time = as_expression(time)
        super().__init__(self.scale, self.shape, self.time_shift, self.time)

    def check(self) -> None:
        _require(self.scale.mean() > 0, f"Weibull: scale must be positive ({self.scale.mean()}).")
        _require(self.shape.mean() > 0, f"Weibull: shape must be positive ({self.shape.mean()}).")
        _require(
            self.time_shift.mean() >= 0,
            f"Weibull: negative time shift ({self.time_shift.mean()}).",
        )
        _require(self.time.mean() >= 0, f"Weibull: negative mission time ({self.time.mean()}).")

    @staticmethod
    def compute(scale: float, shape: float, time_shift: float, time: float) -> float:
        """Evaluate the Weibull formula for plain numbers."""
        if time <= time_shift:
            return 0.0
        if scale <= 0:
            # Limit of a vanishing characteristic life
            return 1.0
        try:
            hazard = ((time - time_shift) / scale) ** shape
        except OverflowError:
            return 1.0
        return -math.expm1(-hazard)

    def mean(self) -> float:
        return self.compute(
            self.scale.mean(), self.shape.mean(), self.time_shift.mean(), self.time.mean()
        )

    def low(self) -> float:
        return self.compute(
            self.scale.high(), self.shape.low(), self.time_shift.high(), self.time.low()
        )

    def high(self) -> float:
        return self.compute(
            self.scale.low(), self.shape.high(), self.time_shift.low(), self.time.high()
        )

    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        return self.compute(*(arg.sample(rng, memo) for arg in self.args))


class PeriodicTest(Expression):
    """Periodically tested component: deploy, test, function.

    The component fails at ``rate`` while functioning. The first test happens
    at ``theta`` and then every ``tau`` hours. Tests are instantaneous and
    always detect a failure.

    Without ``repair_rate`` repairs are instantaneous too, so the component
    is as good as new after every test. With ``repair_rate`` a failure found
    at a test is repaired at that rate, and the unavailability carried into
    each test follows a geometric recurrence solved in closed form.

    The repair flavor is fixed when the expression is created.
    """

    kind = ExpressionKind.PERIODIC_TEST

    def __init__(
        self,
        rate: "Expression | float",
        tau: "Expression | float",
        theta: "Expression | float",
        time: "Expression | float",
        repair_rate: "Expression | float | None" = None,
    ) -> None:
        self.rate = as_expression(rate)
        self.tau = as_expression(tau)
        self.theta = as_expression(theta)
        self.time = as_expression(time)
        self.repair_rate = None if repair_rate is None else as_expression(repair_rate)
        args = [self.rate, self.tau, self.theta, self.time]
        if self.repair_rate is not None:
            args.insert(1, self.repair_rate)
        super().__init__(*args)

    @property
    def instant_repair(self) -> bool:
        """True if repairs take no time."""
        return self.repair_rate is None

    def check(self) -> None:
        _require(self.rate.mean() >= 0, f"Periodic test: negative failure rate ({self.rate.mean()}).")
        _require(
            self.tau.mean() > 0,
            f"Periodic test: time between tests must be positive ({self.tau.mean()}).",
        )
        _require(
            self.theta.mean() >= 0,
            f"Periodic test: negative time before the first test ({self.theta.mean()}).",
        )
        _require(self.time.mean() >= 0, f"Periodic test: negative mission time ({self.time.mean()}).")
        if self.repair_rate is not None:
            _require(
                self.repair_rate.mean() >= 0,
                f"Periodic test: negative repair rate ({self.repair_rate.mean()}).",
            )

    @staticmethod
    def compute_instant_repair(rate: float, tau: float, theta: float, time: float) -> float:
        """Unavailability when tests and repairs are instantaneous."""
        if time <= theta:
            return _exp_cdf(rate, time)
        if tau <= 0:
            # Continuous testing renews the component at every instant
            return 0.0
        since_test = math.fmod(time - theta, tau)
        return _exp_cdf(rate, since_test)

    @staticmethod
    def _unavailable_after_detection(rate: float, repair_rate: float, elapsed: float) -> float:
        """Probability of being down ``elapsed`` hours after a failure was found."""
        if repair_rate == rate:
            return 1 - repair_rate * elapsed * math.exp(-rate * elapsed)
        return 1 - repair_rate * (
            math.exp(-rate * elapsed) - math.exp(-repair_rate * elapsed)
        ) / (repair_rate - rate)

    @classmethod
    def compute_instant_test(
        cls, rate: float, repair_rate: float, tau: float, theta: float, time: float
    ) -> float:
        """Unavailability when tests are instantaneous but repairs are not."""
        rate, repair_rate = max(rate, 0.0), max(repair_rate, 0.0)
        if time <= theta:
            return _exp_cdf(rate, time)
        if tau <= 0:
            # Continuous testing: failures are found at once and repaired at
            # repair_rate, a two-state process started at the first test
            return GlmExpression.compute(
                _exp_cdf(rate, theta), rate, repair_rate, time - theta
            )
        delta = time - theta
        num_intervals = math.floor(delta / tau)
        since_test = delta - num_intervals * tau

        # q[n+1] = a * q[n] + b, q[1] being the unavailability at the first test
        fail_in_interval = _exp_cdf(rate, tau)
        a = cls._unavailable_after_detection(rate, repair_rate, tau) - fail_in_interval
        first = _exp_cdf(rate, theta)
        if a >= 1:
            at_last_test = first
        else:
            steady = fail_in_interval / (1 - a)
            at_last_test = steady + a**num_intervals * (first - steady)

        return at_last_test * cls._unavailable_after_detection(
            rate, repair_rate, since_test
        ) + (1 - at_last_test) * _exp_cdf(rate, since_test)

    def _compute(self, values: list[float]) -> float:
        if self.instant_repair:
            return self.compute_instant_repair(*values)
        return self.compute_instant_test(*values)

    def mean(self) -> float:
        return self._compute([arg.mean() for arg in self.args])

    def low(self) -> float:
        return 0.0

    def high(self) -> float:
        if not self.instant_repair:
            return 1.0
        # Time since the last renewal never exceeds max(theta, tau) nor t
        longest = min(self.time.high(), max(self.theta.high(), self.tau.high()))
        return _exp_cdf(self.rate.high(), longest)

    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        return self._compute([arg.sample(rng, memo) for arg in self.args])
