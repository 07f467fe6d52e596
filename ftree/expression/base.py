"""Expression contract and parameter deviates.

An expression produces a scalar four ways: a best estimate (``mean``), a low
and a high bound, and one stochastic draw (``sample``). Composite expressions
compute all four from the corresponding values of their arguments.

Sampling is memoized per trial: the caller passes one ``memo`` dict for the
whole trial so that an expression shared by several events is drawn once and
every consumer sees the same value. The memo lives with the caller, so
expression trees stay immutable and may be sampled from several threads.
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from statistics import NormalDist
from typing import Dict, Optional, Tuple

from ftree.exceptions import InvalidArgument
from ftree.types.base import ExpressionKind

#: Per-trial memo mapping ``id(expression)`` to its sampled value.
SampleMemo = Dict[int, float]


class Expression(ABC):
    """Base class for expression nodes.

    Subclasses implement ``mean``, ``_sample`` and, where the domain is
    restricted, ``check``. The default ``low``/``high`` return the mean, which
    is right for constants and must be overridden by anything uncertain.
    """

    kind: ExpressionKind

    def __init__(self, *args: "Expression") -> None:
        self._args: Tuple[Expression, ...] = tuple(args)

    @property
    def args(self) -> Tuple["Expression", ...]:
        """Argument expressions in declaration order."""
        return self._args

    @abstractmethod
    def mean(self) -> float:
        """Best estimate of the value."""

    def low(self) -> float:
        """Lower bound of the value."""
        return self.mean()

    def high(self) -> float:
        """Upper bound of the value."""
        return self.mean()

    def check(self) -> None:
        """Check this node's own arguments. Raises ``InvalidArgument``."""

    def validate(self) -> None:
        """Check every node of the expression tree, arguments first.

        Raises:
            InvalidArgument: A parameter's best estimate is outside its domain.
        """
        for arg in self._args:
            arg.validate()
        self.check()

    def sample(self, rng: random.Random, memo: Optional[SampleMemo] = None) -> float:
        """Draw one value, reusing the draw already made in this trial.

        Args:
            rng: Random source for the trial.
            memo: Per-trial memo. A fresh one is used when omitted.

        Returns:
            The sampled value.
        """
        if memo is None:
            memo = {}
        key = id(self)
        value = memo.get(key)
        if value is None:
            value = self._sample(rng, memo)
            memo[key] = value
        return value

    @abstractmethod
    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        """Draw a new value. Arguments are sampled through ``sample``."""

    def is_constant(self) -> bool:
        """Return True if the value has no uncertainty."""
        return all(arg.is_constant() for arg in self._args) and self._args != ()

    def __repr__(self) -> str:
        inner = ", ".join(repr(arg) for arg in self._args)
        return f"{type(self).__name__}({inner})"


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise InvalidArgument(message)


class ConstantExpression(Expression):
    """A literal value."""

    kind = ExpressionKind.CONSTANT

    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = float(value)

    def mean(self) -> float:
        return self.value

    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        return self.value

    def is_constant(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"ConstantExpression({self.value!r})"


def as_expression(value: "Expression | float | int") -> Expression:
    """Wrap a number into a ``ConstantExpression``; pass expressions through."""
    if isinstance(value, Expression):
        return value
    return ConstantExpression(value)


class UniformDeviate(Expression):
    """Uniform distribution over ``[minimum, maximum]``."""

    kind = ExpressionKind.UNIFORM

    def __init__(self, minimum: "Expression | float", maximum: "Expression | float"):
        self.minimum = as_expression(minimum)
        self.maximum = as_expression(maximum)
        super().__init__(self.minimum, self.maximum)

    def check(self) -> None:
        _require(
            self.minimum.mean() < self.maximum.mean(),
            "Uniform deviate: min must be less than max "
            f"({self.minimum.mean()} >= {self.maximum.mean()}).",
        )

    def mean(self) -> float:
        return (self.minimum.mean() + self.maximum.mean()) / 2

    def low(self) -> float:
        return self.minimum.low()

    def high(self) -> float:
        return self.maximum.high()

    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        return rng.uniform(self.minimum.sample(rng, memo), self.maximum.sample(rng, memo))

    def is_constant(self) -> bool:
        return False


class NormalDeviate(Expression):
    """Normal distribution; bounds are taken at six standard deviations."""

    kind = ExpressionKind.NORMAL

    def __init__(self, mean: "Expression | float", sigma: "Expression | float"):
        self.mu = as_expression(mean)
        self.sigma = as_expression(sigma)
        super().__init__(self.mu, self.sigma)

    def check(self) -> None:
        _require(
            self.sigma.mean() > 0,
            f"Normal deviate: standard deviation must be positive ({self.sigma.mean()}).",
        )

    def mean(self) -> float:
        return self.mu.mean()

    def low(self) -> float:
        return self.mu.low() - 6 * self.sigma.high()

    def high(self) -> float:
        return self.mu.high() + 6 * self.sigma.high()

    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        return rng.gauss(self.mu.sample(rng, memo), self.sigma.sample(rng, memo))

    def is_constant(self) -> bool:
        return False


class LogNormalDeviate(Expression):
    """Log-normal distribution given by its mean and error factor.

    The error factor is the ratio of the ``level`` quantile to the median,
    which fixes the log-space standard deviation. The upper bound is the
    99.9th percentile; the lower bound is zero.
    """

    kind = ExpressionKind.LOGNORMAL

    #: Quantile used as the upper bound.
    HIGH_QUANTILE = 0.999

    def __init__(
        self,
        mean: "Expression | float",
        error_factor: "Expression | float",
        level: "Expression | float" = 0.95,
    ) -> None:
        self.mu = as_expression(mean)
        self.error_factor = as_expression(error_factor)
        self.level = as_expression(level)
        super().__init__(self.mu, self.error_factor, self.level)

    def check(self) -> None:
        _require(self.mu.mean() > 0, f"Log-normal deviate: mean must be positive ({self.mu.mean()}).")
        _require(
            self.error_factor.mean() > 1,
            f"Log-normal deviate: error factor must be greater than 1 ({self.error_factor.mean()}).",
        )
        _require(
            0.5 < self.level.mean() < 1,
            f"Log-normal deviate: confidence level must be in (0.5, 1) ({self.level.mean()}).",
        )

    @staticmethod
    def _log_params(mean: float, error_factor: float, level: float) -> Tuple[float, float]:
        """Log-space location and scale. Parameters off their domain give sigma 0."""
        if error_factor <= 1 or not 0.5 < level < 1:
            return math.log(mean), 0.0
        sigma = math.log(error_factor) / NormalDist().inv_cdf(level)
        mu = math.log(mean) - sigma * sigma / 2
        return mu, sigma

    def mean(self) -> float:
        return self.mu.mean()

    def low(self) -> float:
        return 0.0

    def high(self) -> float:
        mu, sigma = self._log_params(
            self.mu.mean(), self.error_factor.mean(), self.level.mean()
        )
        return math.exp(mu + sigma * NormalDist().inv_cdf(self.HIGH_QUANTILE))

    def _sample(self, rng: random.Random, memo: SampleMemo) -> float:
        mean = self.mu.sample(rng, memo)
        error_factor = self.error_factor.sample(rng, memo)
        level = self.level.sample(rng, memo)
        if mean <= 0:
            return 0.0
        mu, sigma = self._log_params(mean, error_factor, level)
        return rng.lognormvariate(mu, sigma)

    def is_constant(self) -> bool:
        return False
