"""Expressions supplying probability values to basic events.

Constants and deviates describe parameters; the exponential-family models
turn parameters into failure probabilities.
"""

from ftree.expression.base import (
    ConstantExpression,
    Expression,
    LogNormalDeviate,
    NormalDeviate,
    SampleMemo,
    UniformDeviate,
    as_expression,
)
from ftree.expression.exponential import (
    ExponentialExpression,
    GlmExpression,
    PeriodicTest,
    WeibullExpression,
)

__all__ = [
    "Expression",
    "SampleMemo",
    "as_expression",
    # Parameters
    "ConstantExpression",
    "UniformDeviate",
    "NormalDeviate",
    "LogNormalDeviate",
    # Failure models
    "ExponentialExpression",
    "GlmExpression",
    "WeibullExpression",
    "PeriodicTest",
]
