"""Rules composed by an :class:`~method_mox.expectations.Expectation`."""

from __future__ import annotations

from .invocation_count import (
    AnyInvokedCount,
    CountKind,
    InvocationCountRule,
    InvokedAtLeastCount,
    InvokedAtMostCount,
    InvokedBetweenCount,
    InvokedCount,
    any_count,
    at_least,
    at_most,
    between,
    exactly,
    never,
    once,
)
from .method_name import MethodName
from .parameters import AnyParameters, Parameters, ParametersRule

__all__ = [
    "AnyInvokedCount",
    "AnyParameters",
    "CountKind",
    "InvocationCountRule",
    "InvokedAtLeastCount",
    "InvokedAtMostCount",
    "InvokedBetweenCount",
    "InvokedCount",
    "MethodName",
    "Parameters",
    "ParametersRule",
    "any_count",
    "at_least",
    "at_most",
    "between",
    "exactly",
    "never",
    "once",
]
