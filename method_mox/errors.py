"""Custom exceptions for method_mox."""

from __future__ import annotations

import typing as t


class MethodMoxError(Exception):
    """Base exception for all method_mox errors."""


class LifecycleError(MethodMoxError):
    """Raised when the controller is used outside its valid lifecycle."""


class ConfigurationError(MethodMoxError):
    """Raised when an expectation is declared inconsistently."""


class MethodNameNotConfiguredError(ConfigurationError):
    """Raised when an expectation is used before ``method()`` was called."""

    DEFAULT_MESSAGE = "Method name is not configured for this expectation"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE)


class MethodCannotBeConfiguredError(ConfigurationError):
    """Raised when a method name does not exist on the double's spec."""

    def __init__(self, method_name: str, spec_name: str) -> None:
        self.method_name = method_name
        msg = (
            f"Trying to configure method {method_name!r} which cannot be "
            f"configured because it does not exist on {spec_name}"
        )
        super().__init__(msg)


class LinkedExpectationNotFoundError(MethodMoxError):
    """Raised when a predecessor expectation cannot be resolved by id."""

    def __init__(self, expectation_id: str) -> None:
        self.expectation_id = expectation_id
        super().__init__(f"No expectation defined with id {expectation_id!r}")


class ExcessInvocationError(MethodMoxError):
    """Raised when a call arrives after its count rule is saturated."""


class ResponseAlreadySetError(MethodMoxError):
    """Raised when a call record's response slot is filled twice."""


class VerificationError(MethodMoxError, AssertionError):
    """Raised when an expectation is not satisfied.

    Aggregated verification failures keep the individual errors in
    :attr:`failures`.
    """

    def __init__(
        self, message: str, failures: t.Sequence[BaseException] = ()
    ) -> None:
        super().__init__(message)
        self.failures = tuple(failures)


class ParameterMismatchError(VerificationError):
    """Raised when a call's arguments fail their declared constraints."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class UnsatisfiedCountError(VerificationError):
    """Raised when the final call count violates the declared bound."""


class UnexpectedCallError(VerificationError):
    """Raised when a mock receives a call no expectation accepts."""


__all__ = [
    "ConfigurationError",
    "ExcessInvocationError",
    "LifecycleError",
    "LinkedExpectationNotFoundError",
    "MethodCannotBeConfiguredError",
    "MethodMoxError",
    "MethodNameNotConfiguredError",
    "ParameterMismatchError",
    "ResponseAlreadySetError",
    "UnexpectedCallError",
    "UnsatisfiedCountError",
    "VerificationError",
]
