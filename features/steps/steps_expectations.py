"""Step definitions for method_mox behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from method_mox import (
    MethodMox,
    MethodMoxError,
    MockObject,
    VerificationError,
    exactly,
    never,
    once,
)
from method_mox.unittests._spec_helpers import Writer


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    mox: MethodMox
    double: MockObject
    value: object
    error: MethodMoxError | None


def _call(context: BehaveContext, method: str, *args: object) -> None:
    context.value = None
    context.error = None
    try:
        context.value = getattr(context.double, method)(*args)
    except MethodMoxError as err:
        context.error = err


@given("a MethodMox controller")
def step_create_controller(context: BehaveContext) -> None:
    """Create a :class:`MethodMox` instance for the scenario."""
    context.mox = MethodMox(verify_on_exit=False)


@given("a mock writer")
def step_create_mock(context: BehaveContext) -> None:
    """Create a strict double for :class:`Writer`."""
    context.double = context.mox.mock(Writer)


@given("a stub writer")
def step_create_stub(context: BehaveContext) -> None:
    """Create a lenient double for :class:`Writer`."""
    context.double = context.mox.stub(Writer)


@given('the writer expects "{method}" exactly {count:d} times')
def step_expect_exactly(context: BehaveContext, method: str, count: int) -> None:
    """Expect *method* to be called *count* times."""
    context.mox.expect(context.double, exactly(count)).method(method)


@given('the writer expects "{method}" once with "{arg}" returning {value:d}')
def step_expect_with_argument(
    context: BehaveContext, method: str, arg: str, value: int
) -> None:
    """Expect one call of *method* with *arg*."""
    expectation = context.mox.expect(context.double, once()).method(method)
    expectation.with_args(arg).will_return(value)


@given('the writer expects "{method}" with "{first}" then "{second}"')
def step_expect_chain(
    context: BehaveContext, method: str, first: str, second: str
) -> None:
    """Expect two consecutive calls returning 1 and 2."""
    chain = context.mox.expect(context.double, once()).method(method)
    chain.with_args(first).will_return(1)
    chain.then(once()).with_args(second).will_return(2)


@given('the writer expects "{method}" once as "{ident}"')
def step_expect_identified(context: BehaveContext, method: str, ident: str) -> None:
    """Expect one call of *method* registered under *ident*."""
    context.mox.expect(context.double, once()).method(method).identified_by(ident)


@given('the writer expects "{method}" once after "{ident}"')
def step_expect_after(context: BehaveContext, method: str, ident: str) -> None:
    """Expect one call of *method* once *ident* has been invoked."""
    context.mox.expect(context.double, once()).method(method).after(ident)


@given('the writer expects "{method}" never')
def step_expect_never(context: BehaveContext, method: str) -> None:
    """Forbid calls of *method*."""
    context.mox.expect(context.double, never()).method(method)


@when('the code calls "{method}" without arguments')
def step_call(context: BehaveContext, method: str) -> None:
    """Call *method* on the double."""
    _call(context, method)


@when('the code calls "{method}" with "{arg}"')
def step_call_with_argument(context: BehaveContext, method: str, arg: str) -> None:
    """Call *method* on the double with one argument."""
    _call(context, method, arg)


@then("the call returns {value:d}")
def step_check_value(context: BehaveContext, value: int) -> None:
    """The last call returned *value*."""
    assert context.error is None  # noqa: S101
    assert context.value == value  # noqa: S101


@then("the call is rejected with {error}")
def step_check_rejected(context: BehaveContext, error: str) -> None:
    """The last call raised an error of type *error*."""
    assert type(context.error).__name__ == error  # noqa: S101


@then("verification passes")
def step_verification_passes(context: BehaveContext) -> None:
    """Verify without errors."""
    context.mox.verify()


@then("verification fails with {error}")
def step_verification_fails(context: BehaveContext, error: str) -> None:
    """Verification reports a failure of type *error*."""
    try:
        context.mox.verify()
    except VerificationError as err:
        names = [type(failure).__name__ for failure in err.failures]
        assert error in names  # noqa: S101
    else:
        raise AssertionError("verification unexpectedly passed")  # noqa: TRY003
