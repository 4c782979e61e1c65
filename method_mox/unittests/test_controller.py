"""Unit tests for the :class:`MethodMox` controller."""

from __future__ import annotations

import pytest

from method_mox import (
    LifecycleError,
    MethodMox,
    ParameterMismatchError,
    Phase,
    UnexpectedCallError,
    UnsatisfiedCountError,
    VerificationError,
    exactly,
    never,
    once,
)
from method_mox.unittests._spec_helpers import Writer


def test_verify_passes_when_all_expectations_met() -> None:
    """A fully satisfied controller moves to the verified phase."""
    mox = MethodMox()
    writer = mox.mock(Writer)
    mox.expect(writer, exactly(2)).method("write").with_args("x").will_return(1)
    assert writer.write("x") == 1
    assert writer.write("x") == 1
    mox.verify()
    assert mox.phase is Phase.VERIFIED


def test_verify_aggregates_failures() -> None:
    """Every failing expectation is reported in one error."""
    mox = MethodMox()
    writer = mox.mock(Writer)
    other = mox.mock(Writer, name="Other")
    mox.expect(writer, once()).method("flush")
    mox.expect(other, once()).method("write").with_args("x")
    with pytest.raises(ParameterMismatchError):
        other.write("y")
    with pytest.raises(VerificationError) as caught:
        mox.verify()
    failures = caught.value.failures
    assert len(failures) == 2
    assert isinstance(failures[0], UnsatisfiedCountError)
    assert isinstance(failures[1], ParameterMismatchError)
    assert str(caught.value).startswith("2 expectation(s) not satisfied.")


def test_swallowed_unexpected_call_fails_verification() -> None:
    """Unexpected calls caught by the code under test are still reported."""
    mox = MethodMox()
    writer = mox.mock(Writer)
    try:
        writer.read()
    except UnexpectedCallError:
        pass
    with pytest.raises(VerificationError) as caught:
        mox.verify()
    (failure,) = caught.value.failures
    assert isinstance(failure, UnexpectedCallError)
    assert "Writer.read()" in str(failure)


def test_stub_never_fails_verification() -> None:
    """Stubs tolerate unmatched calls."""
    mox = MethodMox()
    writer = mox.stub(Writer)
    mox.allow(writer).method("read").will_return("data")
    assert writer.read() == "data"
    assert writer.flush() is False
    mox.verify()
    assert mox.stubs == [writer]
    assert mox.mocks == []


def test_verify_twice_is_lifecycle_error() -> None:
    """verify() finalises the controller."""
    mox = MethodMox()
    mox.verify()
    with pytest.raises(LifecycleError, match="not in 'active' phase"):
        mox.verify()
    with pytest.raises(LifecycleError):
        mox.mock(Writer)


def test_context_manager_verifies_on_exit() -> None:
    """Leaving the block verifies the expectations."""
    with pytest.raises(VerificationError, match="close"):  # noqa: PT012
        with MethodMox() as mox:
            writer = mox.mock(Writer)
            mox.expect(writer, once()).method("close")
    assert mox.phase is Phase.VERIFIED


def test_context_manager_skips_verify_after_error() -> None:
    """An exception inside the block is not masked by verification."""
    with pytest.raises(RuntimeError, match="boom"):  # noqa: PT012
        with MethodMox() as mox:
            writer = mox.mock(Writer)
            mox.expect(writer, once()).method("close")
            raise RuntimeError("boom")
    assert mox.phase is Phase.ACTIVE


def test_context_manager_without_verify_on_exit() -> None:
    """verify_on_exit=False leaves verification to the caller."""
    with MethodMox(verify_on_exit=False) as mox:
        writer = mox.mock(Writer)
        mox.expect(writer, never()).method("close")
    assert mox.phase is Phase.ACTIVE
    mox.verify()
