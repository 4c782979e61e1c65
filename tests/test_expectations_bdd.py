"""Behavioural tests for expectation matching using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenario

from tests.steps import *  # noqa: F403

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"
FEATURE = str(FEATURES_DIR / "expectations.feature")


@scenario(FEATURE, "exact counts are verified")
def test_exact_counts() -> None:
    """Unsatisfied counts fail verification."""
    pass


@scenario(FEATURE, "a saturated expectation rejects further calls")
def test_saturated_expectation() -> None:
    """Calls beyond the expected count are rejected."""
    pass


@scenario(FEATURE, "matching arguments select the response")
def test_matching_arguments() -> None:
    """Configured responses are returned for matching calls."""
    pass


@scenario(FEATURE, "mismatching arguments fail at the call")
def test_mismatching_arguments() -> None:
    """Parameter mismatches raise and are reported again at verification."""
    pass


@scenario(FEATURE, "chained calls are selected by their arguments")
def test_chained_calls() -> None:
    """Consecutive-call links are disambiguated by their parameters."""
    pass


@scenario(FEATURE, "an expectation waits for its predecessor")
def test_predecessor() -> None:
    """Linked expectations stay ineligible until the predecessor ran."""
    pass


@scenario(FEATURE, "a never expectation passes without calls")
def test_never_without_calls() -> None:
    """never() is satisfied by zero calls."""
    pass


@scenario(FEATURE, "stubs answer with defaults")
def test_stub_defaults() -> None:
    """Stubs return values derived from the return annotation."""
    pass
