"""Pytest plugin providing the ``method_mox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .controller import MethodMox, Phase

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("method_mox")
    group.addoption(
        "--method-mox-verify-on-teardown",
        action="store_true",
        dest="method_mox_verify_on_teardown",
        default=None,
        help=(
            "Verify every method_mox expectation when the fixture is torn "
            "down. Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-method-mox-verify-on-teardown",
        action="store_false",
        dest="method_mox_verify_on_teardown",
        default=None,
        help=(
            "Leave verification of the method_mox fixture to the test. "
            "Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        "method_mox_verify_on_teardown",
        "Verify every method_mox expectation when the fixture is torn down.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "method_mox(verify_on_teardown: bool = True): override automatic "
            "verification of the method_mox fixture for a single test."
        ),
    )


class _MethodMoxItem(t.Protocol):
    """pytest item carrying method_mox teardown metadata."""

    _method_mox_verify_error: Exception | None


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach each stage's report to the item for the fixture teardown."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
    if rep.when == "teardown":
        _report_suppressed_verify_failure(item, rep)


def _verify_on_teardown_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether the fixture should verify during teardown.

    A per-test override (marker, then fixture param) wins over the CLI flag,
    which wins over the ini setting.
    """
    override = _test_override(request)
    if override is not None:
        return override
    config = request.config
    cli_value = config.getoption("method_mox_verify_on_teardown")
    if cli_value is not None:
        return bool(cli_value)
    return bool(config.getini("method_mox_verify_on_teardown"))


def _test_override(request: pytest.FixtureRequest) -> bool | None:
    """Return the marker or fixture param setting for this test, if any."""
    marker = request.node.get_closest_marker("method_mox")
    if marker is not None and "verify_on_teardown" in marker.kwargs:
        return bool(marker.kwargs["verify_on_teardown"])
    return _get_param_verify(request)


def _get_param_verify(request: pytest.FixtureRequest) -> bool | None:
    """Return the indirect fixture param as a bool, or ``None`` if absent."""
    param = getattr(request, "param", None)
    if param is None or isinstance(param, bool):
        return param
    if not isinstance(param, dict):
        msg = (
            "method_mox fixture param must be a bool or a dict with a "
            f"'verify_on_teardown' key, got {type(param).__name__}"
        )
        raise TypeError(msg)
    try:
        return bool(param["verify_on_teardown"])
    except KeyError:
        msg = (
            "method_mox fixture param dict must contain 'verify_on_teardown', "
            f"got keys: {sorted(param)}"
        )
        raise TypeError(msg) from None


def _report_suppressed_verify_failure(
    item: pytest.Item, report: pytest.TestReport
) -> None:
    """Attach a verification error hidden by an earlier test failure."""
    err: Exception | None = getattr(item, "_method_mox_verify_error", None)
    if err is None:
        return
    delattr(item, "_method_mox_verify_error")
    report.sections.append(("method_mox verification", f"{type(err).__name__}: {err}"))


@pytest.fixture
def method_mox(request: pytest.FixtureRequest) -> t.Generator[MethodMox, None, None]:
    """Provide a :class:`MethodMox` controller verified at teardown."""
    mox = MethodMox(verify_on_exit=False)
    verify = _verify_on_teardown_enabled(request)
    yield mox
    if verify and mox.phase is Phase.ACTIVE:
        _teardown_verify(request.node, mox)


def _teardown_verify(item: pytest.Item, mox: MethodMox) -> None:
    """Verify *mox*, failing the test unless its body already failed."""
    try:
        mox.verify()
    except Exception as err:
        logger.exception("Error during method_mox verification")
        if _call_stage_failed(item):
            typed_item = t.cast("_MethodMoxItem", item)
            typed_item._method_mox_verify_error = err
            return
        pytest.fail(f"{type(err).__name__}: {err}")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)
