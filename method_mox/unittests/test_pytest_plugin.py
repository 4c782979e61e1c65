"""Unit tests for the pytest plugin."""

from __future__ import annotations

import dataclasses as dc
import textwrap

import pytest

from method_mox import MethodMox, Phase, once
from method_mox.pytest_plugin import _get_param_verify, _test_override
from method_mox.unittests._spec_helpers import Writer


@dc.dataclass(slots=True, frozen=True)
class TeardownTestCase:
    """Configuration scenario for verification at fixture teardown."""

    ini_setting: str | None
    cli_args: tuple[str, ...]
    test_decorator: str
    should_fail: bool


_UNSATISFIED_MODULE = """
import pytest

from method_mox import once
from method_mox.unittests._spec_helpers import Writer

{decorator}
def test_unsatisfied(method_mox):
    writer = method_mox.mock(Writer)
    method_mox.expect(writer, once()).method("flush")
"""


def test_fixture_provides_controller(method_mox: MethodMox) -> None:
    """The fixture yields an active controller."""
    assert isinstance(method_mox, MethodMox)
    assert method_mox.phase is Phase.ACTIVE
    writer = method_mox.mock(Writer)
    method_mox.expect(writer, once()).method("read").will_return("x")
    assert writer.read() == "x"


def test_explicit_verify_skips_teardown(pytester: pytest.Pytester) -> None:
    """Calling verify() in the test leaves nothing for teardown."""
    test_file = pytester.makepyfile(
        """
        from method_mox import once
        from method_mox.unittests._spec_helpers import Writer

        def test_verified(method_mox):
            writer = method_mox.mock(Writer)
            method_mox.expect(writer, once()).method("close")
            writer.close()
            method_mox.verify()
        """
    )
    result = pytester.runpytest(str(test_file), plugins=("method_mox.pytest_plugin",))
    result.assert_outcomes(passed=1)


def test_body_failure_is_not_masked(pytester: pytest.Pytester) -> None:
    """A failing test body is not masked by the teardown verification."""
    test_file = pytester.makepyfile(
        """
        from method_mox import once
        from method_mox.unittests._spec_helpers import Writer

        def test_broken(method_mox):
            writer = method_mox.mock(Writer)
            method_mox.expect(writer, once()).method("flush")
            raise AssertionError("body failed")
        """
    )
    result = pytester.runpytest(str(test_file), plugins=("method_mox.pytest_plugin",))
    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(["*body failed*"])
    result.stdout.no_fnmatch_line("*UnsatisfiedCountError*")


@pytest.mark.parametrize(
    "test_case",
    [
        pytest.param(
            TeardownTestCase(
                ini_setting=None,
                cli_args=(),
                test_decorator="",
                should_fail=True,
            ),
            id="default",
        ),
        pytest.param(
            TeardownTestCase(
                ini_setting="method_mox_verify_on_teardown = false",
                cli_args=(),
                test_decorator="",
                should_fail=False,
            ),
            id="ini-disabled",
        ),
        pytest.param(
            TeardownTestCase(
                ini_setting="method_mox_verify_on_teardown = false",
                cli_args=("--method-mox-verify-on-teardown",),
                test_decorator="",
                should_fail=True,
            ),
            id="cli-overrides-ini",
        ),
        pytest.param(
            TeardownTestCase(
                ini_setting=None,
                cli_args=("--no-method-mox-verify-on-teardown",),
                test_decorator="",
                should_fail=False,
            ),
            id="cli-disabled",
        ),
        pytest.param(
            TeardownTestCase(
                ini_setting=None,
                cli_args=(),
                test_decorator=(
                    '@pytest.mark.parametrize("method_mox", [False], indirect=True)'
                ),
                should_fail=False,
            ),
            id="fixture-param-bool",
        ),
        pytest.param(
            TeardownTestCase(
                ini_setting=None,
                cli_args=("--no-method-mox-verify-on-teardown",),
                test_decorator="\n".join(
                    [
                        "@pytest.mark.parametrize(",
                        '    "method_mox", [{"verify_on_teardown": True}],',
                        "    indirect=True,",
                        ")",
                    ]
                ),
                should_fail=True,
            ),
            id="fixture-param-dict-overrides-cli",
        ),
        pytest.param(
            TeardownTestCase(
                ini_setting=None,
                cli_args=(),
                test_decorator="@pytest.mark.method_mox(verify_on_teardown=False)",
                should_fail=False,
            ),
            id="marker-disabled",
        ),
        pytest.param(
            TeardownTestCase(
                ini_setting=None,
                cli_args=(),
                test_decorator="\n".join(
                    [
                        "@pytest.mark.method_mox(verify_on_teardown=True)",
                        '@pytest.mark.parametrize('
                        '    "method_mox", [False], indirect=True)',
                    ]
                ),
                should_fail=True,
            ),
            id="marker-overrides-param",
        ),
    ],
)
def test_verify_on_teardown_configuration(
    pytester: pytest.Pytester,
    test_case: TeardownTestCase,
) -> None:
    """Exercise marker, param, CLI and ini precedence."""
    if test_case.ini_setting:
        pytester.makeini(
            textwrap.dedent(
                f"""
                [pytest]
                {test_case.ini_setting}
                """
            )
        )
    module = _UNSATISFIED_MODULE.format(decorator=test_case.test_decorator)
    test_file = pytester.makepyfile(test_teardown=module)

    result = pytester.runpytest(
        *test_case.cli_args, str(test_file), plugins=("method_mox.pytest_plugin",)
    )

    if test_case.should_fail:
        result.assert_outcomes(passed=1, errors=1)
        result.stdout.fnmatch_lines(["*UnsatisfiedCountError*"])
    else:
        result.assert_outcomes(passed=1)


@pytest.mark.parametrize(
    ("param", "expected"),
    [
        (True, True),
        (False, False),
        ({"verify_on_teardown": False}, False),
    ],
)
def test_param_values(param: object, *, expected: bool) -> None:
    """Fixture params accept a bool or a dict."""

    class _Request:
        pass

    request = _Request()
    request.param = param  # type: ignore[attr-defined]
    assert _get_param_verify(request) is expected  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("param", "match"),
    [
        ({"other": True}, "must contain 'verify_on_teardown'"),
        ("yes", "got str"),
    ],
)
def test_param_rejects_bad_values(param: object, match: str) -> None:
    """Unsupported fixture params raise ``TypeError``."""

    class _Request:
        pass

    request = _Request()
    request.param = param  # type: ignore[attr-defined]
    with pytest.raises(TypeError, match=match):
        _get_param_verify(request)  # type: ignore[arg-type]


class _StubMarker:
    """Marker surrogate exposing keyword arguments."""

    __slots__ = ("kwargs",)

    def __init__(self, **kwargs: object) -> None:
        self.kwargs = kwargs


class _StubNode:
    """Node returning a fixed ``method_mox`` marker."""

    __slots__ = ("_marker",)

    def __init__(self, marker: _StubMarker | None) -> None:
        self._marker = marker

    def get_closest_marker(self, name: str) -> _StubMarker | None:
        assert name == "method_mox"
        return self._marker


class _StubRequest:
    """Fixture request carrying a node and an optional param."""

    def __init__(self, marker: _StubMarker | None, **param: object) -> None:
        self.node = _StubNode(marker)
        if param:
            self.param = param["param"]


@pytest.mark.parametrize(
    ("request_", "expected"),
    [
        (_StubRequest(None), None),
        (_StubRequest(None, param=False), False),
        (_StubRequest(_StubMarker(verify_on_teardown=True), param=False), True),
        (_StubRequest(_StubMarker(), param=False), False),
    ],
    ids=["nothing", "param-only", "marker-wins", "marker-without-kwarg"],
)
def test_override_prefers_marker(request_: _StubRequest, expected: object) -> None:
    """The marker takes precedence over the fixture param."""
    assert _test_override(request_) is expected  # type: ignore[arg-type]
