"""MethodMox controller and related helpers."""

from __future__ import annotations

import enum
import logging
import types  # noqa: TC003
import typing as t

from .doubles import DoubleKind, InvocationHandler, MockObject, handler_of
from .errors import LifecycleError
from .rules.invocation_count import AnyInvokedCount
from .verifiers import verify_handlers

if t.TYPE_CHECKING:
    from .expectations import Expectation
    from .rules.invocation_count import InvocationCountRule

logger = logging.getLogger(__name__)


class Phase(enum.StrEnum):
    """Lifecycle phases for :class:`MethodMox`."""

    ACTIVE = "ACTIVE"
    VERIFIED = "VERIFIED"


class MethodMox:
    """Create test doubles and verify all of their expectations together."""

    def __init__(self, *, verify_on_exit: bool = True) -> None:
        """Create a new controller.

        Parameters
        ----------
        verify_on_exit:
            When ``True`` (the default), :meth:`__exit__` calls :meth:`verify`
            if the block completed without an exception and verification has
            not happened yet. Disable for explicit control.
        """
        self._verify_on_exit = verify_on_exit
        self._phase = Phase.ACTIVE
        self._doubles: list[MockObject] = []

    # ------------------------------------------------------------------
    # Double accessors
    # ------------------------------------------------------------------
    @property
    def doubles(self) -> list[MockObject]:
        """Return every double created by this controller."""
        return list(self._doubles)

    @property
    def mocks(self) -> list[MockObject]:
        """Return the mock doubles."""
        return [d for d in self._doubles if handler_of(d).kind is DoubleKind.MOCK]

    @property
    def stubs(self) -> list[MockObject]:
        """Return the stub doubles."""
        return [d for d in self._doubles if handler_of(d).kind is DoubleKind.STUB]

    @property
    def phase(self) -> Phase:
        """Return the current lifecycle phase."""
        return self._phase

    # ------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------
    def __enter__(self) -> MethodMox:
        """Enter the context."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Exit the context, verifying when enabled and the block succeeded."""
        if not self._verify_on_exit or self._phase is not Phase.ACTIVE:
            return
        if exc_type is not None:
            logger.debug("Skipping verification after %s", exc_type.__name__)
            return
        self.verify()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def _create(
        self, spec: type | None, kind: DoubleKind, name: str | None
    ) -> MockObject:
        self._require_phase(Phase.ACTIVE, kind.value)
        double = MockObject(InvocationHandler(spec, kind=kind, name=name))
        self._doubles.append(double)
        return double

    def mock(self, spec: type | None = None, *, name: str | None = None) -> MockObject:
        """Create a strict double; unmatched calls raise ``UnexpectedCallError``."""
        return self._create(spec, DoubleKind.MOCK, name)

    def stub(self, spec: type | None = None, *, name: str | None = None) -> MockObject:
        """Create a lenient double; unmatched calls return default values."""
        return self._create(spec, DoubleKind.STUB, name)

    def expect(
        self, double: MockObject, count_rule: InvocationCountRule | None = None
    ) -> Expectation:
        """Declare an expectation on *double*."""
        self._require_phase(Phase.ACTIVE, "expect")
        return handler_of(double).expects(count_rule)

    def allow(self, double: MockObject) -> Expectation:
        """Declare an expectation accepting any number of calls on *double*."""
        return self.expect(double, AnyInvokedCount())

    def verify(self) -> None:
        """Verify every double and finalise the controller."""
        self._require_phase(Phase.ACTIVE, "verify")
        try:
            verify_handlers(handler_of(double) for double in self._doubles)
        finally:
            self._phase = Phase.VERIFIED

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_phase(self, expected: Phase, action: str) -> None:
        """Ensure we're in ``expected`` phase before executing ``action``."""
        if self._phase != expected:
            msg = (
                f"Cannot call {action}(): not in '{expected.name.lower()}' phase "
                f"(current phase: {self._phase.name.lower()})"
            )
            raise LifecycleError(msg)
