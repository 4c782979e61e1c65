"""Parameter rules checking a call's positional arguments.

:meth:`ParametersRule.apply` is the single, raising evaluation used once a
call has been routed to an expectation. Its outcome is cached so
:meth:`ParametersRule.verify` replays it instead of running the constraints a
second time; constraints may carry side effects such as counters or captured
values. :meth:`ParametersRule.match` is the non-raising form used only while
choosing between candidate expectations.
"""

from __future__ import annotations

import abc
import typing as t

from method_mox.constraints import Anything, Constraint, as_constraint
from method_mox.errors import ParameterMismatchError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from method_mox.call_record import CallRecord

_ANYTHING_HINT = (
    "\nTo allow 0 or more parameters with any value, omit with_args() or use "
    "with_any_parameters() instead."
)


class ParametersRule(abc.ABC):
    """Interface shared by parameter rules."""

    @abc.abstractmethod
    def apply(self, record: CallRecord) -> None:
        """Evaluate *record* and raise :class:`ParameterMismatchError` on failure."""

    @abc.abstractmethod
    def match(self, record: CallRecord) -> bool:
        """Return ``True`` if *record* would pass, without raising."""

    @abc.abstractmethod
    def verify(self) -> None:
        """Re-raise the recorded outcome of :meth:`apply`."""

    @abc.abstractmethod
    def describe(self) -> str:
        """Return a human readable description of the rule."""


class AnyParameters(ParametersRule):
    """Accept any arguments."""

    def apply(self, record: CallRecord) -> None:
        """Accept *record* unconditionally."""

    def match(self, record: CallRecord) -> bool:
        """Return ``True``."""
        return True

    def verify(self) -> None:
        """Never fail."""

    def describe(self) -> str:
        """Return ``with any parameters``."""
        return "with any parameters"


class Parameters(ParametersRule):
    """Positional constraints, one per expected argument."""

    def __init__(self, parameters: t.Iterable[t.Any]) -> None:
        self.constraints: list[Constraint] = [as_constraint(p) for p in parameters]
        self._record: CallRecord | None = None
        self._result: bool | ParameterMismatchError | None = None
        # First failure seen by ``apply``; stays the verdict of ``verify``.
        self._failure: ParameterMismatchError | None = None
        # Record that passed ``match``; ``apply`` on it reuses that verdict.
        self._matched: CallRecord | None = None

    def describe(self) -> str:
        """Return ``with parameter 0 <c0> and 1 <c1> ...``."""
        if not self.constraints:
            return "with no parameters"
        parts = [
            f"{index} {constraint.describe()}"
            for index, constraint in enumerate(self.constraints)
        ]
        return "with parameter " + " and ".join(parts)

    def apply(self, record: CallRecord) -> None:
        """Evaluate *record*, caching the outcome for later replay."""
        if record is self._record and self._result is not None:
            self._replay()
            return
        matched, self._matched = self._matched, None
        self._record = record
        if record is matched:
            self._result = True
            return
        self._result = None
        try:
            self._evaluate(record)
        except ParameterMismatchError as err:
            self._result = err
            if self._failure is None:
                self._failure = err
            raise
        self._result = True

    def match(self, record: CallRecord) -> bool:
        """Return ``False`` at the first failing position or short argument list.

        A pass is remembered for *record* so routing it through :meth:`apply`
        does not evaluate the constraints again.
        """
        arguments = record.arguments
        if len(arguments) < len(self.constraints):
            return False
        passed = all(
            constraint.evaluate(arguments[index]).passed
            for index, constraint in enumerate(self.constraints)
        )
        self._matched = record if passed else None
        return passed

    def verify(self) -> None:
        """Replay the cached outcome; fail if no call was ever applied."""
        if self._failure is not None:
            raise self._failure
        if self._record is None:
            msg = f"Expected a call {self.describe()}, but no call was recorded."
            raise ParameterMismatchError(msg)
        self._replay()

    def _replay(self) -> None:
        if isinstance(self._result, ParameterMismatchError):
            raise self._result

    def _evaluate(self, record: CallRecord) -> None:
        arguments = record.arguments
        if len(arguments) < len(self.constraints):
            msg = f"Parameter count for invocation {record.describe()} is too low."
            if len(self.constraints) == 1 and isinstance(
                self.constraints[0], Anything
            ):
                msg += _ANYTHING_HINT
            raise ParameterMismatchError(msg)
        for index, constraint in enumerate(self.constraints):
            result = constraint.evaluate(arguments[index])
            if result.passed:
                continue
            msg = (
                f"Parameter {index} for invocation {record.describe()} does not "
                f"match expected value.\n{result.description}"
            )
            raise ParameterMismatchError(msg, position=index)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Parameters({self.constraints!r})"
