"""Invocation count rules deciding how often an expectation may match."""

from __future__ import annotations

import abc
import enum
import typing as t

from method_mox.errors import ExcessInvocationError, UnsatisfiedCountError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from method_mox.call_record import CallRecord


class CountKind(enum.StrEnum):
    """Enumerates the built-in count rule variants."""

    ANY = "any"
    NEVER = "never"
    EXACTLY = "exactly"
    AT_LEAST = "at-least"
    AT_MOST = "at-most"
    BETWEEN = "between"


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        msg = f"{name} must not be negative, got {value}"
        raise ValueError(msg)


class InvocationCountRule(abc.ABC):
    """Track matched calls and decide whether another one is acceptable.

    :meth:`matches` is queried before a call is committed; :meth:`invoked`
    commits it. Calling :meth:`invoked` while :meth:`matches` is ``False``
    raises :class:`~method_mox.errors.ExcessInvocationError`.
    """

    kind: t.ClassVar[CountKind]

    def __init__(self) -> None:
        self._invocations: list[CallRecord] = []

    @property
    def invocation_count(self) -> int:
        """Return the number of committed calls."""
        return len(self._invocations)

    @property
    def invocations(self) -> list[CallRecord]:
        """Return a copy of the committed call records."""
        return list(self._invocations)

    def has_been_invoked(self) -> bool:
        """Return ``True`` once at least one call was committed."""
        return bool(self._invocations)

    def invoked(self, record: CallRecord) -> None:
        """Commit *record* as one more occurrence."""
        if not self.matches():
            msg = (
                f"{record.describe()} was not expected to be called more than "
                f"{self.invocation_count} time(s); rule: {self.describe()}"
            )
            raise ExcessInvocationError(msg)
        self._invocations.append(record)

    @abc.abstractmethod
    def matches(self) -> bool:
        """Return ``True`` if another occurrence would be acceptable."""

    @abc.abstractmethod
    def verify(self) -> None:
        """Raise :class:`UnsatisfiedCountError` if the final count is wrong."""

    @abc.abstractmethod
    def describe(self) -> str:
        """Return a human readable description of the bound."""

    def _unsatisfied(self, expected: str) -> t.NoReturn:
        msg = (
            f"Method was expected to be called {expected}, "
            f"actually called {self.invocation_count} times."
        )
        raise UnsatisfiedCountError(msg)

    def __repr__(self) -> str:
        """Return a debug representation."""
        name = type(self).__name__
        return f"<{name} {self.describe()!r} count={self.invocation_count}>"


class AnyInvokedCount(InvocationCountRule):
    """Accept any number of calls, including none."""

    kind = CountKind.ANY

    def matches(self) -> bool:
        """Always accept another call."""
        return True

    def verify(self) -> None:
        """Never fail."""

    def describe(self) -> str:
        """Return ``invoked zero or more times``."""
        return "invoked zero or more times"


class InvokedCount(InvocationCountRule):
    """Require exactly ``expected`` calls; ``0`` means never."""

    def __init__(self, expected: int) -> None:
        super().__init__()
        _require_non_negative("expected", expected)
        self.expected = expected

    @property
    def kind(self) -> CountKind:  # type: ignore[override]
        """Return ``NEVER`` for a zero bound, ``EXACTLY`` otherwise."""
        return CountKind.NEVER if self.expected == 0 else CountKind.EXACTLY

    def is_never(self) -> bool:
        """Return ``True`` when no call is allowed."""
        return self.expected == 0

    def matches(self) -> bool:
        """Accept calls while fewer than ``expected`` were committed.

        A never rule still accepts its first call so the call is recorded and
        reported by :meth:`verify`.
        """
        if self.is_never():
            return self.invocation_count == 0
        return self.invocation_count < self.expected

    def verify(self) -> None:
        """Fail unless exactly ``expected`` calls were committed."""
        if self.invocation_count != self.expected:
            self._unsatisfied(f"{self.expected} time(s)")

    def describe(self) -> str:
        """Return ``invoked <n> time(s)``."""
        return f"invoked {self.expected} time(s)"


class InvokedAtLeastCount(InvocationCountRule):
    """Require at least ``minimum`` calls."""

    kind = CountKind.AT_LEAST

    def __init__(self, minimum: int) -> None:
        super().__init__()
        _require_non_negative("minimum", minimum)
        self.minimum = minimum

    def matches(self) -> bool:
        """Always accept another call."""
        return True

    def verify(self) -> None:
        """Fail if fewer than ``minimum`` calls were committed."""
        if self.invocation_count < self.minimum:
            self._unsatisfied(f"at least {self.minimum} times")

    def describe(self) -> str:
        """Return ``invoked at least <n> times``."""
        return f"invoked at least {self.minimum} times"


class InvokedAtMostCount(InvocationCountRule):
    """Allow at most ``maximum`` calls."""

    kind = CountKind.AT_MOST

    def __init__(self, maximum: int) -> None:
        super().__init__()
        _require_non_negative("maximum", maximum)
        self.maximum = maximum

    def matches(self) -> bool:
        """Accept calls while fewer than ``maximum`` were committed."""
        return self.invocation_count < self.maximum

    def verify(self) -> None:
        """Fail if more than ``maximum`` calls were committed."""
        if self.invocation_count > self.maximum:
            self._unsatisfied(f"at most {self.maximum} times")

    def describe(self) -> str:
        """Return ``invoked at most <n> times``."""
        return f"invoked at most {self.maximum} times"


class InvokedBetweenCount(InvocationCountRule):
    """Require between ``minimum`` and ``maximum`` calls, inclusive."""

    kind = CountKind.BETWEEN

    def __init__(self, minimum: int, maximum: int) -> None:
        super().__init__()
        _require_non_negative("minimum", minimum)
        _require_non_negative("maximum", maximum)
        if minimum > maximum:
            msg = f"minimum ({minimum}) must not exceed maximum ({maximum})"
            raise ValueError(msg)
        self.minimum = minimum
        self.maximum = maximum

    def matches(self) -> bool:
        """Accept calls while fewer than ``maximum`` were committed."""
        return self.invocation_count < self.maximum

    def verify(self) -> None:
        """Fail unless the count lies within the inclusive bounds."""
        if not self.minimum <= self.invocation_count <= self.maximum:
            self._unsatisfied(f"between {self.minimum} and {self.maximum} times")

    def describe(self) -> str:
        """Return ``invoked between <n> and <m> times``."""
        return f"invoked between {self.minimum} and {self.maximum} times"


def any_count() -> AnyInvokedCount:
    """Return a rule accepting any number of calls."""
    return AnyInvokedCount()


def never() -> InvokedCount:
    """Return a rule forbidding calls."""
    return InvokedCount(0)


def once() -> InvokedCount:
    """Return a rule requiring exactly one call."""
    return InvokedCount(1)


def exactly(count: int) -> InvokedCount:
    """Return a rule requiring exactly *count* calls."""
    return InvokedCount(count)


def at_least(count: int) -> InvokedAtLeastCount:
    """Return a rule requiring at least *count* calls."""
    return InvokedAtLeastCount(count)


def at_most(count: int) -> InvokedAtMostCount:
    """Return a rule allowing at most *count* calls."""
    return InvokedAtMostCount(count)


def between(minimum: int, maximum: int) -> InvokedBetweenCount:
    """Return a rule requiring between *minimum* and *maximum* calls."""
    return InvokedBetweenCount(minimum, maximum)
