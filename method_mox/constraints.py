"""Argument constraints used by parameter and method-name rules.

Every constraint implements :meth:`Constraint.matches` and
:meth:`Constraint.describe`; :meth:`Constraint.evaluate` combines both into a
:class:`ConstraintResult` carrying a human readable explanation. Custom
constraints subclass :class:`Constraint`.
"""

from __future__ import annotations

import abc
import dataclasses as dc
import re
import typing as t


@dc.dataclass(frozen=True, slots=True)
class ConstraintResult:
    """Outcome of evaluating a constraint against one value."""

    passed: bool
    description: str = ""

    def __bool__(self) -> bool:
        """Return ``True`` when the constraint passed."""
        return self.passed


class Constraint(abc.ABC):
    """Predicate over a single value with a readable description."""

    __slots__ = ()

    @abc.abstractmethod
    def matches(self, value: t.Any) -> bool:  # noqa: ANN401 - any argument value
        """Return ``True`` if *value* satisfies the constraint."""

    @abc.abstractmethod
    def describe(self) -> str:
        """Return the description used in diagnostics, e.g. ``is equal to 5``."""

    def evaluate(self, value: t.Any) -> ConstraintResult:  # noqa: ANN401
        """Evaluate *value* and explain a failure."""
        if self.matches(value):
            return ConstraintResult(passed=True)
        return ConstraintResult(
            passed=False,
            description=f"Failed asserting that {value!r} {self.describe()}.",
        )


@dc.dataclass(frozen=True, slots=True)
class Anything(Constraint):
    """Match any value."""

    def matches(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` for any input."""
        return True

    def describe(self) -> str:
        """Return ``is anything``."""
        return "is anything"


@dc.dataclass(frozen=True, slots=True)
class IsEqual(Constraint):
    """Match values equal to ``value``."""

    value: t.Any

    def matches(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` when *value* compares equal."""
        return bool(value == self.value)

    def describe(self) -> str:
        """Return ``is equal to <value>``."""
        return f"is equal to {self.value!r}"


@dc.dataclass(frozen=True, slots=True)
class IsIdentical(Constraint):
    """Match only the very object ``value``."""

    value: t.Any

    def matches(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` when *value* is ``self.value``."""
        return value is self.value

    def describe(self) -> str:
        """Return ``is identical to <value>``."""
        return f"is identical to {self.value!r}"


@dc.dataclass(frozen=True, slots=True)
class IsA(Constraint):
    """Match instances of ``typ``."""

    typ: type | tuple[type, ...]

    def matches(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` when ``isinstance(value, typ)``."""
        return isinstance(value, self.typ)

    def describe(self) -> str:
        """Return ``is an instance of <typ>``."""
        if isinstance(self.typ, tuple):
            names = " or ".join(typ.__qualname__ for typ in self.typ)
        else:
            names = self.typ.__qualname__
        return f"is an instance of {names}"


@dc.dataclass(frozen=True, slots=True)
class Regex(Constraint):
    """Match string values in which ``pattern`` is found."""

    pattern: str
    _compiled: re.Pattern[str] = dc.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def matches(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if the regex matches *value*."""
        if not isinstance(value, str):
            return False
        return bool(self._compiled.search(value))

    def describe(self) -> str:
        """Return ``matches pattern <pattern>``."""
        return f"matches pattern {self.pattern!r}"


@dc.dataclass(frozen=True, slots=True)
class Contains(Constraint):
    """Match containers (or strings) holding ``item``."""

    item: t.Any

    def matches(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value
        except TypeError:
            return False

    def describe(self) -> str:
        """Return ``contains <item>``."""
        return f"contains {self.item!r}"


@dc.dataclass(frozen=True, slots=True)
class StartsWith(Constraint):
    """Match strings beginning with ``prefix``."""

    prefix: str

    def matches(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)

    def describe(self) -> str:
        """Return ``starts with <prefix>``."""
        return f"starts with {self.prefix!r}"


@dc.dataclass(frozen=True, slots=True)
class Callback(Constraint):
    """Use a custom ``func`` to determine a match."""

    func: t.Callable[[t.Any], bool]

    def matches(self, value: t.Any) -> bool:  # noqa: ANN401
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))

    def describe(self) -> str:
        """Return ``is accepted by specified callback``."""
        return "is accepted by specified callback"


def as_constraint(value: t.Any) -> Constraint:  # noqa: ANN401
    """Return *value* unchanged if it is a constraint, else wrap it in ``IsEqual``."""
    if isinstance(value, Constraint):
        return value
    return IsEqual(value)


__all__ = [
    "Anything",
    "Callback",
    "Constraint",
    "ConstraintResult",
    "Contains",
    "IsA",
    "IsEqual",
    "IsIdentical",
    "Regex",
    "StartsWith",
    "as_constraint",
]
