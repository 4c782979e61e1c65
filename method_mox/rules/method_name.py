"""Method name rule deciding which calls an expectation is about."""

from __future__ import annotations

import typing as t

from method_mox.constraints import Constraint, IsEqual

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from method_mox.call_record import CallRecord


class MethodName:
    """Match a call record's method name against a name or constraint."""

    def __init__(self, name: str | Constraint) -> None:
        if isinstance(name, str):
            self.name: str | None = name
            self.constraint: Constraint = IsEqual(name)
        elif isinstance(name, Constraint):
            self.name = None
            self.constraint = name
        else:
            msg = f"method name must be a str or Constraint, got {type(name).__name__}"
            raise TypeError(msg)

    def matches(self, record: CallRecord) -> bool:
        """Return ``True`` if *record* targets the expected method."""
        return self.constraint.evaluate(record.method_name).passed

    def describe(self) -> str:
        """Return ``method name <constraint description>``."""
        return f"method name {self.constraint.describe()}"

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"MethodName({self.constraint!r})"
