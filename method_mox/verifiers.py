"""Verification helpers for :class:`~method_mox.controller.MethodMox`."""

from __future__ import annotations

import typing as t
from textwrap import indent

from .errors import UnexpectedCallError, VerificationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .call_record import CallRecord
    from .doubles import InvocationHandler
    from .expectations import Expectation


def numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    """Return *entries* as a numbered list, continuation lines indented."""
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    """Return *title* followed by labelled, indented sections."""
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def describe_expectations(expectations: t.Sequence[Expectation]) -> str:
    """Return a numbered list of expectation descriptions."""
    return numbered([exp.describe() for exp in expectations])


def _describe_calls(records: t.Sequence[CallRecord]) -> str:
    return numbered([record.describe() for record in records])


class ExpectationVerifier:
    """Run :meth:`Expectation.verify` on every registered expectation."""

    def collect(self, handler: InvocationHandler) -> list[VerificationError]:
        """Return the failures of *handler*'s expectations."""
        failures: list[VerificationError] = []
        for expectation in handler.expectations:
            try:
                expectation.verify()
            except VerificationError as err:
                failures.append(err)
        return failures


class UnexpectedCallVerifier:
    """Report calls that no expectation accepted."""

    def collect(self, handler: InvocationHandler) -> list[VerificationError]:
        """Return one failure listing *handler*'s unexpected calls, if any."""
        if not handler.unexpected:
            return []
        registered = describe_expectations(handler.expectations)
        msg = format_sections(
            f"Unexpected calls on {handler.name}.",
            [
                ("Unexpected calls", _describe_calls(handler.unexpected)),
                ("Registered expectations", registered),
            ],
        )
        return [UnexpectedCallError(msg)]


def verify_handlers(handlers: t.Iterable[InvocationHandler]) -> None:
    """Raise one :class:`VerificationError` aggregating every failure."""
    failures: list[VerificationError] = []
    for handler in handlers:
        failures.extend(ExpectationVerifier().collect(handler))
        failures.extend(UnexpectedCallVerifier().collect(handler))
    if not failures:
        return
    msg = format_sections(
        f"{len(failures)} expectation(s) not satisfied.",
        [("Failures", numbered([str(err) for err in failures]))],
    )
    raise VerificationError(msg, failures)
