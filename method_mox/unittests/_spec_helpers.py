"""Spec classes and record helpers shared by the unit tests."""

from __future__ import annotations

import inspect
from collections.abc import Iterator  # noqa: TC003 - resolved by get_type_hints

from method_mox.call_record import CallRecord


class Writer:
    """Collaborator used as the spec class for most doubles in the tests."""

    def write(self, data: str) -> int:
        """Write *data* and return the number of characters written."""
        return len(data)

    def read(self) -> str:
        """Return the next chunk."""
        return ""

    def seek(self, offset: int, whence: int = 0) -> None:
        """Move the cursor."""

    def flush(self) -> bool:
        """Flush buffered output."""
        return True

    def lines(self) -> Iterator[str]:
        """Iterate over lines."""
        return iter(())

    def tags(self) -> list[str]:
        """Return attached tags."""
        return []

    def configure(self, *, mode: str, level: int = 1) -> dict[str, int]:
        """Configure the writer."""
        return {mode: level}

    def close(self) -> None:
        """Close the writer."""


class CountingCallback:
    """Predicate recording how often it was evaluated."""

    def __init__(self, expected: object) -> None:
        self.expected = expected
        self.calls = 0

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* equals ``expected``."""
        self.calls += 1
        return value == self.expected


def make_record(
    method_name: str,
    *arguments: object,
    target: object = None,
    return_annotation: object = inspect.Signature.empty,
) -> CallRecord:
    """Build a :class:`CallRecord` for ``Writer.<method_name>``."""
    return CallRecord(
        target=target,
        class_name="Writer",
        method_name=method_name,
        arguments=arguments,
        return_annotation=return_annotation,
    )
