"""Response generators producing the value returned by a matched call."""

from __future__ import annotations

import abc
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .call_record import CallRecord


class ResponseGenerator(abc.ABC):
    """Produce the value (or effect) of a call routed to an expectation."""

    @abc.abstractmethod
    def produce(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Return the response for *record*."""

    @abc.abstractmethod
    def describe(self) -> str:
        """Return a description used after ``will`` in diagnostics."""


class ReturnValue(ResponseGenerator):
    """Return a fixed value."""

    def __init__(self, value: t.Any) -> None:  # noqa: ANN401
        self.value = value

    def produce(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Return the configured value."""
        return self.value

    def describe(self) -> str:
        """Describe the returned value."""
        return f"return user-specified value {self.value!r}"


class ConsecutiveReturns(ResponseGenerator):
    """Return ``values`` one per call, then fall back to the default value."""

    def __init__(self, values: t.Iterable[t.Any]) -> None:
        self.values = list(values)
        self._position = 0

    def produce(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Return the next value, or the generated default once exhausted."""
        if self._position >= len(self.values):
            return record.generate_return_value()
        value = self.values[self._position]
        self._position += 1
        if isinstance(value, ResponseGenerator):
            return value.produce(record)
        return value

    def describe(self) -> str:
        """Describe the value sequence."""
        return "return user-specified values in order " + ", ".join(
            repr(value) for value in self.values
        )


class ReturnCallback(ResponseGenerator):
    """Return ``func(*arguments)`` for each call."""

    def __init__(self, func: t.Callable[..., t.Any]) -> None:
        self.func = func

    def produce(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Call ``func`` with the record's arguments."""
        return self.func(*record.arguments)

    def describe(self) -> str:
        """Return ``return result of user defined callback``."""
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"return result of user defined callback {name}"


class ReturnArgument(ResponseGenerator):
    """Return the positional argument at ``index``."""

    def __init__(self, index: int) -> None:
        self.index = index

    def produce(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Return ``record.arguments[index]`` or ``None`` when absent."""
        if self.index < len(record.arguments):
            return record.arguments[self.index]
        return None

    def describe(self) -> str:
        """Return ``return argument #<index>``."""
        return f"return argument #{self.index}"


class ReturnSelf(ResponseGenerator):
    """Return the double the call was made on."""

    def produce(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Return ``record.target``."""
        return record.target

    def describe(self) -> str:
        """Return ``return the current object``."""
        return "return the current object"


class ReturnValueMap(ResponseGenerator):
    """Look up the return value by argument tuple.

    Each entry holds the expected arguments followed by the value to return,
    e.g. ``[("a", "b", 1), ("c", "d", 2)]``.
    """

    def __init__(self, entries: t.Iterable[t.Sequence[t.Any]]) -> None:
        self.entries = [tuple(entry) for entry in entries]

    def produce(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Return the value mapped to the call's arguments."""
        for entry in self.entries:
            *arguments, value = entry
            if tuple(arguments) == tuple(record.arguments):
                return value
        return record.generate_return_value()

    def describe(self) -> str:
        """Return ``return value from a map``."""
        return "return value from a map"


class RaiseException(ResponseGenerator):
    """Raise ``exception`` instead of returning."""

    def __init__(self, exception: BaseException) -> None:
        self.exception = exception

    def produce(self, record: CallRecord) -> t.NoReturn:
        """Raise the configured exception."""
        raise self.exception

    def describe(self) -> str:
        """Describe the raised exception."""
        return (
            f"raise user-specified exception {type(self.exception).__name__}: "
            f"{self.exception}"
        )


__all__ = [
    "ConsecutiveReturns",
    "RaiseException",
    "ResponseGenerator",
    "ReturnArgument",
    "ReturnCallback",
    "ReturnSelf",
    "ReturnValue",
    "ReturnValueMap",
]
