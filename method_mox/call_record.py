"""Snapshot of a single call made against a test double."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import inspect
import types
import typing as t

from .errors import ResponseAlreadySetError

_REPR_FIELD_LIMIT = 60

_SCALAR_DEFAULTS: dict[t.Any, t.Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    complex: 0j,
    str: "",
    bytes: b"",
}

_CONTAINER_FACTORIES: dict[t.Any, t.Callable[[], t.Any]] = {
    list: list,
    dict: dict,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    cabc.Sequence: list,
    cabc.MutableSequence: list,
    cabc.Mapping: dict,
    cabc.MutableMapping: dict,
    cabc.Set: frozenset,
    cabc.MutableSet: set,
}

_ITERATOR_ORIGINS = (
    cabc.Iterator,
    cabc.Iterable,
    cabc.Generator,
)

_UNSET = object()


def _shorten(text: str, limit: int) -> str:
    """Return *text* truncated to *limit* characters with an ellipsis."""
    return text if len(text) <= limit else text[: limit - 3] + "..."


def default_for_annotation(annotation: t.Any) -> t.Any:  # noqa: ANN401, PLR0911
    """Return a neutral value appropriate for the return *annotation*."""
    if annotation is inspect.Signature.empty or annotation is None:
        return None
    if annotation is type(None):
        return None
    if annotation in _SCALAR_DEFAULTS:
        return _SCALAR_DEFAULTS[annotation]
    origin = t.get_origin(annotation) or annotation
    if origin is t.Union or origin is types.UnionType:
        # Optional values default to ``None``; other unions follow their
        # first member.
        members = t.get_args(annotation)
        if type(None) in members:
            return None
        return default_for_annotation(members[0])
    if origin in _CONTAINER_FACTORIES:
        return _CONTAINER_FACTORIES[origin]()
    if origin in _ITERATOR_ORIGINS:
        return iter(())
    return None


@dc.dataclass(slots=True, eq=False)
class CallRecord:
    """Information captured for one call on a test double.

    The record is created by the double for each call and routed to exactly
    one expectation. The response slot may be filled at most once.
    """

    target: object
    class_name: str
    method_name: str
    arguments: tuple[t.Any, ...] = ()
    return_annotation: t.Any = inspect.Signature.empty
    _response: t.Any = dc.field(default=_UNSET, init=False, repr=False)

    @property
    def has_response(self) -> bool:
        """Return ``True`` once :meth:`respond` has been called."""
        return self._response is not _UNSET

    @property
    def response(self) -> t.Any:  # noqa: ANN401
        """Return the value stored in the response slot."""
        if self._response is _UNSET:
            msg = f"No response has been set for {self.describe()}"
            raise LookupError(msg)
        return self._response

    def respond(self, value: t.Any) -> None:  # noqa: ANN401
        """Fill the response slot with *value*."""
        if self._response is not _UNSET:
            msg = f"Response for {self.describe()} has already been set"
            raise ResponseAlreadySetError(msg)
        self._response = value

    def generate_return_value(self) -> t.Any:  # noqa: ANN401
        """Return a neutral value matching the mocked method's return type."""
        return default_for_annotation(self.return_annotation)

    def describe(self) -> str:
        """Return ``Class.method(arg, ...)`` for diagnostics."""
        args = ", ".join(
            _shorten(repr(arg), _REPR_FIELD_LIMIT) for arg in self.arguments
        )
        return f"{self.class_name}.{self.method_name}({args})"

    def __repr__(self) -> str:
        """Return a convenient debug representation."""
        return f"CallRecord({self.describe()})"
