"""Test doubles routing calls through registered expectations."""

from __future__ import annotations

import enum
import inspect
import logging
import typing as t

from .call_record import CallRecord
from .errors import (
    ConfigurationError,
    ExcessInvocationError,
    MethodCannotBeConfiguredError,
    UnexpectedCallError,
)
from .expectations import Expectation
from .rules.invocation_count import AnyInvokedCount, InvocationCountRule
from .verifiers import describe_expectations, format_sections

logger = logging.getLogger(__name__)

_HANDLER_ATTR = "_method_mox_handler"


class DoubleKind(enum.StrEnum):
    """Kinds of test doubles."""

    STUB = "stub"
    MOCK = "mock"


class InvocationHandler:
    """Own a double's expectations and route each call to one of them.

    The handler is the registry expectations use to resolve ``after()``
    links. Expectations hold only a weak reference back to it.
    """

    def __init__(
        self,
        spec: type | None = None,
        *,
        kind: DoubleKind = DoubleKind.MOCK,
        name: str | None = None,
    ) -> None:
        self.spec = spec
        self.kind = kind
        if name is None:
            name = spec.__qualname__ if spec is not None else "MockObject"
        self.name = name
        self._expectations: list[Expectation] = []
        self._ids: dict[str, Expectation] = {}
        self._signatures: dict[str, tuple[inspect.Signature | None, t.Any]] = {}
        self.calls: list[CallRecord] = []
        self.unexpected: list[CallRecord] = []

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"<InvocationHandler {self.name} ({self.kind})>"

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    @property
    def expectations(self) -> list[Expectation]:
        """Return the registered expectations in routing order."""
        return list(self._expectations)

    def register(self, expectation: Expectation) -> None:
        """Append *expectation* to the routing order."""
        expectation.bind(self)
        self._expectations.append(expectation)

    def register_id(self, expectation_id: str, expectation: Expectation) -> None:
        """Make *expectation* resolvable as *expectation_id*."""
        existing = self._ids.get(expectation_id)
        if existing is not None and existing is not expectation:
            msg = f"Expectation with id {expectation_id!r} is already registered"
            raise ConfigurationError(msg)
        self._ids[expectation_id] = expectation

    def lookup(self, expectation_id: str) -> Expectation | None:
        """Return the expectation registered as *expectation_id*, if any."""
        return self._ids.get(expectation_id)

    def unregister(self, expectation: Expectation) -> None:
        """Remove *expectation* and every id that resolves to it."""
        self._expectations = [e for e in self._expectations if e is not expectation]
        self._ids = {
            key: value for key, value in self._ids.items() if value is not expectation
        }

    def ensure_configurable(self, method_name: str) -> None:
        """Raise if *method_name* is not a callable attribute of the spec class."""
        if self.spec is None:
            return
        if not callable(getattr(self.spec, method_name, None)):
            raise MethodCannotBeConfiguredError(method_name, self.spec.__qualname__)

    def expects(self, count_rule: InvocationCountRule | None = None) -> Expectation:
        """Create, register and return a new expectation."""
        rule = count_rule if count_rule is not None else AnyInvokedCount()
        if self.kind is DoubleKind.STUB and not isinstance(rule, AnyInvokedCount):
            msg = (
                f"{self.name} is a stub; call count expectations require a mock "
                f"(got {rule.describe()!r})"
            )
            raise ConfigurationError(msg)
        expectation = Expectation(count_rule=rule)
        self.register(expectation)
        return expectation

    # ------------------------------------------------------------------
    # Call routing
    # ------------------------------------------------------------------
    def signature_for(self, method_name: str) -> tuple[inspect.Signature | None, t.Any]:
        """Return the instance signature and return annotation of a spec method."""
        cached = self._signatures.get(method_name)
        if cached is not None:
            return cached
        result = _inspect_method(self.spec, method_name)
        self._signatures[method_name] = result
        return result

    def record_call(
        self,
        target: object,
        method_name: str,
        args: tuple[t.Any, ...],
        kwargs: dict[str, t.Any],
    ) -> CallRecord:
        """Build a :class:`CallRecord` with arguments in declaration order."""
        signature, return_annotation = self.signature_for(method_name)
        if signature is None:
            arguments = (*args, *kwargs.values())
        else:
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()
            arguments = _declared_order(signature, bound)
        return CallRecord(
            target=target,
            class_name=self.name,
            method_name=method_name,
            arguments=arguments,
            return_annotation=return_annotation,
        )

    def invoke(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Route *record* to the first matching expectation; return its response."""
        self.calls.append(record)
        for expectation in self._expectations:
            if expectation.matches(record):
                logger.debug(
                    "Routing %s to expectation %s",
                    record.describe(),
                    expectation.describe(),
                )
                value = expectation.invoked(record)
                record.respond(value)
                return value
        return self._handle_unmatched(record)

    def _find_saturated(self, record: CallRecord) -> Expectation | None:
        for expectation in reversed(self._expectations):
            rule = expectation.method_name_rule
            if rule is not None and expectation.is_saturated and rule.matches(record):
                return expectation
        return None

    def _handle_unmatched(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        saturated = self._find_saturated(record)
        if saturated is not None:
            self.unexpected.append(record)
            try:
                saturated.invoked(record)
            except ExcessInvocationError:
                logger.debug("Excess call %s", record.describe())
                raise
        if self.kind is DoubleKind.STUB:
            value = record.generate_return_value()
            record.respond(value)
            return value
        if saturated is None:
            self.unexpected.append(record)
        logger.debug("Unexpected call %s", record.describe())
        msg = format_sections(
            f"{record.describe()} was not expected to be called.",
            [("Registered expectations", describe_expectations(self._expectations))],
        )
        raise UnexpectedCallError(msg)


def _declared_order(
    signature: inspect.Signature, bound: inspect.BoundArguments
) -> tuple[t.Any, ...]:
    """Return every bound value, defaults included, in declaration order."""
    values: list[t.Any] = []
    for name, parameter in signature.parameters.items():
        value = bound.arguments[name]
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            values.extend(value)
        elif parameter.kind is inspect.Parameter.VAR_KEYWORD:
            values.extend(value.values())
        else:
            values.append(value)
    return tuple(values)


def _inspect_method(
    spec: type | None, method_name: str
) -> tuple[inspect.Signature | None, t.Any]:
    """Return the instance-level signature and return annotation of a method."""
    if spec is None:
        return None, inspect.Signature.empty
    func = getattr(spec, method_name, None)
    if func is None:
        return None, inspect.Signature.empty
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None, inspect.Signature.empty
    static = inspect.getattr_static(spec, method_name, None)
    if inspect.isfunction(static):
        # Plain methods looked up on the class still carry ``self``.
        parameters = list(signature.parameters.values())[1:]
        signature = signature.replace(parameters=parameters)
    try:
        hints = t.get_type_hints(func)
    except Exception:  # noqa: BLE001 - unresolved forward references
        hints = {}
    return signature, hints.get("return", signature.return_annotation)


class _MockMethod:
    """Callable standing in for one method of a double."""

    __slots__ = ("_handler", "_name", "_target")

    def __init__(
        self, target: MockObject, handler: InvocationHandler, name: str
    ) -> None:
        self._target = target
        self._handler = handler
        self._name = name

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> t.Any:  # noqa: ANN401
        record = self._handler.record_call(self._target, self._name, args, kwargs)
        return self._handler.invoke(record)

    def __repr__(self) -> str:
        return f"<mocked method {self._handler.name}.{self._name}>"


class MockObject:
    """Attribute-forwarding stand-in for an instance of ``spec``."""

    __slots__ = (_HANDLER_ATTR, "__weakref__")

    def __init__(self, handler: InvocationHandler) -> None:
        object.__setattr__(self, _HANDLER_ATTR, handler)

    @property  # type: ignore[misc]
    def __class__(self) -> type:  # type: ignore[override]
        """Report the spec class so ``isinstance`` checks pass."""
        spec = handler_of(self).spec
        return spec if spec is not None else MockObject

    def __getattr__(self, name: str) -> _MockMethod:
        if name.startswith("_"):
            msg = f"'{handler_of(self).name}' double has no attribute {name!r}"
            raise AttributeError(msg)
        handler = handler_of(self)
        try:
            handler.ensure_configurable(name)
        except MethodCannotBeConfiguredError as err:
            raise AttributeError(str(err)) from err
        return _MockMethod(self, handler, name)

    def __setattr__(self, name: str, value: object) -> None:
        msg = f"Cannot set attribute {name!r} on a test double"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        handler = handler_of(self)
        return f"<{handler.kind} {handler.name}>"


def handler_of(double: MockObject) -> InvocationHandler:
    """Return the :class:`InvocationHandler` behind *double*."""
    try:
        return object.__getattribute__(double, _HANDLER_ATTR)
    except AttributeError:
        msg = f"{double!r} is not a method_mox test double"
        raise TypeError(msg) from None


def create_double(
    spec: type | None = None,
    *,
    kind: DoubleKind = DoubleKind.MOCK,
    name: str | None = None,
) -> MockObject:
    """Return a new double for *spec*."""
    return MockObject(InvocationHandler(spec, kind=kind, name=name))


def expect(
    double: MockObject, count_rule: InvocationCountRule | None = None
) -> Expectation:
    """Declare an expectation on *double*; chain ``.method(...)`` next."""
    return handler_of(double).expects(count_rule)


def allow(double: MockObject) -> Expectation:
    """Declare an expectation accepting any number of calls."""
    return handler_of(double).expects(AnyInvokedCount())
