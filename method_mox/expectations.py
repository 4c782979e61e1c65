"""Expectation matching and verification for test doubles.

An :class:`Expectation` composes one invocation count rule, one method name
rule, an optional parameter rule and an optional response generator. The
owning double asks each registered expectation :meth:`Expectation.matches`
in registration order and routes the call to the first match via
:meth:`Expectation.invoked`. At teardown every expectation receives
:meth:`Expectation.verify`.
"""

from __future__ import annotations

import dataclasses as dc
import typing as t
import weakref

from .errors import (
    ConfigurationError,
    LinkedExpectationNotFoundError,
    MethodNameNotConfiguredError,
    ParameterMismatchError,
    VerificationError,
)
from .responses import (
    ConsecutiveReturns,
    RaiseException,
    ResponseGenerator,
    ReturnArgument,
    ReturnCallback,
    ReturnSelf,
    ReturnValue,
    ReturnValueMap,
)
from .rules.invocation_count import AnyInvokedCount, CountKind, InvocationCountRule
from .rules.method_name import MethodName
from .rules.parameters import AnyParameters, Parameters, ParametersRule

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .call_record import CallRecord
    from .constraints import Constraint

# Count rules for which zero calls are acceptable; there are no arguments to
# verify when nothing was called.
_PARAMETERS_UNVERIFIED: frozenset[CountKind] = frozenset(
    {CountKind.ANY, CountKind.NEVER, CountKind.AT_MOST}
)


class ExpectationRegistry(t.Protocol):
    """Lookup service owned by a test double."""

    def register(self, expectation: Expectation) -> None:
        """Add *expectation* to the double's routing order."""
        ...

    def register_id(self, expectation_id: str, expectation: Expectation) -> None:
        """Make *expectation* resolvable as *expectation_id*."""
        ...

    def lookup(self, expectation_id: str) -> Expectation | None:
        """Return the expectation registered as *expectation_id*."""
        ...

    def ensure_configurable(self, method_name: str) -> None:
        """Raise if *method_name* does not exist on the double's spec."""
        ...


@dc.dataclass(slots=True, eq=False)
class Expectation:
    """Declared rule for how a method on a double should be called."""

    count_rule: InvocationCountRule = dc.field(default_factory=AnyInvokedCount)
    method_name_rule: MethodName | None = None
    parameter_rule: ParametersRule | None = None
    response_generator: ResponseGenerator | None = None
    predecessor_id: str | None = None
    sequence_position: int | None = None
    order_enforced: bool = False
    expectation_id: str | None = None
    _registry_ref: weakref.ReferenceType[ExpectationRegistry] | None = dc.field(
        default=None, repr=False
    )

    @classmethod
    def extending(
        cls,
        previous: Expectation,
        count_rule: InvocationCountRule | None = None,
    ) -> Expectation:
        """Create the next link of the call chain started by *previous*."""
        method_rule = previous.require_method_name_rule()
        position = previous.sequence_position
        expectation = cls(
            count_rule=count_rule if count_rule is not None else AnyInvokedCount(),
            method_name_rule=method_rule,
            sequence_position=(position if position is not None else 0) + 1,
            order_enforced=previous.order_enforced,
        )
        if previous.order_enforced:
            expectation.predecessor_id = previous.chain_id
        return expectation

    # ------------------------------------------------------------------
    # Registry binding
    # ------------------------------------------------------------------
    def bind(self, registry: ExpectationRegistry) -> None:
        """Attach the registry used to resolve predecessor ids."""
        self._registry_ref = weakref.ref(registry)

    @property
    def registry(self) -> ExpectationRegistry | None:
        """Return the owning registry, or ``None`` if unbound or gone."""
        if self._registry_ref is None:
            return None
        return self._registry_ref()

    def _require_registry(self, action: str) -> ExpectationRegistry:
        registry = self.registry
        if registry is None:
            msg = (
                f"Cannot call {action}(): expectation is not registered "
                "with a double"
            )
            raise ConfigurationError(msg)
        return registry

    def _resolve_predecessor(self) -> Expectation | None:
        if self.predecessor_id is None:
            return None
        registry = self.registry
        predecessor = (
            registry.lookup(self.predecessor_id) if registry is not None else None
        )
        if predecessor is None:
            raise LinkedExpectationNotFoundError(self.predecessor_id)
        return predecessor

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------
    def require_method_name_rule(self) -> MethodName:
        """Return the method name rule or raise if it was never set."""
        if self.method_name_rule is None:
            raise MethodNameNotConfiguredError
        return self.method_name_rule

    def has_been_invoked(self) -> bool:
        """Return ``True`` once a call has been routed to this expectation."""
        return self.count_rule.has_been_invoked()

    @property
    def is_saturated(self) -> bool:
        """Return ``True`` when the count rule accepts no further calls."""
        return not self.count_rule.matches()

    @property
    def chain_id(self) -> str:
        """Return the identity of this expectation within its call chain."""
        method_rule = self.require_method_name_rule()
        return f"{method_rule.describe()} call #{self.sequence_position or 0}"

    # ------------------------------------------------------------------
    # Matching and verification
    # ------------------------------------------------------------------
    def matches(self, record: CallRecord) -> bool:
        """Return ``True`` if *record* may be routed to this expectation."""
        predecessor = self._resolve_predecessor()
        if predecessor is not None and not predecessor.has_been_invoked():
            return False
        method_rule = self.require_method_name_rule()
        if not self.count_rule.matches():
            return False
        if not method_rule.matches(record):
            return False
        if self.sequence_position is not None and self.parameter_rule is not None:
            return self.parameter_rule.match(record)
        return True

    def invoked(self, record: CallRecord) -> t.Any:  # noqa: ANN401
        """Commit *record* and return the response for the call."""
        method_rule = self.require_method_name_rule()
        self._resolve_predecessor()
        self.count_rule.invoked(record)
        if self.parameter_rule is not None:
            try:
                self.parameter_rule.apply(record)
            except ParameterMismatchError as err:
                msg = (
                    f"Expectation failed for {method_rule.describe()} when "
                    f"{self.count_rule.describe()}\n{err}"
                )
                raise ParameterMismatchError(msg, position=err.position) from err
        if self.response_generator is not None:
            return self.response_generator.produce(record)
        return record.generate_return_value()

    def verify(self) -> None:
        """Raise :class:`VerificationError` if the expectation was not met."""
        method_rule = self.require_method_name_rule()
        try:
            self.count_rule.verify()
            if self.parameter_rule is None:
                self.parameter_rule = AnyParameters()
            if self.count_rule.kind not in _PARAMETERS_UNVERIFIED:
                self.parameter_rule.verify()
        except VerificationError as err:
            msg = (
                f"Expectation failed for {method_rule.describe()} when "
                f"{self.count_rule.describe()}.\n{err}"
            )
            if isinstance(err, ParameterMismatchError):
                raise ParameterMismatchError(msg, position=err.position) from err
            raise type(err)(msg) from err

    def describe(self) -> str:
        """Return a readable summary used in diagnostics."""
        parts = [self.count_rule.describe()]
        if self.method_name_rule is not None:
            parts.append(f"where {self.method_name_rule.describe()}")
        if self.parameter_rule is not None:
            parts.append(f"and {self.parameter_rule.describe()}")
        if self.predecessor_id is not None:
            parts.append(f"after {self.predecessor_id}")
        if self.response_generator is not None:
            parts.append(f"will {self.response_generator.describe()}")
        return " ".join(parts)

    # ------------------------------------------------------------------
    # Builder API
    # ------------------------------------------------------------------
    def method(self, name: str | Constraint) -> Expectation:
        """Restrict this expectation to calls of the method *name*."""
        if self.method_name_rule is not None:
            msg = "Method name rule is already defined, cannot redefine"
            raise ConfigurationError(msg)
        registry = self.registry
        if isinstance(name, str) and registry is not None:
            registry.ensure_configurable(name)
        self.method_name_rule = MethodName(name)
        return self

    def with_args(self, *values: t.Any) -> Expectation:  # noqa: ANN401
        """Require positional arguments matching *values*.

        Values that are not :class:`~method_mox.constraints.Constraint`
        instances are compared with ``IsEqual``.
        """
        self._set_parameter_rule(Parameters(values))
        return self

    def with_any_parameters(self) -> Expectation:
        """Accept calls with any arguments."""
        self._set_parameter_rule(AnyParameters())
        return self

    def _set_parameter_rule(self, rule: ParametersRule) -> None:
        self.require_method_name_rule()
        if self.parameter_rule is not None:
            msg = "Parameter rule is already defined, cannot redefine"
            raise ConfigurationError(msg)
        self.parameter_rule = rule

    def will(self, generator: ResponseGenerator) -> Expectation:
        """Produce responses with *generator*."""
        self.response_generator = generator
        return self

    def will_return(self, *values: t.Any) -> Expectation:  # noqa: ANN401
        """Return *values*; several values are returned one per call."""
        if not values:
            msg = "will_return() requires at least one value"
            raise TypeError(msg)
        if len(values) == 1:
            return self.will(ReturnValue(values[0]))
        return self.will(ConsecutiveReturns(values))

    def will_return_callback(self, func: t.Callable[..., t.Any]) -> Expectation:
        """Return ``func(*args)`` for each call."""
        return self.will(ReturnCallback(func))

    def will_return_argument(self, index: int) -> Expectation:
        """Return the positional argument at *index*."""
        return self.will(ReturnArgument(index))

    def will_return_self(self) -> Expectation:
        """Return the double itself."""
        return self.will(ReturnSelf())

    def will_return_map(self, entries: t.Iterable[t.Sequence[t.Any]]) -> Expectation:
        """Return values looked up by argument tuple."""
        return self.will(ReturnValueMap(entries))

    def will_raise(self, exception: BaseException) -> Expectation:
        """Raise *exception* when called."""
        return self.will(RaiseException(exception))

    def identified_by(self, expectation_id: str) -> Expectation:
        """Register this expectation under *expectation_id* for ``after()``."""
        registry = self._require_registry("identified_by")
        registry.register_id(expectation_id, self)
        self.expectation_id = expectation_id
        return self

    def after(self, expectation_id: str) -> Expectation:
        """Only match once the expectation *expectation_id* has been invoked."""
        self.predecessor_id = expectation_id
        return self

    def in_order(self) -> Expectation:
        """Make chain links created by :meth:`then` wait for this one."""
        self.order_enforced = True
        return self

    def any_order(self) -> Expectation:
        """Allow chain links created by :meth:`then` to match independently."""
        self.order_enforced = False
        return self

    def then(self, count_rule: InvocationCountRule | None = None) -> Expectation:
        """Declare the next call of the same method and return its expectation."""
        registry = self._require_registry("then")
        if self.sequence_position is None:
            self.sequence_position = 0
        if self.order_enforced:
            registry.register_id(self.chain_id, self)
        expectation = Expectation.extending(self, count_rule)
        registry.register(expectation)
        return expectation
