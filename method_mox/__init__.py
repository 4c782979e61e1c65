"""Method-level test doubles built around an expectation-matching engine.

Declare expectations on a double, exercise the code under test, then verify::

    mox = MethodMox()
    repo = mox.mock(Repository)
    mox.expect(repo, once()).method("load").with_args(42).will_return(record)
    service.run(repo)
    mox.verify()
"""

from __future__ import annotations

from .call_record import CallRecord
from .constraints import (
    Anything,
    Callback,
    Constraint,
    ConstraintResult,
    Contains,
    IsA,
    IsEqual,
    IsIdentical,
    Regex,
    StartsWith,
)
from .controller import MethodMox, Phase
from .doubles import (
    DoubleKind,
    InvocationHandler,
    MockObject,
    allow,
    create_double,
    expect,
    handler_of,
)
from .errors import (
    ConfigurationError,
    ExcessInvocationError,
    LifecycleError,
    LinkedExpectationNotFoundError,
    MethodCannotBeConfiguredError,
    MethodMoxError,
    MethodNameNotConfiguredError,
    ParameterMismatchError,
    ResponseAlreadySetError,
    UnexpectedCallError,
    UnsatisfiedCountError,
    VerificationError,
)
from .expectations import Expectation
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
from .rules import (
    any_count,
    at_least,
    at_most,
    between,
    exactly,
    never,
    once,
)

__all__ = [
    "Anything",
    "CallRecord",
    "Callback",
    "ConfigurationError",
    "ConsecutiveReturns",
    "Constraint",
    "ConstraintResult",
    "Contains",
    "DoubleKind",
    "ExcessInvocationError",
    "Expectation",
    "InvocationHandler",
    "IsA",
    "IsEqual",
    "IsIdentical",
    "LifecycleError",
    "LinkedExpectationNotFoundError",
    "MethodCannotBeConfiguredError",
    "MethodMox",
    "MethodMoxError",
    "MethodNameNotConfiguredError",
    "MockObject",
    "ParameterMismatchError",
    "Phase",
    "RaiseException",
    "Regex",
    "ResponseAlreadySetError",
    "ResponseGenerator",
    "ReturnArgument",
    "ReturnCallback",
    "ReturnSelf",
    "ReturnValue",
    "ReturnValueMap",
    "StartsWith",
    "UnexpectedCallError",
    "UnsatisfiedCountError",
    "VerificationError",
    "allow",
    "any_count",
    "at_least",
    "at_most",
    "between",
    "create_double",
    "exactly",
    "expect",
    "handler_of",
    "never",
    "once",
]
