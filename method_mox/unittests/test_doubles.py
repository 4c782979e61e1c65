"""Unit tests for test doubles and call routing."""

from __future__ import annotations

import logging

import pytest

from method_mox.constraints import Callback, IsA
from method_mox.doubles import (
    DoubleKind,
    InvocationHandler,
    MockObject,
    allow,
    create_double,
    expect,
    handler_of,
)
from method_mox.errors import (
    ConfigurationError,
    ExcessInvocationError,
    MethodCannotBeConfiguredError,
    ParameterMismatchError,
    UnexpectedCallError,
)
from method_mox.rules.invocation_count import exactly, never, once
from method_mox.unittests._spec_helpers import CountingCallback, Writer


class Store:
    """Spec class with defaulted parameters between required ones."""

    def put(self, key: str, mode: str = "w", *, flush: bool = False) -> None:
        """Store *key*."""

    def extend(self, key: str, *values: int, **options: bool) -> None:
        """Append *values* under *key*."""


def test_routes_to_first_matching_expectation(writer: MockObject) -> None:
    """Registration order decides which eligible expectation wins."""
    expect(writer, once()).method("write").will_return(1)
    expect(writer, once()).method("write").will_return(2)
    assert writer.write("a") == 1
    assert writer.write("b") == 2


def test_response_fills_call_record(
    writer: MockObject, handler: InvocationHandler
) -> None:
    """The produced response is stored in the record's slot."""
    allow(writer).method("write").will_return(5)
    writer.write("a")
    (record,) = handler.calls
    assert record.has_response
    assert record.response == 5


def test_consecutive_calls_with_then(writer: MockObject) -> None:
    """then() declares per-call behaviour for repeated calls."""
    first = expect(writer, once()).method("read").will_return("a")
    first.then(once()).will_return("b")
    assert writer.read() == "a"
    assert writer.read() == "b"


def test_sequence_selected_by_arguments(writer: MockObject) -> None:
    """Calling the second link first selects it by its arguments."""
    first = expect(writer, once()).method("write").with_args("x").will_return(1)
    first.then(once()).with_args("y").will_return(2)
    assert writer.write("y") == 2
    assert writer.write("x") == 1


def test_excess_call_is_reported_immediately(
    writer: MockObject, handler: InvocationHandler
) -> None:
    """A saturated expectation surfaces the extra call as an error."""
    expect(writer, exactly(1)).method("flush")
    writer.flush()
    with pytest.raises(ExcessInvocationError):
        writer.flush()
    assert len(handler.unexpected) == 1


def test_mock_rejects_unexpected_call(
    writer: MockObject, handler: InvocationHandler
) -> None:
    """Mocks raise for calls no expectation accepts."""
    expect(writer, once()).method("write")
    with pytest.raises(UnexpectedCallError) as caught:
        writer.read()
    message = str(caught.value)
    assert message.startswith("Writer.read() was not expected to be called.")
    assert "1. invoked 1 time(s) where method name is equal to 'write'" in message
    assert [record.method_name for record in handler.unexpected] == ["read"]


def test_stub_returns_defaults_for_unexpected_calls() -> None:
    """Stubs answer unmatched calls with values matching the annotation."""
    stub = create_double(Writer, kind=DoubleKind.STUB)
    assert stub.write("x") == 0
    assert stub.read() == ""
    assert stub.flush() is False
    assert stub.tags() == []
    assert list(stub.lines()) == []
    assert stub.close() is None
    assert handler_of(stub).unexpected == []


def test_stub_rejects_count_expectations() -> None:
    """Stubs only accept any-count expectations."""
    stub = create_double(Writer, kind=DoubleKind.STUB)
    allow(stub).method("read").will_return("data")
    assert stub.read() == "data"
    with pytest.raises(ConfigurationError, match="is a stub"):
        expect(stub, once())


def test_parameter_mismatch_raises_at_call(writer: MockObject) -> None:
    """The routed call raises the parameter diagnostic."""
    expect(writer, once()).method("write").with_args(IsA(str))
    with pytest.raises(ParameterMismatchError, match=r"Writer\.write\(3\)"):
        writer.write(3)


def test_keyword_arguments_follow_declaration_order(
    writer: MockObject, handler: InvocationHandler
) -> None:
    """Keyword arguments are bound to the spec class signature."""
    allow(writer).method("seek").with_args(10, 2)
    writer.seek(whence=2, offset=10)
    assert handler.calls[0].arguments == (10, 2)


def test_keyword_only_arguments(
    writer: MockObject, handler: InvocationHandler
) -> None:
    """Keyword-only parameters are appended in call order."""
    allow(writer).method("configure")
    assert writer.configure(mode="fast", level=3) == {}
    assert handler.calls[0].arguments == ("fast", 3)


def test_invalid_call_signature_raises_type_error(writer: MockObject) -> None:
    """Calls not accepted by the spec class signature fail like real calls."""
    allow(writer).method("write")
    with pytest.raises(TypeError):
        writer.write("a", "b")


def test_unknown_attribute(writer: MockObject) -> None:
    """Attributes missing from the spec class raise AttributeError."""
    with pytest.raises(AttributeError, match="does not exist on Writer"):
        _ = writer.missing
    with pytest.raises(AttributeError):
        _ = writer._private


def test_double_is_instance_of_spec(writer: MockObject) -> None:
    """Doubles pass isinstance checks against their spec."""
    assert isinstance(writer, Writer)
    assert isinstance(writer, MockObject)


def test_double_rejects_attribute_assignment(writer: MockObject) -> None:
    """Doubles are read-only."""
    with pytest.raises(AttributeError):
        writer.write = None  # type: ignore[method-assign]


def test_double_without_spec_accepts_any_method() -> None:
    """A spec-less double forwards any public name."""
    double = create_double(name="Anything")
    allow(double).method("whatever").will_return_argument(1)
    assert double.whatever("a", "b") == "b"
    assert repr(double) == "<mock Anything>"


def test_never_expectation_fails_on_call(writer: MockObject) -> None:
    """A never() expectation records the call and saturates."""
    exp = expect(writer, never()).method("close")
    writer.close()
    assert exp.is_saturated
    with pytest.raises(ExcessInvocationError):
        writer.close()


def test_unknown_method_configuration() -> None:
    """Configuring a method missing from the spec class fails early."""
    double = create_double(Writer)
    with pytest.raises(MethodCannotBeConfiguredError):
        expect(double).method("missing")


def test_handler_of_rejects_other_objects() -> None:
    """Only doubles have handlers."""
    with pytest.raises(TypeError, match="not a method_mox test double"):
        handler_of(object())  # type: ignore[arg-type]


def test_routing_is_logged(
    writer: MockObject, caplog: pytest.LogCaptureFixture
) -> None:
    """Routing decisions are logged at debug level."""
    allow(writer).method("write")
    with caplog.at_level(logging.DEBUG, logger="method_mox.doubles"):
        writer.write("a")
    assert "Routing Writer.write('a') to expectation" in caplog.text


def test_omitted_defaults_keep_argument_positions() -> None:
    """Skipped defaulted parameters are recorded with their default value."""
    store = create_double(Store)
    expect(store, once()).method("put").with_args("k", "w", True)
    store.put("k", flush=True)
    (record,) = handler_of(store).calls
    assert record.arguments == ("k", "w", True)


def test_later_argument_does_not_shift_into_default_slot() -> None:
    """A constraint for the second parameter sees that parameter's value."""
    store = create_double(Store)
    expect(store, once()).method("put").with_args("k", True)
    with pytest.raises(ParameterMismatchError, match="Parameter 1"):
        store.put("k", flush=True)


def test_variadic_arguments_are_flattened_in_place() -> None:
    """*args and **kwargs values follow the declared parameter order."""
    store = create_double(Store)
    allow(store).method("extend")
    store.extend("k", 1, 2, replace=True)
    assert handler_of(store).calls[0].arguments == ("k", 1, 2, True)


def test_chain_member_evaluates_constraints_once(writer: MockObject) -> None:
    """Selecting and invoking a chain link runs each constraint once."""
    counter = CountingCallback("x")
    head = expect(writer, once()).method("write").with_args(Callback(counter))
    head.then(once())
    writer.write("x")
    assert counter.calls == 1
