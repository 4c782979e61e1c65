"""Global test configuration and shared fixtures."""

from __future__ import annotations

import pytest

from method_mox.doubles import InvocationHandler, MockObject
from method_mox.unittests._spec_helpers import Writer

pytest_plugins = ("method_mox.pytest_plugin", "pytester")


@pytest.fixture
def handler() -> InvocationHandler:
    """Return a mock-kind handler for :class:`Writer`."""
    return InvocationHandler(Writer)


@pytest.fixture
def writer(handler: InvocationHandler) -> MockObject:
    """Return a mock :class:`Writer` backed by ``handler``."""
    return MockObject(handler)
