"""
doublekit - Spies, stubs and mocks for Python tests.

All doubles share one call-recording core. There is no global registry:
every double and mock handle owns only its own installations.

Modules:
    double: Call-recording core, spies, stubs and wrap()
    mock: Expectations and mock handles
    matchers: Argument matchers (literal, subset, type, predicate)
    calls: Immutable call records
    assertions: Static assertion helpers
    sandbox: Grouped cleanup of doubles and mocks
    errors: Error hierarchy

Usage:
    from doublekit import create_spy, wrap, create_mock, match
"""

import logging

from doublekit.config import Settings, settings
from doublekit.assertions import (
    assert_call_count,
    assert_called,
    assert_called_once,
    assert_called_with,
    assert_not_called,
)
from doublekit.calls import CallRecord
from doublekit.double import (
    Behavior,
    BehaviorKind,
    Double,
    Spy,
    Stub,
    StubBranch,
    create_spy,
    create_stub,
    wrap,
)
from doublekit.errors import (
    CallAssertionError,
    DoubleError,
    ExpectationError,
    MockRestoreError,
    NoSuchCallError,
    RestoreError,
    TargetError,
)
from doublekit.matchers import (
    ANY,
    AnyValue,
    InstanceOf,
    Literal,
    Matcher,
    Predicate,
    SubsetOf,
    instance_of,
    match,
)
from doublekit.mock import Expectation, MockHandle, create_mock
from doublekit.sandbox import Sandbox, sandboxed

__version__ = "0.1.0"


def configure_logging(config: Settings = settings) -> None:
    """Apply DOUBLEKIT_LOG_LEVEL to the "doublekit" logger, only when it is set."""
    if config.log_level is not None:
        logging.getLogger(__name__).setLevel(config.log_level)


configure_logging()

__all__ = [
    "ANY",
    "AnyValue",
    "Behavior",
    "BehaviorKind",
    "CallAssertionError",
    "CallRecord",
    "Double",
    "DoubleError",
    "Expectation",
    "ExpectationError",
    "InstanceOf",
    "Literal",
    "Matcher",
    "MockHandle",
    "MockRestoreError",
    "NoSuchCallError",
    "Predicate",
    "RestoreError",
    "Sandbox",
    "Spy",
    "Stub",
    "StubBranch",
    "SubsetOf",
    "TargetError",
    "assert_call_count",
    "assert_called",
    "assert_called_once",
    "assert_called_with",
    "assert_not_called",
    "configure_logging",
    "create_mock",
    "create_spy",
    "create_stub",
    "instance_of",
    "match",
    "sandboxed",
    "wrap",
]
