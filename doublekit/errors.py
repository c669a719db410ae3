"""
Error hierarchy for doublekit.

All framework errors derive from DoubleError so callers can catch the whole
family at once. Errors that represent a failed check (verification and
assertion helpers) also derive from AssertionError so test runners report
them as failures rather than errors.
"""

from typing import List, Sequence


class DoubleError(Exception):
    """Base class for all doublekit errors."""
    pass


class TargetError(DoubleError):
    """Raised when a target attribute cannot be wrapped."""

    def __init__(self, target: object, name: str, reason: str):
        self.target = target
        self.name = name
        self.reason = reason
        super().__init__(
            f"Cannot wrap {type(target).__name__}.{name}: {reason}"
        )


class RestoreError(DoubleError):
    """Raised when restore() is called on a double that is not installed."""
    pass


class MockRestoreError(RestoreError):
    """Raised when one or more restores failed during a bulk restore."""

    def __init__(self, failures: Sequence[Exception]):
        self.failures: List[Exception] = list(failures)
        details = "\n".join(f"  - {failure}" for failure in self.failures)
        super().__init__(
            f"{len(self.failures)} restore(s) failed:\n{details}"
        )


class NoSuchCallError(DoubleError, IndexError):
    """Raised when a call position is beyond the recorded history."""

    def __init__(self, double_name: str, position: int, call_count: int):
        self.position = position
        self.call_count = call_count
        super().__init__(
            f"{double_name} has no call at position {position} "
            f"(recorded {call_count} call(s))"
        )


class ExpectationError(DoubleError, AssertionError):
    """Raised by MockHandle.verify() with every unmet expectation."""

    def __init__(self, violations: Sequence[str]):
        self.violations: List[str] = list(violations)
        details = "\n".join(f"  - {violation}" for violation in self.violations)
        super().__init__(
            f"{len(self.violations)} expectation(s) not met:\n{details}"
        )


class CallAssertionError(AssertionError):
    """Raised by the static assertion helpers."""
    pass
