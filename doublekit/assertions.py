"""
Static assertion helpers.

Each helper inspects a double's recorded calls and raises CallAssertionError
describing expected vs. actual. None of them mutate the double.

Usage:
    callback = create_spy()
    my_function(True, callback)

    assert_called_once(callback)
    assert_called_with(spy, match({"fname": "Mike"}))
"""

from typing import Any

from doublekit.config import settings
from doublekit.calls import describe_matchers, normalize_matchers
from doublekit.double import Double
from doublekit.errors import CallAssertionError


def _history(double: Double) -> str:
    calls = double.calls
    shown = calls[: settings.max_calls_in_errors]
    text = "\n".join(f"    {call.describe()}" for call in shown)
    if len(calls) > len(shown):
        text += f"\n    ... ({len(calls) - len(shown)} more)"
    return text or "    (no calls)"


def _count_failure(double: Double, expected: str) -> CallAssertionError:
    return CallAssertionError(
        f"expected {double.name} to be called {expected} "
        f"but was called {double.call_count} time(s)\n{_history(double)}"
    )


def assert_called(double: Double) -> None:
    if not double.called:
        raise _count_failure(double, "at least once")


def assert_not_called(double: Double) -> None:
    if double.called:
        raise _count_failure(double, "never")


def assert_called_once(double: Double) -> None:
    if not double.called_once:
        raise _count_failure(double, "once")


def assert_call_count(double: Double, count: int) -> None:
    if double.call_count != count:
        raise _count_failure(double, f"{count} time(s)")


def assert_called_with(double: Double, *matchers: Any, **kw_matchers: Any) -> None:
    """Pass if at least one recorded call matches the given arguments."""
    positional, keywords = normalize_matchers(matchers, kw_matchers)
    if double.matching_calls(positional, keywords):
        return
    raise CallAssertionError(
        f"expected {double.name} to be called with "
        f"{describe_matchers(positional, keywords)}\n{_history(double)}"
    )
