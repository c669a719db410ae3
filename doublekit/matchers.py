"""
Argument matchers.

A matcher is a predicate over a single argument value. Plain values passed
where a matcher is expected are wrapped in Literal, so callers can mix both:

    stub.with_args("data", match({"id": 7})).returns(0)

Variants:
    Literal(value)      deep equality (==)
    SubsetOf(mapping)   value contains at least these key/value pairs
    AnyValue()          matches anything
    InstanceOf(type)    isinstance check
    Predicate(func)     arbitrary boolean function
"""

from collections.abc import Mapping
from typing import Any, Callable, Optional

from doublekit.config import settings

_MISSING = object()


def short_repr(value: Any) -> str:
    """repr() truncated to the configured maximum length."""
    text = repr(value)
    limit = settings.repr_max_length
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


class Matcher:
    """Base class for all matchers."""

    def test(self, value: Any) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.describe()


class Literal(Matcher):
    """Matches values equal to the expected one."""

    def __init__(self, expected: Any):
        self.expected = expected

    def test(self, value: Any) -> bool:
        try:
            return bool(value == self.expected)
        except Exception:
            # Objects with exotic __eq__ (e.g. arrays) simply do not match
            return False

    def describe(self) -> str:
        return short_repr(self.expected)


class SubsetOf(Matcher):
    """
    Matches values containing at least the given key/value pairs.

    Mappings are checked by key; any other object is checked by attribute.
    Expected values may themselves be matchers, which allows nesting.
    """

    def __init__(self, expected: Mapping):
        self.expected = {key: to_matcher(value) for key, value in expected.items()}

    def test(self, value: Any) -> bool:
        for key, matcher in self.expected.items():
            actual = _lookup(value, key)
            if actual is _MISSING or not matcher.test(actual):
                return False
        return True

    def describe(self) -> str:
        pairs = ", ".join(f"{key!r}: {matcher.describe()}" for key, matcher in self.expected.items())
        return f"match({{{pairs}}})"


class AnyValue(Matcher):
    """Matches any value, including None."""

    def test(self, value: Any) -> bool:
        return True

    def describe(self) -> str:
        return "ANY"


class InstanceOf(Matcher):

    def __init__(self, expected_type: type):
        self.expected_type = expected_type

    def test(self, value: Any) -> bool:
        return isinstance(value, self.expected_type)

    def describe(self) -> str:
        return f"instance_of({self.expected_type.__name__})"


class Predicate(Matcher):

    def __init__(self, func: Callable[[Any], bool], description: Optional[str] = None):
        self.func = func
        self.description = description or getattr(func, "__name__", "predicate")

    def test(self, value: Any) -> bool:
        return bool(self.func(value))

    def describe(self) -> str:
        return f"match({self.description})"


ANY = AnyValue()


def _lookup(value: Any, key: Any) -> Any:
    if isinstance(value, Mapping):
        return value.get(key, _MISSING)
    if isinstance(key, str):
        return getattr(value, key, _MISSING)
    return _MISSING


def to_matcher(value: Any) -> Matcher:
    """Return value unchanged if it is a matcher, else wrap it in Literal."""
    if isinstance(value, Matcher):
        return value
    return Literal(value)


def match(expected: Any, description: Optional[str] = None) -> Matcher:
    """
    Build a matcher from an example value.

    Args:
        expected: A mapping (SubsetOf), a type (InstanceOf), a callable
            (Predicate) or any other value (Literal).
        description: Optional label used for predicates in error messages.

    Returns:
        The matching Matcher variant.
    """
    if isinstance(expected, Matcher):
        return expected
    if isinstance(expected, Mapping):
        return SubsetOf(expected)
    if isinstance(expected, type):
        return InstanceOf(expected)
    if callable(expected):
        return Predicate(expected, description)
    return Literal(expected)


def instance_of(expected_type: type) -> Matcher:
    return InstanceOf(expected_type)
