"""
Call records - the shared core of every double.

Each invocation of a double appends one immutable CallRecord. Argument
matching is prefix-based for positional arguments: a call to f(1, 2, 3)
matches the matchers (1, 2). Keyword matchers must each be present and match.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from doublekit.matchers import Matcher, short_repr, to_matcher


@dataclass(frozen=True)
class CallRecord:
    """One recorded invocation of a double."""

    index: int
    args: Tuple[Any, ...]
    kwargs: Mapping[str, Any] = field(default_factory=dict)
    receiver: Any = None
    return_value: Any = None
    exception: Optional[BaseException] = None

    @property
    def raised(self) -> bool:
        return self.exception is not None

    def matches(self, matchers: Sequence[Matcher], kw_matchers: Mapping[str, Matcher]) -> bool:
        """Check this call against positional (prefix) and keyword matchers."""
        return args_match(self.args, self.kwargs, matchers, kw_matchers)

    def describe(self) -> str:
        parts = [short_repr(arg) for arg in self.args]
        parts.extend(f"{key}={short_repr(value)}" for key, value in self.kwargs.items())
        return f"#{self.index}({', '.join(parts)})"


def normalize_matchers(
    matchers: Sequence[Any], kw_matchers: Mapping[str, Any]
) -> Tuple[Tuple[Matcher, ...], Dict[str, Matcher]]:
    """Wrap raw values in Literal so the result contains only matchers."""
    return (
        tuple(to_matcher(m) for m in matchers),
        {key: to_matcher(m) for key, m in kw_matchers.items()},
    )


def args_match(
    args: Sequence[Any],
    kwargs: Mapping[str, Any],
    matchers: Sequence[Matcher],
    kw_matchers: Mapping[str, Matcher],
) -> bool:
    if len(args) < len(matchers):
        return False
    for arg, matcher in zip(args, matchers):
        if not matcher.test(arg):
            return False
    for key, matcher in kw_matchers.items():
        if key not in kwargs or not matcher.test(kwargs[key]):
            return False
    return True


def describe_matchers(matchers: Sequence[Matcher], kw_matchers: Mapping[str, Matcher]) -> str:
    parts = [m.describe() for m in matchers]
    parts.extend(f"{key}={m.describe()}" for key, m in kw_matchers.items())
    return f"({', '.join(parts)})"
