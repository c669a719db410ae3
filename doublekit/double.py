"""
Doubles - callable substitutes that record every invocation.

Kinds:
    Spy:  records calls and forwards them to a delegate (or does nothing).
    Stub: records calls and replaces behavior with a configured return
          value, raised error or fake function.

Lifecycle:
    ┌─────────────────────────────────────────────────────────────┐
    │  created → (wrap) → installed on (target, name)             │
    │  installed → (called N times) → N CallRecords appended      │
    │  installed → (restore) → original written back, detached    │
    └─────────────────────────────────────────────────────────────┘

Usage:
    spy = wrap(user, "set_first_name")
    user.set_first_name("Mike")
    assert spy.called_once
    spy.restore()

    stub = create_stub().returns(42)
    assert stub("anything") == 42
"""

import inspect
import itertools
import logging
from dataclasses import dataclass, replace
from enum import Enum
from types import FunctionType, MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from doublekit.calls import CallRecord, args_match, normalize_matchers
from doublekit.errors import NoSuchCallError, RestoreError, TargetError
from doublekit.matchers import Matcher

logger = logging.getLogger(__name__)

_MISSING = object()
_ids = itertools.count(1)


class BehaviorKind(Enum):
    """What a double does when invoked."""
    NONE = "none"            # return None
    RETURNS = "returns"      # return a fixed value
    THROWS = "throws"        # raise a fixed error
    DELEGATE = "delegate"    # forward to a function


@dataclass(frozen=True)
class Behavior:
    kind: BehaviorKind = BehaviorKind.NONE
    value: Any = None

    def apply(self, receiver: Any, args: Tuple[Any, ...], kwargs: Mapping[str, Any], bound: bool) -> Any:
        if self.kind is BehaviorKind.RETURNS:
            return self.value
        if self.kind is BehaviorKind.THROWS:
            error = self.value
            if isinstance(error, type):
                error = error()
            raise error
        if self.kind is BehaviorKind.DELEGATE:
            if bound:
                return self.value(receiver, *args, **kwargs)
            return self.value(*args, **kwargs)
        return None


def _check_error(error: Any) -> None:
    if isinstance(error, BaseException):
        return
    if isinstance(error, type) and issubclass(error, BaseException):
        return
    raise TypeError(f"throws() expects an exception instance or class, got {error!r}")


def _target_label(target: Any, name: str) -> str:
    owner = target.__name__ if isinstance(target, type) else type(target).__name__
    return f"{owner}.{name}"


class _BoundDouble:
    """A double accessed through an instance of the class it is installed on."""

    def __init__(self, double: "Double", receiver: Any):
        self.__double = double
        self.__receiver = receiver

    def __call__(self, *args, **kwargs) -> Any:
        return self.__double._invoke(self.__receiver, args, kwargs, bound=True)

    def __getattr__(self, name: str) -> Any:
        return getattr(self.__double, name)

    def __repr__(self) -> str:
        return f"<bound {self.__double!r} of {self.__receiver!r}>"


class Double:
    """
    Common call-recording core shared by spies and stubs.

    A double is callable. Installed on a class attribute it binds like a
    method, recording the instance as the call's receiver.
    """

    def __init__(self, name: Optional[str] = None):
        self.id = next(_ids)
        self.name = name or f"{type(self).__name__.lower()}#{self.id}"
        self._calls: List[CallRecord] = []

        # Installation state
        self._target: Any = None
        self._attribute: Optional[str] = None
        self._original: Any = _MISSING
        self._receiver: Any = None
        self._installed = False

    # =========================================================================
    # Invocation
    # =========================================================================

    def __call__(self, *args, **kwargs) -> Any:
        return self._invoke(self._receiver, args, kwargs, bound=False)

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return _BoundDouble(self, instance)

    def _invoke(self, receiver: Any, args: Tuple[Any, ...], kwargs: Mapping[str, Any], bound: bool) -> Any:
        # The slot is taken before behaving so reentrant calls number after this one
        pending = CallRecord(
            index=len(self._calls),
            args=tuple(args),
            kwargs=MappingProxyType(dict(kwargs)),
            receiver=receiver,
        )
        self._calls.append(pending)
        logger.debug(f"{self.name} called: {pending.describe()}")

        try:
            result = self._behave(receiver, args, kwargs, bound)
        except BaseException as e:
            self._calls[pending.index] = replace(pending, exception=e)
            raise
        self._calls[pending.index] = replace(pending, return_value=result)
        return result

    def _behave(self, receiver: Any, args: Tuple[Any, ...], kwargs: Mapping[str, Any], bound: bool) -> Any:
        raise NotImplementedError

    # =========================================================================
    # Call history
    # =========================================================================

    @property
    def calls(self) -> Tuple[CallRecord, ...]:
        return tuple(self._calls)

    @property
    def call_count(self) -> int:
        return len(self._calls)

    @property
    def called(self) -> bool:
        return len(self._calls) > 0

    @property
    def called_once(self) -> bool:
        return len(self._calls) == 1

    @property
    def called_twice(self) -> bool:
        return len(self._calls) == 2

    @property
    def called_thrice(self) -> bool:
        return len(self._calls) == 3

    @property
    def first_call(self) -> CallRecord:
        return self.nth_call(0)

    @property
    def last_call(self) -> CallRecord:
        return self.nth_call(len(self._calls) - 1)

    def nth_call(self, n: int) -> CallRecord:
        """
        Get the call recorded at position n (0-indexed).

        Raises:
            NoSuchCallError: If fewer than n + 1 calls were recorded.
        """
        if n < 0 or n >= len(self._calls):
            raise NoSuchCallError(self.name, n, len(self._calls))
        return self._calls[n]

    def matching_calls(
        self,
        matchers: Sequence[Matcher] = (),
        kw_matchers: Optional[Mapping[str, Matcher]] = None,
        since: int = 0,
    ) -> List[CallRecord]:
        """Calls from position `since` onward whose arguments match."""
        kw_matchers = kw_matchers or {}
        return [
            call for call in self._calls[since:]
            if args_match(call.args, call.kwargs, matchers, kw_matchers)
        ]

    def called_with(self, *matchers: Any, **kw_matchers: Any) -> bool:
        """True if at least one call matches the given argument prefix."""
        positional, keywords = normalize_matchers(matchers, kw_matchers)
        return bool(self.matching_calls(positional, keywords))

    def always_called_with(self, *matchers: Any, **kw_matchers: Any) -> bool:
        """True if called at least once and every call matches."""
        positional, keywords = normalize_matchers(matchers, kw_matchers)
        return self.called and len(self.matching_calls(positional, keywords)) == len(self._calls)

    # =========================================================================
    # Installation
    # =========================================================================

    @property
    def installed(self) -> bool:
        return self._installed

    @property
    def target(self) -> Any:
        return self._target

    @property
    def attribute(self) -> Optional[str]:
        return self._attribute

    def _install(self, target: Any, name: str) -> None:
        namespace = getattr(target, "__dict__", None)
        original = namespace.get(name, _MISSING) if namespace is not None else _MISSING

        if isinstance(target, type):
            # Plain functions bind per instance; anything else is called as-is
            if isinstance(inspect.getattr_static(target, name), FunctionType):
                replacement, receiver = self, None
            else:
                replacement, receiver = staticmethod(self), target
        else:
            replacement, receiver = self, target

        try:
            setattr(target, name, replacement)
        except (AttributeError, TypeError) as e:
            raise TargetError(target, name, f"attribute is not writable ({e})") from e

        self._target = target
        self._attribute = name
        self._original = original
        self._receiver = receiver
        self._installed = True
        logger.info(f"{self.name} installed on {_target_label(target, name)}")

    def restore(self) -> None:
        """
        Put the original value back and detach this double.

        Raises:
            RestoreError: If the double is not currently installed.
        """
        if not self._installed:
            raise RestoreError(f"{self.name} is not currently wrapping any method")

        target, name = self._target, self._attribute
        if self._original is _MISSING:
            # Original came from the class; drop the shadowing attribute
            delattr(target, name)
        else:
            setattr(target, name, self._original)

        self._installed = False
        self._original = _MISSING
        self._receiver = None
        logger.info(f"{self.name} restored on {_target_label(target, name)}")

    def __repr__(self) -> str:
        state = "installed" if self._installed else "detached"
        return f"<{type(self).__name__} {self.name} calls={len(self._calls)} {state}>"


class Spy(Double):
    """Records calls and forwards them to the delegate, if any."""

    def __init__(self, delegate: Optional[Callable] = None, name: Optional[str] = None):
        super().__init__(name)
        self.delegate = delegate

    def _behave(self, receiver: Any, args: Tuple[Any, ...], kwargs: Mapping[str, Any], bound: bool) -> Any:
        if self.delegate is None:
            return None
        if bound:
            return self.delegate(receiver, *args, **kwargs)
        return self.delegate(*args, **kwargs)


class StubBranch:
    """Behavior applied only to calls whose arguments match."""

    def __init__(self, stub: "Stub", matchers: Tuple[Matcher, ...], kw_matchers: Mapping[str, Matcher]):
        self.stub = stub
        self.matchers = matchers
        self.kw_matchers = kw_matchers
        self.behavior = Behavior()

    def applies_to(self, args: Tuple[Any, ...], kwargs: Mapping[str, Any]) -> bool:
        return args_match(args, kwargs, self.matchers, self.kw_matchers)

    def returns(self, value: Any) -> "Stub":
        self.behavior = Behavior(BehaviorKind.RETURNS, value)
        return self.stub

    def throws(self, error: Any) -> "Stub":
        _check_error(error)
        self.behavior = Behavior(BehaviorKind.THROWS, error)
        return self.stub

    def calls_fake(self, func: Callable) -> "Stub":
        self.behavior = Behavior(BehaviorKind.DELEGATE, func)
        return self.stub


class Stub(Double):
    """
    Records calls and returns None until configured.

    The most recently configured behavior wins. Argument-specific branches
    created with with_args() take precedence over the default behavior.
    """

    def __init__(self, name: Optional[str] = None):
        super().__init__(name)
        self._behavior = Behavior()
        self._branches: List[StubBranch] = []

    @property
    def behavior(self) -> Behavior:
        return self._behavior

    def returns(self, value: Any) -> "Stub":
        self._behavior = Behavior(BehaviorKind.RETURNS, value)
        return self

    def throws(self, error: Any) -> "Stub":
        """Raise `error` (an exception instance or class) on every call."""
        _check_error(error)
        self._behavior = Behavior(BehaviorKind.THROWS, error)
        return self

    def calls_fake(self, func: Callable) -> "Stub":
        self._behavior = Behavior(BehaviorKind.DELEGATE, func)
        return self

    def with_args(self, *matchers: Any, **kw_matchers: Any) -> StubBranch:
        positional, keywords = normalize_matchers(matchers, kw_matchers)
        branch = StubBranch(self, positional, keywords)
        self._branches.append(branch)
        return branch

    def _behave(self, receiver: Any, args: Tuple[Any, ...], kwargs: Mapping[str, Any], bound: bool) -> Any:
        for branch in reversed(self._branches):
            if branch.behavior.kind is not BehaviorKind.NONE and branch.applies_to(args, kwargs):
                return branch.behavior.apply(receiver, args, kwargs, bound)
        return self._behavior.apply(receiver, args, kwargs, bound)


def create_spy(delegate: Optional[Callable] = None, name: Optional[str] = None) -> Spy:
    """Create a standalone spy, optionally forwarding to `delegate`."""
    return Spy(delegate, name=name)


def create_stub(name: Optional[str] = None) -> Stub:
    """Create a standalone stub that returns None until configured."""
    return Stub(name=name)


def wrap(target: Any, name: str, stub: bool = False) -> Double:
    """
    Replace `target.name` with a double.

    Args:
        target: Object, class or module owning the method.
        name: Attribute name of the method.
        stub: Install a Stub (no-op until configured) instead of a Spy
            that forwards to the original.

    Returns:
        The installed double. Call restore() on it to undo.

    Raises:
        TargetError: If the attribute is missing, not callable, or already
            wrapped by an installed double.
    """
    try:
        current = getattr(target, name)
    except AttributeError:
        raise TargetError(target, name, "attribute does not exist") from None

    if isinstance(current, Double) and current.installed:
        raise TargetError(target, name, f"already wrapped by {current.name}")
    if not callable(current):
        raise TargetError(target, name, f"{type(current).__name__} is not callable")

    label = _target_label(target, name)
    double: Double = Stub(name=label) if stub else Spy(current, name=label)
    double._install(target, name)
    return double
