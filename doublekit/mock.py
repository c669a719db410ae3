"""
Mocks - stubs bound to expectations that are checked on demand.

Usage:
    store_mock = create_mock(store)
    store_mock.expects("get").with_args("data").returns(0)
    store_mock.expects("set").once().with_args("data", 23)

    increment_total("data", 23)

    store_mock.verify()     # raises ExpectationError listing every violation
    store_mock.restore()
"""

import logging
from typing import Any, Dict, List, Optional

from doublekit.config import settings
from doublekit.calls import describe_matchers, normalize_matchers
from doublekit.double import Stub, StubBranch, wrap
from doublekit.errors import ExpectationError, MockRestoreError, RestoreError

logger = logging.getLogger(__name__)


class Expectation:
    """
    Required call count and arguments for one mocked method.

    Only calls recorded after the expectation was created are counted. When
    no count is configured the method must be called at least once.
    """

    def __init__(self, method_name: str, stub: Stub, since: int):
        self.method_name = method_name
        self.stub = stub
        self.since = since

        self.matchers: Optional[tuple] = None
        self.kw_matchers: Dict[str, Any] = {}
        self.min_calls: Optional[int] = None
        self.max_calls: Optional[int] = None
        self._branch: Optional[StubBranch] = None

    # =========================================================================
    # Builder
    # =========================================================================

    def with_args(self, *matchers: Any, **kw_matchers: Any) -> "Expectation":
        self.matchers, self.kw_matchers = normalize_matchers(matchers, kw_matchers)
        if self._branch is not None:
            self._branch.matchers = self.matchers
            self._branch.kw_matchers = self.kw_matchers
        return self

    def returns(self, value: Any) -> "Expectation":
        self._get_branch().returns(value)
        return self

    def throws(self, error: Any) -> "Expectation":
        self._get_branch().throws(error)
        return self

    def exactly(self, count: int) -> "Expectation":
        if count < 0:
            raise ValueError(f"Call count must be >= 0, got {count}")
        self.min_calls = count
        self.max_calls = count
        return self

    def at_least(self, count: int) -> "Expectation":
        if count < 0:
            raise ValueError(f"Call count must be >= 0, got {count}")
        self.min_calls = count
        self.max_calls = None
        return self

    def never(self) -> "Expectation":
        return self.exactly(0)

    def once(self) -> "Expectation":
        return self.exactly(1)

    def twice(self) -> "Expectation":
        return self.exactly(2)

    def thrice(self) -> "Expectation":
        return self.exactly(3)

    def _get_branch(self) -> StubBranch:
        if self._branch is None:
            self._branch = self.stub.with_args(*(self.matchers or ()), **self.kw_matchers)
        return self._branch

    # =========================================================================
    # Verification
    # =========================================================================

    def describe_count(self) -> str:
        if self.min_calls is None:
            return "at least once"
        if self.max_calls is None:
            return f"at least {self.min_calls} time(s)"
        return f"exactly {self.min_calls} time(s)"

    def check(self) -> Optional[str]:
        """
        Evaluate this expectation against the recorded calls.

        Returns:
            A human-readable violation, or None if the expectation is met.
        """
        matched = len(self.stub.matching_calls(self.matchers or (), self.kw_matchers, since=self.since))
        minimum = 1 if self.min_calls is None else self.min_calls

        if matched >= minimum and (self.max_calls is None or matched <= self.max_calls):
            return None

        signature = self.method_name
        if self.matchers is not None or self.kw_matchers:
            signature += describe_matchers(self.matchers or (), self.kw_matchers)

        recorded = self.stub.calls[self.since:]
        shown = recorded[: settings.max_calls_in_errors]
        history = ", ".join(call.describe() for call in shown) or "none"
        if len(recorded) > len(shown):
            history += f", ... ({len(recorded) - len(shown)} more)"

        return (
            f"{signature}: expected {self.describe_count()}, "
            f"matched {matched} time(s); recorded calls: {history}"
        )

    def __repr__(self) -> str:
        return f"<Expectation {self.method_name} {self.describe_count()}>"


class MockHandle:
    """Installs stubs on a target object and checks expectations against them."""

    def __init__(self, target: Any):
        self.target = target
        self._stubs: Dict[str, Stub] = {}
        self._installed: List[Stub] = []
        self._expectations: List[Expectation] = []

    @property
    def expectations(self) -> List[Expectation]:
        return list(self._expectations)

    def expects(self, method_name: str) -> Expectation:
        """
        Expect `method_name` to be called.

        The first expectation for a method installs a stub on the target;
        later expectations for the same method share that stub.

        Raises:
            TargetError: If the method cannot be wrapped.
        """
        stub = self._stubs.get(method_name)
        if stub is None or not stub.installed:
            stub = wrap(self.target, method_name, stub=True)
            self._stubs[method_name] = stub
            self._installed.append(stub)

        expectation = Expectation(method_name, stub, since=stub.call_count)
        self._expectations.append(expectation)
        return expectation

    def verify(self) -> None:
        """
        Check every expectation.

        Raises:
            ExpectationError: Listing all unmet expectations.
        """
        violations = [v for v in (e.check() for e in self._expectations) if v is not None]
        if violations:
            logger.warning(
                f"Mock on {type(self.target).__name__}: "
                f"{len(violations)}/{len(self._expectations)} expectation(s) not met"
            )
            raise ExpectationError(violations)

        logger.debug(f"Mock on {type(self.target).__name__}: all expectations met")

    def restore(self) -> None:
        """
        Restore every installed stub, newest first.

        All restores are attempted even if some fail. A stub the caller
        already restored directly counts as a failure.

        Raises:
            MockRestoreError: If at least one restore failed.
        """
        failures = []
        for stub in reversed(self._installed):
            try:
                stub.restore()
            except RestoreError as e:
                logger.warning(f"Failed to restore {stub.name}: {e}")
                failures.append(e)
        self._installed.clear()

        if failures:
            raise MockRestoreError(failures)


def create_mock(target: Any) -> MockHandle:
    return MockHandle(target)
