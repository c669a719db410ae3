"""
Sandbox - owns a group of doubles and mocks and cleans them up together.

Usage:
    with Sandbox() as sandbox:
        sandbox.wrap(user, "set_first_name")
        sandbox.mock(store).expects("set").once()
        ...
    # on clean exit: mocks verified, then everything restored

    @sandboxed
    def test_store(sandbox):
        ...
"""

import inspect
import logging
from functools import wraps
from typing import Any, Callable, List, Optional

from doublekit.double import Double, Spy, Stub, create_spy, create_stub, wrap
from doublekit.errors import ExpectationError, MockRestoreError, RestoreError
from doublekit.mock import MockHandle, create_mock

logger = logging.getLogger(__name__)


class Sandbox:
    """Tracks every double and mock it creates; no state is shared between sandboxes."""

    def __init__(self):
        self._mocks: List[MockHandle] = []
        # Restore order across doubles and mocks, oldest first
        self._owned: List[Any] = []

    def spy(self, delegate: Optional[Callable] = None, name: Optional[str] = None) -> Spy:
        return create_spy(delegate, name=name)

    def stub(self, name: Optional[str] = None) -> Stub:
        return create_stub(name=name)

    def wrap(self, target: Any, name: str, stub: bool = False) -> Double:
        double = wrap(target, name, stub=stub)
        self._owned.append(double)
        return double

    def mock(self, target: Any) -> MockHandle:
        handle = create_mock(target)
        self._mocks.append(handle)
        self._owned.append(handle)
        return handle

    def verify(self) -> None:
        """
        Verify every mock created by this sandbox.

        Raises:
            ExpectationError: Aggregating violations from all mocks.
        """
        violations = []
        for handle in self._mocks:
            try:
                handle.verify()
            except ExpectationError as e:
                violations.extend(e.violations)
        if violations:
            raise ExpectationError(violations)

    def restore(self) -> None:
        """
        Restore everything this sandbox installed, newest first.

        A double the caller already restored directly counts as a failure,
        the same as a stub restored out from under a MockHandle.

        Raises:
            MockRestoreError: If any restore failed; all are attempted.
        """
        failures = []
        for owned in reversed(self._owned):
            try:
                owned.restore()
            except MockRestoreError as e:
                failures.extend(e.failures)
            except RestoreError as e:
                failures.append(e)
        self._owned.clear()
        self._mocks.clear()

        if failures:
            logger.warning(f"Sandbox restore finished with {len(failures)} failure(s)")
            raise MockRestoreError(failures)

    def __enter__(self) -> "Sandbox":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.restore()
            return
        try:
            self.verify()
        finally:
            self.restore()


def sandboxed(func: Callable) -> Callable:
    """
    Run `func` with a fresh Sandbox passed as its `sandbox` parameter.

    The parameter may sit anywhere in the signature, so methods taking
    `self` first work too. Mocks are verified and all doubles restored when
    the function returns; if it raises, doubles are restored and the error
    propagates.

    Raises:
        TypeError: If `func` has no parameter named `sandbox`.
    """
    signature = inspect.signature(func)
    names = list(signature.parameters)
    if "sandbox" not in names:
        raise TypeError(f"{func.__name__}() must accept a 'sandbox' parameter to be sandboxed")
    position = names.index("sandbox")
    keyword_only = signature.parameters["sandbox"].kind is inspect.Parameter.KEYWORD_ONLY

    @wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        with Sandbox() as sandbox:
            if not keyword_only and len(args) >= position:
                args = args[:position] + (sandbox,) + args[position:]
            else:
                kwargs["sandbox"] = sandbox
            return func(*args, **kwargs)

    # Hide the injected parameter so pytest does not look for a fixture
    wrapper.__signature__ = signature.replace(
        parameters=[p for p in signature.parameters.values() if p.name != "sandbox"]
    )
    return wrapper
