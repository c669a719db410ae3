"""
Pytest fixtures and configuration.

This module provides shared fixtures for all tests:
- A `User` object with chainable setters (method-based target)
- A namespace-style user whose methods live on the instance
- An in-memory key-value store and helpers that call into it
- Settings overrides for error-message formatting

Usage:
    def test_something(user, store):
        # fixtures are automatically injected
        pass
"""

from types import SimpleNamespace
from typing import Any, Callable, Dict, Optional
from unittest.mock import patch

import pytest

from doublekit.config import settings


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "real: mark test as a real usage scenario test"
    )
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test combining several doubles"
    )


# =============================================================================
# Target Objects
# =============================================================================

class User:
    """Toy object with chainable setters."""

    def __init__(self, fname: str = "<fname>", lname: str = "<lname>"):
        self.fname = fname
        self.lname = lname

    def set_first_name(self, fname: str) -> "User":
        self.fname = fname
        return self

    def set_last_name(self, lname: str) -> "User":
        self.lname = lname
        return self

    def get_full_name(self) -> str:
        return f"{self.fname} {self.lname}"

    @staticmethod
    def normalize(name: str) -> str:
        return name.strip().title()

    @classmethod
    def anonymous(cls) -> "User":
        return cls("Anonymous", "User")


class MemoryStore:
    """In-memory key-value store."""

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


@pytest.fixture
def user_class():
    """Provide the User class itself."""
    return User


@pytest.fixture
def user():
    """Provide a fresh User instance."""
    return User()


@pytest.fixture
def user_namespace():
    """
    Provide a user whose methods are stored on the object itself.

    Setters return the namespace so calls can be chained.
    """
    ns = SimpleNamespace(fname="<fname>", lname="<lname>")

    def set_first_name(fname):
        ns.fname = fname
        return ns

    def set_last_name(lname):
        ns.lname = lname
        return ns

    def get_full_name():
        return f"{ns.fname} {ns.lname}"

    ns.set_first_name = set_first_name
    ns.set_last_name = set_last_name
    ns.get_full_name = get_full_name
    return ns


@pytest.fixture
def store():
    """Provide an empty in-memory store."""
    return MemoryStore()


# =============================================================================
# Helper Functions
# =============================================================================

@pytest.fixture
def my_function():
    """Provide a function that invokes the callback only when condition is true."""
    def _my_function(condition: bool, callback: Callable) -> None:
        if condition:
            callback()
    return _my_function


@pytest.fixture
def increment_total(store):
    """Provide a function that adds `amount` to the stored total for `key`."""
    def _increment_total(key: str, amount: int) -> int:
        total = store.get(key) or 0
        new_total = total + amount
        store.set(key, new_total)
        return new_total
    return _increment_total


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def short_errors():
    """Shrink error-message limits for the duration of a test."""
    with patch.object(settings, "repr_max_length", 10), \
            patch.object(settings, "max_calls_in_errors", 2):
        yield settings
