"""
Tests for Sandbox and the sandboxed decorator.

This test suite verifies:
- Grouped restore of wrapped methods and mocks
- Verification across every owned mock
- Context-manager exit behavior with and without errors
- The sandboxed decorator injecting a fresh sandbox
"""

import inspect

import pytest

from doublekit import ExpectationError, MockRestoreError, Sandbox, Spy, Stub, sandboxed


class TestSandbox:
    """Test suite for Sandbox."""

    def test_restore_everything(self, user, store):
        original_set = user.set_first_name
        sandbox = Sandbox()
        sandbox.wrap(user, "set_first_name")
        sandbox.mock(store).expects("get")

        sandbox.restore()

        assert user.set_first_name == original_set
        assert not isinstance(store.get, Stub)

    def test_standalone_doubles_need_no_restore(self):
        sandbox = Sandbox()
        spy = sandbox.spy(lambda: "ok")
        stub = sandbox.stub().returns(1)

        assert spy() == "ok"
        assert stub() == 1
        sandbox.restore()

    def test_already_restored_double_reported(self, user):
        """Test that a double restored directly is reported like a mock's stub."""
        sandbox = Sandbox()
        spy = sandbox.wrap(user, "set_first_name")
        sandbox.wrap(user, "set_last_name")
        spy.restore()

        with pytest.raises(MockRestoreError) as exc_info:
            sandbox.restore()

        assert len(exc_info.value.failures) == 1
        assert "set_last_name" not in vars(user)

    def test_restore_collects_mock_failures(self, store):
        sandbox = Sandbox()
        stub = sandbox.mock(store).expects("get").stub
        stub.restore()

        with pytest.raises(MockRestoreError) as exc_info:
            sandbox.restore()

        assert len(exc_info.value.failures) == 1

    def test_verify_aggregates_mocks(self, user, store):
        sandbox = Sandbox()
        sandbox.mock(user).expects("get_full_name").once()
        sandbox.mock(store).expects("set").once()

        with pytest.raises(ExpectationError) as exc_info:
            sandbox.verify()

        assert len(exc_info.value.violations) == 2
        sandbox.restore()

    def test_separate_sandboxes_do_not_interfere(self, user, store):
        first, second = Sandbox(), Sandbox()
        first.wrap(user, "set_first_name")
        second.wrap(store, "get")

        first.restore()

        assert isinstance(store.get, Spy)
        assert "set_first_name" not in vars(user)
        second.restore()


class TestSandboxContext:
    """Test suite for Sandbox used as a context manager."""

    def test_clean_exit_verifies_and_restores(self, store):
        with Sandbox() as sandbox:
            sandbox.mock(store).expects("set").once().with_args("data", 1)
            store.set("data", 1)

        assert not isinstance(store.set, Stub)

    def test_clean_exit_raises_on_unmet_expectation(self, store):
        with pytest.raises(ExpectationError):
            with Sandbox() as sandbox:
                sandbox.mock(store).expects("set").once()

        assert not isinstance(store.set, Stub)

    def test_error_exit_restores_without_verifying(self, store):
        """Test that the original error propagates, not an ExpectationError."""
        with pytest.raises(RuntimeError):
            with Sandbox() as sandbox:
                sandbox.mock(store).expects("set").once()
                raise RuntimeError("test body failed")

        assert not isinstance(store.set, Stub)


class TestSandboxedDecorator:
    """Test suite for the sandboxed decorator."""

    def test_injects_sandbox(self, user):
        seen = []

        @sandboxed
        def body(sandbox, name):
            seen.append(sandbox)
            spy = sandbox.wrap(user, "set_first_name")
            user.set_first_name(name)
            return spy.call_count

        assert body("Mike") == 1
        assert isinstance(seen[0], Sandbox)
        assert "set_first_name" not in vars(user)
        assert user.fname == "Mike"

    def test_fresh_sandbox_per_call(self):
        seen = []

        @sandboxed
        def body(sandbox):
            seen.append(sandbox)

        body()
        body()

        assert seen[0] is not seen[1]

    def test_signature_hides_sandbox(self):
        @sandboxed
        def body(sandbox, store, user):
            pass

        assert list(inspect.signature(body).parameters) == ["store", "user"]
        assert body.__name__ == "body"

    def test_sandbox_parameter_after_others(self, user):
        @sandboxed
        def body(name, sandbox, suffix=""):
            spy = sandbox.wrap(user, "set_first_name")
            user.set_first_name(name + suffix)
            return spy.call_count

        assert body("Mike") == 1
        assert body(name="Mike", suffix="!") == 1
        assert user.fname == "Mike!"
        assert list(inspect.signature(body).parameters) == ["name", "suffix"]

    def test_requires_sandbox_parameter(self):
        def body(store):
            pass

        with pytest.raises(TypeError, match="sandbox"):
            sandboxed(body)


@sandboxed
def test_sandboxed_pytest_function(sandbox, store):
    """Test that decorated test functions still receive pytest fixtures."""
    sandbox.mock(store).expects("get").with_args("data").returns(0)

    assert store.get("data") == 0


class TestSandboxedMethods:
    """Test suite for sandboxed test methods inside a class."""

    @sandboxed
    def test_method_receives_instance_and_sandbox(self, sandbox, store):
        """Test that self stays the instance and the sandbox is injected by name."""
        assert isinstance(self, TestSandboxedMethods)
        assert isinstance(sandbox, Sandbox)

        sandbox.mock(store).expects("set").once().with_args("data", 23)
        store.set("data", 23)

    def test_method_signature_keeps_self(self):
        signature = inspect.signature(TestSandboxedMethods.test_method_receives_instance_and_sandbox)

        assert list(signature.parameters) == ["self", "store"]
