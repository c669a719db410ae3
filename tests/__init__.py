"""
Test Suite for doublekit.

Structure:
    tests/
    ├── conftest.py          # Shared fixtures and configuration
    ├── unit/                # Per-module tests
    │   ├── test_matchers.py
    │   ├── test_calls.py
    │   ├── test_double.py
    │   ├── test_mock.py
    │   ├── test_assertions.py
    │   ├── test_sandbox.py
    │   └── test_settings.py
    ├── integration/         # Several doubles working against one target
    │   └── test_store_integration.py
    └── real/                # End-to-end usage scenarios
        └── test_usage_scenarios_real.py

Run tests:
    pytest tests/                    # All tests
    pytest tests/unit/               # Unit tests only
    pytest tests/ -m real            # Tests marked @pytest.mark.real
"""
