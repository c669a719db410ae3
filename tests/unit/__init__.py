"""
Unit Tests Package.

This package contains per-module tests that exercise
individual components in isolation.

Tests verify:
- Call recording and matching
- Double, mock and sandbox behavior
- Edge cases and error handling
"""
