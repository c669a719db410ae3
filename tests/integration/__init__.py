"""
Integration Tests Package.

Tests in this package combine several doubles, mocks and sandboxes
against a single target.
"""
