"""
Real Usage Scenario Tests Package.

These tests run doubles end to end against realistic targets
instead of checking individual modules.
"""
