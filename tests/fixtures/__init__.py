"""Shared test fixtures package.

Provides reusable test doubles and helpers for all test suites.
Pytest fixtures must be defined in conftest.py files; this package
contains only helpers, dataclasses, and fakes.
"""
