"""Test Fixtures Package

Provides reusable test fixtures for all test modules.

Fixtures:
- fake_provider: scripted in-memory market data provider
"""

from tests.fixtures.fake_provider import (
    FakeProvider,
    Gate,
    make_quote,
    make_response,
    fake_provider,
)

__all__ = [
    "FakeProvider",
    "Gate",
    "make_quote",
    "make_response",
    "fake_provider",
]
