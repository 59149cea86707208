"""Pytest Configuration and Shared Fixtures

This file is automatically loaded by pytest and makes all fixtures available to all tests.
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add backend to path for imports
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

# Keep test logs out of the working tree; must happen before finterm is imported
os.environ.setdefault(
    "LOGGER__FILE_PATH",
    str(Path(tempfile.gettempdir()) / "finterm-tests" / "finterm.log"),
)

# Register shared fixtures
from tests.fixtures.fake_provider import fake_provider  # noqa: E402,F401


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: Unit tests with fakes and mocks only (fast)"
    )
    config.addinivalue_line(
        "markers",
        "slow: Slow-running tests (skip with -m 'not slow')"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def captured_logs():
    """Capture loguru records emitted during the test."""
    from finterm.logger import logger

    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    try:
        logger.remove(handler_id)
    except ValueError:
        # set_level() rebuilds the sinks and already dropped this one
        pass
