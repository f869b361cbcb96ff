"""
Pytest configuration and shared fixtures for Cumuli tests.

Provides common setup, teardown, and fixtures used across
unit tests.
"""
import shutil
import tempfile
from pathlib import Path

import pytest

from cumuli.settings import Settings
from tests.fixtures.mock_data import create_example_directory, EXAMPLE_USERS


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def settings(temp_dir):
    """Settings with small pages and a throwaway cache directory."""
    return Settings(
        client_id="test-client",
        page_size=2,
        max_workers=4,
        page_workers=3,
        fetch_timeout=5.0,
        cache_dir=str(temp_dir / "cache"),
    )


@pytest.fixture
def example_directory():
    """The A/B/C example directory."""
    return create_example_directory()


@pytest.fixture
def example_users():
    return list(EXAMPLE_USERS)


# Custom markers for different test categories
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that mock API interactions"
    )


def pytest_collection_modifyitems(config, items):
    """Add the unit marker to tests in the unit directory."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
