"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path

import pytest  # type: ignore[import-not-found]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "slow: Tests that render charts with matplotlib")


@pytest.fixture  # type: ignore[misc]
def temp_dir() -> Path:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
