"""Pytest configuration and shared fixtures."""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from activity_clock.core.storage import StorageManager

CATEGORIES = ["Python", "SQL", "Datasetu", "Break", "TT"]


class FakeClock:
    """Manually advanced clock for deterministic timestamps."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_storage(temp_dir: Path) -> StorageManager:
    """Create a storage manager in a temporary directory."""
    return StorageManager(temp_dir / "data")


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at 09:00 on a fixed day."""
    return FakeClock(datetime(2025, 11, 16, 9, 0, 0))
