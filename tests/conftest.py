"""Pytest configuration and fixtures."""

import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """Path of a not-yet-created SQLite database."""
    return temp_dir / "cache.db"


@pytest.fixture
def long_ago() -> datetime:
    """A timestamp well outside any freshness window used in tests."""
    return datetime.now(UTC) - timedelta(days=365)

