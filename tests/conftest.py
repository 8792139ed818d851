"""Shared pytest fixtures for devquest integration tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from devquest.stats.store import SnapshotStore


@pytest.fixture
def temp_snapshot_file(tmp_path: Path) -> Path:
    """Create a temporary snapshot file path for testing.

    Args:
        tmp_path: pytest's temporary directory fixture

    Returns:
        Path to temporary snapshots.json file
    """
    return tmp_path / "snapshots.json"


@pytest.fixture
def snapshot_store(temp_snapshot_file: Path) -> SnapshotStore:
    return SnapshotStore(temp_snapshot_file)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test.

    This ensures tests don't interfere with each other through the
    cached settings singleton.
    """
    import devquest.core.config

    devquest.core.config._settings = None

    yield

    devquest.core.config._settings = None
