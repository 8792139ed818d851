"""Shared fixtures for stats tests."""

from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path

import pytest

from devquest.stats.models import StatsSnapshot


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test."""
    import devquest.core.config

    devquest.core.config._settings = None

    yield

    devquest.core.config._settings = None


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
def make_snapshot() -> Callable[..., StatsSnapshot]:
    """Factory for snapshots with sensible defaults."""

    def _make(
        snapshot_date: date,
        commits: int = 0,
        prs: int = 0,
        reviews: int = 0,
        issues: int = 0,
        stars: int = 0,
        contributions: int = 0,
        user_id: str = "octocat",
    ) -> StatsSnapshot:
        return StatsSnapshot(
            user_id=user_id,
            snapshot_date=snapshot_date,
            total_commits=commits,
            total_prs=prs,
            total_reviews=reviews,
            total_issues=issues,
            total_stars_received=stars,
            total_contributions=contributions,
        )

    return _make
