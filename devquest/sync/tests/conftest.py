"""Shared fixtures for sync engine tests."""

from collections.abc import Iterator
from datetime import UTC, date, datetime

import pytest

from devquest.stats.models import StatsSnapshot, UserStats
from devquest.sync.models import SyncTotals

# Wednesday
NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)
YESTERDAY = date(2025, 3, 11)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test."""
    import devquest.core.config

    devquest.core.config._settings = None

    yield

    devquest.core.config._settings = None


@pytest.fixture
def new_user() -> UserStats:
    return UserStats(user_id="octocat")


@pytest.fixture
def first_totals() -> SyncTotals:
    """Totals seen on a user's very first sync."""
    return SyncTotals(
        total_commits=12,
        total_prs=2,
        total_prs_merged=1,
        total_reviews=1,
        total_issues=1,
        total_issues_closed=0,
        total_stars_received=3,
        total_contributions=15,
        languages_count=1,
    )


@pytest.fixture
def returning_user() -> UserStats:
    """User state after the first sync, one day earlier."""
    return UserStats(
        user_id="octocat",
        total_xp=277,
        current_level=3,
        current_streak=1,
        longest_streak=1,
        last_activity_date=YESTERDAY,
        total_commits=12,
        total_prs=2,
        total_reviews=1,
        total_issues=1,
    )


@pytest.fixture
def yesterday_snapshot() -> StatsSnapshot:
    return StatsSnapshot(
        user_id="octocat",
        snapshot_date=YESTERDAY,
        total_commits=12,
        total_prs=2,
        total_reviews=1,
        total_issues=1,
        total_stars_received=3,
        total_contributions=15,
    )


@pytest.fixture
def today_totals() -> SyncTotals:
    """Five new commits, one new PR and one more merge since yesterday."""
    return SyncTotals(
        total_commits=17,
        total_prs=3,
        total_prs_merged=2,
        total_reviews=1,
        total_issues=1,
        total_issues_closed=0,
        total_stars_received=3,
        total_contributions=21,
        languages_count=1,
    )
