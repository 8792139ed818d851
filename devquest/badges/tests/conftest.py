"""Shared fixtures for badge tests."""

from collections.abc import Iterator

import pytest

from devquest.badges.models import BadgeEvalContext


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test."""
    import devquest.core.config

    devquest.core.config._settings = None

    yield

    devquest.core.config._settings = None


@pytest.fixture
def empty_context() -> BadgeEvalContext:
    """Context for a brand new user."""
    return BadgeEvalContext()


@pytest.fixture
def active_context() -> BadgeEvalContext:
    """Context for a moderately active user."""
    return BadgeEvalContext(
        total_commits=120,
        current_streak=2,
        longest_streak=8,
        weekly_streak=3,
        monthly_streak=1,
        total_reviews=45,
        total_prs=15,
        total_prs_merged=14,
        total_issues_closed=10,
        languages_count=4,
        current_level=6,
        total_stars_received=9,
    )
