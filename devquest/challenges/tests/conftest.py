"""Shared fixtures for challenge tests."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest

from devquest.challenges.models import Challenge
from devquest.shared.models import ChallengeStatus, ChallengeType, TargetMetric

# Wednesday
NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test."""
    import devquest.core.config

    devquest.core.config._settings = None

    yield

    devquest.core.config._settings = None


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_challenge() -> Callable[..., Challenge]:
    """Factory for challenges with sensible defaults."""

    def _make(
        challenge_type: ChallengeType = ChallengeType.WEEKLY,
        target_metric: TargetMetric = TargetMetric.COMMITS,
        target_value: int = 10,
        current_value: int = 0,
        reward_xp: int = 100,
        status: ChallengeStatus = ChallengeStatus.ACTIVE,
        start_date: datetime = NOW - timedelta(days=2),
        end_date: datetime = NOW + timedelta(days=5),
        completed_at: datetime | None = None,
        challenge_id: int | None = 1,
    ) -> Challenge:
        return Challenge(
            id=challenge_id,
            user_id="octocat",
            challenge_type=challenge_type,
            target_metric=target_metric,
            target_value=target_value,
            current_value=current_value,
            reward_xp=reward_xp,
            start_date=start_date,
            end_date=end_date,
            status=status,
            completed_at=completed_at,
        )

    return _make
