"""Data models for challenges, templates and progress results."""

import math
from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from devquest.core.config import get_settings
from devquest.shared.models import ChallengeStatus, ChallengeType, TargetMetric, ensure_utc
from devquest.stats.models import ActivityTotals


class Challenge(BaseModel):
    """A time-boxed activity goal.

    Attributes:
        id: Persistence identifier (None until the caller stores it)
        user_id: Owner
        challenge_type: daily or weekly
        target_metric: Counter the challenge tracks
        target_value: Amount of activity required
        current_value: Activity so far, never above target_value
        reward_xp: XP awarded on completion
        start_date: Start of the challenge period (UTC)
        end_date: End of the challenge period (UTC, exclusive)
        status: Lifecycle state
        completed_at: When the challenge was completed
        start_stats: Cumulative totals captured at creation
    """

    id: int | None = Field(None, description="Challenge identifier")
    user_id: str = Field(..., description="User identifier")
    challenge_type: ChallengeType = Field(..., description="Challenge type")
    target_metric: TargetMetric = Field(..., description="Tracked metric")
    target_value: int = Field(..., ge=0, description="Target amount")
    current_value: int = Field(0, ge=0, description="Progress so far")
    reward_xp: int = Field(0, ge=0, description="XP reward")
    start_date: datetime = Field(..., description="Period start (UTC)")
    end_date: datetime = Field(..., description="Period end (UTC)")
    status: ChallengeStatus = Field(ChallengeStatus.ACTIVE, description="Lifecycle state")
    completed_at: datetime | None = Field(None, description="Completion timestamp")
    start_stats: ActivityTotals | None = Field(None, description="Totals at creation")

    @field_validator("start_date", "end_date", "completed_at")
    @classmethod
    def to_utc(cls, v: datetime | None) -> datetime | None:
        """Store all timestamps as aware UTC datetimes."""
        if v is None:
            return None
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_progress(self) -> "Challenge":
        """Keep progress within the target and completion data consistent."""
        if self.current_value > self.target_value:
            raise ValueError(
                f"current_value ({self.current_value}) exceeds target_value ({self.target_value})"
            )
        if self.status is ChallengeStatus.COMPLETED:
            if self.completed_at is None:
                raise ValueError("Completed challenge must have completed_at")
            if self.current_value != self.target_value:
                raise ValueError("Completed challenge must have reached target_value")
        return self

    @property
    def is_completed(self) -> bool:
        return self.status is ChallengeStatus.COMPLETED

    @property
    def progress_percent(self) -> float:
        """Progress toward the target (0-100, 100 for a zero target)."""
        if self.target_value == 0:
            return 100.0
        return min(100.0, self.current_value / self.target_value * 100.0)

    def is_expired(self, now: datetime) -> bool:
        """Whether an active challenge has run past its end date."""
        return self.status is ChallengeStatus.ACTIVE and ensure_utc(now) > self.end_date

    def is_active(self, now: datetime) -> bool:
        """Whether the challenge is active and not yet expired."""
        return self.status is ChallengeStatus.ACTIVE and not self.is_expired(now)


class ChallengeTemplate(BaseModel):
    """A challenge to create, before a period and start stats are attached."""

    challenge_type: ChallengeType = Field(..., description="Challenge type")
    target_metric: TargetMetric = Field(..., description="Tracked metric")
    target_value: int = Field(..., ge=1, description="Target amount")
    reward_xp: int = Field(..., ge=0, description="XP reward")


class ChallengeRequest(BaseModel):
    """Validated request for a user-defined challenge."""

    challenge_type: ChallengeType
    target_metric: TargetMetric
    target_value: int = Field(..., ge=1)
    reward_xp: int | None = Field(None, ge=0)


class RecommendedTargets(BaseModel):
    """Per-metric daily and weekly targets derived from recent activity."""

    daily_commits: int
    weekly_commits: int
    daily_prs: int
    weekly_prs: int
    daily_reviews: int
    weekly_reviews: int
    daily_issues: int
    weekly_issues: int

    def daily_for(self, metric: TargetMetric) -> int:
        return int(getattr(self, f"daily_{metric.value}"))

    def weekly_for(self, metric: TargetMetric) -> int:
        return int(getattr(self, f"weekly_{metric.value}"))


class ChallengeGeneratorConfig(BaseModel):
    """Tuning for recommended targets.

    Attributes:
        daily_target_multiplier: Applied to the average per active day
        weekly_target_multiplier: Applied to the average per week
        min_commits: Lowest commit target
        min_prs: Lowest PR target
        min_reviews: Lowest review target
        min_issues: Lowest issue target
    """

    daily_target_multiplier: float = 1.0
    weekly_target_multiplier: float = 1.1
    min_commits: int = 1
    min_prs: int = 1
    min_reviews: int = 1
    min_issues: int = 1

    @classmethod
    def from_settings(cls) -> "ChallengeGeneratorConfig":
        """Build the config from application settings."""
        settings = get_settings()
        return cls(
            daily_target_multiplier=settings.daily_target_multiplier,
            weekly_target_multiplier=settings.weekly_target_multiplier,
            min_commits=settings.min_commits_target,
            min_prs=settings.min_prs_target,
            min_reviews=settings.min_reviews_target,
            min_issues=settings.min_issues_target,
        )

    def min_for(self, metric: TargetMetric) -> int:
        return int(getattr(self, f"min_{metric.value}"))


class CompletionEvent(BaseModel):
    """Emitted once, on the active -> completed transition.

    The caller awards ``reward_xp`` and records an XP history entry.
    """

    challenge_id: int | None
    user_id: str
    challenge_type: ChallengeType
    target_metric: TargetMetric
    reward_xp: int
    completed_at: datetime


class ChallengeUpdateResult(BaseModel):
    """Outcome of a progress update for one challenge."""

    challenge_id: int | None = Field(None, description="Challenge identifier")
    old_value: int = Field(..., description="Value before the update")
    new_value: int = Field(..., description="Value after the update")
    target_value: int = Field(..., description="Target amount")
    just_completed: bool = Field(False, description="Whether this update completed it")
    reward_xp: int = Field(0, description="XP to award (0 unless just completed)")


class ChallengeInfo(BaseModel):
    """Challenge plus display fields computed at a point in time."""

    id: int | None
    user_id: str
    challenge_type: ChallengeType
    target_metric: TargetMetric
    target_value: int
    current_value: int
    reward_xp: int
    start_date: datetime
    end_date: datetime
    status: ChallengeStatus
    completed_at: datetime | None
    progress_percent: float
    remaining_time_hours: int
    is_completed: bool
    is_expired: bool

    @classmethod
    def from_challenge(cls, challenge: Challenge, now: datetime) -> "ChallengeInfo":
        """Build the view of a challenge as of ``now``."""
        now = ensure_utc(now)
        remaining_seconds = (challenge.end_date - now).total_seconds()
        return cls(
            id=challenge.id,
            user_id=challenge.user_id,
            challenge_type=challenge.challenge_type,
            target_metric=challenge.target_metric,
            target_value=challenge.target_value,
            current_value=challenge.current_value,
            reward_xp=challenge.reward_xp,
            start_date=challenge.start_date,
            end_date=challenge.end_date,
            status=challenge.status,
            completed_at=challenge.completed_at,
            progress_percent=challenge.progress_percent,
            # Whole hours, truncated toward zero
            remaining_time_hours=max(0, math.trunc(remaining_seconds / 3600)),
            is_completed=challenge.is_completed,
            is_expired=challenge.end_date < now and challenge.status is ChallengeStatus.ACTIVE,
        )


class ChallengeSummary(BaseModel):
    """Challenge completion statistics for a user."""

    total_completed: int = 0
    consecutive_weekly_completions: int = 0
    active_count: int = 0
