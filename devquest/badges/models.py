"""Badge definitions, conditions and evaluation results."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from devquest.shared.models import BadgeRarity, BadgeType


class CommitsCondition(BaseModel):
    """Total commits reach a threshold."""

    model_config = ConfigDict(frozen=True)

    type: Literal["commits"] = "commits"
    threshold: int


class StreakCondition(BaseModel):
    """Best daily streak (current or longest) reaches a number of days."""

    model_config = ConfigDict(frozen=True)

    type: Literal["streak"] = "streak"
    days: int


class WeeklyStreakCondition(BaseModel):
    """Consecutive weeks with at least one active day."""

    model_config = ConfigDict(frozen=True)

    type: Literal["weekly_streak"] = "weekly_streak"
    weeks: int


class MonthlyStreakCondition(BaseModel):
    """Consecutive months with at least one active day."""

    model_config = ConfigDict(frozen=True)

    type: Literal["monthly_streak"] = "monthly_streak"
    months: int


class ReviewsCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["reviews"] = "reviews"
    threshold: int


class PrsMergedCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["prs_merged"] = "prs_merged"
    threshold: int


class IssuesClosedCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["issues_closed"] = "issues_closed"
    threshold: int


class PrMergeRateCondition(BaseModel):
    """Share of merged PRs, only judged once enough PRs exist."""

    model_config = ConfigDict(frozen=True)

    type: Literal["pr_merge_rate"] = "pr_merge_rate"
    min_rate: float = Field(..., gt=0, le=1)
    min_prs: int


class LanguagesCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["languages"] = "languages"
    count: int


class LevelCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["level"] = "level"
    threshold: int


class StarsReceivedCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["stars_received"] = "stars_received"
    threshold: int


BadgeCondition = Annotated[
    CommitsCondition
    | StreakCondition
    | WeeklyStreakCondition
    | MonthlyStreakCondition
    | ReviewsCondition
    | PrsMergedCondition
    | IssuesClosedCondition
    | PrMergeRateCondition
    | LanguagesCondition
    | LevelCondition
    | StarsReceivedCondition,
    Field(discriminator="type"),
]


class BadgeDefinition(BaseModel):
    """Catalog entry for a badge.

    Attributes:
        id: Durable badge identifier (never renamed)
        name: Display name
        description: What the user has to do
        badge_type: Catalog category
        rarity: Rarity tier
        icon: Emoji shown with the badge
        condition: Condition that earns the badge
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Badge identifier")
    name: str = Field(..., description="Display name")
    description: str = Field(..., description="Badge description")
    badge_type: BadgeType = Field(..., description="Badge category")
    rarity: BadgeRarity = Field(..., description="Rarity tier")
    icon: str = Field(..., description="Badge emoji")
    condition: BadgeCondition = Field(..., description="Earning condition")


class BadgeEvalContext(BaseModel):
    """User totals badges are evaluated against.

    Attributes:
        total_commits: Total commits all time
        current_streak: Current daily streak
        longest_streak: Longest daily streak
        weekly_streak: Consecutive active weeks
        monthly_streak: Consecutive active months
        total_reviews: Total reviews
        total_prs: Total pull requests opened
        total_prs_merged: Total pull requests merged
        total_issues_closed: Total issues closed
        languages_count: Distinct programming languages used
        current_level: Current level
        total_stars_received: Stars received on owned repositories
    """

    total_commits: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    weekly_streak: int = 0
    monthly_streak: int = 0
    total_reviews: int = 0
    total_prs: int = 0
    total_prs_merged: int = 0
    total_issues_closed: int = 0
    languages_count: int = 0
    current_level: int = 1
    total_stars_received: int = 0


class BadgeEvalResult(BaseModel):
    """A badge whose condition is met and which the user does not hold yet."""

    badge_id: str = Field(..., description="Badge identifier")
    badge_type: BadgeType = Field(..., description="Badge category")
    newly_earned: bool = Field(True, description="Whether this evaluation earned it")


class BadgeProgress(BaseModel):
    """Progress toward an unearned badge.

    Attributes:
        badge_id: Badge identifier
        current_value: Current value of the tracked metric
        target_value: Value needed to earn the badge
        progress_percent: Progress from 0.0 to 100.0
    """

    badge_id: str = Field(..., description="Badge identifier")
    current_value: int = Field(..., description="Current metric value")
    target_value: int = Field(..., description="Target metric value")
    progress_percent: float = Field(..., ge=0, le=100, description="Progress percent")


class BadgeWithProgress(BaseModel):
    """Catalog entry joined with the user's earned state or progress."""

    id: str = Field(..., description="Badge identifier")
    name: str = Field(..., description="Display name")
    description: str = Field(..., description="Badge description")
    badge_type: BadgeType = Field(..., description="Badge category")
    rarity: BadgeRarity = Field(..., description="Rarity tier")
    icon: str = Field(..., description="Badge emoji")
    earned: bool = Field(False, description="Whether the user holds the badge")
    earned_at: datetime | None = Field(None, description="When the badge was earned")
    progress: BadgeProgress | None = Field(None, description="Progress when unearned")


class EarnedBadge(BaseModel):
    """Badge row ready to persist.

    Attributes:
        user_id: User who earned the badge
        badge_id: Badge identifier
        badge_type: Badge category
        earned_at: When it was earned (UTC)
    """

    user_id: str = Field(..., description="User identifier")
    badge_id: str = Field(..., description="Badge identifier")
    badge_type: BadgeType = Field(..., description="Badge category")
    earned_at: datetime = Field(..., description="Earned timestamp")
