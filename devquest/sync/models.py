"""Inputs and outputs of a sync cycle."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from devquest.badges.models import EarnedBadge
from devquest.challenges.models import Challenge, ChallengeUpdateResult, CompletionEvent
from devquest.leveling.streaks import StreakBonusResult
from devquest.leveling.xp import XpBreakdown
from devquest.stats.models import HistoricalStats, StatsDiff, StatsSnapshot, UserStats


class SyncTotals(BaseModel):
    """Cumulative counters fetched for the user in this sync.

    Attributes:
        total_commits: Cumulative commits
        total_prs: Cumulative pull requests opened
        total_prs_merged: Cumulative pull requests merged
        total_reviews: Cumulative reviews
        total_issues: Cumulative issues opened
        total_issues_closed: Cumulative issues closed
        total_stars_received: Stars on owned repositories
        total_contributions: Cumulative contributions
        languages_count: Distinct languages used
    """

    total_commits: int = Field(0, ge=0)
    total_prs: int = Field(0, ge=0)
    total_prs_merged: int = Field(0, ge=0)
    total_reviews: int = Field(0, ge=0)
    total_issues: int = Field(0, ge=0)
    total_issues_closed: int = Field(0, ge=0)
    total_stars_received: int = Field(0, ge=0)
    total_contributions: int = Field(0, ge=0)
    languages_count: int = Field(0, ge=0)


class SyncRequest(BaseModel):
    """Everything the engine needs for one user's sync.

    Attributes:
        user_stats: Persisted user stats
        totals: Counters fetched in this sync
        previous_snapshot: Totals as of the last sync (loaded from the
            snapshot store when omitted and a store is configured; today's
            row wins over earlier ones so a same-day resync diffs to zero)
        previous_prs_merged: Merged PR total at the previous sync
        previous_issues_closed: Closed issue total at the previous sync
        challenges: The user's current challenges
        earned_badge_ids: Badges the user already holds
        activity_dates: Known active days (for weekly/monthly streaks)
        generate_challenges: Whether to create due daily/weekly challenges
        last_daily_challenge_date: Creation date of the last daily challenge
        last_weekly_challenge_date: Creation date of the last weekly challenge
        historical: Trailing activity for challenge targets (built from the
            snapshot store when omitted and a store is configured)
        now: Sync time
        sync_id: Optional identifier of the sync run, for logs
    """

    user_stats: UserStats
    totals: SyncTotals
    previous_snapshot: StatsSnapshot | None = None
    previous_prs_merged: int | None = None
    previous_issues_closed: int | None = None
    challenges: list[Challenge] = Field(default_factory=list)
    earned_badge_ids: list[str] = Field(default_factory=list)
    activity_dates: list[date] = Field(default_factory=list)
    generate_challenges: bool = False
    last_daily_challenge_date: date | None = None
    last_weekly_challenge_date: date | None = None
    historical: HistoricalStats | None = None
    now: datetime
    sync_id: str = ""


class SyncOutcome(BaseModel):
    """Results of a sync for the caller to persist.

    Attributes:
        snapshot: Snapshot to upsert for today
        diff: Floored change since the previous snapshot
        xp_breakdown: Activity XP by source
        streak_bonus: Streak continuation and milestone bonus
        challenge_results: One result per challenge progressed this sync
        completions: Challenges completed this sync (award once each)
        challenge_xp: XP from completed challenges
        total_xp_gained: All XP added this sync
        user_stats: Updated user stats
        old_level: Level before the sync
        new_level: Level after the sync
        challenges: All challenges after expiry and progress
        new_challenges: Challenges generated this sync
        new_badges: Badges earned this sync
    """

    snapshot: StatsSnapshot
    diff: StatsDiff
    xp_breakdown: XpBreakdown
    streak_bonus: StreakBonusResult
    challenge_results: list[ChallengeUpdateResult] = Field(default_factory=list)
    completions: list[CompletionEvent] = Field(default_factory=list)
    challenge_xp: int = 0
    total_xp_gained: int = 0
    user_stats: UserStats
    old_level: int
    new_level: int
    challenges: list[Challenge] = Field(default_factory=list)
    new_challenges: list[Challenge] = Field(default_factory=list)
    new_badges: list[EarnedBadge] = Field(default_factory=list)

    @property
    def leveled_up(self) -> bool:
        """Whether the sync crossed at least one level boundary."""
        return self.new_level > self.old_level
