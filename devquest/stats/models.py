"""Data models for user stats, snapshots and diffs."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from devquest.shared.models import TargetMetric


class UserStats(BaseModel):
    """Gamification state for one user, mutated by the caller after each sync.

    Attributes:
        user_id: User identifier
        total_xp: Accumulated experience points
        current_level: Level derived from total_xp
        current_streak: Current consecutive active days
        longest_streak: Longest streak ever achieved
        last_activity_date: Date of last activity (for streak continuation)
        total_commits: Total commits all time
        total_prs: Total pull requests all time
        total_reviews: Total PR reviews all time
        total_issues: Total issues all time
    """

    user_id: str = Field(..., description="User identifier")
    total_xp: int = Field(0, ge=0, description="Accumulated XP")
    current_level: int = Field(1, ge=1, description="Current level")
    current_streak: int = Field(0, ge=0, description="Current consecutive streak")
    longest_streak: int = Field(0, ge=0, description="Longest streak achieved")
    last_activity_date: date | None = Field(None, description="Last activity date")

    total_commits: int = Field(0, ge=0, description="Total commits all time")
    total_prs: int = Field(0, ge=0, description="Total pull requests all time")
    total_reviews: int = Field(0, ge=0, description="Total PR reviews all time")
    total_issues: int = Field(0, ge=0, description="Total issues all time")

    @model_validator(mode="after")
    def check_streaks(self) -> "UserStats":
        """Ensure the longest streak is a high-water mark of the current one."""
        if self.longest_streak < self.current_streak:
            raise ValueError(
                f"longest_streak ({self.longest_streak}) must be >= "
                f"current_streak ({self.current_streak})"
            )
        return self


class ActivityTotals(BaseModel):
    """Cumulative values of the four challenge metrics at one point in time.

    Also the shape of a challenge's start stats JSON blob.
    """

    commits: int = Field(0, description="Cumulative commits")
    prs: int = Field(0, description="Cumulative pull requests")
    reviews: int = Field(0, description="Cumulative reviews")
    issues: int = Field(0, description="Cumulative issues")

    def get_metric(self, metric: TargetMetric) -> int:
        """Get the cumulative value for a metric."""
        match metric:
            case TargetMetric.COMMITS:
                return self.commits
            case TargetMetric.PRS:
                return self.prs
            case TargetMetric.REVIEWS:
                return self.reviews
            case TargetMetric.ISSUES:
                return self.issues

    def to_json(self) -> str:
        """Serialize for the persistence layer's start_stats_json column."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str | None) -> "ActivityTotals | None":
        """Parse a persisted start_stats_json blob (None when absent)."""
        if not raw:
            return None
        return cls.model_validate_json(raw)


class StatsSnapshot(BaseModel):
    """Cumulative GitHub totals observed for a user on a given date.

    Attributes:
        user_id: User identifier
        snapshot_date: Day the totals were observed (UTC)
        total_commits: Cumulative commits
        total_prs: Cumulative pull requests
        total_reviews: Cumulative reviews
        total_issues: Cumulative issues
        total_stars_received: Cumulative stars on owned repositories
        total_contributions: Cumulative contributions
        created_at: When the snapshot row was written (set by the store)
    """

    user_id: str = Field(..., description="User identifier")
    snapshot_date: date = Field(..., description="Snapshot date")
    total_commits: int = Field(0, description="Cumulative commits")
    total_prs: int = Field(0, description="Cumulative pull requests")
    total_reviews: int = Field(0, description="Cumulative reviews")
    total_issues: int = Field(0, description="Cumulative issues")
    total_stars_received: int = Field(0, description="Cumulative stars received")
    total_contributions: int = Field(0, description="Cumulative contributions")
    created_at: datetime | None = Field(None, description="Row creation time")

    def to_activity_totals(self) -> ActivityTotals:
        """Project onto the four challenge metrics."""
        return ActivityTotals(
            commits=self.total_commits,
            prs=self.total_prs,
            reviews=self.total_reviews,
            issues=self.total_issues,
        )


class StatsDiff(BaseModel):
    """Non-negative change between two snapshots.

    Attributes:
        commits_diff: New commits since the baseline
        prs_diff: New pull requests since the baseline
        reviews_diff: New reviews since the baseline
        issues_diff: New issues since the baseline
        stars_diff: New stars since the baseline
        contributions_diff: New contributions since the baseline
        comparison_date: Date of the baseline snapshot (None on first sync)
    """

    commits_diff: int = Field(0, ge=0, description="Commit delta")
    prs_diff: int = Field(0, ge=0, description="PR delta")
    reviews_diff: int = Field(0, ge=0, description="Review delta")
    issues_diff: int = Field(0, ge=0, description="Issue delta")
    stars_diff: int = Field(0, ge=0, description="Star delta")
    contributions_diff: int = Field(0, ge=0, description="Contribution delta")
    comparison_date: date | None = Field(None, description="Baseline snapshot date")

    def has_changes(self) -> bool:
        """Check if any metric moved since the baseline."""
        return any(
            (
                self.commits_diff,
                self.prs_diff,
                self.reviews_diff,
                self.issues_diff,
                self.stars_diff,
                self.contributions_diff,
            )
        )

    def is_positive(self) -> bool:
        """Check if the overall trend is upward."""
        total = (
            self.commits_diff
            + self.prs_diff
            + self.reviews_diff
            + self.issues_diff
            + self.stars_diff
            + self.contributions_diff
        )
        return total > 0


class HistoricalStats(BaseModel):
    """Trailing four-week activity used to seed challenge targets.

    Attributes:
        commits_4w: Commits in the last 4 weeks
        prs_4w: PRs in the last 4 weeks
        reviews_4w: Reviews in the last 4 weeks
        issues_4w: Issues in the last 4 weeks
        active_days_4w: Days with any activity in the last 4 weeks
    """

    commits_4w: int = Field(0, ge=0, description="Commits in window")
    prs_4w: int = Field(0, ge=0, description="PRs in window")
    reviews_4w: int = Field(0, ge=0, description="Reviews in window")
    issues_4w: int = Field(0, ge=0, description="Issues in window")
    active_days_4w: int = Field(0, ge=0, description="Active days in window")

    def total_for(self, metric: TargetMetric) -> int:
        """Get the window total for a metric."""
        match metric:
            case TargetMetric.COMMITS:
                return self.commits_4w
            case TargetMetric.PRS:
                return self.prs_4w
            case TargetMetric.REVIEWS:
                return self.reviews_4w
            case TargetMetric.ISSUES:
                return self.issues_4w

    def avg_daily(self, metric: TargetMetric) -> float:
        """Average per active day (at least one day to avoid dividing by zero)."""
        return self.total_for(metric) / max(self.active_days_4w, 1)

    def avg_weekly(self, metric: TargetMetric) -> float:
        """Average per week over the four-week window."""
        return self.total_for(metric) / 4.0
