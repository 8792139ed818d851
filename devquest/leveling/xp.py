"""XP values for activity and the per-sync XP breakdown."""

from pydantic import BaseModel, Field

# XP per activity for the flat activity formula
COMMIT_XP = 10
PR_XP = 25
REVIEW_XP = 15
ISSUE_XP = 10

# XP per activity in a sync breakdown
BREAKDOWN_COMMIT_XP = 10
BREAKDOWN_PR_CREATED_XP = 25
BREAKDOWN_PR_MERGED_XP = 50
BREAKDOWN_ISSUE_CREATED_XP = 5
BREAKDOWN_ISSUE_CLOSED_XP = 10
BREAKDOWN_REVIEW_XP = 15
BREAKDOWN_STAR_XP = 5

# Streak bonus: percent per streak day, capped
STREAK_BONUS_PERCENT = 10
MAX_STREAK_BONUS_PERCENT = 100
BREAKDOWN_MAX_STREAK_PERCENT = 10


def with_streak_bonus(base_xp: int, streak: int) -> int:
    """Apply the streak multiplier (+10% per day, at most +100%)."""
    bonus_percent = min(max(streak, 0) * STREAK_BONUS_PERCENT, MAX_STREAK_BONUS_PERCENT)
    return base_xp + (base_xp * bonus_percent // 100)


def calculate_activity_xp(commits: int, prs: int, reviews: int, issues: int) -> int:
    """Flat XP for a batch of activity."""
    return commits * COMMIT_XP + prs * PR_XP + reviews * REVIEW_XP + issues * ISSUE_XP


class XpBreakdown(BaseModel):
    """XP earned in one sync, itemized by source."""

    commits_xp: int = Field(0, description="XP from commits")
    prs_created_xp: int = Field(0, description="XP from opened PRs")
    prs_merged_xp: int = Field(0, description="XP from merged PRs")
    issues_created_xp: int = Field(0, description="XP from opened issues")
    issues_closed_xp: int = Field(0, description="XP from closed issues")
    reviews_xp: int = Field(0, description="XP from reviews")
    stars_xp: int = Field(0, description="XP from stars received")
    streak_bonus_xp: int = Field(0, description="Streak multiplier bonus")
    total_xp: int = Field(0, description="Sum of all items")

    @classmethod
    def calculate(
        cls,
        commits: int = 0,
        prs_created: int = 0,
        prs_merged: int = 0,
        issues_created: int = 0,
        issues_closed: int = 0,
        reviews: int = 0,
        stars: int = 0,
        streak: int = 0,
    ) -> "XpBreakdown":
        """Itemize XP for activity deltas.

        The streak bonus adds 1% of the base total per streak day, up to 10%.

        Args:
            commits: New commits
            prs_created: New pull requests
            prs_merged: Newly merged pull requests
            issues_created: New issues
            issues_closed: Newly closed issues
            reviews: New reviews
            stars: New stars received
            streak: Current daily streak

        Returns:
            XpBreakdown with per-source and total XP
        """
        commits_xp = commits * BREAKDOWN_COMMIT_XP
        prs_created_xp = prs_created * BREAKDOWN_PR_CREATED_XP
        prs_merged_xp = prs_merged * BREAKDOWN_PR_MERGED_XP
        issues_created_xp = issues_created * BREAKDOWN_ISSUE_CREATED_XP
        issues_closed_xp = issues_closed * BREAKDOWN_ISSUE_CLOSED_XP
        reviews_xp = reviews * BREAKDOWN_REVIEW_XP
        stars_xp = stars * BREAKDOWN_STAR_XP

        base_total = (
            commits_xp
            + prs_created_xp
            + prs_merged_xp
            + issues_created_xp
            + issues_closed_xp
            + reviews_xp
            + stars_xp
        )
        streak_bonus_xp = (
            base_total * min(streak, BREAKDOWN_MAX_STREAK_PERCENT) // 100 if streak > 0 else 0
        )

        return cls(
            commits_xp=commits_xp,
            prs_created_xp=prs_created_xp,
            prs_merged_xp=prs_merged_xp,
            issues_created_xp=issues_created_xp,
            issues_closed_xp=issues_closed_xp,
            reviews_xp=reviews_xp,
            stars_xp=stars_xp,
            streak_bonus_xp=streak_bonus_xp,
            total_xp=base_total + streak_bonus_xp,
        )
