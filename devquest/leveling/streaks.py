"""Streak transitions, streak derivation and streak bonus XP.

Daily streaks count consecutive active days. Weekly and monthly streaks
count consecutive ISO weeks / calendar months containing at least one
active day. A run is still "current" when its last period is the present
one or the one just before it (one period of grace, like the daily streak
which survives until the end of the day after the last activity).
"""

from collections.abc import Callable, Iterable
from datetime import date, timedelta

from pydantic import BaseModel, Field

from devquest.core.logging import get_logger
from devquest.stats.models import UserStats

logger = get_logger(__name__)


class StreakMilestone(BaseModel):
    """Streak length that pays a one-time XP bonus."""

    days: int = Field(..., description="Streak length in days")
    xp_bonus: int = Field(..., description="Bonus XP when reached")


STREAK_MILESTONES: tuple[StreakMilestone, ...] = (
    StreakMilestone(days=7, xp_bonus=50),
    StreakMilestone(days=14, xp_bonus=100),
    StreakMilestone(days=30, xp_bonus=200),
    StreakMilestone(days=100, xp_bonus=500),
    StreakMilestone(days=365, xp_bonus=1000),
)

DAILY_STREAK_BONUS = 20


class StreakBonusResult(BaseModel):
    """Bonus XP earned by a streak update.

    Attributes:
        daily_bonus: Bonus for extending the streak
        milestone_bonus: Bonus for crossing a milestone
        total_bonus: daily_bonus + milestone_bonus
        milestone_reached: Milestone length crossed, if any
        current_streak: Streak after the update
    """

    daily_bonus: int = Field(0, description="Daily continuation bonus")
    milestone_bonus: int = Field(0, description="Milestone bonus")
    total_bonus: int = Field(0, description="Total bonus XP")
    milestone_reached: int | None = Field(None, description="Milestone crossed")
    current_streak: int = Field(0, description="Streak after update")


def advance_streak(stats: UserStats, activity_date: date) -> UserStats:
    """Record activity on a date and return the updated streak state.

    Same-day activity changes nothing, the next day extends the streak and
    any gap restarts it at 1. The longest streak never decreases.

    Args:
        stats: Current user stats
        activity_date: Day the activity happened

    Returns:
        Updated UserStats
    """
    last = stats.last_activity_date
    if last is None:
        current, longest = 1, max(1, stats.longest_streak)
    else:
        days_diff = (activity_date - last).days
        if days_diff == 0:
            return stats
        if days_diff == 1:
            current = stats.current_streak + 1
            longest = max(current, stats.longest_streak)
        elif days_diff > 1:
            current, longest = 1, max(1, stats.longest_streak)
            logger.info(
                "streak.reset",
                user_id=stats.user_id,
                previous_streak=stats.current_streak,
                gap_days=days_diff,
            )
        else:
            # Activity older than what we already recorded
            return stats

    return stats.model_copy(
        update={
            "current_streak": current,
            "longest_streak": longest,
            "last_activity_date": activity_date,
        }
    )


def calculate_streak_bonus(old_streak: int, new_streak: int) -> StreakBonusResult:
    """Calculate bonus XP for a streak update.

    Args:
        old_streak: Streak before the update
        new_streak: Streak after the update

    Returns:
        StreakBonusResult (all zeros when the streak did not grow)
    """
    result = StreakBonusResult(current_streak=new_streak)
    if new_streak <= old_streak:
        return result

    result.daily_bonus = DAILY_STREAK_BONUS
    for milestone in STREAK_MILESTONES:
        if old_streak < milestone.days <= new_streak:
            result.milestone_bonus = milestone.xp_bonus
            result.milestone_reached = milestone.days
            break

    result.total_bonus = result.daily_bonus + result.milestone_bonus
    return result


def get_next_milestone(current_streak: int) -> StreakMilestone | None:
    """Next milestone above the current streak, if any."""
    return next((m for m in STREAK_MILESTONES if m.days > current_streak), None)


def days_to_next_milestone(current_streak: int) -> int | None:
    """Days until the next milestone, if any."""
    milestone = get_next_milestone(current_streak)
    if milestone is None:
        return None
    return milestone.days - current_streak


def is_streak_at_risk(last_activity: date | None, today: date) -> bool:
    """Whether the streak breaks unless there is activity today."""
    if last_activity is None:
        return False
    return last_activity < today


def _consecutive_runs(
    periods: list[int], current_period: int
) -> tuple[int, int]:
    """Current and longest run of consecutive integer period indexes.

    Args:
        periods: Distinct period indexes in descending order
        current_period: Index of the period containing today

    Returns:
        Tuple of (current_run, longest_run)
    """
    if not periods:
        return 0, 0

    # Check if the run is still alive (one period of grace)
    if periods[0] < current_period - 1:
        current_run = 0
    else:
        current_run = 1
        expected = periods[0] - 1
        for period in periods[1:]:
            if period != expected:
                break
            current_run += 1
            expected -= 1

    longest_run = 0
    temp_run = 1
    expected = periods[0] - 1
    for period in periods[1:]:
        if period == expected:
            temp_run += 1
        else:
            longest_run = max(longest_run, temp_run)
            temp_run = 1
        expected = period - 1

    longest_run = max(longest_run, temp_run)
    return current_run, longest_run


def _streaks_by(
    activity_dates: Iterable[date], today: date, period_of: Callable[[date], int]
) -> tuple[int, int]:
    periods = sorted({period_of(d) for d in activity_dates if d <= today}, reverse=True)
    return _consecutive_runs(periods, period_of(today))


def _day_index(d: date) -> int:
    return d.toordinal()


def _week_index(d: date) -> int:
    # Ordinal of the Monday starting the ISO week, in weeks
    return (d - timedelta(days=d.weekday())).toordinal() // 7


def _month_index(d: date) -> int:
    return d.year * 12 + d.month - 1


def daily_streaks(activity_dates: Iterable[date], today: date) -> tuple[int, int]:
    """Current and longest consecutive-day streaks."""
    return _streaks_by(activity_dates, today, _day_index)


def weekly_streaks(activity_dates: Iterable[date], today: date) -> tuple[int, int]:
    """Current and longest runs of consecutive ISO weeks with activity."""
    return _streaks_by(activity_dates, today, _week_index)


def monthly_streaks(activity_dates: Iterable[date], today: date) -> tuple[int, int]:
    """Current and longest runs of consecutive calendar months with activity."""
    return _streaks_by(activity_dates, today, _month_index)
