"""Badge evaluation, progress scoring and near-completion reporting."""

import math
from collections.abc import Iterable
from datetime import datetime
from typing import assert_never

from devquest.badges.catalog import get_badge_definitions
from devquest.badges.models import (
    BadgeCondition,
    BadgeDefinition,
    BadgeEvalContext,
    BadgeEvalResult,
    BadgeProgress,
    BadgeWithProgress,
    CommitsCondition,
    EarnedBadge,
    IssuesClosedCondition,
    LanguagesCondition,
    LevelCondition,
    MonthlyStreakCondition,
    PrMergeRateCondition,
    PrsMergedCondition,
    ReviewsCondition,
    StarsReceivedCondition,
    StreakCondition,
    WeeklyStreakCondition,
)
from devquest.core.config import get_settings
from devquest.core.logging import get_logger
from devquest.shared.models import ensure_utc
from devquest.stats.models import UserStats

logger = get_logger(__name__)


def _merge_rate(ctx: BadgeEvalContext) -> float:
    if ctx.total_prs <= 0:
        return 0.0
    return ctx.total_prs_merged / ctx.total_prs


def _percent_points(rate: float) -> int:
    """Rate as whole percentage points, halves rounded up."""
    return math.floor(rate * 100 + 0.5)


def _calculate_percent(current: int, target: int) -> float:
    """Percentage of target reached, capped at 100 (100 for a zero target)."""
    if target == 0:
        return 100.0
    return max(0.0, min(100.0, current / target * 100.0))


def _tracked_value(condition: BadgeCondition, ctx: BadgeEvalContext) -> tuple[int, int]:
    """Current value and target for every threshold-style condition."""
    match condition:
        case CommitsCondition(threshold=threshold):
            return ctx.total_commits, threshold
        case StreakCondition(days=days):
            return max(ctx.current_streak, ctx.longest_streak), days
        case WeeklyStreakCondition(weeks=weeks):
            return ctx.weekly_streak, weeks
        case MonthlyStreakCondition(months=months):
            return ctx.monthly_streak, months
        case ReviewsCondition(threshold=threshold):
            return ctx.total_reviews, threshold
        case PrsMergedCondition(threshold=threshold):
            return ctx.total_prs_merged, threshold
        case IssuesClosedCondition(threshold=threshold):
            return ctx.total_issues_closed, threshold
        case LanguagesCondition(count=count):
            return ctx.languages_count, count
        case LevelCondition(threshold=threshold):
            return ctx.current_level, threshold
        case StarsReceivedCondition(threshold=threshold):
            return ctx.total_stars_received, threshold
        case PrMergeRateCondition():
            raise TypeError("Merge rate conditions are not threshold based")
        case _:
            assert_never(condition)


def evaluate_condition(condition: BadgeCondition, ctx: BadgeEvalContext) -> bool:
    """Check whether a badge condition is satisfied.

    Streak conditions use the best of the current and longest streak, so a
    broken streak still counts. Merge rate conditions are never satisfied
    before ``min_prs`` pull requests exist.

    Args:
        condition: Badge condition
        ctx: User totals

    Returns:
        True if the condition is met
    """
    match condition:
        case PrMergeRateCondition(min_rate=min_rate, min_prs=min_prs):
            if ctx.total_prs < min_prs or ctx.total_prs == 0:
                return False
            return _merge_rate(ctx) >= min_rate
        case _:
            current, target = _tracked_value(condition, ctx)
            return current >= target


def calculate_progress(
    badge_id: str, condition: BadgeCondition, ctx: BadgeEvalContext
) -> BadgeProgress:
    """Calculate progress toward a badge.

    Merge rate badges report progress in two phases: first the number of
    PRs toward ``min_prs``, then the merge rate (as an integer percent)
    toward the required rate.

    Args:
        badge_id: Badge identifier
        condition: Badge condition
        ctx: User totals

    Returns:
        BadgeProgress with current, target and percent
    """
    match condition:
        case PrMergeRateCondition(min_rate=min_rate, min_prs=min_prs):
            if ctx.total_prs < min_prs:
                return BadgeProgress(
                    badge_id=badge_id,
                    current_value=ctx.total_prs,
                    target_value=min_prs,
                    progress_percent=_calculate_percent(ctx.total_prs, min_prs),
                )
            rate = _merge_rate(ctx)
            return BadgeProgress(
                badge_id=badge_id,
                current_value=_percent_points(rate),
                target_value=_percent_points(min_rate),
                progress_percent=min(100.0, rate / min_rate * 100.0),
            )
        case _:
            current, target = _tracked_value(condition, ctx)
            return BadgeProgress(
                badge_id=badge_id,
                current_value=current,
                target_value=target,
                progress_percent=_calculate_percent(current, target),
            )


def evaluate_badges(
    ctx: BadgeEvalContext, already_earned_ids: Iterable[str]
) -> list[BadgeEvalResult]:
    """Find badges whose condition is met and which are not held yet.

    Pure: calling twice with the same earned ids returns the same result,
    so the caller must persist awards before evaluating again.

    Args:
        ctx: User totals
        already_earned_ids: Badge ids the user already holds

    Returns:
        Newly earned badges in catalog order
    """
    earned = set(already_earned_ids)
    results = [
        BadgeEvalResult(badge_id=badge.id, badge_type=badge.badge_type, newly_earned=True)
        for badge in get_badge_definitions()
        if badge.id not in earned and evaluate_condition(badge.condition, ctx)
    ]
    logger.debug(
        "badges.evaluated",
        already_earned=len(earned),
        newly_earned=[r.badge_id for r in results],
    )
    return results


def _with_progress(
    badge: BadgeDefinition,
    earned_at: datetime | None = None,
    progress: BadgeProgress | None = None,
    earned: bool = False,
) -> BadgeWithProgress:
    return BadgeWithProgress(
        id=badge.id,
        name=badge.name,
        description=badge.description,
        badge_type=badge.badge_type,
        rarity=badge.rarity,
        icon=badge.icon,
        earned=earned,
        earned_at=earned_at,
        progress=progress,
    )


def get_badges_with_progress(
    ctx: BadgeEvalContext, earned: Iterable[tuple[str, datetime | None]]
) -> list[BadgeWithProgress]:
    """Join the catalog with the user's earned badges.

    Args:
        ctx: User totals
        earned: (badge_id, earned_at) pairs for badges the user holds

    Returns:
        Every catalog badge in catalog order; earned ones carry earned_at,
        the rest carry progress
    """
    earned_at_by_id = dict(earned)
    results = []
    for badge in get_badge_definitions():
        if badge.id in earned_at_by_id:
            results.append(_with_progress(badge, earned_at=earned_at_by_id[badge.id], earned=True))
        else:
            results.append(
                _with_progress(badge, progress=calculate_progress(badge.id, badge.condition, ctx))
            )
    return results


def get_near_completion_badges(
    ctx: BadgeEvalContext,
    earned_ids: Iterable[str],
    threshold_percent: float | None = None,
) -> list[BadgeWithProgress]:
    """Find unearned badges the user is close to.

    Args:
        ctx: User totals
        earned_ids: Badge ids the user already holds
        threshold_percent: Minimum progress to report (defaults to settings)

    Returns:
        Badges with ``threshold <= percent < 100``, closest first. Ties keep
        catalog order.
    """
    if threshold_percent is None:
        threshold_percent = get_settings().near_completion_threshold

    earned = set(earned_ids)
    results = []
    for badge in get_badge_definitions():
        if badge.id in earned:
            continue
        progress = calculate_progress(badge.id, badge.condition, ctx)
        if threshold_percent <= progress.progress_percent < 100.0:
            results.append(_with_progress(badge, progress=progress))

    # sort() is stable, so equal percents stay in catalog order
    results.sort(key=lambda b: b.progress.progress_percent if b.progress else 0.0, reverse=True)
    return results


def build_eval_context(
    stats: UserStats,
    *,
    total_prs_merged: int = 0,
    total_issues_closed: int = 0,
    languages_count: int = 0,
    total_stars_received: int = 0,
    weekly_streak: int = 0,
    monthly_streak: int = 0,
) -> BadgeEvalContext:
    """Flatten user stats and derived metrics into an evaluation context.

    Args:
        stats: User stats
        total_prs_merged: Merged pull requests
        total_issues_closed: Closed issues
        languages_count: Distinct languages used
        total_stars_received: Stars on owned repositories
        weekly_streak: Consecutive active weeks
        monthly_streak: Consecutive active months

    Returns:
        BadgeEvalContext
    """
    return BadgeEvalContext(
        total_commits=stats.total_commits,
        current_streak=stats.current_streak,
        longest_streak=stats.longest_streak,
        weekly_streak=weekly_streak,
        monthly_streak=monthly_streak,
        total_reviews=stats.total_reviews,
        total_prs=stats.total_prs,
        total_prs_merged=total_prs_merged,
        total_issues_closed=total_issues_closed,
        languages_count=languages_count,
        current_level=stats.current_level,
        total_stars_received=total_stars_received,
    )


def award_badges(
    user_id: str,
    ctx: BadgeEvalContext,
    already_earned_ids: Iterable[str],
    now: datetime,
) -> list[EarnedBadge]:
    """Evaluate badges and build the rows to persist for new ones.

    Args:
        user_id: User identifier
        ctx: User totals
        already_earned_ids: Badge ids the user already holds
        now: Award timestamp

    Returns:
        EarnedBadge rows in catalog order
    """
    earned_at = ensure_utc(now)
    awarded = [
        EarnedBadge(
            user_id=user_id,
            badge_id=result.badge_id,
            badge_type=result.badge_type,
            earned_at=earned_at,
        )
        for result in evaluate_badges(ctx, already_earned_ids)
    ]
    for badge in awarded:
        logger.info("badges.awarded", user_id=user_id, badge_id=badge.badge_id)
    return awarded
