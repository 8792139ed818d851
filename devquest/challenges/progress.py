"""Challenge progress tracking and lifecycle transitions.

Lifecycle: ``active -> completed`` when progress reaches the target, or
``active -> failed`` when the period ends first. Terminal challenges are
never modified again, which is what makes completion rewards exactly-once:
a completion event is only produced on the transition itself.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from devquest.challenges.models import (
    Challenge,
    ChallengeSummary,
    ChallengeUpdateResult,
    CompletionEvent,
)
from devquest.challenges.periods import week_start
from devquest.core.logging import get_logger
from devquest.shared.models import ChallengeStatus, ChallengeType, TargetMetric, ensure_utc
from devquest.stats.models import ActivityTotals
from devquest.stats.snapshots import metric_delta, select_baseline

logger = get_logger(__name__)


def calculate_progress_for_metric(
    metric: TargetMetric,
    prev_stats: ActivityTotals,
    current_stats: ActivityTotals,
    challenge_start_stats: ActivityTotals | None = None,
) -> int:
    """Activity counted toward a challenge on ``metric``.

    Measured from the challenge's start stats when present, otherwise from
    the previous sync. Never negative.
    """
    baseline = select_baseline(prev_stats, challenge_start_stats)
    return metric_delta(metric, current_stats, baseline)


def apply_progress(
    challenge: Challenge, value: int, now: datetime
) -> tuple[Challenge, CompletionEvent | None]:
    """Apply a new progress value to a challenge.

    The value is clamped to ``[current_value, target_value]``, so progress
    never goes backwards. Reaching the target completes the challenge and
    returns a completion event. Completed and failed challenges are returned
    unchanged with no event.

    Args:
        challenge: Challenge to update
        value: Newly computed progress value
        now: Time of the update

    Returns:
        Tuple of (updated challenge, completion event or None)
    """
    if challenge.status.is_terminal:
        return challenge, None

    new_value = max(challenge.current_value, min(value, challenge.target_value))
    if new_value < challenge.target_value:
        if new_value == challenge.current_value:
            return challenge, None
        return challenge.model_copy(update={"current_value": new_value}), None

    completed_at = ensure_utc(now)
    updated = challenge.model_copy(
        update={
            "current_value": new_value,
            "status": ChallengeStatus.COMPLETED,
            "completed_at": completed_at,
        }
    )
    event = CompletionEvent(
        challenge_id=challenge.id,
        user_id=challenge.user_id,
        challenge_type=challenge.challenge_type,
        target_metric=challenge.target_metric,
        reward_xp=challenge.reward_xp,
        completed_at=completed_at,
    )
    logger.info(
        "challenge.progress.completed",
        user_id=challenge.user_id,
        challenge_id=challenge.id,
        challenge_type=challenge.challenge_type.value,
        target_metric=challenge.target_metric.value,
        reward_xp=challenge.reward_xp,
    )
    return updated, event


def update_challenge_progress(
    challenge: Challenge, value: int, now: datetime
) -> tuple[Challenge, ChallengeUpdateResult]:
    """Apply progress and describe what changed.

    Args:
        challenge: Challenge to update
        value: Newly computed progress value
        now: Time of the update

    Returns:
        Tuple of (updated challenge, update result)
    """
    updated, event = apply_progress(challenge, value, now)
    return updated, build_update_result(challenge, updated, event)


def build_update_result(
    before: Challenge, after: Challenge, event: CompletionEvent | None
) -> ChallengeUpdateResult:
    """Describe the change between two versions of a challenge."""
    result = ChallengeUpdateResult(
        challenge_id=before.id,
        old_value=before.current_value,
        new_value=after.current_value,
        target_value=after.target_value,
        just_completed=event is not None,
        reward_xp=event.reward_xp if event is not None else 0,
    )
    if result.old_value != result.new_value and not result.just_completed:
        logger.debug(
            "challenge.progress.updated",
            challenge_id=before.id,
            old_value=result.old_value,
            new_value=result.new_value,
            target_value=result.target_value,
        )
    return result


def expire_challenges(challenges: Iterable[Challenge], now: datetime) -> list[Challenge]:
    """Fail active challenges whose period ended before ``now``.

    Args:
        challenges: Challenges to sweep
        now: Current time

    Returns:
        All challenges, with expired ones marked failed (order kept)
    """
    now = ensure_utc(now)
    swept = []
    for challenge in challenges:
        if challenge.status is ChallengeStatus.ACTIVE and challenge.end_date < now:
            challenge = challenge.model_copy(update={"status": ChallengeStatus.FAILED})
            logger.info(
                "challenge.expired",
                user_id=challenge.user_id,
                challenge_id=challenge.id,
                current_value=challenge.current_value,
                target_value=challenge.target_value,
            )
        swept.append(challenge)
    return swept


def count_consecutive_weekly_completions(challenges: Iterable[Challenge]) -> int:
    """Count consecutive ISO weeks, newest first, with a completed weekly challenge.

    Several completions in the same week count once. The run starts at the
    most recent completion and stops at the first missing week.
    """
    weeks = sorted(
        {
            week_start(c.completed_at.date())
            for c in challenges
            if c.challenge_type is ChallengeType.WEEKLY
            and c.status is ChallengeStatus.COMPLETED
            and c.completed_at is not None
        },
        reverse=True,
    )
    if not weeks:
        return 0

    consecutive = 1
    for newer, older in zip(weeks, weeks[1:], strict=False):
        if newer - older != timedelta(weeks=1):
            break
        consecutive += 1
    return consecutive


def summarize_challenges(challenges: Iterable[Challenge], now: datetime) -> ChallengeSummary:
    """Completion statistics for a user's challenges."""
    items = list(challenges)
    return ChallengeSummary(
        total_completed=sum(1 for c in items if c.status is ChallengeStatus.COMPLETED),
        consecutive_weekly_completions=count_consecutive_weekly_completions(items),
        active_count=sum(1 for c in items if c.is_active(now)),
    )


def has_active_challenge(
    challenges: Iterable[Challenge],
    challenge_type: ChallengeType,
    target_metric: TargetMetric,
) -> bool:
    """Whether an active challenge of this type and metric already exists."""
    return any(
        c.status is ChallengeStatus.ACTIVE
        and c.challenge_type is challenge_type
        and c.target_metric is target_metric
        for c in challenges
    )
