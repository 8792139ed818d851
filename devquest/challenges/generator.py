"""Challenge generation: rewards, recommended targets and templates."""

import math
from datetime import datetime

from pydantic import ValidationError

from devquest.challenges.models import (
    Challenge,
    ChallengeGeneratorConfig,
    ChallengeRequest,
    ChallengeTemplate,
    RecommendedTargets,
)
from devquest.challenges.periods import calculate_challenge_period
from devquest.core.logging import get_logger
from devquest.shared.exceptions import InvalidRequestError
from devquest.shared.models import (
    ChallengeType,
    TargetMetric,
    parse_challenge_type,
    parse_target_metric,
)
from devquest.stats.models import ActivityTotals, HistoricalStats

logger = get_logger(__name__)

BASE_REWARD_XP: dict[str, int] = {
    TargetMetric.COMMITS: 10,
    TargetMetric.PRS: 40,
    TargetMetric.REVIEWS: 20,
    TargetMetric.ISSUES: 25,
}
DEFAULT_BASE_REWARD_XP = 10

# Decimal places kept before rounding a target up
TARGET_PRECISION = 6

DAILY_METRICS: tuple[TargetMetric, ...] = (TargetMetric.COMMITS,)
WEEKLY_METRICS: tuple[TargetMetric, ...] = (
    TargetMetric.COMMITS,
    TargetMetric.PRS,
    TargetMetric.REVIEWS,
)


def calculate_reward_xp(target_metric: TargetMetric | str, target_value: int) -> int:
    """XP reward for a challenge: per-metric base XP times the target.

    Args:
        target_metric: Metric (enum or raw string; unknown metrics use 10)
        target_value: Challenge target

    Returns:
        Reward XP
    """
    base_xp = BASE_REWARD_XP.get(str(target_metric), DEFAULT_BASE_REWARD_XP)
    return base_xp * target_value


def _scaled_target(average: float, multiplier: float, minimum: int) -> int:
    # Rounding first keeps 10 * 1.1 at 11 instead of 11.000000000000002
    return max(math.ceil(round(average * multiplier, TARGET_PRECISION)), minimum)


def calculate_recommended_targets(
    historical: HistoricalStats, config: ChallengeGeneratorConfig | None = None
) -> RecommendedTargets:
    """Derive daily and weekly targets from the last four weeks.

    Daily targets scale the average per active day, weekly targets scale
    the average per week. Both round up and never drop below the
    configured minimum.

    Args:
        historical: Trailing four-week activity
        config: Generator tuning (defaults to settings)

    Returns:
        RecommendedTargets for every metric
    """
    if config is None:
        config = ChallengeGeneratorConfig.from_settings()

    values: dict[str, int] = {}
    for metric in TargetMetric:
        minimum = config.min_for(metric)
        values[f"daily_{metric.value}"] = _scaled_target(
            historical.avg_daily(metric), config.daily_target_multiplier, minimum
        )
        values[f"weekly_{metric.value}"] = _scaled_target(
            historical.avg_weekly(metric), config.weekly_target_multiplier, minimum
        )
    return RecommendedTargets(**values)


def generate_default_weekly_challenges() -> list[ChallengeTemplate]:
    """Weekly challenges for users without activity history."""
    return [
        ChallengeTemplate(
            challenge_type=ChallengeType.WEEKLY,
            target_metric=TargetMetric.COMMITS,
            target_value=5,
            reward_xp=50,
        ),
        ChallengeTemplate(
            challenge_type=ChallengeType.WEEKLY,
            target_metric=TargetMetric.PRS,
            target_value=2,
            reward_xp=80,
        ),
        ChallengeTemplate(
            challenge_type=ChallengeType.WEEKLY,
            target_metric=TargetMetric.REVIEWS,
            target_value=3,
            reward_xp=60,
        ),
    ]


def generate_default_daily_challenges() -> list[ChallengeTemplate]:
    """Daily challenges for users without activity history."""
    return [
        ChallengeTemplate(
            challenge_type=ChallengeType.DAILY,
            target_metric=TargetMetric.COMMITS,
            target_value=1,
            reward_xp=10,
        )
    ]


def _templates_for(
    challenge_type: ChallengeType, metrics: tuple[TargetMetric, ...], targets: RecommendedTargets
) -> list[ChallengeTemplate]:
    templates = []
    for metric in metrics:
        if challenge_type is ChallengeType.DAILY:
            target = targets.daily_for(metric)
        else:
            target = targets.weekly_for(metric)
        templates.append(
            ChallengeTemplate(
                challenge_type=challenge_type,
                target_metric=metric,
                target_value=target,
                reward_xp=calculate_reward_xp(metric, target),
            )
        )
    return templates


def generate_daily_challenges(targets: RecommendedTargets) -> list[ChallengeTemplate]:
    """Daily challenges (commits) at the recommended targets."""
    return _templates_for(ChallengeType.DAILY, DAILY_METRICS, targets)


def generate_weekly_challenges(targets: RecommendedTargets) -> list[ChallengeTemplate]:
    """Weekly challenges (commits, PRs, reviews) at the recommended targets."""
    return _templates_for(ChallengeType.WEEKLY, WEEKLY_METRICS, targets)


def generate_challenge_templates(
    challenge_type: ChallengeType,
    historical: HistoricalStats | None,
    config: ChallengeGeneratorConfig | None = None,
) -> list[ChallengeTemplate]:
    """Pick personalized or default challenges for a period.

    Users with no active days in the window get the default templates.

    Args:
        challenge_type: Period to generate for
        historical: Trailing four-week activity, if any
        config: Generator tuning (defaults to settings)

    Returns:
        Challenge templates to create
    """
    if historical is None or historical.active_days_4w == 0:
        logger.debug("challenge.generate.defaults", challenge_type=challenge_type.value)
        if challenge_type is ChallengeType.DAILY:
            return generate_default_daily_challenges()
        return generate_default_weekly_challenges()

    targets = calculate_recommended_targets(historical, config)
    if challenge_type is ChallengeType.DAILY:
        templates = generate_daily_challenges(targets)
    else:
        templates = generate_weekly_challenges(targets)

    logger.debug(
        "challenge.generate.personalized",
        challenge_type=challenge_type.value,
        targets={t.target_metric.value: t.target_value for t in templates},
    )
    return templates


def parse_challenge_request(
    challenge_type: str,
    target_metric: str,
    target_value: int,
    reward_xp: int | None = None,
) -> ChallengeRequest:
    """Validate a raw user-defined challenge request.

    Args:
        challenge_type: "daily" or "weekly"
        target_metric: "commits", "prs", "reviews" or "issues"
        target_value: Target amount (positive)
        reward_xp: Optional explicit reward (non-negative)

    Returns:
        ChallengeRequest with parsed enums

    Raises:
        InvalidRequestError: If any field is invalid
    """
    parsed_type = parse_challenge_type(challenge_type)
    parsed_metric = parse_target_metric(target_metric)
    try:
        return ChallengeRequest(
            challenge_type=parsed_type,
            target_metric=parsed_metric,
            target_value=target_value,
            reward_xp=reward_xp,
        )
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid challenge request: {e}") from e


def create_challenge(
    user_id: str,
    template: ChallengeTemplate | ChallengeRequest,
    now: datetime,
    start_stats: ActivityTotals | None = None,
) -> Challenge:
    """Create a new active challenge starting at ``now``.

    Args:
        user_id: Owner
        template: Generated template or validated user request
        now: Creation time
        start_stats: Cumulative totals at creation (progress baseline)

    Returns:
        Unpersisted Challenge (id is None)
    """
    start_date, end_date = calculate_challenge_period(template.challenge_type, now)

    reward_xp = template.reward_xp
    if reward_xp is None:
        reward_xp = calculate_reward_xp(template.target_metric, template.target_value)

    challenge = Challenge(
        user_id=user_id,
        challenge_type=template.challenge_type,
        target_metric=template.target_metric,
        target_value=template.target_value,
        current_value=0,
        reward_xp=reward_xp,
        start_date=start_date,
        end_date=end_date,
        start_stats=start_stats,
    )
    logger.info(
        "challenge.created",
        user_id=user_id,
        challenge_type=challenge.challenge_type.value,
        target_metric=challenge.target_metric.value,
        target_value=challenge.target_value,
        reward_xp=reward_xp,
        end_date=end_date.isoformat(),
    )
    return challenge
