"""Challenge period arithmetic on UTC day and week boundaries."""

from datetime import UTC, date, datetime, time, timedelta

from devquest.core.logging import get_logger
from devquest.shared.models import ChallengeType, ensure_utc

logger = get_logger(__name__)

DEFAULT_PERIOD = timedelta(days=7)


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def calculate_challenge_period(
    challenge_type: ChallengeType | str, now: datetime
) -> tuple[datetime, datetime]:
    """Calculate the start and end of a challenge created at ``now``.

    Daily challenges end at the next UTC midnight. Weekly challenges end at
    the midnight that starts the following Monday; on a Sunday that is a
    full week away, not a few hours. Anything else runs for seven days.

    Args:
        challenge_type: Challenge type (enum or raw string)
        now: Creation time

    Returns:
        Tuple of (start, end), both UTC
    """
    now = ensure_utc(now)
    today = now.date()

    if challenge_type == ChallengeType.DAILY:
        return now, _midnight(today + timedelta(days=1))

    if challenge_type == ChallengeType.WEEKLY:
        days_until_sunday = (6 - today.weekday()) % 7
        if days_until_sunday == 0:
            days_until_sunday = 7
        sunday = today + timedelta(days=days_until_sunday)
        return now, _midnight(sunday + timedelta(days=1))

    logger.warning("challenge.period.unknown_type", challenge_type=str(challenge_type))
    return now, now + DEFAULT_PERIOD


def should_generate_daily_challenges(last_challenge_date: date | None, now: datetime) -> bool:
    """Whether a new UTC day started since the last daily challenge."""
    if last_challenge_date is None:
        return True
    return ensure_utc(now).date() > last_challenge_date


def should_generate_weekly_challenges(last_challenge_date: date | None, now: datetime) -> bool:
    """Whether the last weekly challenge predates this week's Monday."""
    if last_challenge_date is None:
        return True
    return last_challenge_date < week_start(ensure_utc(now).date())
