"""Shared enums and helpers used across the engine."""

from datetime import UTC, datetime
from enum import StrEnum

from devquest.shared.exceptions import InvalidRequestError


class ChallengeType(StrEnum):
    """Challenge duration category."""

    DAILY = "daily"
    WEEKLY = "weekly"


class ChallengeStatus(StrEnum):
    """Challenge lifecycle state (transitions only move forward)."""

    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed from this state."""
        return self is not ChallengeStatus.ACTIVE


class TargetMetric(StrEnum):
    """Activity counter a challenge is measured against."""

    COMMITS = "commits"
    PRS = "prs"
    REVIEWS = "reviews"
    ISSUES = "issues"


class BadgeRarity(StrEnum):
    """Badge rarity tiers."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class BadgeType(StrEnum):
    """Badge catalog categories."""

    MILESTONE = "milestone"
    STREAK = "streak"
    COLLABORATION = "collaboration"
    QUALITY = "quality"
    LANGUAGE = "language"
    LEVEL = "level"
    STARS = "stars"
    CONSISTENCY = "consistency"


def ensure_utc(value: datetime) -> datetime:
    """Return a timezone-aware UTC datetime, treating naive values as UTC.

    Args:
        value: Datetime to normalize

    Returns:
        Datetime in UTC
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_challenge_type(value: str) -> ChallengeType:
    """Parse a raw challenge type string.

    Args:
        value: Raw value such as "daily" or "weekly"

    Returns:
        Matching ChallengeType

    Raises:
        InvalidRequestError: If the value is not a known challenge type
    """
    try:
        return ChallengeType(value.strip().lower())
    except ValueError as e:
        raise InvalidRequestError(
            f"Invalid challenge type: {value!r}. Must be 'daily' or 'weekly'"
        ) from e


def parse_target_metric(value: str) -> TargetMetric:
    """Parse a raw target metric string.

    Args:
        value: Raw value such as "commits"

    Returns:
        Matching TargetMetric

    Raises:
        InvalidRequestError: If the value is not a known metric
    """
    try:
        return TargetMetric(value.strip().lower())
    except ValueError as e:
        valid = ", ".join(m.value for m in TargetMetric)
        raise InvalidRequestError(
            f"Invalid target metric: {value!r}. Must be one of: {valid}"
        ) from e
