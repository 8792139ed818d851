"""Tests for devquest.shared.models module."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from devquest.shared.exceptions import DevQuestError, InvalidRequestError
from devquest.shared.models import (
    ChallengeStatus,
    ChallengeType,
    TargetMetric,
    ensure_utc,
    parse_challenge_type,
    parse_target_metric,
)


class TestParsers:
    """Tests for raw string parsing."""

    def test_parse_challenge_type(self) -> None:
        """Test that known types parse case-insensitively."""
        assert parse_challenge_type("daily") is ChallengeType.DAILY
        assert parse_challenge_type(" Weekly ") is ChallengeType.WEEKLY

    def test_parse_challenge_type_invalid(self) -> None:
        """Test that unknown types raise InvalidRequestError."""
        with pytest.raises(InvalidRequestError, match="Invalid challenge type"):
            parse_challenge_type("monthly")

    def test_parse_target_metric(self) -> None:
        """Test that known metrics parse."""
        assert parse_target_metric("prs") is TargetMetric.PRS
        assert parse_target_metric("ISSUES") is TargetMetric.ISSUES

    def test_parse_target_metric_invalid(self) -> None:
        """Test that unknown metrics raise InvalidRequestError."""
        with pytest.raises(InvalidRequestError, match="Invalid target metric"):
            parse_target_metric("stars")

    def test_invalid_request_is_devquest_error(self) -> None:
        """Test the exception hierarchy."""
        with pytest.raises(DevQuestError):
            parse_target_metric("nope")


class TestEnums:
    """Tests for shared enums."""

    def test_wire_values_are_lowercase(self) -> None:
        """Test that enums serialize to lowercase strings."""
        assert ChallengeStatus.ACTIVE == "active"
        assert ChallengeType.WEEKLY == "weekly"
        assert TargetMetric.REVIEWS == "reviews"

    def test_terminal_states(self) -> None:
        """Test that only active is non-terminal."""
        assert not ChallengeStatus.ACTIVE.is_terminal
        assert ChallengeStatus.COMPLETED.is_terminal
        assert ChallengeStatus.FAILED.is_terminal


class TestEnsureUtc:
    """Tests for ensure_utc()."""

    def test_naive_treated_as_utc(self) -> None:
        """Test that naive datetimes get UTC attached."""
        result = ensure_utc(datetime(2025, 1, 1, 12, 0))

        assert result == datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def test_aware_converted(self) -> None:
        """Test that other offsets are converted to UTC."""
        plus_two = timezone(timedelta(hours=2))

        result = ensure_utc(datetime(2025, 1, 1, 12, 0, tzinfo=plus_two))

        assert result == datetime(2025, 1, 1, 10, 0, tzinfo=UTC)
        assert result.tzinfo == UTC
