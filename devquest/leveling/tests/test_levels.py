"""Tests for devquest.leveling.levels module."""

import pytest

from devquest.leveling.levels import (
    MAX_LEVEL,
    apply_xp,
    get_level_info,
    level_from_xp,
    level_title,
    progress_to_next_level,
    xp_for_level,
    xp_progress_in_level,
    xp_to_next_level,
)
from devquest.shared.exceptions import InvalidRequestError
from devquest.stats.models import UserStats


class TestXpForLevel:
    """Tests for xp_for_level()."""

    def test_level_one_and_below_is_free(self) -> None:
        """Test that levels <= 1 need no XP."""
        assert xp_for_level(0) == 0
        assert xp_for_level(1) == 0

    def test_known_thresholds(self) -> None:
        """Test quadratic thresholds."""
        assert xp_for_level(2) == 50
        assert xp_for_level(3) == 200
        assert xp_for_level(10) == 4050
        assert xp_for_level(100) == 490050

    def test_monotone(self) -> None:
        """Test that thresholds never decrease across all levels."""
        thresholds = [xp_for_level(level) for level in range(1, MAX_LEVEL + 1)]

        assert thresholds == sorted(thresholds)


class TestLevelFromXp:
    """Tests for level_from_xp()."""

    def test_zero_xp_is_level_one(self) -> None:
        assert level_from_xp(0) == 1

    def test_boundaries(self) -> None:
        """Test values just below and at a threshold."""
        assert level_from_xp(49) == 1
        assert level_from_xp(50) == 2
        assert level_from_xp(199) == 2
        assert level_from_xp(200) == 3

    def test_exact_threshold_round_trip(self) -> None:
        """Test that every threshold maps back to its level."""
        for level in range(1, MAX_LEVEL + 1):
            assert level_from_xp(xp_for_level(level)) == level

    def test_capped_at_max_level(self) -> None:
        assert level_from_xp(10**9) == MAX_LEVEL

    @pytest.mark.parametrize("xp", [0, 1, 49, 50, 51, 777, 4049, 4050, 123456, 490050, 10**7])
    def test_idempotent_through_threshold(self, xp: int) -> None:
        """Test that re-deriving the level from its threshold is stable."""
        level = level_from_xp(xp)

        assert level_from_xp(xp_for_level(level)) == level


class TestProgress:
    """Tests for progress helpers."""

    def test_xp_to_next_level(self) -> None:
        assert xp_to_next_level(0) == 50
        assert xp_to_next_level(120) == 80

    def test_xp_to_next_level_at_max(self) -> None:
        assert xp_to_next_level(xp_for_level(MAX_LEVEL)) == 0

    def test_progress_percent(self) -> None:
        """Test progress within the level band."""
        # Level 2 spans 50..200
        assert progress_to_next_level(125) == pytest.approx(50.0)
        assert progress_to_next_level(50) == 0.0

    def test_progress_at_max_level(self) -> None:
        assert progress_to_next_level(10**9) == 100.0

    def test_progress_in_level(self) -> None:
        assert xp_progress_in_level(125) == (75, 150)
        assert xp_progress_in_level(xp_for_level(MAX_LEVEL) + 10) == (10, 0)


class TestLevelInfo:
    """Tests for level titles and summaries."""

    @pytest.mark.parametrize(
        ("level", "title"),
        [
            (1, "Novice"),
            (4, "Novice"),
            (5, "Apprentice"),
            (10, "Developer"),
            (15, "Senior Developer"),
            (25, "Expert"),
            (40, "Master"),
            (60, "Grandmaster"),
            (80, "Legend"),
            (99, "Legend"),
            (100, "Mythic"),
        ],
    )
    def test_level_title(self, level: int, title: str) -> None:
        assert level_title(level) == title

    def test_get_level_info(self) -> None:
        """Test the level summary fields."""
        info = get_level_info(125)

        assert info.current_level == 2
        assert info.total_xp == 125
        assert info.xp_for_current_level == 50
        assert info.xp_for_next_level == 200
        assert info.xp_to_next_level == 75
        assert info.progress_percent == pytest.approx(50.0)
        assert info.title == "Novice"


class TestApplyXp:
    """Tests for apply_xp()."""

    def test_level_recomputed(self) -> None:
        """Test that level follows total XP after an award."""
        stats = UserStats(user_id="octocat", total_xp=40, current_level=1)

        award = apply_xp(stats, 170)

        assert award.stats.total_xp == 210
        assert award.stats.current_level == 3
        assert award.old_level == 1
        assert award.new_level == 3
        assert award.leveled_up

    def test_no_level_up(self) -> None:
        stats = UserStats(user_id="octocat", total_xp=60, current_level=2)

        award = apply_xp(stats, 10)

        assert not award.leveled_up
        assert award.stats.current_level == level_from_xp(award.stats.total_xp)

    def test_original_not_mutated(self) -> None:
        stats = UserStats(user_id="octocat")

        apply_xp(stats, 500)

        assert stats.total_xp == 0

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(InvalidRequestError, match="non-negative"):
            apply_xp(UserStats(user_id="octocat"), -5)
