"""Level calculation: XP thresholds, level lookup and progress.

Cumulative XP needed for level L is ``50 * (L - 1)**2``, so each level costs
more than the previous one. Levels are capped at 100.
"""

from math import isqrt

from pydantic import BaseModel, Field

from devquest.core.logging import get_logger
from devquest.shared.exceptions import InvalidRequestError
from devquest.stats.models import UserStats

logger = get_logger(__name__)

XP_PER_LEVEL_UNIT = 50
MAX_LEVEL = 100

LEVEL_TITLES: tuple[tuple[int, str], ...] = (
    (100, "Mythic"),
    (80, "Legend"),
    (60, "Grandmaster"),
    (40, "Master"),
    (25, "Expert"),
    (15, "Senior Developer"),
    (10, "Developer"),
    (5, "Apprentice"),
    (1, "Novice"),
)


class LevelInfo(BaseModel):
    """Level summary for display.

    Attributes:
        current_level: Level derived from total XP
        total_xp: Accumulated XP
        xp_for_current_level: Cumulative XP at which the current level starts
        xp_for_next_level: Cumulative XP at which the next level starts
        xp_to_next_level: XP still needed for the next level
        progress_percent: Progress through the current level (0-100)
        title: Rank name for the level
    """

    current_level: int = Field(..., description="Current level")
    total_xp: int = Field(..., description="Total XP")
    xp_for_current_level: int = Field(..., description="XP threshold of current level")
    xp_for_next_level: int = Field(..., description="XP threshold of next level")
    xp_to_next_level: int = Field(..., description="XP remaining to next level")
    progress_percent: float = Field(..., description="Progress percent in level")
    title: str = Field(..., description="Level title")


class XpAward(BaseModel):
    """Outcome of adding XP to a user.

    Attributes:
        stats: Updated user stats (level kept in sync with XP)
        amount: XP added
        old_level: Level before the award
        new_level: Level after the award
    """

    stats: UserStats = Field(..., description="Updated user stats")
    amount: int = Field(..., description="XP added")
    old_level: int = Field(..., description="Level before award")
    new_level: int = Field(..., description="Level after award")

    @property
    def leveled_up(self) -> bool:
        """Whether the award crossed at least one level boundary."""
        return self.new_level > self.old_level


def xp_for_level(level: int) -> int:
    """Total XP required to reach a level (0 for level 1 and below)."""
    if level <= 1:
        return 0
    return XP_PER_LEVEL_UNIT * (level - 1) ** 2


def level_from_xp(total_xp: int) -> int:
    """Level reached with the given total XP, clamped to [1, MAX_LEVEL].

    ``floor(sqrt(xp / 50)) + 1``, evaluated with an integer square root so
    exact thresholds land on the right level.
    """
    if total_xp <= 0:
        return 1
    level = isqrt(total_xp // XP_PER_LEVEL_UNIT) + 1
    return max(1, min(MAX_LEVEL, level))


def xp_progress_in_level(total_xp: int) -> tuple[int, int]:
    """XP earned within the current level and the width of the level band.

    Returns:
        Tuple of (current_progress, level_requirement). The requirement is 0
        at the max level.
    """
    level = level_from_xp(total_xp)
    floor_xp = xp_for_level(level)
    if level >= MAX_LEVEL:
        return total_xp - floor_xp, 0
    return total_xp - floor_xp, xp_for_level(level + 1) - floor_xp


def xp_to_next_level(total_xp: int) -> int:
    """XP remaining until the next level (0 at the max level)."""
    level = level_from_xp(total_xp)
    if level >= MAX_LEVEL:
        return 0
    return max(0, xp_for_level(level + 1) - total_xp)


def progress_to_next_level(total_xp: int) -> float:
    """Progress through the current level as a percentage (0-100)."""
    current, required = xp_progress_in_level(total_xp)
    if required <= 0:
        return 100.0
    return max(0.0, min(100.0, current / required * 100.0))


def level_title(level: int) -> str:
    """Rank name for a level."""
    for floor_level, title in LEVEL_TITLES:
        if level >= floor_level:
            return title
    return "Novice"


def get_level_info(total_xp: int) -> LevelInfo:
    """Build the level summary for a total XP value."""
    level = level_from_xp(total_xp)
    return LevelInfo(
        current_level=level,
        total_xp=total_xp,
        xp_for_current_level=xp_for_level(level),
        xp_for_next_level=xp_for_level(min(level + 1, MAX_LEVEL)),
        xp_to_next_level=xp_to_next_level(total_xp),
        progress_percent=progress_to_next_level(total_xp),
        title=level_title(level),
    )


def apply_xp(stats: UserStats, amount: int) -> XpAward:
    """Add XP to a user and recompute their level.

    Args:
        stats: Current user stats
        amount: XP to add

    Returns:
        XpAward with the updated stats

    Raises:
        InvalidRequestError: If amount is negative
    """
    if amount < 0:
        raise InvalidRequestError(f"XP amount must be non-negative, got {amount}")

    old_level = level_from_xp(stats.total_xp)
    total_xp = stats.total_xp + amount
    new_level = level_from_xp(total_xp)
    updated = stats.model_copy(update={"total_xp": total_xp, "current_level": new_level})

    if new_level > old_level:
        logger.info(
            "xp.level.up",
            user_id=stats.user_id,
            old_level=old_level,
            new_level=new_level,
            total_xp=total_xp,
        )

    return XpAward(stats=updated, amount=amount, old_level=old_level, new_level=new_level)
