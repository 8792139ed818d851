"""Badge catalog.

Badge ids are stored with every earned badge, so entries may be added but
never renamed or removed.
"""

from devquest.badges.models import (
    BadgeDefinition,
    CommitsCondition,
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
from devquest.shared.models import BadgeRarity, BadgeType

BADGE_DEFINITIONS: tuple[BadgeDefinition, ...] = (
    # Commit milestones
    BadgeDefinition(
        id="first_blood",
        name="First Blood",
        description="Make your first commit",
        badge_type=BadgeType.MILESTONE,
        rarity=BadgeRarity.BRONZE,
        icon="🎯",
        condition=CommitsCondition(threshold=1),
    ),
    BadgeDefinition(
        id="century",
        name="Century",
        description="Reach 100 commits",
        badge_type=BadgeType.MILESTONE,
        rarity=BadgeRarity.SILVER,
        icon="💯",
        condition=CommitsCondition(threshold=100),
    ),
    BadgeDefinition(
        id="thousand_cuts",
        name="Thousand Cuts",
        description="Reach 1,000 commits",
        badge_type=BadgeType.MILESTONE,
        rarity=BadgeRarity.GOLD,
        icon="⚔️",
        condition=CommitsCondition(threshold=1000),
    ),
    BadgeDefinition(
        id="legendary",
        name="Legendary",
        description="Reach 10,000 commits",
        badge_type=BadgeType.MILESTONE,
        rarity=BadgeRarity.PLATINUM,
        icon="🏆",
        condition=CommitsCondition(threshold=10000),
    ),
    # Daily streaks
    BadgeDefinition(
        id="on_fire",
        name="On Fire",
        description="7 day commit streak",
        badge_type=BadgeType.STREAK,
        rarity=BadgeRarity.BRONZE,
        icon="🔥",
        condition=StreakCondition(days=7),
    ),
    BadgeDefinition(
        id="unstoppable",
        name="Unstoppable",
        description="30 day commit streak",
        badge_type=BadgeType.STREAK,
        rarity=BadgeRarity.SILVER,
        icon="💪",
        condition=StreakCondition(days=30),
    ),
    BadgeDefinition(
        id="immortal",
        name="Immortal",
        description="365 day commit streak",
        badge_type=BadgeType.STREAK,
        rarity=BadgeRarity.PLATINUM,
        icon="👑",
        condition=StreakCondition(days=365),
    ),
    # Collaboration
    BadgeDefinition(
        id="team_player",
        name="Team Player",
        description="Complete your first review",
        badge_type=BadgeType.COLLABORATION,
        rarity=BadgeRarity.BRONZE,
        icon="🤝",
        condition=ReviewsCondition(threshold=1),
    ),
    BadgeDefinition(
        id="mentor",
        name="Mentor",
        description="Complete 50 reviews",
        badge_type=BadgeType.COLLABORATION,
        rarity=BadgeRarity.SILVER,
        icon="🎓",
        condition=ReviewsCondition(threshold=50),
    ),
    BadgeDefinition(
        id="guardian",
        name="Guardian",
        description="Merge 100 PRs",
        badge_type=BadgeType.COLLABORATION,
        rarity=BadgeRarity.GOLD,
        icon="🛡️",
        condition=PrsMergedCondition(threshold=100),
    ),
    # Quality
    BadgeDefinition(
        id="clean_coder",
        name="Clean Coder",
        description="90%+ PR merge rate (10+ PRs)",
        badge_type=BadgeType.QUALITY,
        rarity=BadgeRarity.GOLD,
        icon="✨",
        condition=PrMergeRateCondition(min_rate=0.9, min_prs=10),
    ),
    BadgeDefinition(
        id="bug_hunter",
        name="Bug Hunter",
        description="Close 50 issues",
        badge_type=BadgeType.QUALITY,
        rarity=BadgeRarity.SILVER,
        icon="🐛",
        condition=IssuesClosedCondition(threshold=50),
    ),
    BadgeDefinition(
        id="polyglot",
        name="Polyglot",
        description="Use 5+ programming languages",
        badge_type=BadgeType.QUALITY,
        rarity=BadgeRarity.SILVER,
        icon="🌍",
        condition=LanguagesCondition(count=5),
    ),
    # Languages
    BadgeDefinition(
        id="polyglot_3",
        name="Trilingual",
        description="Use 3+ programming languages",
        badge_type=BadgeType.LANGUAGE,
        rarity=BadgeRarity.BRONZE,
        icon="🗣️",
        condition=LanguagesCondition(count=3),
    ),
    BadgeDefinition(
        id="polyglot_10",
        name="Language Master",
        description="Use 10+ programming languages",
        badge_type=BadgeType.LANGUAGE,
        rarity=BadgeRarity.GOLD,
        icon="📚",
        condition=LanguagesCondition(count=10),
    ),
    # Levels
    BadgeDefinition(
        id="level_5",
        name="Rising Star",
        description="Reach level 5",
        badge_type=BadgeType.LEVEL,
        rarity=BadgeRarity.BRONZE,
        icon="⭐",
        condition=LevelCondition(threshold=5),
    ),
    BadgeDefinition(
        id="level_10",
        name="Skilled Developer",
        description="Reach level 10",
        badge_type=BadgeType.LEVEL,
        rarity=BadgeRarity.SILVER,
        icon="🌟",
        condition=LevelCondition(threshold=10),
    ),
    BadgeDefinition(
        id="level_25",
        name="Expert",
        description="Reach level 25",
        badge_type=BadgeType.LEVEL,
        rarity=BadgeRarity.SILVER,
        icon="💫",
        condition=LevelCondition(threshold=25),
    ),
    BadgeDefinition(
        id="level_50",
        name="Master",
        description="Reach level 50",
        badge_type=BadgeType.LEVEL,
        rarity=BadgeRarity.GOLD,
        icon="🏅",
        condition=LevelCondition(threshold=50),
    ),
    BadgeDefinition(
        id="level_100",
        name="Grandmaster",
        description="Reach level 100",
        badge_type=BadgeType.LEVEL,
        rarity=BadgeRarity.PLATINUM,
        icon="👑",
        condition=LevelCondition(threshold=100),
    ),
    # Stars
    BadgeDefinition(
        id="star_1",
        name="First Star",
        description="Receive your first star",
        badge_type=BadgeType.STARS,
        rarity=BadgeRarity.BRONZE,
        icon="✨",
        condition=StarsReceivedCondition(threshold=1),
    ),
    BadgeDefinition(
        id="star_10",
        name="Rising Repository",
        description="Receive 10 stars",
        badge_type=BadgeType.STARS,
        rarity=BadgeRarity.BRONZE,
        icon="🌠",
        condition=StarsReceivedCondition(threshold=10),
    ),
    BadgeDefinition(
        id="star_50",
        name="Popular Project",
        description="Receive 50 stars",
        badge_type=BadgeType.STARS,
        rarity=BadgeRarity.SILVER,
        icon="⭐",
        condition=StarsReceivedCondition(threshold=50),
    ),
    BadgeDefinition(
        id="star_100",
        name="Star Magnet",
        description="Receive 100 stars",
        badge_type=BadgeType.STARS,
        rarity=BadgeRarity.GOLD,
        icon="🎖️",
        condition=StarsReceivedCondition(threshold=100),
    ),
    BadgeDefinition(
        id="star_1000",
        name="Open Source Hero",
        description="Receive 1000 stars",
        badge_type=BadgeType.STARS,
        rarity=BadgeRarity.PLATINUM,
        icon="🌌",
        condition=StarsReceivedCondition(threshold=1000),
    ),
    # Consistency
    BadgeDefinition(
        id="weekly_3",
        name="Consistent Coder",
        description="Contribute for 3 consecutive weeks",
        badge_type=BadgeType.CONSISTENCY,
        rarity=BadgeRarity.BRONZE,
        icon="📅",
        condition=WeeklyStreakCondition(weeks=3),
    ),
    BadgeDefinition(
        id="weekly_12",
        name="Quarter Champion",
        description="Contribute for 12 consecutive weeks",
        badge_type=BadgeType.CONSISTENCY,
        rarity=BadgeRarity.SILVER,
        icon="🗓️",
        condition=WeeklyStreakCondition(weeks=12),
    ),
    BadgeDefinition(
        id="monthly_6",
        name="Half Year Hero",
        description="Contribute for 6 consecutive months",
        badge_type=BadgeType.CONSISTENCY,
        rarity=BadgeRarity.GOLD,
        icon="📆",
        condition=MonthlyStreakCondition(months=6),
    ),
    BadgeDefinition(
        id="monthly_12",
        name="Year Round Developer",
        description="Contribute for 12 consecutive months",
        badge_type=BadgeType.CONSISTENCY,
        rarity=BadgeRarity.PLATINUM,
        icon="🎖️",
        condition=MonthlyStreakCondition(months=12),
    ),
)

_BADGES_BY_ID: dict[str, BadgeDefinition] = {badge.id: badge for badge in BADGE_DEFINITIONS}


def get_badge_definitions() -> tuple[BadgeDefinition, ...]:
    """Get all badge definitions in catalog order."""
    return BADGE_DEFINITIONS


def get_badge_definition(badge_id: str) -> BadgeDefinition | None:
    """Look up a badge definition by id.

    Args:
        badge_id: Badge identifier

    Returns:
        BadgeDefinition, or None for an unknown id
    """
    return _BADGES_BY_ID.get(badge_id)
