"""Sync orchestration: one read-modify-write gamification cycle per user."""

import uuid
from datetime import date, datetime

from devquest.badges.evaluator import award_badges, build_eval_context
from devquest.challenges.generator import create_challenge, generate_challenge_templates
from devquest.challenges.models import Challenge, ChallengeUpdateResult, CompletionEvent
from devquest.challenges.periods import (
    should_generate_daily_challenges,
    should_generate_weekly_challenges,
)
from devquest.challenges.progress import (
    apply_progress,
    build_update_result,
    calculate_progress_for_metric,
    expire_challenges,
    has_active_challenge,
)
from devquest.core.locks import UserLockRegistry
from devquest.core.logging import clear_sync_context, get_logger, set_sync_context
from devquest.leveling.levels import apply_xp
from devquest.leveling.streaks import (
    StreakBonusResult,
    advance_streak,
    calculate_streak_bonus,
    monthly_streaks,
    weekly_streaks,
)
from devquest.leveling.xp import XpBreakdown
from devquest.shared.models import ChallengeStatus, ChallengeType, ensure_utc
from devquest.stats.models import ActivityTotals, HistoricalStats, StatsDiff, StatsSnapshot
from devquest.stats.snapshots import build_historical_stats, calculate_diff, floored_delta
from devquest.stats.store import SnapshotStore
from devquest.sync.models import SyncOutcome, SyncRequest, SyncTotals

logger = get_logger(__name__)


def _snapshot_from_totals(user_id: str, totals: SyncTotals, today: date) -> StatsSnapshot:
    return StatsSnapshot(
        user_id=user_id,
        snapshot_date=today,
        total_commits=totals.total_commits,
        total_prs=totals.total_prs,
        total_reviews=totals.total_reviews,
        total_issues=totals.total_issues,
        total_stars_received=totals.total_stars_received,
        total_contributions=totals.total_contributions,
    )


def _activity_xp(
    request: SyncRequest, diff: StatsDiff, has_history: bool, streak: int
) -> XpBreakdown:
    """Itemize activity XP; the first sync counts the full totals."""
    totals = request.totals
    if not has_history:
        return XpBreakdown.calculate(
            commits=totals.total_commits,
            prs_created=totals.total_prs,
            prs_merged=totals.total_prs_merged,
            issues_created=totals.total_issues,
            issues_closed=totals.total_issues_closed,
            reviews=totals.total_reviews,
            stars=totals.total_stars_received,
            streak=streak,
        )
    return XpBreakdown.calculate(
        commits=diff.commits_diff,
        prs_created=diff.prs_diff,
        prs_merged=floored_delta(totals.total_prs_merged, request.previous_prs_merged or 0),
        issues_created=diff.issues_diff,
        issues_closed=floored_delta(
            totals.total_issues_closed, request.previous_issues_closed or 0
        ),
        reviews=diff.reviews_diff,
        stars=diff.stars_diff,
        streak=streak,
    )


def _had_activity(diff: StatsDiff, totals: SyncTotals, has_history: bool) -> bool:
    if not has_history:
        return totals.total_contributions > 0
    return (diff.commits_diff + diff.prs_diff + diff.reviews_diff + diff.issues_diff) > 0


class GamificationEngine:
    """Runs sync cycles, serialized per user.

    The engine computes and returns results; persisting them is the
    caller's job, ideally before the user's lock is released. When a
    SnapshotStore is configured the engine also reads snapshot history
    from it and upserts today's snapshot.
    """

    def __init__(
        self,
        locks: UserLockRegistry | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            locks: Per-user lock registry (a private one when omitted)
            store: Optional snapshot store
        """
        self.locks = locks or UserLockRegistry()
        self.store = store

    def process_sync(self, request: SyncRequest) -> SyncOutcome:
        """Run one sync cycle for a user while holding their lock.

        Args:
            request: Persisted state and freshly fetched totals

        Returns:
            SyncOutcome describing everything to persist
        """
        user_id = request.user_stats.user_id
        with self.locks.hold(user_id):
            set_sync_context(user_id, request.sync_id or uuid.uuid4().hex[:12])
            try:
                return self._process(request)
            finally:
                clear_sync_context()

    def _previous_snapshot(self, request: SyncRequest, today: date) -> StatsSnapshot | None:
        """Totals as of the last sync: today's row if one exists, else the latest earlier one."""
        if request.previous_snapshot is not None or self.store is None:
            return request.previous_snapshot
        user_id = request.user_stats.user_id
        todays = self.store.get_snapshot_for_date(user_id, today)
        if todays is not None:
            return todays
        return self.store.get_previous_snapshot(user_id, today)

    def _historical(self, request: SyncRequest, today: date) -> HistoricalStats | None:
        if request.historical is not None or self.store is None:
            return request.historical
        return build_historical_stats(self.store.list_snapshots(request.user_stats.user_id), today)

    def _progress_challenges(
        self,
        challenges: list[Challenge],
        previous: StatsSnapshot | None,
        current: ActivityTotals,
        now: datetime,
    ) -> tuple[list[Challenge], list[ChallengeUpdateResult], list[CompletionEvent]]:
        prev_totals = previous.to_activity_totals() if previous is not None else current
        updated: list[Challenge] = []
        results: list[ChallengeUpdateResult] = []
        completions: list[CompletionEvent] = []

        for challenge in challenges:
            if challenge.status is not ChallengeStatus.ACTIVE:
                updated.append(challenge)
                continue
            value = calculate_progress_for_metric(
                challenge.target_metric, prev_totals, current, challenge.start_stats
            )
            progressed, event = apply_progress(challenge, value, now)
            updated.append(progressed)
            results.append(build_update_result(challenge, progressed, event))
            if event is not None:
                completions.append(event)
        return updated, results, completions

    def _generate_challenges(
        self,
        request: SyncRequest,
        challenges: list[Challenge],
        current: ActivityTotals,
        now: datetime,
    ) -> list[Challenge]:
        due: list[ChallengeType] = []
        if should_generate_daily_challenges(request.last_daily_challenge_date, now):
            due.append(ChallengeType.DAILY)
        if should_generate_weekly_challenges(request.last_weekly_challenge_date, now):
            due.append(ChallengeType.WEEKLY)
        if not due:
            return []

        historical = self._historical(request, now.date())
        created: list[Challenge] = []
        for challenge_type in due:
            for template in generate_challenge_templates(challenge_type, historical):
                if has_active_challenge(
                    challenges + created, template.challenge_type, template.target_metric
                ):
                    continue
                created.append(
                    create_challenge(
                        request.user_stats.user_id, template, now, start_stats=current
                    )
                )
        return created

    def _process(self, request: SyncRequest) -> SyncOutcome:
        now = ensure_utc(request.now)
        today = now.date()
        stats = request.user_stats
        totals = request.totals

        snapshot = _snapshot_from_totals(stats.user_id, totals, today)
        previous = self._previous_snapshot(request, today)
        diff = calculate_diff(snapshot, previous)
        has_history = previous is not None

        # Streak
        old_streak = stats.current_streak
        streak_bonus = StreakBonusResult(current_streak=old_streak)
        activity_dates = list(request.activity_dates)
        if _had_activity(diff, totals, has_history):
            stats = advance_streak(stats, today)
            streak_bonus = calculate_streak_bonus(old_streak, stats.current_streak)
            activity_dates.append(today)

        xp_breakdown = _activity_xp(request, diff, has_history, stats.current_streak)

        stats = stats.model_copy(
            update={
                "total_commits": totals.total_commits,
                "total_prs": totals.total_prs,
                "total_reviews": totals.total_reviews,
                "total_issues": totals.total_issues,
            }
        )

        # Challenges: expire first, then progress
        current_totals = snapshot.to_activity_totals()
        challenges = expire_challenges(request.challenges, now)
        challenges, results, completions = self._progress_challenges(
            challenges, previous, current_totals, now
        )
        challenge_xp = sum(event.reward_xp for event in completions)

        total_xp_gained = xp_breakdown.total_xp + streak_bonus.total_bonus + challenge_xp
        award = apply_xp(stats, total_xp_gained)
        stats = award.stats

        new_challenges: list[Challenge] = []
        if request.generate_challenges:
            new_challenges = self._generate_challenges(request, challenges, current_totals, now)

        # Badges, after XP so level badges see the new level
        weekly_streak, _ = weekly_streaks(activity_dates, today)
        monthly_streak, _ = monthly_streaks(activity_dates, today)
        ctx = build_eval_context(
            stats,
            total_prs_merged=totals.total_prs_merged,
            total_issues_closed=totals.total_issues_closed,
            languages_count=totals.languages_count,
            total_stars_received=totals.total_stars_received,
            weekly_streak=weekly_streak,
            monthly_streak=monthly_streak,
        )
        new_badges = award_badges(stats.user_id, ctx, request.earned_badge_ids, now)

        if self.store is not None:
            snapshot = self.store.save_snapshot(snapshot)

        logger.info(
            "sync.completed",
            xp_gained=total_xp_gained,
            challenge_xp=challenge_xp,
            completed_challenges=len(completions),
            new_challenges=len(new_challenges),
            new_badges=[b.badge_id for b in new_badges],
            old_level=award.old_level,
            new_level=award.new_level,
            current_streak=stats.current_streak,
        )

        return SyncOutcome(
            snapshot=snapshot,
            diff=diff,
            xp_breakdown=xp_breakdown,
            streak_bonus=streak_bonus,
            challenge_results=results,
            completions=completions,
            challenge_xp=challenge_xp,
            total_xp_gained=total_xp_gained,
            user_stats=stats,
            old_level=award.old_level,
            new_level=award.new_level,
            challenges=challenges,
            new_challenges=new_challenges,
            new_badges=new_badges,
        )
