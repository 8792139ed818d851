"""Tests for devquest.sync.engine module."""

import json
import threading
from datetime import UTC, date, datetime, timedelta

import pytest

from devquest.challenges.models import Challenge
from devquest.core.locks import UserLockRegistry
from devquest.core.logging import get_sync_id, setup_logging
from devquest.shared.models import ChallengeStatus, ChallengeType, TargetMetric
from devquest.stats.models import ActivityTotals, StatsSnapshot, UserStats
from devquest.sync.engine import GamificationEngine
from devquest.sync.models import SyncRequest, SyncTotals

NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)


def _challenge(
    challenge_id: int,
    target_metric: TargetMetric,
    target_value: int,
    challenge_type: ChallengeType = ChallengeType.WEEKLY,
    current_value: int = 0,
    reward_xp: int = 50,
    end_date: datetime = datetime(2025, 3, 17, tzinfo=UTC),
    start_stats: ActivityTotals | None = None,
) -> Challenge:
    return Challenge(
        id=challenge_id,
        user_id="octocat",
        challenge_type=challenge_type,
        target_metric=target_metric,
        target_value=target_value,
        current_value=current_value,
        reward_xp=reward_xp,
        start_date=datetime(2025, 3, 10, 9, tzinfo=UTC),
        end_date=end_date,
        start_stats=start_stats,
    )


class TestFirstSync:
    """Tests for a user's first sync."""

    def test_full_totals_count(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        """Test that the first sync awards XP for the full totals."""
        outcome = GamificationEngine().process_sync(
            SyncRequest(user_stats=new_user, totals=first_totals, now=NOW)
        )

        # 120 + 50 + 50 + 5 + 15 + 15 = 255 base, +1% for a 1-day streak
        assert outcome.xp_breakdown.total_xp == 257
        assert outcome.streak_bonus.total_bonus == 20
        assert outcome.total_xp_gained == 277
        assert not outcome.diff.has_changes()

    def test_stats_updated(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        outcome = GamificationEngine().process_sync(
            SyncRequest(user_stats=new_user, totals=first_totals, now=NOW)
        )

        stats = outcome.user_stats
        assert stats.total_xp == 277
        assert stats.current_level == 3
        assert stats.current_streak == 1
        assert stats.longest_streak == 1
        assert stats.last_activity_date == NOW.date()
        assert stats.total_commits == 12
        assert outcome.old_level == 1
        assert outcome.new_level == 3
        assert outcome.leveled_up

    def test_badges_awarded(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        outcome = GamificationEngine().process_sync(
            SyncRequest(user_stats=new_user, totals=first_totals, now=NOW)
        )

        assert [b.badge_id for b in outcome.new_badges] == ["first_blood", "team_player", "star_1"]
        assert all(b.earned_at == NOW for b in outcome.new_badges)

    def test_snapshot_for_today(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        outcome = GamificationEngine().process_sync(
            SyncRequest(user_stats=new_user, totals=first_totals, now=NOW)
        )

        assert outcome.snapshot.snapshot_date == NOW.date()
        assert outcome.snapshot.total_commits == 12
        assert outcome.snapshot.total_contributions == 15

    def test_no_activity_no_streak(self, new_user: UserStats) -> None:
        """Test that an empty account earns nothing."""
        outcome = GamificationEngine().process_sync(
            SyncRequest(user_stats=new_user, totals=SyncTotals(), now=NOW)
        )

        assert outcome.total_xp_gained == 0
        assert outcome.user_stats.current_streak == 0
        assert outcome.new_badges == []


class TestReturningSync:
    """Tests for a sync with a previous snapshot and active challenges."""

    @pytest.fixture
    def request_with_challenges(
        self,
        returning_user: UserStats,
        yesterday_snapshot: StatsSnapshot,
        today_totals: SyncTotals,
    ) -> SyncRequest:
        return SyncRequest(
            user_stats=returning_user,
            totals=today_totals,
            previous_snapshot=yesterday_snapshot,
            previous_prs_merged=1,
            previous_issues_closed=0,
            challenges=[
                _challenge(
                    7,
                    TargetMetric.COMMITS,
                    5,
                    current_value=2,
                    start_stats=ActivityTotals(commits=10, prs=2, reviews=1, issues=1),
                ),
                _challenge(8, TargetMetric.PRS, 2, reward_xp=80),
                _challenge(
                    9,
                    TargetMetric.COMMITS,
                    1,
                    challenge_type=ChallengeType.DAILY,
                    reward_xp=10,
                    end_date=datetime(2025, 3, 12, tzinfo=UTC),
                ),
            ],
            earned_badge_ids=["first_blood", "team_player", "star_1"],
            activity_dates=[date(2025, 3, 11)],
            now=NOW,
        )

    def test_diff_xp_and_streak(self, request_with_challenges: SyncRequest) -> None:
        outcome = GamificationEngine().process_sync(request_with_challenges)

        assert outcome.diff.commits_diff == 5
        assert outcome.diff.prs_diff == 1
        # 50 commits + 25 opened + 50 merged, +2% for a 2-day streak
        assert outcome.xp_breakdown.total_xp == 127
        assert outcome.user_stats.current_streak == 2
        assert outcome.user_stats.longest_streak == 2
        assert outcome.streak_bonus.total_bonus == 20

    def test_challenge_progress_and_completion(
        self, request_with_challenges: SyncRequest
    ) -> None:
        """Test that progress is clamped, rewards are paid once and expiry runs first."""
        outcome = GamificationEngine().process_sync(request_with_challenges)

        by_id = {c.id: c for c in outcome.challenges}
        assert by_id[7].status is ChallengeStatus.COMPLETED
        assert by_id[7].current_value == 5
        assert by_id[8].status is ChallengeStatus.ACTIVE
        assert by_id[8].current_value == 1
        assert by_id[9].status is ChallengeStatus.FAILED

        assert [e.challenge_id for e in outcome.completions] == [7]
        assert outcome.challenge_xp == 50
        assert [(r.challenge_id, r.just_completed) for r in outcome.challenge_results] == [
            (7, True),
            (8, False),
        ]

    def test_totals_and_level(self, request_with_challenges: SyncRequest) -> None:
        outcome = GamificationEngine().process_sync(request_with_challenges)

        assert outcome.total_xp_gained == 127 + 20 + 50
        assert outcome.user_stats.total_xp == 474
        assert outcome.old_level == 3
        assert outcome.new_level == 4
        assert outcome.new_badges == []

    def test_completion_rewarded_once(self, request_with_challenges: SyncRequest) -> None:
        """Test that feeding the persisted challenges back in pays nothing again."""
        engine = GamificationEngine()
        first = engine.process_sync(request_with_challenges)

        second = engine.process_sync(
            request_with_challenges.model_copy(update={"challenges": first.challenges})
        )

        assert second.completions == []
        assert second.challenge_xp == 0
        assert [r.challenge_id for r in second.challenge_results] == [8]

    def test_negative_diff_awards_nothing(
        self, returning_user: UserStats, yesterday_snapshot: StatsSnapshot
    ) -> None:
        """Test that counters going backwards never remove or grant XP."""
        totals = SyncTotals(total_commits=3, total_prs=1, total_contributions=4)

        outcome = GamificationEngine().process_sync(
            SyncRequest(
                user_stats=returning_user,
                totals=totals,
                previous_snapshot=yesterday_snapshot,
                previous_prs_merged=1,
                now=NOW,
            )
        )

        assert outcome.xp_breakdown.total_xp == 0
        assert outcome.total_xp_gained == 0
        assert outcome.user_stats.current_streak == 1
        assert outcome.user_stats.total_xp == 277


class TestChallengeGeneration:
    """Tests for optional challenge generation during sync."""

    def test_generates_due_challenges(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        """Test defaults are generated and existing active pairs are skipped."""
        existing = _challenge(1, TargetMetric.COMMITS, 5)

        outcome = GamificationEngine().process_sync(
            SyncRequest(
                user_stats=new_user,
                totals=first_totals,
                challenges=[existing],
                generate_challenges=True,
                now=NOW,
            )
        )

        assert [(c.challenge_type, c.target_metric) for c in outcome.new_challenges] == [
            (ChallengeType.DAILY, TargetMetric.COMMITS),
            (ChallengeType.WEEKLY, TargetMetric.PRS),
            (ChallengeType.WEEKLY, TargetMetric.REVIEWS),
        ]
        assert all(
            c.start_stats == ActivityTotals(commits=12, prs=2, reviews=1, issues=1)
            for c in outcome.new_challenges
        )
        assert outcome.new_challenges[0].end_date == datetime(2025, 3, 13, tzinfo=UTC)

    def test_nothing_due(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        outcome = GamificationEngine().process_sync(
            SyncRequest(
                user_stats=new_user,
                totals=first_totals,
                generate_challenges=True,
                last_daily_challenge_date=NOW.date(),
                last_weekly_challenge_date=date(2025, 3, 10),
                now=NOW,
            )
        )

        assert outcome.new_challenges == []

    def test_generation_off_by_default(
        self, new_user: UserStats, first_totals: SyncTotals
    ) -> None:
        outcome = GamificationEngine().process_sync(
            SyncRequest(user_stats=new_user, totals=first_totals, now=NOW)
        )

        assert outcome.new_challenges == []


class TestSerialization:
    """Tests for per-user locking and sync context."""

    def test_uses_registry(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        locks = UserLockRegistry()

        GamificationEngine(locks=locks).process_sync(
            SyncRequest(user_stats=new_user, totals=first_totals, now=NOW)
        )

        assert len(locks) == 1
        assert not locks.get_lock("octocat").locked()

    def test_waits_for_user_lock(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        """Test that a sync blocks while another writer holds the user's lock."""
        locks = UserLockRegistry()
        engine = GamificationEngine(locks=locks)
        done = threading.Event()

        def run() -> None:
            engine.process_sync(SyncRequest(user_stats=new_user, totals=first_totals, now=NOW))
            done.set()

        with locks.hold("octocat"):
            worker = threading.Thread(target=run)
            worker.start()
            assert not done.wait(timeout=0.2)

        worker.join(timeout=5)
        assert done.is_set()

    def test_sync_context_logged_and_cleared(
        self,
        new_user: UserStats,
        first_totals: SyncTotals,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        setup_logging(log_level="INFO")

        GamificationEngine().process_sync(
            SyncRequest(user_stats=new_user, totals=first_totals, now=NOW, sync_id="sync-42")
        )

        events = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]
        completed = next(e for e in events if e["event"] == "sync.completed")
        assert completed["sync_id"] == "sync-42"
        assert completed["user_id"] == "octocat"
        assert get_sync_id() == ""

    def test_naive_now(self, new_user: UserStats, first_totals: SyncTotals) -> None:
        outcome = GamificationEngine().process_sync(
            SyncRequest(
                user_stats=new_user,
                totals=first_totals,
                now=NOW.replace(tzinfo=None) + timedelta(hours=1),
            )
        )

        assert outcome.snapshot.snapshot_date == NOW.date()
