"""Snapshot diffing, baseline selection and historical stats.

Snapshots hold cumulative counters, so "what happened since then" is a
subtraction. Counters can move backwards (a force-push drops commits, a
repository deletion drops stars), so every delta is floored at zero:
activity never regresses a challenge's progress bar.
"""

from collections.abc import Iterable
from datetime import date, timedelta
from itertools import pairwise

from devquest.core.config import get_settings
from devquest.core.logging import get_logger
from devquest.shared.models import TargetMetric
from devquest.stats.models import ActivityTotals, HistoricalStats, StatsDiff, StatsSnapshot

logger = get_logger(__name__)

CHALLENGE_METRICS: tuple[TargetMetric, ...] = tuple(TargetMetric)


def floored_delta(current: int, baseline: int) -> int:
    """Non-negative difference between two cumulative counter values."""
    return max(0, current - baseline)


def calculate_diff(current: StatsSnapshot, previous: StatsSnapshot | None) -> StatsDiff:
    """Calculate the change between a snapshot and an earlier one.

    Args:
        current: Snapshot for the current sync
        previous: Most recent earlier snapshot, or None on first sync

    Returns:
        StatsDiff with every metric floored at zero. All zeros when there is
        no previous snapshot.
    """
    if previous is None:
        return StatsDiff()

    diff = StatsDiff(
        commits_diff=floored_delta(current.total_commits, previous.total_commits),
        prs_diff=floored_delta(current.total_prs, previous.total_prs),
        reviews_diff=floored_delta(current.total_reviews, previous.total_reviews),
        issues_diff=floored_delta(current.total_issues, previous.total_issues),
        stars_diff=floored_delta(current.total_stars_received, previous.total_stars_received),
        contributions_diff=floored_delta(
            current.total_contributions, previous.total_contributions
        ),
        comparison_date=previous.snapshot_date,
    )

    if current.total_commits < previous.total_commits or current.total_prs < previous.total_prs:
        logger.warning(
            "snapshot.diff.counter_regressed",
            user_id=current.user_id,
            comparison_date=previous.snapshot_date.isoformat(),
        )

    return diff


def select_baseline(
    prev_stats: ActivityTotals, challenge_start_stats: ActivityTotals | None
) -> ActivityTotals:
    """Pick the totals a challenge's progress is measured against.

    A challenge's own start stats win over the previous sync, so a
    long-running challenge measures from its own start line.
    """
    if challenge_start_stats is not None:
        return challenge_start_stats
    return prev_stats


def metric_delta(
    metric: TargetMetric, current: ActivityTotals, baseline: ActivityTotals
) -> int:
    """Floored delta of one metric between two totals."""
    return floored_delta(current.get_metric(metric), baseline.get_metric(metric))


def build_historical_stats(
    snapshots: Iterable[StatsSnapshot],
    today: date,
    window_days: int | None = None,
) -> HistoricalStats:
    """Aggregate snapshot history into trailing-window activity totals.

    The window covers the ``window_days`` days ending on ``today``. The
    latest snapshot on or before the window start (if any) anchors the first
    delta; otherwise the oldest snapshot in the window is the anchor.

    Args:
        snapshots: Snapshot history for one user, in any order
        today: Last day of the window
        window_days: Window length (defaults to settings, 28 days)

    Returns:
        HistoricalStats with per-metric totals and active day count
    """
    if window_days is None:
        window_days = get_settings().historical_window_days

    window_start = today - timedelta(days=window_days)
    ordered = sorted(snapshots, key=lambda s: s.snapshot_date)

    anchor: StatsSnapshot | None = None
    in_window: list[StatsSnapshot] = []
    for snapshot in ordered:
        if snapshot.snapshot_date <= window_start:
            anchor = snapshot
        elif snapshot.snapshot_date <= today:
            in_window.append(snapshot)

    chain = in_window if anchor is None else [anchor, *in_window]

    totals = {metric: 0 for metric in CHALLENGE_METRICS}
    active_days = 0
    for previous, snapshot in pairwise(chain):
        day_active = False
        for metric in CHALLENGE_METRICS:
            delta = metric_delta(
                metric, snapshot.to_activity_totals(), previous.to_activity_totals()
            )
            totals[metric] += delta
            if delta > 0:
                day_active = True
        if day_active:
            active_days += 1

    historical = HistoricalStats(
        commits_4w=totals[TargetMetric.COMMITS],
        prs_4w=totals[TargetMetric.PRS],
        reviews_4w=totals[TargetMetric.REVIEWS],
        issues_4w=totals[TargetMetric.ISSUES],
        active_days_4w=active_days,
    )
    logger.debug(
        "snapshot.history.aggregated",
        snapshots=len(in_window),
        active_days=active_days,
        window_days=window_days,
    )
    return historical
