"""Health scanner: runs every collector, scores them, and aggregates."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from gitbuddy.health import collectors
from gitbuddy.health.constants import (
    CHECK_ACTIVITY,
    CHECK_COMMITS,
    CHECK_README,
    CHECK_STREAK,
    CHECK_TESTS,
    CHECK_TREE,
    WEIGHTS,
)
from gitbuddy.health.probe import find_worktree
from gitbuddy.health.streak import compute_streak
from gitbuddy.health.types import (
    CheckStatus,
    FoundTests,
    HealthCheck,
    RepositoryHealth,
    RepoStats,
    TreeStatus,
)

logger = logging.getLogger("gitbuddy.scanner")


# ─── Per-Metric Scoring ───────────────────────────────────────────────


def score_weekly_commits(count: int) -> HealthCheck:
    if count >= 10:
        score, status = 100, CheckStatus.GREAT
    elif count >= 5:
        score, status = 75, CheckStatus.OK
    elif count >= 1:
        score, status = 40, CheckStatus.WARNING
    else:
        score, status = 0, CheckStatus.BAD
    return HealthCheck(
        name=CHECK_COMMITS, status=status, value=f"{count} commits",
        weight=WEIGHTS[CHECK_COMMITS], score=score, raw=count,
    )


def score_streak(streak: int) -> HealthCheck:
    if streak >= 7:
        score, status = 100, CheckStatus.GREAT
    elif streak >= 3:
        score, status = 70, CheckStatus.OK
    elif streak >= 1:
        score, status = 40, CheckStatus.WARNING
    else:
        score, status = 0, CheckStatus.BAD
    return HealthCheck(
        name=CHECK_STREAK, status=status, value=f"{streak} days",
        weight=WEIGHTS[CHECK_STREAK], score=score, raw=streak,
    )


def score_working_tree(tree: TreeStatus) -> HealthCheck:
    changed = tree.changed_files
    if changed is None:
        score, status, value = 0, CheckStatus.BAD, "unknown"
    elif changed == 0:
        score, status, value = 100, CheckStatus.GREAT, "clean"
    elif changed < 5:
        score, status, value = 60, CheckStatus.OK, f"{changed} changed files"
    elif changed < 10:
        score, status, value = 30, CheckStatus.WARNING, f"{changed} changed files"
    else:
        score, status, value = 0, CheckStatus.BAD, f"{changed} changed files"
    return HealthCheck(
        name=CHECK_TREE, status=status, value=value,
        weight=WEIGHTS[CHECK_TREE], score=score, raw=-1 if changed is None else changed,
    )


def score_tests(tests: FoundTests) -> HealthCheck:
    # Missing tests cost points but do not zero the metric.
    if tests.found:
        score, status, value = 100, CheckStatus.GREAT, f"{tests.count} test files"
    else:
        score, status, value = 20, CheckStatus.WARNING, "no tests found"
    return HealthCheck(
        name=CHECK_TESTS, status=status, value=value,
        weight=WEIGHTS[CHECK_TESTS], score=score, raw=tests.count,
    )


def score_readme(present: bool) -> HealthCheck:
    return HealthCheck(
        name=CHECK_README,
        status=CheckStatus.GREAT if present else CheckStatus.WARNING,
        value="present" if present else "missing",
        weight=WEIGHTS[CHECK_README],
        score=100 if present else 30,
        raw=int(present),
    )


def score_recency(last_commit_at: datetime | None, now: datetime) -> HealthCheck:
    """Score hours since the last commit. ``raw`` is whole hours, -1 for none."""
    if last_commit_at is None:
        return HealthCheck(
            name=CHECK_ACTIVITY, status=CheckStatus.BAD, value="no commits",
            weight=WEIGHTS[CHECK_ACTIVITY], score=0, raw=-1,
        )
    hours = (now - last_commit_at).total_seconds() / 3600
    days_ago = f"{int(max(hours, 0) // 24)} days ago"
    if hours < 24:
        score, status, value = 100, CheckStatus.GREAT, "today"
    elif hours < 72:
        score, status, value = 70, CheckStatus.OK, days_ago
    elif hours < 168:
        score, status, value = 40, CheckStatus.WARNING, days_ago
    else:
        score, status, value = 10, CheckStatus.BAD, days_ago
    return HealthCheck(
        name=CHECK_ACTIVITY, status=status, value=value,
        weight=WEIGHTS[CHECK_ACTIVITY], score=score, raw=max(0, int(hours)),
    )


def aggregate(checks: Iterable[HealthCheck]) -> int:
    """Weight-normalized mean of check scores, rounded half up, in [0, 100]."""
    weighted_sum = 0
    total_weight = 0
    for c in checks:
        weighted_sum += c.score * c.weight
        total_weight += c.weight
    if total_weight <= 0:
        return 0
    # Integer form of floor(x + 0.5) avoids float drift at .5 boundaries.
    total = (2 * weighted_sum + total_weight) // (2 * total_weight)
    return max(0, min(100, total))


# ─── Scan ─────────────────────────────────────────────────────────────


async def scan(cwd: str | Path | None = None, now: datetime | None = None) -> RepositoryHealth:
    """Scan the working copy containing ``cwd`` (default: current directory).

    Outside a repository this returns ``RepositoryHealth.empty()`` without
    running a single probe. Inside one, all collectors run concurrently and
    the result is assembled once every one of them has answered or timed out.
    """
    cwd = Path(cwd) if cwd is not None else Path(os.getcwd())
    now = now or datetime.now(timezone.utc)

    root = find_worktree(cwd)
    if root is None:
        logger.debug("%s is not inside a git repository", cwd)
        return RepositoryHealth.empty()

    started = time.monotonic()
    today = now.astimezone().date()

    # Probes run from the root: a launch from a subdirectory scores the whole copy.
    weekly, dates, tree, tests, last_commit, commit_count = await asyncio.gather(
        collectors.weekly_commits(root, today),
        collectors.commit_dates(root),
        collectors.working_tree(root),
        collectors.count_test_files(root),
        collectors.last_commit_time(root),
        collectors.total_commits(root),
    )
    readme = collectors.has_readme(root)
    streak = compute_streak(dates, today)

    checks = (
        score_weekly_commits(weekly.count),
        score_streak(streak),
        score_working_tree(tree),
        score_tests(tests),
        score_readme(readme),
        score_recency(last_commit, now),
    )
    health = RepositoryHealth(
        is_git_repo=True,
        checks=checks,
        total_score=aggregate(checks),
        commit_count=commit_count,
        last_commit_at=last_commit,
        streak=streak,
    )
    logger.info(
        "Scanned %s in %.0fms: score %d, %d commits, streak %d",
        root,
        (time.monotonic() - started) * 1000,
        health.total_score,
        health.commit_count,
        health.streak,
    )
    return health


def scan_sync(cwd: str | Path | None = None, now: datetime | None = None) -> RepositoryHealth:
    """Blocking wrapper around :func:`scan` for callers without a loop."""
    return asyncio.run(scan(cwd, now))


async def repo_stats(cwd: str | Path | None = None, now: datetime | None = None) -> RepoStats:
    """Fun-fact statistics; an empty ``RepoStats`` outside a repository."""
    root = find_worktree(cwd if cwd is not None else os.getcwd())
    if root is None:
        return RepoStats()
    return await collectors.collect_stats(root, now or datetime.now(timezone.utc))


async def find_todos(cwd: str | Path | None = None) -> list[str]:
    root = find_worktree(cwd if cwd is not None else os.getcwd())
    if root is None:
        return []
    return await collectors.find_todos(root)
