"""Metric collectors: each one answers one narrow question with one probe.

Collectors never raise. A failed probe or unexpected output degrades the
answer to the least favorable value for that metric.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path, PurePosixPath

from gitbuddy.health.constants import (
    MAX_TODOS,
    MESSAGE_SAMPLE,
    PY_TEST_PATTERN,
    README_NAMES,
    STREAK_MAX_COMMITS,
    TEST_DIR_PATTERN,
    TIMEOUT_FAST,
    TIMEOUT_SLOW,
    TODO_PATHSPECS,
    WEEKLY_WINDOW_DAYS,
)
from gitbuddy.health.probe import Probe, ProbeFailure, ProbeResult, run_probe
from gitbuddy.health.types import CommitDates, FoundTests, RepoStats, TreeStatus, WeeklyCommits

logger = logging.getLogger("gitbuddy.collectors")


# ─── Parsing Helpers ──────────────────────────────────────────────────


def round_half_up(value: float) -> int:
    """Round .5 away from zero (``round`` uses banker's rounding)."""
    return int(math.floor(value + 0.5))


def _parse_int(text: str) -> int:
    try:
        return max(0, int(text.strip()))
    except ValueError:
        return 0


def _parse_epoch(text: str) -> datetime | None:
    """Parse a ``%ct`` unix timestamp into an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(int(text.strip()), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def _local_date(moment: datetime) -> date:
    return moment.astimezone().date()


def window_start(today: date, days: int = WEEKLY_WINDOW_DAYS) -> datetime:
    """Local midnight opening a window of ``days`` calendar days ending today."""
    return datetime.combine(today - timedelta(days=days - 1), time.min).astimezone()


def is_test_path(path: str) -> bool:
    name = PurePosixPath(path).name
    return (
        ".test." in name
        or ".spec." in name
        or "__tests__" in path
        or bool(TEST_DIR_PATTERN.search(path))
        or bool(PY_TEST_PATTERN.search(path))
    )


def _lines(result: ProbeResult) -> list[str]:
    if isinstance(result, ProbeFailure):
        return []
    return result.lines()


# ─── Collectors ───────────────────────────────────────────────────────


async def weekly_commits(cwd: str | Path, today: date) -> WeeklyCommits:
    """Commits in the last seven local calendar days, today included."""
    since = window_start(today).strftime("%Y-%m-%d %H:%M:%S %z")
    result = await run_probe(Probe(("log", f"--since={since}", "--format=%ct")), cwd)
    return WeeklyCommits(count=len(_lines(result)))


async def commit_dates(cwd: str | Path, limit: int = STREAK_MAX_COMMITS) -> CommitDates:
    """Distinct local dates of the last ``limit`` commits, newest first."""
    result = await run_probe(Probe(("log", "--format=%ct", f"-{limit}")), cwd)
    seen: dict[date, None] = {}
    for line in _lines(result):
        moment = _parse_epoch(line)
        if moment is not None:
            seen.setdefault(_local_date(moment), None)
    return tuple(sorted(seen, reverse=True))


async def working_tree(cwd: str | Path) -> TreeStatus:
    """Modified plus untracked paths. Unknown when the probe fails."""
    result = await run_probe(Probe(("status", "--porcelain")), cwd)
    if isinstance(result, ProbeFailure):
        return TreeStatus(changed_files=None)
    return TreeStatus(changed_files=len(result.lines()))


async def count_test_files(cwd: str | Path) -> FoundTests:
    """Tracked paths following common test-file conventions."""
    result = await run_probe(Probe(("ls-files",), timeout=TIMEOUT_SLOW), cwd)
    return FoundTests(count=sum(1 for path in _lines(result) if is_test_path(path)))


def has_readme(cwd: str | Path) -> bool:
    try:
        return any((Path(cwd) / name).is_file() for name in README_NAMES)
    except OSError:
        return False


async def last_commit_time(cwd: str | Path) -> datetime | None:
    result = await run_probe(Probe(("log", "-1", "--format=%ct"), timeout=TIMEOUT_FAST), cwd)
    lines = _lines(result)
    return _parse_epoch(lines[0]) if lines else None


async def total_commits(cwd: str | Path) -> int:
    result = await run_probe(Probe(("rev-list", "--count", "HEAD")), cwd)
    lines = _lines(result)
    return _parse_int(lines[0]) if lines else 0


async def find_todos(cwd: str | Path, limit: int = MAX_TODOS) -> list[str]:
    """``path:line:text`` hits for TODO/FIXME markers in tracked source files."""
    result = await run_probe(
        Probe(("grep", "-n", "-w", "-E", "TODO|FIXME", "--", *TODO_PATHSPECS), timeout=TIMEOUT_SLOW),
        cwd,
    )
    return _lines(result)[:limit]


# ─── Fun Facts ────────────────────────────────────────────────────────


async def first_commit_days(cwd: str | Path, now: datetime) -> int:
    result = await run_probe(Probe(("log", "--max-parents=0", "--format=%ct")), cwd)
    roots = [m for m in (_parse_epoch(line) for line in _lines(result)) if m is not None]
    if not roots:
        return 0
    return max(0, (now - min(roots)).days)


async def extension_histogram(cwd: str | Path) -> dict[str, int]:
    result = await run_probe(Probe(("ls-files",), timeout=TIMEOUT_SLOW), cwd)
    counts = Counter(PurePosixPath(path).suffix for path in _lines(result))
    counts.pop("", None)
    return dict(counts.most_common())


async def avg_message_length(cwd: str | Path, sample: int = MESSAGE_SAMPLE) -> int:
    result = await run_probe(Probe(("log", "--format=%s", f"-{sample}")), cwd)
    messages = _lines(result)
    if not messages:
        return 0
    return round_half_up(sum(len(m) for m in messages) / len(messages))


async def collect_stats(cwd: str | Path, now: datetime) -> RepoStats:
    first, total, extensions, avg = await asyncio.gather(
        first_commit_days(cwd, now),
        total_commits(cwd),
        extension_histogram(cwd),
        avg_message_length(cwd),
    )
    logger.debug("Stats for %s: %d commits, %d extensions", cwd, total, len(extensions))
    return RepoStats(
        first_commit_days=first,
        total_commits=total,
        extensions=extensions,
        avg_commit_message_length=avg,
    )
