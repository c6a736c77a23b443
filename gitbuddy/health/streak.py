"""Consecutive-day commit streak."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable


def compute_streak(commit_dates: Iterable[date], today: date) -> int:
    """Count consecutive calendar days with a commit, ending today or yesterday.

    ``commit_dates`` are local calendar dates; duplicates and ordering are
    normalized here. When the newest commit is from yesterday the run is
    still alive (the day is not over yet), and the expected sequence shifts
    back one day so the remaining dates line up behind it.

    >>> d = date(2026, 1, 10)
    >>> compute_streak([d, d - timedelta(1), d - timedelta(2)], d)
    3
    >>> compute_streak([d - timedelta(1), d - timedelta(2)], d)
    2
    >>> compute_streak([d - timedelta(2)], d)
    0
    """
    dates = sorted(set(commit_dates), reverse=True)
    if not dates:
        return 0

    anchor = today
    streak = 0
    for i, commit_day in enumerate(dates):
        expected = anchor - timedelta(days=i)
        if commit_day == expected:
            streak += 1
        elif i == 0 and commit_day == expected - timedelta(days=1):
            anchor = commit_day
            streak += 1
        else:
            break
    return streak
