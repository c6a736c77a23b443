"""
gitbuddy — Scoring & Progression.

Pure functions, no I/O: vitality from the health score, mood from vitality
and idle time, level from experience, and the decay applied after an
absence. Level is always derived here and never read back from storage.
"""

from __future__ import annotations

import bisect
import math
from datetime import datetime
from enum import Enum

# ─── Constants ────────────────────────────────────────────────────────

LEVEL_THRESHOLDS = (0, 100, 300, 600, 1000)
MAX_LEVEL = len(LEVEL_THRESHOLDS)

LEVEL_TITLES = {
    1: "Puppy",
    2: "Young Dog",
    3: "Adult Dog",
    4: "Cool Dog",
    5: "Legendary Doge",
}

IDLE_SLEEP_SECONDS = 60

DECAY_GRACE_HOURS = 24
DECAY_PER_DAY = 5
DECAY_MAX = 30
DECAY_FLOOR = 10

XP_REWARDS: dict[str, int] = {
    "scan": 2,
    "feed": 5,  # per issue found
    "play": 10,
    "trick": 5,
    "trick_success": 15,
    "stats": 1,
    "commit": 10,
    "smart_commit": 15,
    "streak": 3,  # per streak day
    "clean_tree": 5,
    "first_visit_of_day": 10,
}


class Mood(str, Enum):
    EXCITED = "excited"
    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"
    SICK = "sick"
    SLEEPING = "sleeping"


# Highest threshold first so a boundary value lands in the higher band.
_MOOD_BANDS = (
    (90, Mood.EXCITED),
    (70, Mood.HAPPY),
    (50, Mood.NEUTRAL),
    (25, Mood.SAD),
)


# ─── Vitality & Mood ──────────────────────────────────────────────────


def vitality_from_score(total_score: int) -> int:
    """Vitality is the scan's aggregate score, clamped to [0, 100]."""
    return max(0, min(100, int(total_score)))


def mood_for(
    vitality: int, idle_seconds: float, idle_threshold: float = IDLE_SLEEP_SECONDS
) -> Mood:
    """Idleness overrides health; otherwise a step function of vitality."""
    if idle_seconds >= idle_threshold:
        return Mood.SLEEPING
    for threshold, mood in _MOOD_BANDS:
        if vitality >= threshold:
            return mood
    return Mood.SICK


# ─── Levels ───────────────────────────────────────────────────────────


def level_for(experience: int) -> int:
    """Highest plateau reached by ``experience``, in [1, 5]."""
    return max(1, bisect.bisect_right(LEVEL_THRESHOLDS, experience))


def leveled_up(old_xp: int, new_xp: int) -> bool:
    """Edge detector: True once however many plateaus were crossed."""
    return level_for(new_xp) > level_for(old_xp)


def level_title(level: int) -> str:
    return LEVEL_TITLES.get(max(1, min(MAX_LEVEL, level)), LEVEL_TITLES[1])


def xp_for_next_level(level: int) -> int | None:
    """Cumulative XP needed for the next level, None at the top."""
    if level >= MAX_LEVEL:
        return None
    return LEVEL_THRESHOLDS[max(1, level)]


def level_progress(experience: int) -> tuple[int, int, float]:
    """(XP into current level, XP span of the level, percent complete).

    At the last level the span is open-ended; progress reads as 100%.
    """
    level = level_for(experience)
    start = LEVEL_THRESHOLDS[level - 1]
    current = max(0, experience - start)
    if level >= MAX_LEVEL:
        return current, current, 100.0
    span = LEVEL_THRESHOLDS[level] - start
    return current, span, min(100.0, current / span * 100)


def xp_reward(action: str, multiplier: int = 1) -> int:
    """Table lookup; unknown actions are worth nothing."""
    return XP_REWARDS.get(action, 0) * multiplier


# ─── Decay ────────────────────────────────────────────────────────────


def hours_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / 3600


def decay_points(last_visit: datetime, now: datetime) -> int:
    """Vitality lost to absence: nothing for a day, then 5 per full day, max 30."""
    hours = hours_between(last_visit, now)
    if hours < DECAY_GRACE_HOURS:
        return 0
    days_away = math.floor((hours - DECAY_GRACE_HOURS) / 24)
    return min(DECAY_MAX, days_away * DECAY_PER_DAY)


def apply_decay(vitality: int, last_visit: datetime, now: datetime) -> int:
    """Vitality after absence decay. Decay alone never takes it under 10."""
    points = decay_points(last_visit, now)
    if points <= 0:
        return vitality
    return max(DECAY_FLOOR, vitality - points)
