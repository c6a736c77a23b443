"""
gitbuddy — Achievements.

Milestones unlocked from scan results and the companion's own counters.
Each one is granted at most once; its XP lands in the same state update
that unlocked it.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Callable, Optional

from gitbuddy.health import RepositoryHealth
from gitbuddy.state import ProgressionState

Rule = Callable[[ProgressionState, Optional[RepositoryHealth]], bool]


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    xp_reward: int
    rule: Rule = field(repr=False, compare=False)


def _streak(days: int) -> Rule:
    return lambda s, h: h is not None and h.streak >= days


def _commits(count: int) -> Rule:
    return lambda s, h: h is not None and h.commit_count >= count


def _feeds(count: int) -> Rule:
    return lambda s, h: s.total_feeds >= count


def _level(level: int) -> Rule:
    return lambda s, h: s.level >= level


# Level milestones come last so XP granted by the others counts toward them.
ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement("first_feed", "First Meal", "Feed your buddy for the first time", "🍖", 10, _feeds(1)),
    Achievement("feed_10", "Code Cleaner", "Feed your buddy 10 times", "🍖", 30, _feeds(10)),
    Achievement("streak_3", "Hat Trick", "3-day commit streak", "🔥", 20, _streak(3)),
    Achievement("streak_7", "On Fire", "7-day commit streak", "🔥", 50, _streak(7)),
    Achievement("streak_14", "Unstoppable", "14-day commit streak", "💪", 100, _streak(14)),
    Achievement("streak_30", "Legendary Coder", "30-day commit streak", "👑", 200, _streak(30)),
    Achievement("commits_10", "Getting Started", "10 commits in this repo", "📝", 15, _commits(10)),
    Achievement("commits_50", "Committed", "50 commits in this repo", "📝", 30, _commits(50)),
    Achievement("commits_100", "Centurion", "100 commits in this repo", "🏛️", 50, _commits(100)),
    Achievement("commits_500", "Commit Machine", "500 commits in this repo", "⚙️", 100, _commits(500)),
    Achievement("level_2", "Growing Up", "Reach level 2", "📈", 0, _level(2)),
    Achievement("level_3", "Maturity", "Reach level 3", "📈", 0, _level(3)),
    Achievement("level_4", "So Cool", "Reach level 4", "😎", 0, _level(4)),
    Achievement("level_5", "LEGENDARY", "Reach level 5", "👑", 0, _level(5)),
)


def get_achievement(achievement_id: str) -> Achievement | None:
    for a in ACHIEVEMENTS:
        if a.id == achievement_id:
            return a
    return None


def unlock(
    state: ProgressionState, health: RepositoryHealth | None = None
) -> tuple[ProgressionState, list[Achievement]]:
    """Grant every achievement whose rule now holds.

    ``health`` is None for actions that did not scan; repository-based
    milestones are skipped then. Returns the updated state (ids appended,
    XP added) and the newly unlocked achievements in table order.
    """
    unlocked: list[Achievement] = []
    for a in ACHIEVEMENTS:
        if a.id in state.achievements or not a.rule(state, health):
            continue
        state = dataclasses.replace(
            state,
            achievements=[*state.achievements, a.id],
            experience=state.experience + a.xp_reward,
        )
        unlocked.append(a)
    return state, unlocked
