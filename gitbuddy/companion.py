"""Companion — ties scanning, progression and persistence together."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import signal
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from gitbuddy import config
from gitbuddy.achievements import Achievement, unlock
from gitbuddy.health import RepositoryHealth, find_todos, scan
from gitbuddy.progression import (
    Mood,
    apply_decay,
    decay_points,
    leveled_up,
    mood_for,
    vitality_from_score,
    xp_reward,
)
from gitbuddy.state import ProgressionState, StateStore

logger = logging.getLogger("gitbuddy.companion")


@dataclass(frozen=True)
class ScanOutcome:
    health: RepositoryHealth
    state: ProgressionState
    xp_gained: int = 0
    leveled_up: bool = False
    achievements: tuple[Achievement, ...] = ()


@dataclass(frozen=True)
class FeedOutcome:
    issues: list[str]
    state: ProgressionState
    xp_gained: int = 0
    leveled_up: bool = False
    achievements: tuple[Achievement, ...] = ()


@dataclass(frozen=True)
class VisitOutcome:
    state: ProgressionState
    decay: int
    hours_away: float


class Companion:
    """The companion living in one working copy.

    Usage:
        buddy = Companion()
        buddy.visit()              # absence decay + visit stamp
        outcome = buddy.rescan()   # fresh health → vitality, XP
        buddy.mood(idle_seconds=0)
    """

    def __init__(self, cwd: str | Path | None = None, store: StateStore | None = None):
        self.cwd = Path(cwd) if cwd is not None else None
        self.store = store or StateStore()
        self._shutdown = False

    # ── Visits ───────────────────────────────────────────────────────

    def visit(self, now: datetime | None = None) -> VisitOutcome:
        """Apply absence decay to stored vitality and stamp the visit."""
        now = now or datetime.now(timezone.utc)
        seen: list[ProgressionState] = []

        def _apply(s: ProgressionState) -> ProgressionState:
            seen.append(s)
            return dataclasses.replace(
                s, vitality=apply_decay(s.vitality, s.last_visit, now), last_visit=now
            )

        state = self.store.update(_apply)
        before = seen[0]
        points = decay_points(before.last_visit, now)
        hours = (now - before.last_visit).total_seconds() / 3600
        if points:
            logger.info("Away %.0fh: vitality %d → %d", hours, before.vitality, state.vitality)
        return VisitOutcome(state=state, decay=points, hours_away=hours)

    # ── Scanning ─────────────────────────────────────────────────────

    async def arescan(self, now: datetime | None = None) -> ScanOutcome:
        health = await scan(self.cwd, now)
        if not health.is_git_repo:
            return ScanOutcome(health=health, state=self.store.load_or_default())

        gained = xp_reward("scan")
        seen: list[ProgressionState] = []
        unlocked: list[Achievement] = []

        def _apply(s: ProgressionState) -> ProgressionState:
            seen.append(s)
            updated = dataclasses.replace(
                s,
                vitality=vitality_from_score(health.total_score),
                total_scans=s.total_scans + 1,
                longest_streak=max(s.longest_streak, health.streak),
                experience=s.experience + gained,
            )
            updated, found = unlock(updated, health)
            unlocked.extend(found)
            return updated

        state = self.store.update(_apply)
        self._log_unlocked(unlocked)
        return ScanOutcome(
            health=health,
            state=state,
            xp_gained=gained,
            leveled_up=leveled_up(seen[0].experience, state.experience),
            achievements=tuple(unlocked),
        )

    def rescan(self, now: datetime | None = None) -> ScanOutcome:
        return asyncio.run(self.arescan(now))

    # ── Feeding ──────────────────────────────────────────────────────

    def feed(self) -> FeedOutcome:
        """Eat TODO/FIXME markers: XP per marker found."""
        issues = asyncio.run(find_todos(self.cwd))
        gained = xp_reward("feed", len(issues))
        seen: list[ProgressionState] = []
        unlocked: list[Achievement] = []

        def _apply(s: ProgressionState) -> ProgressionState:
            seen.append(s)
            updated = dataclasses.replace(
                s, total_feeds=s.total_feeds + 1, experience=s.experience + gained
            )
            updated, found = unlock(updated)
            unlocked.extend(found)
            return updated

        state = self.store.update(_apply)
        self._log_unlocked(unlocked)
        return FeedOutcome(
            issues=issues,
            state=state,
            xp_gained=gained,
            leveled_up=leveled_up(seen[0].experience, state.experience),
            achievements=tuple(unlocked),
        )

    @staticmethod
    def _log_unlocked(unlocked: list[Achievement]) -> None:
        for a in unlocked:
            logger.info("Achievement unlocked: %s (+%d XP)", a.id, a.xp_reward)

    # ── Mood ─────────────────────────────────────────────────────────

    def mood(self, idle_seconds: float = 0.0, state: ProgressionState | None = None) -> Mood:
        state = state or self.store.load_or_default()
        return mood_for(state.vitality, idle_seconds, config.IDLE_SLEEP_SECONDS)

    # ── Watch Loop ───────────────────────────────────────────────────

    def watch(self, interval: int | None = None, on_scan=None) -> None:
        """Rescan every ``interval`` seconds until SIGINT/SIGTERM."""
        interval = config.WATCH_INTERVAL if interval is None else interval
        self._shutdown = False

        def _handle_signal(signum: int, frame: object) -> None:
            logger.info("Received %s, stopping watch", signal.Signals(signum).name)
            self._shutdown = True

        previous = {
            sig: signal.signal(sig, _handle_signal) for sig in (signal.SIGTERM, signal.SIGINT)
        }

        logger.info("Watching %s (interval=%ds)", self.cwd or ".", interval)
        try:
            while not self._shutdown:
                outcome = self.rescan()
                if on_scan is not None:
                    on_scan(outcome)
                for _ in range(interval):
                    if self._shutdown:
                        break
                    time.sleep(1)
        except KeyboardInterrupt:
            pass
        finally:
            for sig, handler in previous.items():
                if handler is not None:
                    signal.signal(sig, handler)
            logger.info("Watch stopped")
