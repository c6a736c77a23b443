"""
gitbuddy — Progression State persistence.

The companion's durable state lives in one JSON file (default
``~/.gitbuddy/state.json``). Every mutation is a read-merge-write against
the latest file contents, and writes are atomic. A missing or unreadable
file is logged and treated as "start from defaults"; nothing raises out of
this module.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import math
import os
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from gitbuddy import config
from gitbuddy.exceptions import StateCorrupted
from gitbuddy.progression import leveled_up, level_for

logger = logging.getLogger("gitbuddy.state")

DEFAULT_VITALITY = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(raw: Any, fallback: datetime) -> datetime:
    if not isinstance(raw, str) or not raw:
        return fallback
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_int(raw: Any, default: int, low: int = 0, high: int | None = None) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return default
    # json.loads accepts NaN and Infinity
    if isinstance(raw, float) and not math.isfinite(raw):
        return default
    value = max(low, int(raw))
    return min(high, value) if high is not None else value


# ─── Data Classes ─────────────────────────────────────────────────────


@dataclass
class ProgressionState:
    """Everything about the companion that survives between sessions."""

    name: str = ""
    experience: int = 0
    vitality: int = DEFAULT_VITALITY
    last_visit: datetime = field(default_factory=_utcnow)
    created_at: datetime = field(default_factory=_utcnow)
    total_scans: int = 0
    total_feeds: int = 0
    longest_streak: int = 0
    achievements: list[str] = field(default_factory=list)

    @property
    def level(self) -> int:
        return level_for(self.experience)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "experience": self.experience,
            # Written for human readers only; from_dict recomputes it.
            "level": self.level,
            "vitality": self.vitality,
            "last_visit": self.last_visit.isoformat(),
            "created_at": self.created_at.isoformat(),
            "total_scans": self.total_scans,
            "total_feeds": self.total_feeds,
            "longest_streak": self.longest_streak,
            "achievements": list(self.achievements),
        }

    @classmethod
    def from_dict(cls, data: dict) -> ProgressionState:
        """Build a state from decoded JSON, clamping every field into range."""
        now = _utcnow()
        achievements = data.get("achievements", [])
        return cls(
            name=data.get("name") if isinstance(data.get("name"), str) else "",
            experience=_as_int(data.get("experience"), 0),
            vitality=_as_int(data.get("vitality"), DEFAULT_VITALITY, high=100),
            last_visit=_parse_time(data.get("last_visit"), now),
            created_at=_parse_time(data.get("created_at"), now),
            total_scans=_as_int(data.get("total_scans"), 0),
            total_feeds=_as_int(data.get("total_feeds"), 0),
            longest_streak=_as_int(data.get("longest_streak"), 0),
            achievements=(
                [a for a in achievements if isinstance(a, str)]
                if isinstance(achievements, list)
                else []
            ),
        )


@dataclass(frozen=True)
class Award:
    """Outcome of an experience award."""

    state: ProgressionState
    gained: int
    leveled_up: bool


# ─── Store ────────────────────────────────────────────────────────────


class StateStore:
    """JSON-file persistence for :class:`ProgressionState`.

    Usage:
        store = StateStore()
        state = store.load_or_default()
        award = store.award_xp(10)
    """

    def __init__(self, path: Path | str | None = None):
        self._path = Path(path) if path is not None else None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else config.STATE_FILE

    def exists(self) -> bool:
        return self.path.exists()

    # ── Read / Write ─────────────────────────────────────────────────

    def _read(self) -> ProgressionState:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StateCorrupted(f"{self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StateCorrupted(f"{self.path}: expected a JSON object")
        return ProgressionState.from_dict(data)

    def load(self) -> ProgressionState | None:
        """The persisted state, or None when absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            return self._read()
        except (StateCorrupted, OSError, UnicodeDecodeError) as e:
            logger.error("Failed to load state: %s", e)
            return None

    def load_or_default(self) -> ProgressionState:
        return self.load() or ProgressionState()

    def save(self, state: ProgressionState) -> bool:
        """Write atomically (temp file + ``os.replace``). False on failure."""
        path = self.path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(state.to_dict(), f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, str(path))
            except OSError:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
                raise
        except OSError as e:
            logger.error("Failed to save state: %s", e)
            return False
        return True

    def update(self, mutate: Callable[[ProgressionState], ProgressionState]) -> ProgressionState:
        """Read the latest state, apply ``mutate``, write the result back."""
        with self._lock:
            current = self.load_or_default()
            updated = mutate(current)
            self.save(updated)
            return updated

    def patch(self, **changes: Any) -> ProgressionState:
        """Merge ``changes`` into the latest persisted state."""
        return self.update(lambda s: dataclasses.replace(s, **changes))

    # ── Lifecycle ────────────────────────────────────────────────────

    def create(self, name: str, vitality: int = DEFAULT_VITALITY) -> ProgressionState:
        state = ProgressionState(name=name, vitality=max(0, min(100, vitality)))
        with self._lock:
            self.save(state)
        logger.info("Created companion %r", name)
        return state

    def reset(self) -> bool:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to reset state: %s", e)
            return False
        return True

    # ── Progression ──────────────────────────────────────────────────

    def award_xp(self, amount: int) -> Award:
        """Add experience. Negative amounts are ignored: XP never goes down."""
        gained = max(0, int(amount))
        before: list[int] = []

        def _apply(s: ProgressionState) -> ProgressionState:
            before.append(s.experience)
            return dataclasses.replace(s, experience=s.experience + gained)

        state = self.update(_apply)
        up = leveled_up(before[0], state.experience)
        if up:
            logger.info("Level up: %s reached level %d", state.name or "companion", state.level)
        return Award(state=state, gained=gained, leveled_up=up)

