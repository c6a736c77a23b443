"""Data types for the repository health scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class CheckStatus(str, Enum):
    """Display band of a single health check."""

    GREAT = "great"
    OK = "ok"
    WARNING = "warning"
    BAD = "bad"


@dataclass(frozen=True)
class HealthCheck:
    """One evaluated metric.

    ``raw`` is the number ``value`` was formatted from, so consumers never
    have to parse the display string.
    """

    name: str
    status: CheckStatus
    value: str
    weight: int
    score: int
    raw: int = 0


@dataclass(frozen=True)
class RepositoryHealth:
    """Result of one full scan. Created fresh every time, never patched."""

    is_git_repo: bool
    checks: tuple[HealthCheck, ...] = ()
    total_score: int = 0
    commit_count: int = 0
    last_commit_at: datetime | None = None
    streak: int = 0

    @classmethod
    def empty(cls) -> RepositoryHealth:
        """The canonical "not a repository" snapshot."""
        return cls(is_git_repo=False)

    def check(self, name: str) -> HealthCheck | None:
        for c in self.checks:
            if c.name == name:
                return c
        return None

    def to_dict(self) -> dict:
        return {
            "is_git_repo": self.is_git_repo,
            "total_score": self.total_score,
            "commit_count": self.commit_count,
            "last_commit_at": self.last_commit_at.isoformat() if self.last_commit_at else None,
            "streak": self.streak,
            "checks": [
                {
                    "name": c.name, "status": c.status.value, "value": c.value,
                    "weight": c.weight, "score": c.score, "raw": c.raw,
                }
                for c in self.checks
            ],
        }


@dataclass(frozen=True)
class RepoStats:
    """Secondary "fun fact" statistics. Not part of the score."""

    first_commit_days: int = 0
    total_commits: int = 0
    extensions: dict[str, int] = field(default_factory=dict)
    avg_commit_message_length: int = 0

    @property
    def top_extension(self) -> tuple[str, int]:
        if not self.extensions:
            return ("unknown", 0)
        ext, count = max(self.extensions.items(), key=lambda kv: (kv[1], kv[0]))
        return (ext, count)


# ─── Collector Results ────────────────────────────────────────────────


@dataclass(frozen=True)
class WeeklyCommits:
    count: int = 0


@dataclass(frozen=True)
class TreeStatus:
    changed_files: int | None = 0  # None: status could not be read

    @property
    def clean(self) -> bool:
        return self.changed_files == 0


@dataclass(frozen=True)
class FoundTests:
    count: int = 0

    @property
    def found(self) -> bool:
        return self.count > 0


CommitDates = tuple[date, ...]
