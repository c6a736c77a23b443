"""gitbuddy repository health package."""

from .scanner import aggregate, find_todos, repo_stats, scan, scan_sync
from .streak import compute_streak
from .types import CheckStatus, HealthCheck, RepositoryHealth, RepoStats

__all__ = [
    "CheckStatus",
    "HealthCheck",
    "RepoStats",
    "RepositoryHealth",
    "aggregate",
    "compute_streak",
    "find_todos",
    "repo_stats",
    "scan",
    "scan_sync",
]
