"""
gitbuddy — a terminal companion that lives off your repository's health.

The companion's vitality mirrors a weighted health score of the git working
copy it runs in; experience accumulates into five levels.
"""

__version__ = "1.0.0"

from gitbuddy.health import RepositoryHealth, scan, scan_sync
from gitbuddy.progression import Mood, level_for, mood_for
from gitbuddy.state import ProgressionState, StateStore

__all__ = [
    "Mood",
    "ProgressionState",
    "RepositoryHealth",
    "StateStore",
    "__version__",
    "level_for",
    "mood_for",
    "scan",
    "scan_sync",
]
