"""
gitbuddy — Configuration.
Shared settings and paths, read from the environment.
"""

import os
from pathlib import Path


def _load() -> None:
    global GITBUDDY_DIR, STATE_FILE, IDLE_SLEEP_SECONDS, WATCH_INTERVAL

    # Base Paths
    GITBUDDY_DIR = Path(os.environ.get("GITBUDDY_HOME", str(Path.home() / ".gitbuddy")))
    STATE_FILE = Path(os.environ.get("GITBUDDY_STATE_FILE", str(GITBUDDY_DIR / "state.json")))

    # Mood
    IDLE_SLEEP_SECONDS = float(os.environ.get("GITBUDDY_IDLE_SECONDS", "60"))

    # Watch loop
    WATCH_INTERVAL = int(os.environ.get("GITBUDDY_WATCH_INTERVAL", "300"))


GITBUDDY_DIR: Path
STATE_FILE: Path
IDLE_SLEEP_SECONDS: float
WATCH_INTERVAL: int

_load()


def reload() -> None:
    """Re-read settings from the environment."""
    _load()
