import os
import shutil
import subprocess
from datetime import date, datetime, time, timedelta

import pytest

from gitbuddy import config


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point state storage at a temp dir and reload config for every test."""
    home = tmp_path / "gitbuddy-home"
    monkeypatch.setenv("GITBUDDY_HOME", str(home))
    monkeypatch.delenv("GITBUDDY_STATE_FILE", raising=False)
    monkeypatch.delenv("GITBUDDY_IDLE_SECONDS", raising=False)
    config.reload()
    yield home


def local_noon(days_ago: int = 0) -> datetime:
    """Aware local noon ``days_ago`` days back: far from any date boundary."""
    return datetime.combine(date.today() - timedelta(days=days_ago), time(12)).astimezone()


def _git(repo, *args, when=None):
    env = {
        **os.environ,
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@example.com",
        "GIT_CONFIG_NOSYSTEM": "1",
        "GIT_CONFIG_GLOBAL": os.devnull,
    }
    if when is not None:
        env["GIT_AUTHOR_DATE"] = env["GIT_COMMITTER_DATE"] = when.strftime("%Y-%m-%d %H:%M:%S %z")
    subprocess.run(["git", *args], cwd=repo, env=env, check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path):
    """An empty, freshly initialized repository."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    return repo


@pytest.fixture
def commit(git_repo):
    """Commit a change to ``filename``, optionally backdated to ``when``."""
    counter = {"n": 0}

    def _commit(filename="notes.txt", when=None, message=None):
        counter["n"] += 1
        path = git_repo / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a") as f:
            f.write(f"change {counter['n']}\n")
        _git(git_repo, "add", filename)
        _git(git_repo, "commit", "-q", "-m", message or f"change {counter['n']}", when=when)

    return _commit
