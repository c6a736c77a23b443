"""Constants for the repository health scanner."""

import re

# ─── Check Names ──────────────────────────────────────────────────────
# Other subsystems match on these strings; keep them stable.
CHECK_COMMITS = "Commits this week"
CHECK_STREAK = "Commit streak"
CHECK_TREE = "Working tree"
CHECK_TESTS = "Tests"
CHECK_README = "README"
CHECK_ACTIVITY = "Last activity"

# ─── Weights (percent) ────────────────────────────────────────────────
WEIGHTS = {
    CHECK_COMMITS: 30,
    CHECK_STREAK: 15,
    CHECK_TREE: 20,
    CHECK_TESTS: 15,
    CHECK_README: 5,
    CHECK_ACTIVITY: 15,
}
assert sum(WEIGHTS.values()) == 100, "health check weights must sum to 100"

# ─── Probe Budgets ────────────────────────────────────────────────────
TIMEOUT_FAST = 3.0  # rev-parse, log -1
TIMEOUT_DEFAULT = 5.0
TIMEOUT_SLOW = 10.0  # ls-files, grep on large trees
MAX_OUTPUT = 1024 * 1024  # 1 MiB
READ_CHUNK = 64 * 1024

# ─── Windows ──────────────────────────────────────────────────────────
WEEKLY_WINDOW_DAYS = 7
STREAK_MAX_COMMITS = 100
MESSAGE_SAMPLE = 50
MAX_TODOS = 10

# ─── File Conventions ─────────────────────────────────────────────────
README_NAMES = ("README.md", "README.txt", "README", "readme.md", "Readme.md", "README.rst")

TEST_DIR_PATTERN = re.compile(r"(^|/)tests?/.*\.(js|ts|jsx|tsx|py|rb)$")
PY_TEST_PATTERN = re.compile(r"(^|/)(test_[^/]*|[^/]*_test)\.py$")

TODO_PATHSPECS = ("*.ts", "*.js", "*.tsx", "*.jsx", "*.py", "*.rb", "*.go")
