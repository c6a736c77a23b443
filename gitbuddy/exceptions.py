"""
gitbuddy — Custom Exceptions.

Nothing here escapes the engine: these mark internal failure points that
the caller converts into a degraded default.
"""


class GitBuddyError(Exception):
    """Base exception for all gitbuddy errors."""


class StateCorrupted(GitBuddyError):
    """Raised when the persisted state file cannot be parsed."""
