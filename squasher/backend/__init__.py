"""Version control backend selection."""

from __future__ import annotations

from squasher.backend.base import GitCommandError, GitTimeoutError, VersionControlBackend
from squasher.backend.git_cli import GitCliBackend
from squasher.settings import settings

__all__ = [
    "GitCliBackend",
    "GitCommandError",
    "GitTimeoutError",
    "VersionControlBackend",
    "get_backend",
]


def get_backend() -> VersionControlBackend:
    """Return the git CLI backend configured from SQUASHER_GIT_* settings."""
    return GitCliBackend(
        git_bin=settings.git_bin(),
        timeout_s=settings.git_timeout_seconds(),
    )
