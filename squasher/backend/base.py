"""Protocol for version control backends and the errors they raise."""

from __future__ import annotations

from typing import Protocol

from squasher.models import Commit, RepoStatus


class GitCommandError(Exception):
    """A version control command exited unsuccessfully."""

    def __init__(self, args: list[str], returncode: int | None, stderr: str) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(self.stderr or f"{' '.join(args)} exited with {returncode}")


class GitTimeoutError(GitCommandError):
    """A version control command exceeded the configured timeout."""

    def __init__(self, args: list[str], timeout_s: float) -> None:
        super().__init__(args, None, f"git {' '.join(args)} timed out after {timeout_s}s")


class VersionControlBackend(Protocol):
    """Capabilities the squash workflow needs from a repository on disk.

    Every operation takes the repository path and either returns its result or
    raises GitCommandError.
    """

    async def is_repository(self, repo_path: str) -> bool: ...

    async def status(self, repo_path: str) -> RepoStatus: ...

    async def log(self, repo_path: str, max_count: int) -> list[Commit]: ...

    async def diff(self, repo_path: str, file_path: str, staged: bool = False) -> str: ...

    async def apply_patch(self, repo_path: str, patch_file: str, cached: bool = True) -> None:
        """Apply the patch stored at ``patch_file``; to the index when ``cached``."""
        ...

    async def add_file(self, repo_path: str, file_path: str) -> None: ...

    async def commit_fixup(self, repo_path: str, target_commit: str) -> None: ...

    async def rebase_autosquash(self, repo_path: str, base: str) -> None:
        """Run an unattended interactive rebase with autosquash onto ``base``."""
        ...
