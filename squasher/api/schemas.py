"""Pydantic request/response models for API endpoints.

Bodies use camelCase keys (``repoPath``, ``filePath``, ``targetCommit``).
"""

from __future__ import annotations

from pydantic import Field

from squasher.models import CamelModel, Commit, FileStatus
from squasher.orchestrator import SquashPhase
from squasher.settings import settings
from squasher.workflow import SquashState


# --- Request Models ---


class RepoRequest(CamelModel):
    """Any request scoped to a repository."""

    repo_path: str = Field(..., min_length=1)


class LogRequest(RepoRequest):
    """Request body for the commit log."""

    max_count: int = Field(default_factory=settings.log_max_count, ge=1, le=1000)


class FileRequest(RepoRequest):
    """Request body naming one file of the repository."""

    file_path: str = Field(..., min_length=1)


class DiffRequest(FileRequest):
    """Request body for a single file diff."""

    staged: bool = False


class StageRequest(FileRequest):
    """Stage a hunk (raw text, header first) or, without one, the whole file."""

    hunk: str | None = None


class TargetCommitRequest(RepoRequest):
    """Request body naming the commit to fold changes into."""

    target_commit: str = Field(..., min_length=1)


class SquashRequest(FileRequest):
    """One-shot squash of a file's hunks (or the whole file) into a commit."""

    target_commit: str = Field(..., min_length=1)
    hunks: list[str] = []


class SelectFileRequest(CamelModel):
    """Request body for choosing the file in a squash session."""

    file_path: str = Field(..., min_length=1)


class SelectCommitRequest(CamelModel):
    """Request body for choosing the target commit in a squash session."""

    target_commit: str = Field(..., min_length=1)


# --- Response Models ---


class ActionResponse(CamelModel):
    """Result of a mutating repository operation."""

    success: bool = True
    message: str


class LogResponse(CamelModel):
    """Most-recent-first history."""

    commits: list[Commit]


class SquashFailure(CamelModel):
    """Details attached to a SQUASH_FAILED error."""

    phase: SquashPhase
    staged_hunks: list[int]
    detail: str


class SquashSessionResponse(CamelModel):
    """Squash session data returned by the guided workflow endpoints."""

    id: str
    state: SquashState
    files: list[FileStatus]
    commits: list[Commit]
    message: str | None = None
    created_at: str
    last_activity_at: str
