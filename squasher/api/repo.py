"""Repository endpoints: status, log, diff, stage, fixup, rebase and squash."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from squasher.api.deps import get_backend, require_token, resolve_repository
from squasher.api.errors import git_errors, raise_http_error
from squasher.api.schemas import (
    ActionResponse,
    DiffRequest,
    LogRequest,
    LogResponse,
    RepoRequest,
    SquashFailure,
    SquashRequest,
    StageRequest,
    TargetCommitRequest,
)
from squasher.backend import VersionControlBackend
from squasher.diff import parse_hunks
from squasher.models import FileDiff, RepoStatus
from squasher.orchestrator import (
    SquashOutcome,
    SquashPhaseError,
    SquashValidationError,
    run_squash,
)
from squasher.staging import stage_file, stage_hunk

router = APIRouter(prefix="/repo", tags=["repo"], dependencies=[Depends(require_token)])
logger = structlog.get_logger(__name__)


def raise_squash_error(exc: SquashPhaseError) -> None:
    """Report a failed squash phase with the hunks left staged."""
    raise_http_error(
        "SQUASH_FAILED",
        exc.message,
        500,
        details=SquashFailure(
            phase=exc.phase, staged_hunks=exc.staged_hunks, detail=exc.detail
        ).model_dump(by_alias=True, mode="json"),
    )


@router.post("/status", response_model=RepoStatus)
async def get_status(
    request: RepoRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> RepoStatus:
    """Return the working tree changes of the repository."""
    repo = await resolve_repository(backend, request.repo_path)
    with git_errors("Failed to get repository status"):
        return await backend.status(repo)


@router.post("/log", response_model=LogResponse)
async def get_log(
    request: LogRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> LogResponse:
    """Return up to ``maxCount`` commits, newest first."""
    repo = await resolve_repository(backend, request.repo_path)
    with git_errors("Failed to get commit log"):
        commits = await backend.log(repo, request.max_count)
    return LogResponse(commits=commits)


@router.post("/diff", response_model=FileDiff)
async def get_diff(
    request: DiffRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> FileDiff:
    """Return the unified diff of one file and its parsed hunks."""
    repo = await resolve_repository(backend, request.repo_path)
    with git_errors("Failed to get file diff"):
        raw = await backend.diff(repo, request.file_path, staged=request.staged)
    return FileDiff(file_path=request.file_path, diff=raw, hunks=parse_hunks(raw))


@router.post("/stage", response_model=ActionResponse)
async def stage_changes(
    request: StageRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> ActionResponse:
    """Stage a single hunk, or the whole file when no hunk is given."""
    repo = await resolve_repository(backend, request.repo_path)
    with git_errors("Failed to stage changes"):
        if request.hunk:
            await stage_hunk(backend, repo, request.file_path, request.hunk)
            return ActionResponse(message="Hunk staged successfully")
        await stage_file(backend, repo, request.file_path)
    return ActionResponse(message="File staged successfully")


@router.post("/fixup", response_model=ActionResponse)
async def create_fixup(
    request: TargetCommitRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> ActionResponse:
    """Commit the index as a fixup of the target commit."""
    repo = await resolve_repository(backend, request.repo_path)
    with git_errors("Failed to create fixup commit"):
        await backend.commit_fixup(repo, request.target_commit)
    logger.info("Fixup commit created", repo=repo, target=request.target_commit)
    return ActionResponse(message="Fixup commit created successfully")


@router.post("/rebase", response_model=ActionResponse)
async def rebase(
    request: TargetCommitRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> ActionResponse:
    """Autosquash pending fixups onto the parent of the target commit."""
    repo = await resolve_repository(backend, request.repo_path)
    with git_errors("Failed to rebase"):
        await backend.rebase_autosquash(repo, f"{request.target_commit}^")
    logger.info("Autosquash rebase completed", repo=repo, target=request.target_commit)
    return ActionResponse(message="Rebase completed successfully")


@router.post("/squash", response_model=SquashOutcome)
async def squash_changes(
    request: SquashRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> SquashOutcome:
    """Stage, fixup and rebase in one call.

    ``hunks`` are staged in the order given; an empty list stages the file.
    """
    repo = await resolve_repository(backend, request.repo_path)
    try:
        return await run_squash(
            backend,
            repo,
            request.file_path,
            request.target_commit,
            list(enumerate(request.hunks)),
        )
    except SquashValidationError as exc:
        raise_http_error("VALIDATION_ERROR", str(exc), 422)
    except SquashPhaseError as exc:
        raise_squash_error(exc)
