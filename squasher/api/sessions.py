"""Guided squash workflow endpoints backed by server-held session state."""

from __future__ import annotations

from collections.abc import Callable

import structlog
from fastapi import APIRouter, Depends, Response

from squasher import workflow
from squasher.api.deps import get_backend, require_token, resolve_repository
from squasher.api.errors import git_errors, raise_http_error
from squasher.api.repo import raise_squash_error
from squasher.api.schemas import (
    RepoRequest,
    SelectCommitRequest,
    SelectFileRequest,
    SquashSessionResponse,
)
from squasher.api.state import SquashSession, get_session_or_404, store
from squasher.backend import VersionControlBackend
from squasher.diff import parse_hunks
from squasher.orchestrator import SquashPhaseError, SquashValidationError, squash
from squasher.settings import settings
from squasher.workflow import InvalidTransitionError, SquashState

router = APIRouter(
    prefix="/squash/sessions",
    tags=["squash"],
    dependencies=[Depends(require_token)],
)
logger = structlog.get_logger(__name__)


def _to_response(session: SquashSession) -> SquashSessionResponse:
    return SquashSessionResponse(
        id=session.id,
        state=session.state,
        files=session.files,
        commits=session.commits,
        message=session.message,
        created_at=session.created_at,
        last_activity_at=session.last_activity_at,
    )


async def _apply(
    session_id: str, action: Callable[[SquashState], SquashState]
) -> SquashSessionResponse:
    """Run a pure workflow transition under the session lock."""
    session = get_session_or_404(session_id)
    async with session.lock:
        try:
            new_state = action(session.state)
        except InvalidTransitionError as exc:
            raise_http_error("INVALID_STATE", str(exc), 409)
        store.update(session, new_state, message=None)
        logger.info("Squash session transition", session_id=session_id, step=new_state.step.value)
        return _to_response(session)


@router.post("", response_model=SquashSessionResponse, status_code=201)
async def create_session(
    request: RepoRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> SquashSessionResponse:
    """Start a workflow and load the changed files and recent commits."""
    repo = await resolve_repository(backend, request.repo_path)
    with git_errors("Failed to load repository"):
        status = await backend.status(repo)
        commits = await backend.log(repo, settings.log_max_count())
    session = store.create(workflow.start(repo), status.files, commits)
    if not status.files:
        session.message = "No changed files in working directory"
    logger.info("Squash session created", session_id=session.id, repo=repo, files=len(status.files))
    return _to_response(session)


@router.get("/{session_id}", response_model=SquashSessionResponse)
async def get_session(session_id: str) -> SquashSessionResponse:
    """Return the current selection state."""
    return _to_response(get_session_or_404(session_id))


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str) -> Response:
    """Forget a workflow; the repository is left as it is."""
    if not store.delete(session_id):
        raise_http_error("NOT_FOUND", "Squash session not found", 404)
    return Response(status_code=204)


@router.post("/{session_id}/file", response_model=SquashSessionResponse)
async def select_file(
    session_id: str,
    request: SelectFileRequest,
    backend: VersionControlBackend = Depends(get_backend),
) -> SquashSessionResponse:
    """Select a file and fetch its diff.

    Hunk selection is cleared before the diff is requested; if the fetch
    fails the session stays in ``select-files`` with the file selected.
    """
    session = get_session_or_404(session_id)
    async with session.lock:
        switched = workflow.switch_file(session.state, request.file_path)
        store.update(session, switched, message=None)
        with git_errors("Failed to load diff"):
            raw = await backend.diff(switched.repo_path, request.file_path)
        store.update(
            session, workflow.attach_diff(switched, request.file_path, parse_hunks(raw))
        )
        return _to_response(session)


@router.post("/{session_id}/hunks/{index}/toggle", response_model=SquashSessionResponse)
async def toggle_hunk(session_id: str, index: int) -> SquashSessionResponse:
    """Select or deselect one hunk of the current diff."""
    return await _apply(session_id, lambda state: workflow.toggle_hunk(state, index))


@router.post("/{session_id}/whole-file", response_model=SquashSessionResponse)
async def choose_whole_file(session_id: str) -> SquashSessionResponse:
    """Squash the entire file instead of selected hunks."""
    return await _apply(session_id, workflow.choose_whole_file)


@router.post("/{session_id}/continue", response_model=SquashSessionResponse)
async def continue_to_commit(session_id: str) -> SquashSessionResponse:
    """Move on to choosing the target commit."""
    return await _apply(session_id, workflow.continue_to_commit)


@router.post("/{session_id}/commit", response_model=SquashSessionResponse)
async def select_commit(
    session_id: str, request: SelectCommitRequest
) -> SquashSessionResponse:
    """Choose the commit to squash into."""
    return await _apply(
        session_id, lambda state: workflow.select_commit(state, request.target_commit)
    )


@router.post("/{session_id}/back", response_model=SquashSessionResponse)
async def go_back(session_id: str) -> SquashSessionResponse:
    """Return to the previous step."""
    return await _apply(session_id, workflow.back)


@router.post("/{session_id}/reset", response_model=SquashSessionResponse)
async def reset(session_id: str) -> SquashSessionResponse:
    """Drop every selection."""
    return await _apply(session_id, workflow.reset)


@router.post("/{session_id}/squash", response_model=SquashSessionResponse)
async def run_session_squash(
    session_id: str,
    backend: VersionControlBackend = Depends(get_backend),
) -> SquashSessionResponse:
    """Stage the selection, create the fixup commit and autosquash it.

    On failure the selection is kept so the squash can be retried.
    """
    session = get_session_or_404(session_id)
    async with session.lock:
        try:
            result = await squash(backend, session.state)
        except SquashValidationError as exc:
            raise_http_error("VALIDATION_ERROR", str(exc), 422)
        except SquashPhaseError as exc:
            raise_squash_error(exc)
        changes: dict[str, object] = {"message": result.outcome.message}
        if result.status is not None:
            changes["files"] = result.status.files
        if result.refresh_error is None:
            changes["commits"] = result.commits
        store.update(session, result.state, **changes)
        return _to_response(session)
