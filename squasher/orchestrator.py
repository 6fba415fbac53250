"""Run the stage -> fixup commit -> autosquash rebase sequence."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

import structlog

from squasher import workflow
from squasher.backend import GitCommandError, VersionControlBackend
from squasher.models import CamelModel, Commit, Hunk, RepoStatus
from squasher.settings import settings
from squasher.staging import PartialStagingError, stage_file, stage_hunks
from squasher.workflow import SquashState

logger = structlog.get_logger(__name__)


class SquashPhase(str, Enum):
    """Backend phases of a squash, in execution order."""
    STAGE = "stage"
    FIXUP = "fixup"
    REBASE = "rebase"


_PHASE_MESSAGES = {
    SquashPhase.STAGE: "Failed to stage changes",
    SquashPhase.FIXUP: "Failed to create fixup commit",
    SquashPhase.REBASE: "Failed to rebase",
}


class SquashValidationError(Exception):
    """The squash was requested without the selections it needs."""


class SquashPhaseError(Exception):
    """A backend phase failed; later phases were not run.

    Side effects of earlier phases stay in place: ``staged_hunks`` lists the
    hunk indices that made it into the index before the failure.
    """

    def __init__(
        self,
        phase: SquashPhase,
        detail: str,
        staged_hunks: list[int] | None = None,
    ) -> None:
        self.phase = phase
        self.detail = detail
        self.staged_hunks = staged_hunks or []
        super().__init__(f"{_PHASE_MESSAGES[phase]}: {detail}")

    @property
    def message(self) -> str:
        return str(self)


class SquashOutcome(CamelModel):
    """What a completed squash did."""
    target_commit: str
    short_hash: str
    message: str
    staged_hunks: list[int] = []
    whole_file: bool = False


class SquashResult(CamelModel):
    """Outcome plus the reset workflow state and refreshed repository view."""
    outcome: SquashOutcome
    state: SquashState
    status: RepoStatus | None = None
    commits: list[Commit] = []
    refresh_error: str | None = None


async def run_squash(
    backend: VersionControlBackend,
    repo_path: str,
    file_path: str,
    target_commit: str,
    hunks: Sequence[tuple[int, Hunk | str]] = (),
    *,
    patch_dir: str | None = None,
) -> SquashOutcome:
    """Fold changes to ``file_path`` into ``target_commit``.

    Stages ``hunks`` one at a time in the given order (the whole file when
    empty), commits a fixup for the target, then rebases onto the target's
    parent with autosquash. Calls run strictly one after another.

    Raises:
        SquashValidationError: file or target commit missing; no backend call
            was made.
        SquashPhaseError: a phase failed; its message is prefixed with the
            phase and carries the backend error verbatim.
    """
    if not file_path or not target_commit:
        raise SquashValidationError("Please select a file and target commit")

    log = logger.bind(repo=repo_path, file=file_path, target=target_commit)
    staged: list[int] = []

    try:
        if hunks:
            staged = await stage_hunks(
                backend, repo_path, file_path, hunks, patch_dir=patch_dir
            )
        else:
            await stage_file(backend, repo_path, file_path)
    except PartialStagingError as exc:
        log.warning("Squash aborted while staging", staged=exc.staged, failed=exc.failed)
        raise SquashPhaseError(SquashPhase.STAGE, str(exc.cause), exc.staged) from exc
    except (GitCommandError, OSError) as exc:
        log.warning("Squash aborted while staging", error=str(exc))
        raise SquashPhaseError(SquashPhase.STAGE, str(exc)) from exc

    try:
        await backend.commit_fixup(repo_path, target_commit)
    except (GitCommandError, OSError) as exc:
        log.warning("Squash aborted while committing fixup", error=str(exc))
        raise SquashPhaseError(SquashPhase.FIXUP, str(exc), staged) from exc

    try:
        await backend.rebase_autosquash(repo_path, f"{target_commit}^")
    except (GitCommandError, OSError) as exc:
        log.warning("Squash aborted while rebasing", error=str(exc))
        raise SquashPhaseError(SquashPhase.REBASE, str(exc), staged) from exc

    short_hash = target_commit[:7]
    log.info("Squash completed", staged_hunks=staged)
    return SquashOutcome(
        target_commit=target_commit,
        short_hash=short_hash,
        message=f"Successfully squashed changes into commit {short_hash}",
        staged_hunks=staged,
        whole_file=not hunks,
    )


async def squash(
    backend: VersionControlBackend,
    state: SquashState,
    *,
    log_count: int | None = None,
    patch_dir: str | None = None,
) -> SquashResult:
    """Run the squash for the selections held in ``state``.

    On success the returned state is reset to the first step and the status
    and log are fetched again. On failure the exception propagates and the
    caller keeps ``state`` as it was so the user can retry.
    """
    if not state.selected_file or not state.target_commit:
        raise SquashValidationError("Please select a file and target commit")

    hunks = [(index, state.hunks[index]) for index in state.selected_hunks]
    outcome = await run_squash(
        backend,
        state.repo_path,
        state.selected_file,
        state.target_commit,
        hunks,
        patch_dir=patch_dir,
    )

    result = SquashResult(outcome=outcome, state=workflow.reset(state))
    try:
        result.status = await backend.status(state.repo_path)
        result.commits = await backend.log(
            state.repo_path, log_count or settings.log_max_count()
        )
    except (GitCommandError, OSError) as exc:
        logger.exception("Failed to refresh repository after squash", repo=state.repo_path)
        result.refresh_error = str(exc)
    return result
