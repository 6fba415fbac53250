"""Selection state machine for the guided squash workflow.

The workflow moves through four steps::

    select-files -> select-hunks -> select-commit -> confirm

``SquashState`` is immutable. Every transition validates the current step and
returns a new state, so a caller can keep, compare or discard states freely.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from pydantic import ConfigDict

from squasher.models import CamelModel, Hunk


class SquashStep(str, Enum):
    """Caller-visible steps of the squash workflow."""
    SELECT_FILES = "select-files"
    SELECT_HUNKS = "select-hunks"
    SELECT_COMMIT = "select-commit"
    CONFIRM = "confirm"


class InvalidTransitionError(Exception):
    """Raised when an action is not allowed from the current step."""


class SquashState(CamelModel):
    """Snapshot of everything the user has selected so far.

    ``selected_hunks`` holds unique indices into ``hunks`` in the order they
    were selected; it is only meaningful for the diff currently attached.
    """

    model_config = ConfigDict(frozen=True)

    repo_path: str
    step: SquashStep = SquashStep.SELECT_FILES
    selected_file: str | None = None
    hunks: tuple[Hunk, ...] = ()
    selected_hunks: tuple[int, ...] = ()
    whole_file: bool = False
    target_commit: str | None = None

    @property
    def has_staging_choice(self) -> bool:
        return bool(self.selected_hunks) or self.whole_file


_VALID_TRANSITIONS = {
    SquashStep.SELECT_FILES: {SquashStep.SELECT_HUNKS},
    SquashStep.SELECT_HUNKS: {SquashStep.SELECT_FILES, SquashStep.SELECT_COMMIT},
    SquashStep.SELECT_COMMIT: {SquashStep.SELECT_HUNKS, SquashStep.CONFIRM},
    SquashStep.CONFIRM: {SquashStep.SELECT_COMMIT},
}


def _transition(state: SquashState, new_step: SquashStep, **changes: object) -> SquashState:
    if state.step != new_step and new_step not in _VALID_TRANSITIONS[state.step]:
        raise InvalidTransitionError(
            f"Invalid step transition {state.step.value} -> {new_step.value}"
        )
    return state.model_copy(update={"step": new_step, **changes})


def _require_step(state: SquashState, *steps: SquashStep) -> None:
    if state.step not in steps:
        allowed = ", ".join(step.value for step in steps)
        raise InvalidTransitionError(
            f"Action not allowed in step {state.step.value} (expected {allowed})"
        )


def start(repo_path: str) -> SquashState:
    """Initial state for a repository."""
    return SquashState(repo_path=repo_path)


def reset(state: SquashState) -> SquashState:
    """Drop every selection and return to the first step."""
    return start(state.repo_path)


def switch_file(state: SquashState, file_path: str) -> SquashState:
    """Select a file, clearing hunk selection before its diff is fetched.

    Allowed from any step; the workflow returns to ``select-files`` until
    ``attach_diff`` supplies the file's hunks.
    """
    return state.model_copy(
        update={
            "step": SquashStep.SELECT_FILES,
            "selected_file": file_path,
            "hunks": (),
            "selected_hunks": (),
            "whole_file": False,
            "target_commit": None,
        }
    )


def attach_diff(state: SquashState, file_path: str, hunks: Sequence[Hunk]) -> SquashState:
    """Enter ``select-hunks`` with the freshly fetched diff of the selected file."""
    _require_step(state, SquashStep.SELECT_FILES)
    if state.selected_file != file_path:
        raise InvalidTransitionError(
            f"Diff for {file_path} does not belong to the selected file"
        )
    return _transition(state, SquashStep.SELECT_HUNKS, hunks=tuple(hunks))


def toggle_hunk(state: SquashState, index: int) -> SquashState:
    """Select or deselect the hunk at ``index`` of the attached diff."""
    _require_step(state, SquashStep.SELECT_HUNKS)
    if not 0 <= index < len(state.hunks):
        raise InvalidTransitionError(
            f"Hunk {index} out of range for {len(state.hunks)} hunk(s)"
        )
    if index in state.selected_hunks:
        selected = tuple(i for i in state.selected_hunks if i != index)
    else:
        selected = (*state.selected_hunks, index)
    return state.model_copy(update={"selected_hunks": selected, "whole_file": False})


def choose_whole_file(state: SquashState) -> SquashState:
    """Stage the entire file instead of individual hunks."""
    _require_step(state, SquashStep.SELECT_HUNKS)
    return state.model_copy(update={"selected_hunks": (), "whole_file": True})


def continue_to_commit(state: SquashState) -> SquashState:
    """Move on to choosing the target commit."""
    _require_step(state, SquashStep.SELECT_HUNKS)
    if not state.has_staging_choice:
        raise InvalidTransitionError("Select at least one hunk or the whole file")
    return _transition(state, SquashStep.SELECT_COMMIT)


def select_commit(state: SquashState, commit_hash: str) -> SquashState:
    """Choose the commit the changes are folded into."""
    _require_step(state, SquashStep.SELECT_COMMIT, SquashStep.CONFIRM)
    return _transition(state, SquashStep.CONFIRM, target_commit=commit_hash)


def back(state: SquashState) -> SquashState:
    """Return to the previous step.

    Leaving ``select-hunks`` drops the selected file and its diff.
    """
    if state.step == SquashStep.CONFIRM:
        return _transition(state, SquashStep.SELECT_COMMIT)
    if state.step == SquashStep.SELECT_COMMIT:
        return _transition(state, SquashStep.SELECT_HUNKS)
    if state.step == SquashStep.SELECT_HUNKS:
        return _transition(
            state,
            SquashStep.SELECT_FILES,
            selected_file=None,
            hunks=(),
            selected_hunks=(),
            whole_file=False,
        )
    raise InvalidTransitionError("Already at the first step")
