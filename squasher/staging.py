"""Stage whole files or individual diff hunks into the index."""

from __future__ import annotations

import os
import time
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

import structlog

from squasher.backend import GitCommandError, VersionControlBackend
from squasher.diff import build_hunk_patch
from squasher.models import Hunk
from squasher.settings import settings

logger = structlog.get_logger(__name__)


class PartialStagingError(Exception):
    """Staging a hunk failed after earlier hunks of the same batch were staged.

    Hunks listed in ``staged`` remain in the index; nothing is rolled back.
    """

    def __init__(
        self, failed: int, staged: list[int], cause: GitCommandError | OSError
    ) -> None:
        self.failed = failed
        self.staged = staged
        self.cause = cause
        super().__init__(str(cause))


def _patch_file_name() -> str:
    return f"patch-{time.time_ns()}-{uuid.uuid4().hex[:8]}.patch"


@contextmanager
def transient_patch(content: str, patch_dir: str | None = None) -> Iterator[str]:
    """Write ``content`` to a uniquely named patch file and remove it on exit.

    Bytes that are not valid UTF-8 arrive as surrogate escapes from the
    backend and are written back unchanged. A failure to remove the file is
    logged and never replaces an exception raised inside the block.
    """
    directory = patch_dir or settings.patch_dir()
    path = os.path.join(directory, _patch_file_name())
    # "x" refuses to reuse a name another stager created first.
    with open(
        path, "x", encoding="utf-8", errors="surrogateescape", newline=""
    ) as handle:
        handle.write(content)
    try:
        yield path
    finally:
        try:
            os.unlink(path)
        except OSError:
            logger.warning("Failed to remove transient patch", path=path, exc_info=True)


async def stage_file(backend: VersionControlBackend, repo_path: str, file_path: str) -> None:
    """Add the whole file to the index."""
    await backend.add_file(repo_path, file_path)
    logger.info("File staged", repo=repo_path, file=file_path)


async def stage_hunk(
    backend: VersionControlBackend,
    repo_path: str,
    file_path: str,
    hunk: Hunk | str,
    *,
    patch_dir: str | None = None,
) -> None:
    """Apply a single hunk to the index.

    The hunk is written as a standalone patch and applied with
    ``apply --cached``; the patch either applies entirely or not at all.

    Args:
        backend: Version control backend to run the apply with.
        repo_path: Repository root.
        file_path: Repository-relative path the hunk belongs to.
        hunk: Parsed hunk or raw hunk text (header first).
        patch_dir: Directory for the transient patch file.
    """
    patch = build_hunk_patch(file_path, hunk)
    with transient_patch(patch, patch_dir) as patch_file:
        await backend.apply_patch(repo_path, patch_file, cached=True)
    logger.info("Hunk staged", repo=repo_path, file=file_path)


async def stage_hunks(
    backend: VersionControlBackend,
    repo_path: str,
    file_path: str,
    hunks: Sequence[tuple[int, Hunk | str]],
    *,
    patch_dir: str | None = None,
) -> list[int]:
    """Stage each ``(index, hunk)`` pair in order, one apply per hunk.

    Returns the staged indices. Raises PartialStagingError on the first hunk
    that fails to apply or whose patch file cannot be written.
    """
    staged: list[int] = []
    for index, hunk in hunks:
        try:
            await stage_hunk(backend, repo_path, file_path, hunk, patch_dir=patch_dir)
        except (GitCommandError, OSError) as exc:
            logger.warning(
                "Hunk failed to apply",
                repo=repo_path,
                file=file_path,
                hunk=index,
                staged=staged,
            )
            raise PartialStagingError(index, list(staged), exc) from exc
        staged.append(index)
    return staged
