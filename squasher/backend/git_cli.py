"""Version control backend that drives the git CLI as a subprocess."""

from __future__ import annotations

import asyncio
import os

import structlog

from squasher.backend.base import GitCommandError, GitTimeoutError
from squasher.models import Commit, FileStatus, FileStatusKind, RepoStatus

logger = structlog.get_logger(__name__)

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%s", "%an", "%aI", "%D"]) + _RECORD_SEP

# Accept the generated todo list and commit messages without opening an editor.
_UNATTENDED_ENV = {"GIT_SEQUENCE_EDITOR": ":", "GIT_EDITOR": ":"}


def parse_porcelain_status(raw: str) -> RepoStatus:
    """Parse ``git status --porcelain=v1 -z`` output.

    Args:
        raw: NUL separated status entries; renames and copies carry the
            source path as an extra entry.
    """
    files: list[FileStatus] = []
    staged: list[str] = []
    entries = raw.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        index_code, tree_code, path = entry[0], entry[1], entry[3:]
        codes = index_code + tree_code
        if index_code not in (" ", "?", "!"):
            staged.append(path)
        if index_code in ("R", "C"):
            old_path = entries[i] if i < len(entries) else None
            i += 1
            if index_code == "R":
                files.append(
                    FileStatus(path=path, status=FileStatusKind.RENAMED, from_path=old_path)
                )
            else:
                files.append(FileStatus(path=path, status=FileStatusKind.CREATED))
        elif "D" in codes:
            files.append(FileStatus(path=path, status=FileStatusKind.DELETED))
        elif index_code == "A" or codes == "??":
            files.append(FileStatus(path=path, status=FileStatusKind.CREATED))
        elif codes == "!!":
            continue
        else:
            files.append(FileStatus(path=path, status=FileStatusKind.MODIFIED))
    return RepoStatus(files=files, staged=staged, is_clean=not files)


def parse_log(raw: str) -> list[Commit]:
    """Parse log output produced with the record/field separated format."""
    commits: list[Commit] = []
    for record in raw.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(_FIELD_SEP)
        if len(fields) < 5:
            continue
        commit_hash, message, author, date, refs = fields[:5]
        commits.append(Commit.from_log(commit_hash, message, author, date, refs))
    return commits


class GitCliBackend:
    """Run git commands with ``git -C <repo>`` and report failures as exceptions.

    Each call waits for its process to exit before returning, so a caller that
    awaits operations one after another never runs two git processes at once.
    """

    def __init__(self, git_bin: str = "git", timeout_s: float = 0) -> None:
        self._git = git_bin
        self._timeout_s = timeout_s

    async def _run(
        self,
        repo_path: str,
        args: list[str],
        *,
        extra_env: dict[str, str] | None = None,
    ) -> str:
        env = os.environ.copy()
        # Error text is matched in English; LC_ALL outranks any user locale.
        env["LC_ALL"] = "C"
        if extra_env:
            env.update(extra_env)
        logger.debug("Running git", repo=repo_path, args=args)
        proc = await asyncio.create_subprocess_exec(
            self._git,
            "-C",
            repo_path,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
        try:
            if self._timeout_s > 0:
                stdout, stderr = await asyncio.wait_for(
                    proc.communicate(), timeout=self._timeout_s
                )
            else:
                stdout, stderr = await proc.communicate()
        except asyncio.TimeoutError:
            logger.warning("Git timeout reached; terminating process", args=args)
            proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), timeout=3)
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
            raise GitTimeoutError(args, self._timeout_s) from None

        # surrogateescape keeps non-UTF-8 file content byte-exact for patches.
        out = stdout.decode("utf-8", errors="surrogateescape")
        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace")
            # git commit reports "nothing to commit" on stdout.
            message = err.strip() or stdout.decode("utf-8", errors="replace").strip()
            logger.info(
                "Git command failed",
                repo=repo_path,
                args=args,
                returncode=proc.returncode,
                stderr=message,
            )
            raise GitCommandError(args, proc.returncode, message)
        return out

    async def is_repository(self, repo_path: str) -> bool:
        try:
            out = await self._run(repo_path, ["rev-parse", "--is-inside-work-tree"])
        except GitCommandError:
            return False
        return out.strip() == "true"

    async def status(self, repo_path: str) -> RepoStatus:
        out = await self._run(
            repo_path, ["status", "--porcelain=v1", "-z", "--untracked-files=all"]
        )
        return parse_porcelain_status(out)

    async def log(self, repo_path: str, max_count: int) -> list[Commit]:
        try:
            out = await self._run(
                repo_path,
                ["log", f"--max-count={max_count}", f"--format={_LOG_FORMAT}"],
            )
        except GitCommandError as exc:
            if "does not have any commits" in exc.stderr:
                return []
            raise
        return parse_log(out)

    async def diff(self, repo_path: str, file_path: str, staged: bool = False) -> str:
        args = ["diff"]
        if staged:
            args.append("--cached")
        args += ["--unified=3", "--no-color", "--no-ext-diff", "--", file_path]
        return await self._run(repo_path, args)

    async def apply_patch(self, repo_path: str, patch_file: str, cached: bool = True) -> None:
        args = ["apply"]
        if cached:
            args.append("--cached")
        args.append(patch_file)
        await self._run(repo_path, args)

    async def add_file(self, repo_path: str, file_path: str) -> None:
        await self._run(repo_path, ["add", "--", file_path])

    async def commit_fixup(self, repo_path: str, target_commit: str) -> None:
        await self._run(repo_path, ["commit", f"--fixup={target_commit}"])

    async def rebase_autosquash(self, repo_path: str, base: str) -> None:
        await self._run(
            repo_path,
            ["rebase", "-i", "--autosquash", "--autostash", base],
            extra_env=_UNATTENDED_ENV,
        )
