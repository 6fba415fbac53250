"""Shared pytest fixtures for squasher tests."""

import os
import shutil
import subprocess
from pathlib import Path
from typing import AsyncGenerator

import httpx
import pytest

# Set dev mode before importing app to avoid auth requirement
os.environ["SQUASHER_DEV_MODE"] = "1"
os.environ.pop("SQUASHER_TOKEN", None)

from squasher.backend import GitCommandError
from squasher.main import app
from squasher.api.state import store
from squasher.models import Commit, FileStatus, FileStatusKind, RepoStatus

app.state.api_token = ""

TWO_HUNK_DIFF = """\
diff --git a/a.txt b/a.txt
index 3b18e51..8d4b2a0 100644
--- a/a.txt
+++ b/a.txt
@@ -1,3 +1,4 @@
 one
+one and a half
 two
 three
@@ -10,3 +11,3 @@ def section():
 ten
-eleven
+ELEVEN
 twelve
"""


class FakeBackend:
    """Records every backend call and fails the calls it is told to fail."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.repository = True
        self.diffs: dict[str, str] = {"a.txt": TWO_HUNK_DIFF}
        self.status_result = RepoStatus(
            files=[FileStatus(path="a.txt", status=FileStatusKind.MODIFIED)],
            staged=[],
            is_clean=False,
        )
        self.commits = [
            Commit.from_log("abc1234def5678", "Add a.txt", "Dev", "2024-01-02T00:00:00+00:00", "HEAD -> main"),
            Commit.from_log("0123456789abcd", "Initial commit", "Dev", "2024-01-01T00:00:00+00:00"),
        ]
        # op name -> 1-based call number that raises
        self.fail_on: dict[str, int] = {}
        self.errors: dict[str, str] = {}

    def ops(self) -> list[str]:
        """Names of recorded calls, ignoring repository checks."""
        return [call[0] for call in self.calls if call[0] != "is_repository"]

    def _record(self, op: str, *args) -> None:
        self.calls.append((op, *args))
        count = sum(1 for call in self.calls if call[0] == op)
        if self.fail_on.get(op) == count:
            raise GitCommandError([op], 1, self.errors.get(op, f"error: {op} failed"))

    async def is_repository(self, repo_path: str) -> bool:
        self.calls.append(("is_repository", repo_path))
        return self.repository

    async def status(self, repo_path: str) -> RepoStatus:
        self._record("status", repo_path)
        return self.status_result

    async def log(self, repo_path: str, max_count: int) -> list[Commit]:
        self._record("log", repo_path, max_count)
        return self.commits[:max_count]

    async def diff(self, repo_path: str, file_path: str, staged: bool = False) -> str:
        self._record("diff", repo_path, file_path, staged)
        return self.diffs.get(file_path, "")

    async def apply_patch(self, repo_path: str, patch_file: str, cached: bool = True) -> None:
        content = Path(patch_file).read_text(encoding="utf-8", errors="surrogateescape")
        self._record("apply_patch", repo_path, content, cached)

    async def add_file(self, repo_path: str, file_path: str) -> None:
        self._record("add_file", repo_path, file_path)

    async def commit_fixup(self, repo_path: str, target_commit: str) -> None:
        self._record("commit_fixup", repo_path, target_commit)

    async def rebase_autosquash(self, repo_path: str, base: str) -> None:
        self._record("rebase_autosquash", repo_path, base)


@pytest.fixture
def fake_backend(monkeypatch) -> FakeBackend:
    """Install a FakeBackend on the app for API tests."""
    backend = FakeBackend()
    monkeypatch.setattr(app.state, "backend", backend, raising=False)
    return backend


@pytest.fixture
def patch_dir(tmp_path, monkeypatch) -> Path:
    """Isolated directory for transient patch files."""
    directory = tmp_path / "patches"
    directory.mkdir()
    monkeypatch.setenv("SQUASHER_PATCH_DIR", str(directory))
    return directory


@pytest.fixture
def repo_dir(tmp_path) -> str:
    """An existing directory standing in for a repository."""
    directory = tmp_path / "repo"
    directory.mkdir()
    return str(directory.resolve())


@pytest.fixture
async def api_client(fake_backend, patch_dir) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client against the app with a fake backend."""
    store.clear()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    store.clear()


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-C", str(repo), *args],
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path) -> Path:
    """A real repository with three commits and an unstaged two-hunk change."""
    if not shutil.which("git"):
        pytest.skip("git executable not available")
    repo = tmp_path / "real"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "config", "user.name", "Test User")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "commit.gpgsign", "false")

    (repo / "README").write_text("test repository\n")
    _git(repo, "add", "README")
    _git(repo, "commit", "-q", "-m", "Initial commit")

    lines = [f"line {i}" for i in range(1, 21)]
    (repo / "a.txt").write_text("\n".join(lines) + "\n")
    _git(repo, "add", "a.txt")
    _git(repo, "commit", "-q", "-m", "Add a.txt")

    (repo / "b.txt").write_text("other\n")
    _git(repo, "add", "b.txt")
    _git(repo, "commit", "-q", "-m", "Add b.txt")

    lines[1] = "line 2 changed"
    lines[17] = "line 18 changed"
    (repo / "a.txt").write_text("\n".join(lines) + "\n")
    return repo


@pytest.fixture
def git():
    """Run git commands in a test repository."""
    return _git


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Run anyio-marked tests under asyncio, which the server is built on."""
    return "asyncio"


@pytest.fixture
def two_hunk_diff() -> str:
    """Diff of ``a.txt`` with one added line and one changed line."""
    return TWO_HUNK_DIFF
