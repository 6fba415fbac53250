"""Dependency helpers for API endpoints."""

from __future__ import annotations

from pathlib import Path

from fastapi import Request

from squasher.api.errors import raise_http_error
from squasher.backend import VersionControlBackend


async def require_token(request: Request) -> None:
    """Enforce bearer token auth when configured."""
    token = request.app.state.api_token
    if not token:
        return
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("bearer ") or auth.split(" ", 1)[1] != token:
        # Drain request body to avoid hanging ASGI clients on early auth failure.
        await request.body()
        raise_http_error("UNAUTHORIZED", "Missing or invalid bearer token", 401)


def get_backend(request: Request) -> VersionControlBackend:
    """Backend instance shared by the app (replaced in tests)."""
    return request.app.state.backend


def normalize_directory_path(path: str) -> str:
    """Return a normalized absolute path for the provided directory string."""
    candidate = Path(path).expanduser()
    try:
        resolved = candidate.resolve(strict=False)
    except (OSError, RuntimeError):
        resolved = candidate.absolute()
    return str(resolved)


async def resolve_repository(backend: VersionControlBackend, repo_path: str) -> str:
    """Normalize ``repo_path`` and make sure it is a git working tree.

    Raises NOT_FOUND for a missing directory and NOT_A_REPOSITORY when git
    does not recognize it.
    """
    normalized = normalize_directory_path(repo_path)
    if not Path(normalized).is_dir():
        raise_http_error("NOT_FOUND", "Directory not found", 404, details=normalized)
    if not await backend.is_repository(normalized):
        raise_http_error("NOT_A_REPOSITORY", "Not a valid git repository", 400, details=normalized)
    return normalized
