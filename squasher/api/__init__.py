"""API package for repository inspection and the squash workflow."""

from __future__ import annotations

from squasher.api.deps import require_token
from squasher.api.router import api_router

__all__ = ["api_router", "require_token"]
