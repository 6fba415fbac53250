"""Health endpoint."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from squasher import __version__

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    ok: bool
    version: str


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(ok=True, version=__version__)
