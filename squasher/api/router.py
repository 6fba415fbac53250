"""Composition of API routers."""

from __future__ import annotations

from fastapi import APIRouter

from squasher.api.health import router as health_router
from squasher.api.repo import router as repo_router
from squasher.api.sessions import router as sessions_router

api_router = APIRouter(prefix="/api")
api_router.include_router(repo_router)
api_router.include_router(sessions_router)
api_router.include_router(health_router)
