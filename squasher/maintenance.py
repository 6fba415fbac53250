"""Background task that discards abandoned squash sessions."""

from __future__ import annotations

import asyncio

import structlog

from squasher.api.state import store
from squasher.settings import settings

logger = structlog.get_logger(__name__)

MAINTENANCE_INTERVAL_SECONDS = 60


def prune_idle_sessions() -> int:
    """Remove sessions past the idle timeout; a timeout of 0 keeps everything."""
    idle_timeout_s = settings.session_idle_timeout_seconds()
    if idle_timeout_s <= 0:
        return 0
    removed = store.prune_idle(idle_timeout_s)
    if removed:
        logger.info("Pruned idle squash sessions", count=removed)
    return removed


async def maintenance_loop() -> None:
    """Periodically prune idle sessions."""
    while True:
        try:
            prune_idle_sessions()
        except Exception:
            logger.exception("Maintenance loop failed")
        await asyncio.sleep(MAINTENANCE_INTERVAL_SECONDS)
