"""In-memory squash session store shared across API modules."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from squasher.api.errors import raise_http_error
from squasher.models import Commit, FileStatus
from squasher.workflow import SquashState


def now() -> str:
    """Shared timestamp helper for session bookkeeping."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SquashSession:
    """Server-held selection state for one browser tab."""

    id: str
    state: SquashState
    files: list[FileStatus] = field(default_factory=list)
    commits: list[Commit] = field(default_factory=list)
    message: str | None = None
    created_at: str = field(default_factory=now)
    last_activity_at: str = field(default_factory=now)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


class SquashSessionStore:
    """Keeps squash sessions in memory; nothing here touches the repository."""

    def __init__(self) -> None:
        self._sessions: dict[str, SquashSession] = {}

    def create(
        self, state: SquashState, files: list[FileStatus], commits: list[Commit]
    ) -> SquashSession:
        session = SquashSession(
            id=f"sq_{uuid.uuid4().hex[:12]}",
            state=state,
            files=files,
            commits=commits,
        )
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> SquashSession | None:
        return self._sessions.get(session_id)

    def update(self, session: SquashSession, state: SquashState, **changes: object) -> None:
        """Replace the session's state and record activity."""
        session.state = state
        for key, value in changes.items():
            setattr(session, key, value)
        session.last_activity_at = now()

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def prune_idle(self, max_idle_s: float, current: datetime | None = None) -> int:
        """Drop sessions idle for longer than ``max_idle_s`` and return how many.

        A session whose lock is held is in the middle of a request and is kept.
        """
        current = current or datetime.now(timezone.utc)
        expired = [
            session.id
            for session in self._sessions.values()
            if not session.lock.locked()
            and (current - datetime.fromisoformat(session.last_activity_at)).total_seconds()
            > max_idle_s
        ]
        for session_id in expired:
            del self._sessions[session_id]
        return len(expired)

    def clear(self) -> None:
        self._sessions.clear()


store = SquashSessionStore()


def get_session_or_404(session_id: str) -> SquashSession:
    """Return the session or raise NOT_FOUND."""
    session = store.get(session_id)
    if not session:
        raise_http_error("NOT_FOUND", "Squash session not found", 404)
    return session
