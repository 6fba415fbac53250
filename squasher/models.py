"""Pydantic models for repository snapshots and API error payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the browser UI."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Hunk(CamelModel):
    """One contiguous change region within a single file's diff."""

    model_config = ConfigDict(frozen=True)

    header: str
    lines: tuple[str, ...]  # header is always lines[0]
    start_line: int
    end_line: int

    @property
    def text(self) -> str:
        """Hunk lines joined back into diff text (no trailing newline)."""
        return "\n".join(self.lines)


class FileStatusKind(str, Enum):
    """Kinds of working tree change reported for a path."""
    MODIFIED = "modified"
    CREATED = "created"
    DELETED = "deleted"
    RENAMED = "renamed"


class FileStatus(CamelModel):
    """One changed path in the working tree."""
    path: str
    status: FileStatusKind
    from_path: str | None = Field(default=None, alias="from")


class RepoStatus(CamelModel):
    """Working tree snapshot returned by the status operation."""
    files: list[FileStatus]
    staged: list[str] = []
    is_clean: bool


class Commit(CamelModel):
    """One history entry read from the log."""
    hash: str
    short_hash: str
    message: str
    author: str
    date: str
    refs: str = ""

    @classmethod
    def from_log(
        cls, commit_hash: str, message: str, author: str, date: str, refs: str = ""
    ) -> "Commit":
        """Build a commit record, deriving the 7 character short hash."""
        return cls(
            hash=commit_hash,
            short_hash=commit_hash[:7],
            message=message,
            author=author,
            date=date,
            refs=refs,
        )


class FileDiff(CamelModel):
    """Raw diff text for one file along with its parsed hunks."""
    file_path: str
    diff: str
    hunks: list[Hunk]


class ErrorDetail(BaseModel):
    """Structured error payload for API responses."""
    code: str
    message: str
    details: Any = None


class ErrorResponse(BaseModel):
    """Envelope for API error responses."""
    error: ErrorDetail
