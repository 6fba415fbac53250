"""Shared error helpers for API responses."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from fastapi import HTTPException

from squasher.backend import GitCommandError
from squasher.models import ErrorDetail, ErrorResponse

logger = structlog.get_logger(__name__)


def raise_http_error(
    code: str, message: str, status_code: int, details: Any = None
) -> None:
    """Raise an HTTPException with a structured error payload.

    Args:
        code: Stable error code string.
        message: Human-readable error message.
        status_code: HTTP status to return.
        details: Optional underlying detail, e.g. git's stderr.
    """
    raise HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error=ErrorDetail(code=code, message=message, details=details)
        ).model_dump(),
    )


@contextmanager
def git_errors(message: str) -> Iterator[None]:
    """Report a failing git command as GIT_ERROR with its output as details.

    Filesystem failures around a command (an unwritable patch directory, a
    missing git binary) are reported as INTERNAL_ERROR with the OS message.
    """
    try:
        yield
    except GitCommandError as exc:
        raise_http_error("GIT_ERROR", message, 500, details=str(exc))
    except OSError as exc:
        logger.exception(message)
        raise_http_error("INTERNAL_ERROR", message, 500, details=str(exc))
