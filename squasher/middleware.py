"""HTTP middleware and exception handlers."""

from __future__ import annotations

import json
import time
import uuid
from typing import Any

import structlog
from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class EscapedJSONResponse(JSONResponse):
    """JSON response rendered as pure ASCII.

    Diff text from files that are not valid UTF-8 carries surrogate escapes;
    emitting them as ``\\udcXX`` sequences lets a client send the same hunk
    text back and get the original bytes staged.
    """

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=True,
            allow_nan=False,
            indent=None,
            separators=(",", ":"),
        ).encode("ascii")


_CODE_MAP = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "INVALID_STATE",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


async def request_logging_middleware(request: Request, call_next):
    structlog.contextvars.bind_contextvars(
        request_id=str(uuid.uuid4()),
        method=request.method,
        path=request.url.path,
    )
    start_time = time.monotonic()
    logger.info("Request started")
    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.monotonic() - start_time) * 1000
        logger.exception("Request failed", duration_ms=round(duration_ms, 2))
        structlog.contextvars.clear_contextvars()
        raise
    duration_ms = (time.monotonic() - start_time) * 1000
    logger.info(
        "Request completed",
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    structlog.contextvars.clear_contextvars()
    return response


def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        return EscapedJSONResponse(status_code=exc.status_code, content=exc.detail)
    return EscapedJSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": _CODE_MAP.get(exc.status_code, "INTERNAL_ERROR"),
                "message": str(exc.detail),
                "details": None,
            }
        },
    )


def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return EscapedJSONResponse(
        status_code=422,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request",
                "details": jsonable_encoder(exc.errors()),
            }
        },
    )
