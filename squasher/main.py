"""FastAPI application entrypoint for the squasher server."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress

import structlog
import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from squasher import __version__
from squasher.api import api_router
from squasher.backend import get_backend
from squasher.log_config import configure_logging
from squasher.maintenance import maintenance_loop
from squasher.middleware import (
    EscapedJSONResponse,
    http_exception_handler,
    request_logging_middleware,
    validation_exception_handler,
)
from squasher.settings import settings

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Squasher API available",
        url=f"http://{settings.host()}:{settings.port()}/api",
        auth=bool(app.state.api_token),
        git=settings.git_bin(),
    )
    maintenance_task = asyncio.create_task(maintenance_loop())
    try:
        yield
    finally:
        maintenance_task.cancel()
        with suppress(asyncio.CancelledError):
            await maintenance_task


app = FastAPI(
    title="git-squasher",
    version=__version__,
    lifespan=lifespan,
    default_response_class=EscapedJSONResponse,
)

app.middleware("http")(request_logging_middleware)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(api_router)

app.state.api_token = settings.token()
app.state.backend = get_backend()


def run() -> None:
    """Serve the app with uvicorn using SQUASHER_HOST/SQUASHER_PORT."""
    uvicorn.run(
        "squasher.main:app",
        host=settings.host(),
        port=settings.port(),
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    run()
