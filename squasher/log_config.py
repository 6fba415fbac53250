"""Structlog setup for the squasher server.

Every request is logged by ``request_logging_middleware``, so uvicorn's own
access log is silenced; its startup and error loggers share our formatter.
"""

from __future__ import annotations

import logging
import logging.config
import sys

import structlog

from squasher.settings import settings

# Rebase conflicts and rejected patches can print pages of output.
MAX_GIT_OUTPUT_CHARS = 2000
_GIT_OUTPUT_KEYS = ("stderr", "error", "detail")


def clip_git_output(
    logger: logging.Logger | None, name: str, event_dict: dict
) -> dict:
    """Truncate git output fields to ``MAX_GIT_OUTPUT_CHARS``."""
    for key in _GIT_OUTPUT_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > MAX_GIT_OUTPUT_CHARS:
            hidden = len(value) - MAX_GIT_OUTPUT_CHARS
            event_dict[key] = f"{value[:MAX_GIT_OUTPUT_CHARS]}... [{hidden} more chars]"
    return event_dict


def _renderer():
    if settings.log_format() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging() -> None:
    """Configure structlog + stdlib logging from SQUASHER_LOG_* settings."""
    log_level = getattr(logging, settings.log_level(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        clip_git_output,
    ]

    structlog.configure(
        processors=shared_processors
        + [
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_renderer(),
        foreign_pre_chain=shared_processors,
    )

    server_logger = {"handlers": ["default"], "level": log_level, "propagate": False}
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"()": lambda: formatter}},
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": sys.stdout,
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
            "loggers": {
                "uvicorn": dict(server_logger),
                "uvicorn.error": dict(server_logger),
                "uvicorn.access": {"handlers": [], "level": "WARNING", "propagate": False},
            },
        }
    )
