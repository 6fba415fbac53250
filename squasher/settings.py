"""Centralized environment configuration for the squasher server.

All environment variables are read through this module using the SQUASHER_
prefix for consistency.

Usage:
    from squasher.settings import settings

    if settings.dev_mode():
        ...
    port = settings.port()
"""

from __future__ import annotations

import os
import tempfile


def _get(name: str, default: str = "") -> str:
    """Get an environment variable value."""
    return os.environ.get(name, "").strip() or default


def _get_bool(name: str, default: bool = False) -> bool:
    """Get a boolean environment variable."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    return value.lower() in ("1", "true", "yes")


def _get_int(name: str, default: int = 0) -> int:
    """Get an integer environment variable."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class Settings:
    """Centralized settings for the squasher server.

    Environment variables use the SQUASHER_ prefix.
    """

    # -------------------------------------------------------------------------
    # Server Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def dev_mode() -> bool:
        """Development mode disables token requirement.

        Env: SQUASHER_DEV_MODE
        """
        return _get_bool("SQUASHER_DEV_MODE")

    @staticmethod
    def token() -> str:
        """Bearer token for API authentication. Empty disables auth.

        Env: SQUASHER_TOKEN
        """
        if Settings.dev_mode():
            return ""
        return _get("SQUASHER_TOKEN")

    @staticmethod
    def host() -> str:
        """Host to bind the HTTP server to.

        Env: SQUASHER_HOST (default: 127.0.0.1)
        """
        return _get("SQUASHER_HOST", default="127.0.0.1")

    @staticmethod
    def port() -> int:
        """Port to bind the HTTP server to.

        Env: SQUASHER_PORT (default: 3001)
        """
        return _get_int("SQUASHER_PORT", default=3001)

    # -------------------------------------------------------------------------
    # Logging Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def log_level() -> str:
        """Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

        Env: SQUASHER_LOG_LEVEL (default: INFO)
        """
        return _get("SQUASHER_LOG_LEVEL", default="INFO").upper()

    @staticmethod
    def log_format() -> str:
        """Log format: "console" for dev-friendly, "json" for structured.

        Env: SQUASHER_LOG_FORMAT (default: console)
        """
        return _get("SQUASHER_LOG_FORMAT", default="console").lower()

    # -------------------------------------------------------------------------
    # Git Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def git_bin() -> str:
        """Git executable name or path.

        Env: SQUASHER_GIT_BIN (default: git)
        """
        return _get("SQUASHER_GIT_BIN", default="git")

    @staticmethod
    def git_timeout_seconds() -> int:
        """Maximum seconds for a single git invocation. 0 disables.

        Env: SQUASHER_GIT_TIMEOUT_SECONDS (default: 0)
        """
        return _get_int("SQUASHER_GIT_TIMEOUT_SECONDS", default=0)

    @staticmethod
    def patch_dir() -> str:
        """Directory where transient hunk patches are written.

        Env: SQUASHER_PATCH_DIR (default: system temp directory)
        """
        value = _get("SQUASHER_PATCH_DIR")
        if value:
            return os.path.abspath(value)
        return tempfile.gettempdir()

    @staticmethod
    def log_max_count() -> int:
        """Default number of commits returned by the log endpoint.

        Env: SQUASHER_LOG_MAX_COUNT (default: 50)
        """
        return _get_int("SQUASHER_LOG_MAX_COUNT", default=50)

    # -------------------------------------------------------------------------
    # Session Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def session_idle_timeout_seconds() -> int:
        """Seconds without activity before a squash session is discarded. 0 disables.

        Env: SQUASHER_SESSION_IDLE_SECONDS (default: 3600)
        """
        return _get_int("SQUASHER_SESSION_IDLE_SECONDS", default=3600)


# Singleton instance for convenient imports
settings = Settings()
