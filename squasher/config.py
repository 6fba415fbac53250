"""Environment configuration loader for squasher.

Loads settings from layered .env files into ``os.environ``.

Precedence (highest wins):
    1. Already-set environment variables
    2. Local ``.env`` file (cwd)
    3. ``~/.config/squasher/config.env`` (XDG_CONFIG_HOME respected)
    4. Built-in defaults
"""

from __future__ import annotations

import os
from pathlib import Path


def config_dir() -> Path:
    """Return the squasher config directory (XDG_CONFIG_HOME/squasher)."""
    base = os.environ.get("XDG_CONFIG_HOME", "").strip()
    if not base:
        base = os.path.join(Path.home(), ".config")
    return Path(base) / "squasher"


def parse_env_file(path: str | Path) -> dict[str, str]:
    """Parse a .env file and return a dict of key-value pairs.

    Supports ``KEY=value``, quoted values, an ``export`` prefix, comments and
    inline comments after unquoted values.
    """
    result: dict[str, str] = {}
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return result

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()

        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        elif " #" in value:
            value = value.split(" #", 1)[0].rstrip()
        elif value.startswith("#"):
            value = ""

        result[key] = value

    return result


def load_config() -> None:
    """Load configuration from .env files into ``os.environ``.

    Already-set environment variables are never overwritten.
    """
    merged: dict[str, str] = {}
    merged.update(parse_env_file(config_dir() / "config.env"))
    merged.update(parse_env_file(Path.cwd() / ".env"))

    for key, value in merged.items():
        if key not in os.environ:
            os.environ[key] = value
