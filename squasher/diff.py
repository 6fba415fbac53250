"""Helpers for parsing single-file unified diffs into hunks and back into patches."""

from __future__ import annotations

import re

import structlog

from squasher.models import Hunk

logger = structlog.get_logger(__name__)

HUNK_HEADER_RE = re.compile(r"@@ -(\d+),?\d* \+(\d+),?\d* @@")


def parse_hunk_start(header: str) -> int | None:
    """Return the new-file start offset of a hunk header, or None if malformed."""
    match = HUNK_HEADER_RE.search(header)
    if not match:
        return None
    return int(match.group(2))


def _split_lines(raw: str) -> list[str]:
    # Only "\n" separates lines; a trailing newline does not open an empty line.
    lines = raw.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_hunks(raw: str) -> list[Hunk]:
    """Parse the unified diff of exactly one file into ordered hunks.

    Lines before the first ``@@`` header (the ``diff --git``/``---``/``+++``
    preamble) are dropped. Everything after a header, up to the next header,
    belongs to that hunk verbatim. A header that does not match
    ``@@ -a[,b] +c[,d] @@`` is kept but its start offset defaults to 0.

    Args:
        raw: Unified diff text, e.g. from ``git diff --unified=3 -- <path>``.
    """
    hunks: list[Hunk] = []
    header: str | None = None
    body: list[str] = []
    start = 0
    added = 0

    def flush() -> None:
        if header is None:
            return
        hunks.append(
            Hunk(
                header=header,
                lines=(header, *body),
                start_line=start,
                end_line=start + added,
            )
        )

    for line in _split_lines(raw):
        if line.startswith("@@"):
            flush()
            header = line
            body = []
            added = 0
            parsed = parse_hunk_start(line)
            if parsed is None:
                logger.debug("Malformed hunk header, defaulting offset to 0", header=line)
                parsed = 0
            start = parsed
            continue
        if header is None:
            continue
        body.append(line)
        if line.startswith("+") and not line.startswith("+++"):
            added += 1

    flush()
    return hunks


def build_hunk_patch(path: str, hunk: Hunk | str) -> str:
    """Build a standalone single-file, single-hunk patch for ``git apply``.

    Content lines are passed through untouched; the result always ends with a
    newline so the last hunk line is complete.

    Args:
        path: Repository-relative file path the hunk belongs to.
        hunk: Parsed hunk, or its raw text (header line first).
    """
    body = hunk.text if isinstance(hunk, Hunk) else hunk
    patch = "\n".join(
        [
            f"diff --git a/{path} b/{path}",
            f"--- a/{path}",
            f"+++ b/{path}",
            body,
        ]
    )
    if not patch.endswith("\n"):
        patch += "\n"
    return patch
