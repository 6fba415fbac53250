"""CLI entry point for squasher.

Provides the ``squasher start`` subcommand.

``load_config()`` must run before importing ``squasher.main`` because that
module configures logging and reads settings at import time.
"""

from __future__ import annotations

import argparse
import os
import sys


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point (``squasher`` command)."""
    parser = argparse.ArgumentParser(
        prog="squasher",
        description="Fold selected working tree changes into an earlier commit",
    )
    sub = parser.add_subparsers(dest="command")

    start_parser = sub.add_parser("start", help="Start the squasher server")
    start_parser.add_argument("--host", help="Host to bind to")
    start_parser.add_argument("--port", type=int, help="Port to bind to")
    start_parser.add_argument(
        "--dev", action="store_true", help="Enable dev mode (no auth required)"
    )

    args = parser.parse_args(argv)

    if args.command == "start":
        _run_start(args)
    else:
        parser.print_help()
        sys.exit(1)


def _run_start(args: argparse.Namespace) -> None:
    """Handle ``squasher start``."""
    # CLI flags win over .env files because load_config never overwrites.
    if args.host:
        os.environ["SQUASHER_HOST"] = args.host
    if args.port:
        os.environ["SQUASHER_PORT"] = str(args.port)
    if args.dev:
        os.environ["SQUASHER_DEV_MODE"] = "1"

    from squasher.config import load_config

    load_config()

    from squasher.main import run

    run()


if __name__ == "__main__":
    main()
