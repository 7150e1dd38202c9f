#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from miniorm.app import inspect_database
from miniorm.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load and inspect a miniorm data context")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log relationship resolution and persistence details",
    )
    parser.add_argument(
        "--echo-sql",
        action="store_true",
        help="Log every SQL statement sent to the database",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect = subparsers.add_parser("inspect", help="Load every table of a model and report counts")
    inspect.add_argument(
        "model",
        type=str,
        help="Model reference as 'package.module:attribute'",
    )
    inspect.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to MINIORM_DATABASE_URI)",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except SystemExit as exc:
        sys.exit(2 if exc.code else 0)

    configure_logging(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        sql_echo=parsed_args.echo_sql,
    )

    try:
        if parsed_args.command == "inspect":
            inspect_database(parsed_args.model, database_uri=parsed_args.database_uri)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error while loading context")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point: read .env, install the SIGINT handler, run."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
