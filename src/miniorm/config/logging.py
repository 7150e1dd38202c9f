"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(
    *,
    level: int = logging.INFO,
    sql_echo: bool = False,
    force: bool = False,
) -> None:
    """Configure the root logger for CLI output.

    The SQLAlchemy engine logger is held at WARNING unless ``sql_echo`` is set,
    so DEBUG output from miniorm itself is not buried under statement logs.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)
