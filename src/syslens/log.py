"""Logging setup shared by the agent and collector entry points."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s | %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(level: int | str = logging.INFO) -> None:
    """Route all log records through a rich handler on stderr."""
    if isinstance(level, str):
        level = level.upper()
    handler = RichHandler(
        console=Console(stderr=True), rich_tracebacks=True, show_path=False
    )
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FMT,
        handlers=[handler],
    )
