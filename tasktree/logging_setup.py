"""
FILE: tasktree/logging_setup.py
PURPOSE: One-time logging configuration for the CLI and the interactive shell
EXPORTS:
  - setup_logging(log_dir, console_level, file_level) -> None
DEPENDENCIES:
  - logging, logging.handlers (stdlib)
  - pathlib (stdlib)
NOTES:
  - Rotating file handler keeps full DEBUG history of task mutations
  - Console handler writes to stderr at WARNING by default so it never
    interleaves with the task tree on stdout
  - Third-party loggers only reach the console at ERROR
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union


class _ConsoleNoiseFilter(logging.Filter):
    """Let our own records through; third-party noise only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("tasktree"):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    log_dir: Union[str, Path],
    console_level: Union[int, str] = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure root logging.

    Call this ONCE, early in an entry point. Safe to call again: existing
    handlers are replaced rather than duplicated.

    Args:
        log_dir: Directory for tasktree.log (created if missing)
        console_level: Level for the stderr handler
        file_level: Level for the rotating file handler
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "tasktree.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console_handler)

    logging.captureWarnings(True)
