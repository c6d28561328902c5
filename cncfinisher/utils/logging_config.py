"""Logging setup for the cnc-finisher command line tool."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

APP_LOGGER_NAME = "cncfinisher"
CONSOLE_HANDLER_NAME = "cncfinisher_console"
FILE_HANDLER_NAME = "cncfinisher_file"


def _handler_exists(logger: logging.Logger, name: str) -> bool:
    for handler in logger.handlers:
        if handler.get_name() == name:
            return True
    return False


def setup_logging(verbose: bool = False, log_file: str | Path | None = None) -> logging.Logger:
    """Configure the package logger; safe to call more than once.

    Console output goes to stderr at INFO (DEBUG when *verbose*).  When
    *log_file* is given a rotating file handler records everything at DEBUG.
    """
    root = logging.getLogger(APP_LOGGER_NAME)
    root.setLevel(logging.DEBUG)
    root.propagate = False

    if not _handler_exists(root, CONSOLE_HANDLER_NAME):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        console.set_name(CONSOLE_HANDLER_NAME)
        root.addHandler(console)
    for handler in root.handlers:
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    if log_file is not None and not _handler_exists(root, FILE_HANDLER_NAME):
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=5_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        file_handler.set_name(FILE_HANDLER_NAME)
        root.addHandler(file_handler)

    return root
