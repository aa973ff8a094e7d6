# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: logging_config.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Rich console logging plus a rotating log file.
# -----------------------------------------------------------------------------
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_SIZE = 2 * 1024 * 1024  # 2MB


def setup_logging(
    log_file: Optional[str], log_level: str = "INFO", console: Optional[Console] = None
) -> Optional[str]:
    """
    Configure the ``hostprov`` logger.

    Console output goes through a RichHandler; the log file gets everything
    down to DEBUG. If the file cannot be opened, logging continues on the
    console only.

    Args:
        log_file: Path of the rotating log file, or None to skip it.
        log_level: Minimum level shown on the console.
        console: Rich console shared with the rest of the UI.

    Returns:
        A warning message when the log file could not be used, else None.
    """
    logger = logging.getLogger("hostprov")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console, rich_tracebacks=True, show_path=False
    )
    console_handler.setLevel(log_level.upper())
    logger.addHandler(console_handler)

    if not log_file:
        return None
    try:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=MAX_LOG_SIZE, backupCount=3, encoding="utf-8"
        )
    except OSError as e:
        return f"Could not set up logging to {log_file}: {e}"
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, "%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)
    return None
