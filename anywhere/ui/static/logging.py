#!/usr/bin/env python3
# anywhere/ui/static/logging.py
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from anywhere.ui.utils import colorize, strip_ansi, supports_color

CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"
FILE_MAX_BYTES = 2_000_000
FILE_BACKUPS = 3


class ColorizingStreamHandler(logging.StreamHandler):
    """
    Console handler that tints records by level on a terminal and writes
    plain text to pipes (the usual case for a container's boot log).
    """

    LEVEL_STYLES = {
        logging.DEBUG: "bright_black",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "magenta",
    }

    def __init__(self, stream=None) -> None:
        super().__init__(stream if stream is not None else sys.stderr)
        self.use_color = supports_color(self.stream)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self.use_color:
            return strip_ansi(text)
        style = self.LEVEL_STYLES.get(record.levelno)
        return colorize(text, style) if style else text


class PlainFormatter(logging.Formatter):
    """Formatter whose output never carries ANSI escapes (log files)."""

    def format(self, record: logging.LogRecord) -> str:
        return strip_ansi(super().format(record))


def _has_handler(logger: logging.Logger, kind: type) -> bool:
    return any(isinstance(h, kind) for h in logger.handlers)


def init_logger(
    name: str = "",
    level: Union[int, str] = logging.INFO,
    logfile: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure `name` for the boot: colored console output on stderr and,
    optionally, a rotating plain-text file that always records DEBUG.

    Safe to call more than once; handlers are only added the first time.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if logfile else level)
    logger.propagate = False

    if not _has_handler(logger, ColorizingStreamHandler):
        console = ColorizingStreamHandler()
        console.setLevel(level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console)

    if logfile and not _has_handler(logger, RotatingFileHandler):
        path = Path(logfile)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path, maxBytes=FILE_MAX_BYTES, backupCount=FILE_BACKUPS, encoding="utf-8"
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(PlainFormatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(handler)

    return logger
