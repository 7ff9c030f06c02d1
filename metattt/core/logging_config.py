"""Unified logging configuration for metattt.

Every module logs through ``logging.getLogger(__name__)``. Entry points call
:func:`setup_logging` once, normally on the ``"metattt"`` package logger, so
that all module loggers inherit its handlers and level.

Usage:
    from metattt.core.logging_config import setup_logging, LogContext

    logger = setup_logging("metattt", level="DEBUG", format_style="compact")

    with LogContext(logger, logging.WARNING):
        run_quiet_section()

The level defaults to the ``METATTT_LOG_LEVEL`` environment variable, then
INFO.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import Iterable, Optional, Union

__all__ = [
    "COMPACT_FORMAT",
    "DEFAULT_FORMAT",
    "DETAILED_FORMAT",
    "LOG_LEVEL_ENV",
    "STRUCTURED_FORMAT",
    "LogContext",
    "configure_third_party_loggers",
    "get_logger",
    "setup_logging",
]

LOG_LEVEL_ENV = "METATTT_LOG_LEVEL"

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
COMPACT_FORMAT = "%(levelname).1s %(name)s: %(message)s"
DETAILED_FORMAT = (
    "%(asctime)s [%(levelname)s] %(name)s (%(threadName)s) "
    "%(filename)s:%(lineno)d: %(message)s"
)
STRUCTURED_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"thread": "%(threadName)s", "message": "%(message)s"}'
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_FORMATS = {
    "default": DEFAULT_FORMAT,
    "compact": COMPACT_FORMAT,
    "detailed": DETAILED_FORMAT,
    "structured": STRUCTURED_FORMAT,
}

NOISY_PACKAGES = ("urllib3", "asyncio", "prometheus_client", "filelock")

# Marks handlers installed here so repeated setup calls never duplicate them
_HANDLER_TAG = "_metattt_handler"


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        return resolved
    return int(level)


def _tag(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(
    name: str = "metattt",
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    console: bool = True,
    propagate: bool = False,
    format_style: str = "default",
) -> logging.Logger:
    """Configure and return the logger called ``name``.

    Args:
        name: Logger name; use the package name to cover every module
        level: Level as int or name. Defaults to ``$METATTT_LOG_LEVEL`` or INFO
        log_file: Also write to this file
        log_dir: Also write to ``<log_dir>/<name>_<date>.log``
        console: Write to stderr
        propagate: Pass records on to ancestor loggers
        format_style: One of default, compact, detailed, structured; unknown
            styles use the default format

    Calling it again for the same name replaces the handlers it installed
    earlier instead of adding more.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))
    logger.propagate = propagate

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(
        _FORMATS.get(format_style, DEFAULT_FORMAT), datefmt=DATE_FORMAT
    )

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(formatter)
        logger.addHandler(_tag(stream))

    if log_file is None and log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{name}_{time.strftime('%Y%m%d')}.log"

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(_tag(file_handler))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Module logger; configuration comes from :func:`setup_logging`."""
    return logging.getLogger(name)


def configure_third_party_loggers(
    quiet: bool = True,
    verbose_packages: Optional[Iterable[str]] = None,
) -> None:
    """Raise noisy third-party loggers to WARNING, except ``verbose_packages``."""
    if not quiet:
        return
    keep = set(verbose_packages or ())
    for package in NOISY_PACKAGES:
        if package in keep:
            continue
        logging.getLogger(package).setLevel(logging.WARNING)


class LogContext:
    """Temporarily change a logger's level.

    Example:
        with LogContext(logger, logging.DEBUG):
            noisy_operation()
    """

    def __init__(self, logger: logging.Logger, level: Union[int, str]):
        self.logger = logger
        self.level = _resolve_level(level)
        self._previous: Optional[int] = None

    def __enter__(self) -> logging.Logger:
        self._previous = self.logger.level
        self.logger.setLevel(self.level)
        return self.logger

    def __exit__(self, *exc_info) -> None:
        if self._previous is not None:
            self.logger.setLevel(self._previous)
