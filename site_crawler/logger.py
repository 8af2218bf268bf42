"""Logging for SiteCrawler.

Every module logs through the one ``"SiteCrawler"`` logger::

    from site_crawler.logger import logger
    logger.debug("GET %s -> HTTP %s", url, status)

Records go to stderr (stdout belongs to the CLI's JSON output) and, when a
file is given, to a size-rotated logfile.  The ``serve`` command also routes
aiohttp's access log through the same handlers.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteCrawler"
ACCESS_LOGGER_NAME: Final[str] = "aiohttp.access"

_LevelT = Union[int, str]


def _build_handlers(log_file: Union[str, Path, None], fmt: str) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
    access_log: bool = False,
) -> logging.Logger:
    """(Re)configure the SiteCrawler logger and return it.

    Parameters
    ----------
    level
        Numeric or textual level, e.g. ``"DEBUG"``.
    log_file
        Optional logfile, rotated at 5 MiB with three backups.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Drop previously installed handlers first (the default).
    access_log
        Also send ``aiohttp.access`` records (one line per HTTP request
        served) to the same handlers.
    """
    handlers = _build_handlers(log_file, log_format)
    names = [LOGGER_NAME, ACCESS_LOGGER_NAME] if access_log else [LOGGER_NAME]
    for name in names:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        if replace_handlers:
            lg.handlers.clear()
        for handler in handlers:
            lg.addHandler(handler)
        lg.propagate = False
    return logging.getLogger(LOGGER_NAME)


def init_logging(
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Entry point for the CLI: fresh handlers at *level*."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "DEFAULT_FORMAT", "LOGGER_NAME"]
