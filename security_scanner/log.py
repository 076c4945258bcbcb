"""Logging setup for the ``security_scanner`` logger hierarchy."""

from __future__ import annotations

import logging
from typing import IO, Optional

LOGGER_NAME = "security_scanner"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_LEVELS = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}
_HANDLER_FLAG = "_security_scanner_handler"


def configure_logging(
    level: str = "info",
    silent: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Install one console handler on the package logger.

    Calling again replaces the handler installed by a previous call, so the
    CLI and library callers can reconfigure freely.
    """

    logger = logging.getLogger(LOGGER_NAME)
    log_level = _LEVELS.get(level.upper(), logging.INFO)
    logger.setLevel(log_level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)

    handler: logging.Handler
    if silent:
        handler = logging.NullHandler()
    else:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(log_level)
    setattr(handler, _HANDLER_FLAG, True)
    logger.addHandler(handler)
    return logger
