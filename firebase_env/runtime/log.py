"""Diagnostic logging with loguru.

Diagnostics are for troubleshooting the tool itself and go to stderr (or
another sink) through loguru.  What the user did during a session is
recorded separately by ``session_log``.  Records from stdlib loggers
(asyncio, prompt_toolkit) are forwarded into loguru.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <8}</level> <cyan>{name}</cyan> - {message}"

QUIET_LOGGERS = ("asyncio", "prompt_toolkit")


class _InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so the record points at the caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "WARNING", *, sink: Any = None) -> int:
    """Make loguru the only diagnostic sink and return its handler id.

    The default level is WARNING so diagnostics stay out of the prompts;
    ``--log-level DEBUG`` shows every subprocess call and state transition.
    """
    level = level.upper()

    logger.remove()
    handler_id = logger.add(sys.stderr if sink is None else sink, level=level, format=LOG_FORMAT, diagnose=False)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Diagnostics at level {}", level)
    return handler_id
