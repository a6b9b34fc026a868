"""Exception types and the error normalizer.

Every failure that reaches a component boundary is passed through
``normalize_error`` so callers always deal with an exception instance,
whatever was actually raised or returned.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from loguru import logger

if TYPE_CHECKING:
    from firebase_env.runtime.session_log import SessionLogger


class FirebaseEnvError(Exception):
    """Base class for errors raised by firebase-env."""


class PromptCancelledError(FirebaseEnvError):
    """Raised when the user aborts a prompt or the input stream is closed."""


class ToolError(FirebaseEnvError):
    """Raised when the firebase CLI cannot be spawned."""


class AuthenticationError(FirebaseEnvError):
    """Raised when the firebase CLI cannot be authenticated."""


class ConfigError(FirebaseEnvError):
    """Raised when the local config file cannot be read or written."""


class SessionExit(FirebaseEnvError):  # noqa: N818
    """Request to end the session with ``exit_code``.

    Propagates to the application bootstrap, which flushes the session log
    before the process exits.
    """

    def __init__(self, exit_code: int = 0) -> None:
        super().__init__(f"Session exit requested (code={exit_code})")
        self.exit_code = exit_code


def normalize_error(value: object) -> BaseException:
    """Coerce any failure value into an exception instance."""
    if isinstance(value, BaseException):
        return value
    return FirebaseEnvError(str(value))


def error_message(value: object) -> str:
    error = normalize_error(value)
    return str(error) or type(error).__name__


async def report_error(value: object, session_log: SessionLogger | None = None) -> BaseException:
    """Normalize *value*, show it to the user and record it.

    Returns the normalized error; the caller decides whether to exit, retry
    or return to the menu.
    """
    error = normalize_error(value)
    message = error_message(error)
    click.secho(f"An error occurred: {message}", fg="red", err=True)
    logger.debug("Reported error: {!r}", error)
    if session_log is not None:
        await session_log.log(f"ERROR: {message}")
    return error
