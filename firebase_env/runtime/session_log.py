"""Ordered, queued session log.

Session activity is appended to a plain text file, one line per message::

    [2024-05-01T12:00:00.000Z] Session started

Each log file is owned by a single ``LogWriter``.  Writers serialize
concurrent ``log`` calls through a FIFO queue drained by one flush loop, so
lines never interleave and always appear in submission order.  File writes
run in a worker thread via ``anyio.to_thread.run_sync``.

Logging must never break the interactive session: failures to open, write
or close a log file are recorded in a separate error log (``ErrorLog``) and
swallowed.

``SessionLogger`` is the logging service handed to every component.  It
creates writers lazily per normalized path and must be closed with
``aclose()`` before the process exits so that queued lines are flushed.
"""

from __future__ import annotations

import contextlib
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import partial
from pathlib import Path
from typing import TextIO

import anyio
from anyio import to_thread
from loguru import logger

DEFAULT_SESSION_LOG = Path("logs") / "session.log"
DEFAULT_ERROR_LOG = Path("logs") / "error.log"


def timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_entry(message: str) -> str:
    return f"[{timestamp()}] {message}\n"


def normalize_path(path: str | os.PathLike[str]) -> Path:
    """Absolute, normalized form of *path*; the identity of a writer."""
    return Path(os.path.normpath(os.path.abspath(path)))


# ---------------------------------------------------------------------------
# Error log
# ---------------------------------------------------------------------------


class ErrorLog:
    """Synchronous append-only log for failures of the session log itself."""

    def __init__(self, path: str | os.PathLike[str] = DEFAULT_ERROR_LOG) -> None:
        self.path = normalize_path(path)

    def write(self, message: str) -> None:
        logger.warning("Session log failure: {}", message)
        # Outermost boundary: a broken error log is dropped silently.
        with contextlib.suppress(OSError):
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(format_entry(message))


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class _Pending:
    message: str
    done: anyio.Event = field(default_factory=anyio.Event)
    written: bool = False


class LogWriter:
    """Append-only writer for a single log file.

    Construction creates the parent directory and opens the file in append
    mode.  If that fails the error is recorded and every later write fails
    the same way, so nothing is raised to the caller.
    """

    def __init__(self, path: str | os.PathLike[str], error_log: ErrorLog) -> None:
        self.path = normalize_path(path)
        self._error_log = error_log
        self._queue: deque[_Pending] = deque()
        self._flushing = False
        self._stream: TextIO | None = None
        self._open()

    def _open(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = self.path.open("a", encoding="utf-8")
        except OSError as exc:
            self._error_log.write(f"Error creating log file: {exc}")

    # -- Properties ------------------------------------------------------------

    @property
    def is_flushing(self) -> bool:
        return self._flushing

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def closed(self) -> bool:
        return self._stream is None or self._stream.closed

    # -- Write -----------------------------------------------------------------

    async def log(self, message: str) -> bool:
        """Queue *message* and wait until the flush loop has dealt with it.

        Returns ``True`` once the line is appended, ``False`` if the flush
        loop stopped on a write failure first.  In that case the message
        stays queued and is retried, in order, by the next flush.
        """
        pending = _Pending(message)
        self._queue.append(pending)
        if not self._flushing:
            await self._flush()
        await pending.done.wait()
        return pending.written

    async def _flush(self) -> None:
        self._flushing = True
        try:
            while self._queue:
                pending = self._queue[0]
                line = format_entry(pending.message)
                try:
                    await to_thread.run_sync(partial(self._write, line))
                except (OSError, ValueError) as exc:
                    self._error_log.write(f"Error writing to log file {self.path}: {exc}")
                    break
                self._queue.popleft()
                pending.written = True
                pending.done.set()
        finally:
            self._flushing = False
            # Release waiters whose messages are still queued after a failure.
            for pending in self._queue:
                pending.done.set()

    def _write(self, line: str) -> None:
        if self._stream is None:
            msg = "log stream is not open"
            raise OSError(msg)
        self._stream.write(line)
        self._stream.flush()

    # -- Lifecycle -------------------------------------------------------------

    async def end(self) -> None:
        """Flush whatever is queued, then close the stream.  Never raises."""
        if self._queue:
            if self._flushing:
                await self._queue[-1].done.wait()
            else:
                await self._flush()
        if self._queue:
            self._error_log.write(f"Dropping {len(self._queue)} unwritten message(s) for {self.path}")
            self._queue.clear()
        if self._stream is None:
            return
        try:
            await to_thread.run_sync(self._stream.close)
        except OSError as exc:
            self._error_log.write(f"Error closing log file: {exc}")


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SessionLogger:
    """Process-wide logging service with an explicit lifecycle.

    Usage::

        async with SessionLogger("logs/session.log") as session_log:
            await session_log.log("Session started")
    """

    def __init__(
        self,
        default_path: str | os.PathLike[str] = DEFAULT_SESSION_LOG,
        error_log: ErrorLog | str | os.PathLike[str] = DEFAULT_ERROR_LOG,
    ) -> None:
        self.default_path = normalize_path(default_path)
        self.error_log = error_log if isinstance(error_log, ErrorLog) else ErrorLog(error_log)
        self._writers: dict[Path, LogWriter] = {}

    def writer(self, path: str | os.PathLike[str] | None = None) -> LogWriter:
        """Return the writer for *path*, creating it on first use."""
        key = self.default_path if path is None else normalize_path(path)
        writer = self._writers.get(key)
        if writer is None:
            logger.debug("Session log: opening writer for {}", key)
            writer = LogWriter(key, self.error_log)
            self._writers[key] = writer
        return writer

    async def log(self, message: str, path: str | os.PathLike[str] | None = None) -> bool:
        return await self.writer(path).log(message)

    async def end(self, path: str | os.PathLike[str] | None = None) -> None:
        """Flush and close the writer for *path*.  Never raises."""
        key = self.default_path if path is None else normalize_path(path)
        writer = self._writers.pop(key, None)
        if writer is not None:
            await writer.end()

    async def aclose(self) -> None:
        """Flush and close every open writer."""
        for key in list(self._writers):
            await self.end(key)

    @property
    def open_paths(self) -> list[Path]:
        return list(self._writers)

    async def __aenter__(self) -> SessionLogger:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
