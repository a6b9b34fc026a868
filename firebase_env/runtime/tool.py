"""Delegated firebase CLI.

All remote reads and writes go through the ``firebase`` command-line tool.
Commands are spawned with ``anyio.run_process`` and their output is only
inspected superficially: JSON for ``functions:config:get`` and substring
markers for authentication problems.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import anyio
from loguru import logger

from firebase_env.runtime.errors import ToolError

NO_ACCOUNTS_MARKER = "No authorized accounts"
AUTH_ERROR_MARKER = "Authentication Error"


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one firebase CLI invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr combined."""
        return self.stdout + self.stderr

    @property
    def is_auth_error(self) -> bool:
        return not self.ok and AUTH_ERROR_MARKER in self.stderr

    def json(self) -> Any:
        """Parse stdout as JSON.  Raises ``json.JSONDecodeError`` on bad output."""
        return json.loads(self.stdout)


class FirebaseTool:
    """Thin async wrapper around the ``firebase`` executable."""

    def __init__(self, executable: str = "firebase", *, project: str | None = None) -> None:
        self.executable = executable
        self.project = project

    def command(self, *args: str) -> list[str]:
        cmd = [self.executable, *args]
        if self.project:
            cmd += ["--project", self.project]
        return cmd

    async def run(self, *args: str) -> ToolResult:
        """Run a subcommand and capture its output.

        Raises ``ToolError`` if the executable cannot be spawned.  A non-zero
        exit status is reported through the result, not raised.
        """
        cmd = self.command(*args)
        logger.debug("Running {}", cmd)
        try:
            completed = await anyio.run_process(cmd, check=False)
        except OSError as exc:
            msg = f"Could not run {self.executable}: {exc}"
            raise ToolError(msg) from exc
        result = ToolResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=_decode(completed.stdout),
            stderr=_decode(completed.stderr),
        )
        logger.debug("{} exited with {}", cmd, result.returncode)
        return result

    async def run_interactive(self, *args: str) -> int:
        """Run a subcommand attached to the terminal and return its exit code."""
        cmd = self.command(*args)
        logger.debug("Running {} (interactive)", cmd)
        try:
            async with await anyio.open_process(cmd, stdin=None, stdout=None, stderr=None) as process:
                return await process.wait()
        except OSError as exc:
            msg = f"Could not run {self.executable}: {exc}"
            raise ToolError(msg) from exc

    # -- Subcommands -----------------------------------------------------------

    async def login_list(self) -> ToolResult:
        return await self.run("login:list")

    async def login_reauth(self) -> int:
        return await self.run_interactive("login", "--reauth")

    async def config_set(self, key: str, value: str) -> ToolResult:
        return await self.run("functions:config:set", f"{key}={value}")

    async def config_get(self) -> ToolResult:
        return await self.run("functions:config:get")

    async def config_unset(self, key: str) -> ToolResult:
        return await self.run("functions:config:unset", key)


def config_keys(result: ToolResult) -> list[str]:
    """Top-level keys of a ``functions:config:get`` result."""
    data = result.json()
    if not isinstance(data, dict):
        msg = f"Expected a JSON object from functions:config:get, got {type(data).__name__}"
        raise TypeError(msg)
    return list(data)


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")
