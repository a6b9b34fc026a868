"""Environment variable editor.

Sets and unsets ``functions:config`` values through the firebase CLI.
Handlers return the next ``SessionEvent``; every path leads back to the
main menu except the ones that end the session (declined
reauthentication).
"""

from __future__ import annotations

import json
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
import click
from anyio import to_thread
from loguru import logger

from firebase_env.runtime.auth import CREDENTIALS_EXPIRED_MESSAGE
from firebase_env.runtime.catalog import GEN_1, RESERVED_KEY_MESSAGE, is_reserved_key
from firebase_env.runtime.errors import PromptCancelledError, ToolError, error_message, report_error
from firebase_env.runtime.models.enums import SessionEvent
from firebase_env.runtime.prompts import require_selection
from firebase_env.runtime.store.local import atomic_write
from firebase_env.runtime.tool import config_keys

if TYPE_CHECKING:
    from firebase_env.runtime.auth import AuthGuard
    from firebase_env.runtime.events import EventBus
    from firebase_env.runtime.prompts import Prompter
    from firebase_env.runtime.session_log import SessionLogger
    from firebase_env.runtime.store.local import LocalConfigStore
    from firebase_env.runtime.tool import FirebaseTool

NAME_QUESTION = "Enter the name of the environment variable:"
VALUE_QUESTION = "Enter the value of the environment variable:"
UNSET_QUESTION = "Select environment variables to unset"
EMPTY_SELECTION_MESSAGE = "You must choose at least one environment variable."
RUNTIME_CONFIG_FILE = ".runtimeconfig.json"


def validate_env_var_name(name: str) -> str | None:
    """Return an error message for an unusable variable name, else ``None``."""
    if not name.strip():
        return "The name of the environment variable cannot be empty."
    if is_reserved_key(name):
        return RESERVED_KEY_MESSAGE
    return None


def runtime_config_path(value: str | None) -> Path | None:
    """Where ``.runtimeconfig.json`` lives for a ``runtimeConfig`` setting.

    The setting may name the file itself or the directory containing it.
    """
    if not value:
        return None
    path = Path(value).expanduser()
    if path.suffix == ".json":
        return path
    return path / RUNTIME_CONFIG_FILE


class EnvVarManager:
    """Set/unset prompts backed by ``firebase functions:config:*``."""

    def __init__(
        self,
        tool: FirebaseTool,
        prompter: Prompter,
        guard: AuthGuard,
        session_log: SessionLogger,
        bus: EventBus,
        *,
        config_store: LocalConfigStore | None = None,
        max_fetch_attempts: int = 3,
    ) -> None:
        self.tool = tool
        self.prompter = prompter
        self.guard = guard
        self.session_log = session_log
        self.bus = bus
        self.config_store = config_store
        self.max_fetch_attempts = max(1, max_fetch_attempts)

    # -- Set -------------------------------------------------------------------

    async def set_env_var_prompt(self) -> SessionEvent:
        try:
            name = await self._ask_name()
            value = await self.prompter.text(VALUE_QUESTION)
        except PromptCancelledError as exc:
            await report_error(exc, self.session_log)
            return SessionEvent.START_SESSION

        try:
            result = await self.tool.config_set(name, value)
        except ToolError as exc:
            await report_error(exc, self.session_log)
            return SessionEvent.START_SESSION

        if not result.ok:
            if result.is_auth_error:
                await self.guard.handle_authentication_error(CREDENTIALS_EXPIRED_MESSAGE)
            else:
                click.secho(f"Error setting an environment variable: {result.stderr.strip()}", fg="red", err=True)
                await self.session_log.log(f"Failed to set {name}: {result.stderr.strip()}")
            return SessionEvent.START_SESSION

        click.echo("Environment variable set successfully.")
        await self.bus.emit(SessionEvent.ENV_VAR_SET, name)
        await self.sync_runtime_config()
        return SessionEvent.START_SESSION

    async def _ask_name(self) -> str:
        # The prompter validates too; this keeps reserved names away from the CLI regardless.
        while True:
            name = (await self.prompter.text(NAME_QUESTION, validate=validate_env_var_name)).strip()
            error = validate_env_var_name(name)
            if error is None:
                return name
            click.secho(error, fg="yellow")

    # -- Unset -----------------------------------------------------------------

    async def unset_env_var_prompt(self) -> SessionEvent:
        keys = await self.fetch_keys()
        if keys is None:
            return SessionEvent.START_SESSION
        if not keys:
            click.echo("No environment variables to unset.")
            return SessionEvent.START_SESSION

        try:
            selected = await self.prompter.checkbox(
                UNSET_QUESTION,
                keys,
                validate=require_selection(EMPTY_SELECTION_MESSAGE),
            )
        except PromptCancelledError as exc:
            await report_error(exc, self.session_log)
            return SessionEvent.START_SESSION

        if not selected:
            click.secho(EMPTY_SELECTION_MESSAGE, fg="yellow")
            return SessionEvent.START_SESSION

        outcomes = await self.unset_env_vars(selected)
        unset = [key for key, ok in outcomes.items() if ok]
        for key in unset:
            await self.bus.emit(SessionEvent.ENV_VAR_UNSET, key)
        if unset:
            await self.sync_runtime_config()
        return SessionEvent.START_SESSION

    async def fetch_keys(self) -> list[str] | None:
        """Names of the current config keys, or ``None`` if they could not be read."""
        result = None
        for attempt in range(1, self.max_fetch_attempts + 1):
            try:
                result = await self.tool.config_get()
            except ToolError as exc:
                await report_error(exc, self.session_log)
                return None
            if result.ok:
                break
            if result.is_auth_error:
                await self.guard.handle_authentication_error(CREDENTIALS_EXPIRED_MESSAGE)
                return None
            click.secho(f"Error fetching environment variables: {result.stderr.strip()}", fg="red", err=True)
            await self.session_log.log(
                f"functions:config:get failed (attempt {attempt}/{self.max_fetch_attempts}): {result.stderr.strip()}"
            )
            if attempt < self.max_fetch_attempts:
                click.echo("Retrying...")
        else:
            return None

        try:
            return config_keys(result)
        except (ValueError, TypeError) as exc:
            await report_error(f"Could not parse functions:config:get output: {exc}", self.session_log)
            return None

    async def unset_env_vars(self, keys: list[str]) -> dict[str, bool]:
        """Unset *keys* concurrently and wait for all of them.

        A failing key does not stop the others.  Returns ``key -> success``
        in the order given.
        """
        outcomes: dict[str, bool] = {}

        async def _unset(key: str) -> None:
            try:
                result = await self.tool.config_unset(key)
            except ToolError as exc:
                outcomes[key] = False
                await self.session_log.log(f"Failed to unset {key}: {error_message(exc)}")
                return
            outcomes[key] = result.ok
            if result.ok:
                click.echo(f"Unset {key}.")
                await self.session_log.log(f"Unset {key}")
            else:
                click.secho(f"Error unsetting {key}: {result.stderr.strip()}", fg="red", err=True)
                await self.session_log.log(f"Failed to unset {key}: {result.stderr.strip()}")

        async with anyio.create_task_group() as tg:
            for key in keys:
                tg.start_soon(_unset, key)

        return {key: outcomes.get(key, False) for key in keys}

    # -- Runtime config --------------------------------------------------------

    async def sync_runtime_config(self) -> Path | None:
        """Refresh ``.runtimeconfig.json`` for Gen 1 projects.

        The emulator reads Gen 1 config from that file, so it is rewritten
        from ``functions:config:get`` after every change.  Failures are
        logged and otherwise ignored.  Returns the written path.
        """
        config = self.config_store.config if self.config_store else None
        if config is None or config.get("functionGeneration") != GEN_1:
            return None
        target = runtime_config_path(config.get("runtimeConfig"))
        if target is None:
            return None

        try:
            result = await self.tool.config_get()
        except ToolError as exc:
            await self.session_log.log(f"Runtime config not updated: {error_message(exc)}")
            return None
        if not result.ok:
            await self.session_log.log(f"Runtime config not updated: {result.stderr.strip()}")
            return None
        try:
            data = json.dumps(result.json(), indent=2)
        except ValueError as exc:
            await self.session_log.log(f"Runtime config not updated: {exc}")
            return None

        try:
            await to_thread.run_sync(partial(atomic_write, target, data))
        except OSError as exc:
            await self.session_log.log(f"Runtime config not updated: {exc}")
            return None

        logger.debug("Wrote runtime config to {}", target)
        await self.session_log.log(f"Updated {target}")
        return target
