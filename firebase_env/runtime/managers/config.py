"""Local config editor.

Lets the user change, enable and disable the options stored in the local
config file.  Every change is written to disk immediately.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from firebase_env.runtime.models.enums import SessionEvent

if TYPE_CHECKING:
    from firebase_env.runtime.events import EventBus
    from firebase_env.runtime.models.config import LocalConfig
    from firebase_env.runtime.prompts import Prompter
    from firebase_env.runtime.session_log import SessionLogger
    from firebase_env.runtime.store.local import LocalConfigStore

ENABLE_OPTION = "Enable an option"
DISABLE_OPTION = "Disable an option"
RETURN_TO_MENU = "Return to main menu"

EDIT_QUESTION = "Select the config option you want to edit:"
ENABLE_QUESTION = "Select the config option you want to enable:"
DISABLE_QUESTION = "Select the config option you want to disable:"


def option_label(key: str, value: str | None) -> str:
    return f"{key}: {value if value is not None else '(disabled)'}"


class ConfigManager:
    """Handlers for the "Edit firebase-env-cli config" menu."""

    def __init__(
        self,
        store: LocalConfigStore,
        prompter: Prompter,
        session_log: SessionLogger,
        bus: EventBus,
    ) -> None:
        self.store = store
        self.prompter = prompter
        self.session_log = session_log
        self.bus = bus

    async def _config(self) -> LocalConfig:
        if self.store.config is None:
            return await self.store.read()
        return self.store.config

    async def edit_config_prompt(self) -> SessionEvent:
        config = await self._config()
        labels = {option_label(key, value): key for key, value in config.values.items()}
        answer = await self.prompter.select(EDIT_QUESTION, [*labels, ENABLE_OPTION, DISABLE_OPTION, RETURN_TO_MENU])

        if answer == ENABLE_OPTION:
            return SessionEvent.ENABLE_CONFIG_OPTION
        if answer == DISABLE_OPTION:
            return SessionEvent.DISABLE_CONFIG_OPTION
        if answer == RETURN_TO_MENU:
            return SessionEvent.START_SESSION

        await self.edit_option(labels[answer])
        return SessionEvent.EDIT_CONFIG_PROMPT

    async def edit_option(self, key: str) -> None:
        config = await self._config()
        value = await self.store.ask(self.store.options[key], current=config.get(key))
        await self.store.set_value(key, value)
        click.echo(f"Config option {key} updated.")
        await self.bus.emit(SessionEvent.CONFIG_OPTION_EDITED, key)

    async def enable_config_option(self) -> SessionEvent:
        config = await self._config()
        candidates = [key for key in config.disabled_keys if key in self.store.options]
        if not candidates:
            click.echo("All config options are already enabled.")
            return SessionEvent.EDIT_CONFIG_PROMPT

        key = await self.prompter.select(ENABLE_QUESTION, candidates)
        value = await self.store.ask(self.store.options[key])
        await self.store.set_value(key, value)
        click.echo("Config option enabled successfully.")
        await self.bus.emit(SessionEvent.CONFIG_OPTION_ENABLED, key)
        return SessionEvent.EDIT_CONFIG_PROMPT

    async def disable_config_option(self) -> SessionEvent:
        config = await self._config()
        candidates = config.enabled_keys
        if not candidates:
            click.echo("All config options are already disabled.")
            return SessionEvent.EDIT_CONFIG_PROMPT

        key = await self.prompter.select(DISABLE_QUESTION, candidates)
        await self.store.set_value(key, None)
        click.echo("Config option disabled successfully.")
        await self.bus.emit(SessionEvent.CONFIG_OPTION_DISABLED, key)
        return SessionEvent.EDIT_CONFIG_PROMPT
