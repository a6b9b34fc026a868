"""Unit tests for the local config editor."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from firebase_env.runtime.catalog import GEN_1, GEN_2
from firebase_env.runtime.events import EventBus
from firebase_env.runtime.managers.config import (
    DISABLE_OPTION,
    ENABLE_OPTION,
    RETURN_TO_MENU,
    ConfigManager,
    option_label,
)
from firebase_env.runtime.models.enums import SessionEvent
from firebase_env.runtime.session_log import SessionLogger
from firebase_env.runtime.store.local import LocalConfigStore
from tests.utils import FakePrompter


@pytest.fixture
async def store(tmp_path: Path, prompter: FakePrompter) -> LocalConfigStore:
    store = LocalConfigStore(tmp_path / "config.json", prompter)
    prompter.queue("select", GEN_1)
    prompter.queue("text", "./functions")
    await store.read()
    prompter.asked.clear()
    prompter.choices.clear()
    return store


@pytest.fixture
def manager(store: LocalConfigStore, prompter: FakePrompter, session_log: SessionLogger, bus: EventBus) -> ConfigManager:
    return ConfigManager(store, prompter, session_log, bus)


def _stored_values(store: LocalConfigStore) -> dict:
    return json.loads(store.path.read_text(encoding="utf-8"))["values"]


async def test_menu_lists_keys_and_actions(manager: ConfigManager, prompter: FakePrompter) -> None:
    prompter.queue("select", RETURN_TO_MENU)

    assert await manager.edit_config_prompt() == SessionEvent.START_SESSION
    assert prompter.choices[-1] == [
        option_label("functionGeneration", GEN_1),
        option_label("runtimeConfig", "./functions"),
        ENABLE_OPTION,
        DISABLE_OPTION,
        RETURN_TO_MENU,
    ]


@pytest.mark.parametrize(
    ("answer", "expected"),
    [
        (ENABLE_OPTION, SessionEvent.ENABLE_CONFIG_OPTION),
        (DISABLE_OPTION, SessionEvent.DISABLE_CONFIG_OPTION),
    ],
)
async def test_menu_actions_transition(
    manager: ConfigManager, prompter: FakePrompter, answer: str, expected: SessionEvent
) -> None:
    prompter.queue("select", answer)

    assert await manager.edit_config_prompt() == expected


async def test_edit_selected_option(
    manager: ConfigManager, prompter: FakePrompter, store: LocalConfigStore, bus: EventBus
) -> None:
    edited: list[str] = []
    bus.on(SessionEvent.CONFIG_OPTION_EDITED, edited.append)
    prompter.queue("select", option_label("functionGeneration", GEN_1), GEN_2)

    assert await manager.edit_config_prompt() == SessionEvent.EDIT_CONFIG_PROMPT

    assert _stored_values(store)["functionGeneration"] == GEN_2
    assert edited == ["functionGeneration"]


async def test_disable_then_enable(
    manager: ConfigManager, prompter: FakePrompter, store: LocalConfigStore, bus: EventBus
) -> None:
    disabled: list[str] = []
    enabled: list[str] = []
    bus.on(SessionEvent.CONFIG_OPTION_DISABLED, disabled.append)
    bus.on(SessionEvent.CONFIG_OPTION_ENABLED, enabled.append)

    prompter.queue("select", "runtimeConfig")
    assert await manager.disable_config_option() == SessionEvent.EDIT_CONFIG_PROMPT
    assert _stored_values(store)["runtimeConfig"] is None
    assert disabled == ["runtimeConfig"]

    prompter.queue("select", "runtimeConfig")
    prompter.queue("text", "./other")
    assert await manager.enable_config_option() == SessionEvent.EDIT_CONFIG_PROMPT
    assert _stored_values(store)["runtimeConfig"] == "./other"
    assert enabled == ["runtimeConfig"]


async def test_enable_only_offers_disabled_options(manager: ConfigManager, prompter: FakePrompter) -> None:
    prompter.queue("select", "runtimeConfig")
    await manager.disable_config_option()

    prompter.queue("select", "runtimeConfig")
    prompter.queue("text", "")
    await manager.enable_config_option()

    assert prompter.choices[-1] == ["runtimeConfig"]


async def test_enable_with_nothing_disabled(manager: ConfigManager, prompter: FakePrompter) -> None:
    assert await manager.enable_config_option() == SessionEvent.EDIT_CONFIG_PROMPT
    assert prompter.count("select") == 0


async def test_disable_with_nothing_enabled(manager: ConfigManager, prompter: FakePrompter) -> None:
    prompter.queue("select", "functionGeneration", "runtimeConfig")
    await manager.disable_config_option()
    await manager.disable_config_option()

    assert await manager.disable_config_option() == SessionEvent.EDIT_CONFIG_PROMPT
    assert prompter.count("select") == 2
