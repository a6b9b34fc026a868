"""Shared fixtures: fake prompter and firebase CLI, temp log and config paths."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest

from firebase_env.runtime.events import EventBus
from firebase_env.runtime.session_log import SessionLogger
from firebase_env.runtime.settings import FirebaseEnvSettings, get_settings
from tests.utils import FakePrompter, FakeTool


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path: Path) -> FirebaseEnvSettings:
    return FirebaseEnvSettings(
        session_log=tmp_path / "logs" / "session.log",
        error_log=tmp_path / "logs" / "error.log",
        config_path=tmp_path / "config.json",
        end_session_delay=0,
    )


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def tool() -> FakeTool:
    return FakeTool()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def session_log_path(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "session.log"


@pytest.fixture
def error_log_path(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "error.log"


@pytest.fixture
async def session_log(session_log_path: Path, error_log_path: Path) -> AsyncIterator[SessionLogger]:
    async with SessionLogger(session_log_path, error_log_path) as log:
        yield log
