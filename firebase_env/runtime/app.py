"""Application bootstrap.

Builds the session components from settings, loads the local config and
runs the session.  The session log is closed, and therefore flushed,
before ``run_app`` returns, so callers can exit the process right away.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from firebase_env.runtime.auth import AuthGuard
from firebase_env.runtime.errors import SessionExit, report_error
from firebase_env.runtime.events import EventBus
from firebase_env.runtime.managers.config import ConfigManager
from firebase_env.runtime.managers.env_vars import EnvVarManager
from firebase_env.runtime.prompts import TerminalPrompter
from firebase_env.runtime.session import Session
from firebase_env.runtime.session_log import SessionLogger
from firebase_env.runtime.store.local import LocalConfigStore, default_config_path
from firebase_env.runtime.tool import FirebaseTool

if TYPE_CHECKING:
    from firebase_env.runtime.prompts import Prompter
    from firebase_env.runtime.settings import FirebaseEnvSettings


def resolve_config_path(settings: FirebaseEnvSettings, config_path: str | Path | None = None) -> Path:
    if config_path is not None:
        return Path(config_path)
    if settings.config_path is not None:
        return settings.config_path
    return default_config_path()


def build_session(
    settings: FirebaseEnvSettings,
    *,
    store: LocalConfigStore,
    session_log: SessionLogger,
    prompter: Prompter,
    tool: FirebaseTool,
) -> Session:
    """Wire the guard, editors and event bus into a ``Session``."""
    bus = EventBus()
    guard = AuthGuard(tool, prompter, session_log, max_attempts=settings.max_auth_attempts)
    env_vars = EnvVarManager(
        tool,
        prompter,
        guard,
        session_log,
        bus,
        config_store=store,
        max_fetch_attempts=settings.max_fetch_attempts,
    )
    config = ConfigManager(store, prompter, session_log, bus)
    return Session(
        prompter,
        session_log,
        guard,
        env_vars,
        config,
        bus=bus,
        end_session_delay=settings.end_session_delay,
    )


async def run_app(
    settings: FirebaseEnvSettings,
    *,
    config_path: str | Path | None = None,
    prompter: Prompter | None = None,
    tool: FirebaseTool | None = None,
) -> int:
    """Run one interactive session and return the process exit code."""
    prompter = prompter or TerminalPrompter()
    tool = tool or FirebaseTool(settings.firebase_bin, project=settings.project)

    async with SessionLogger(settings.session_log, settings.error_log) as session_log:
        await session_log.log("Initializing the application...")
        try:
            store = LocalConfigStore(resolve_config_path(settings, config_path), prompter)
            await store.read()
            logger.debug("Loaded config from {}", store.path)

            session = build_session(settings, store=store, session_log=session_log, prompter=prompter, tool=tool)
            return await session.run()
        except SessionExit as exc:
            return exc.exit_code
        except Exception as exc:
            await report_error(exc, session_log)
            return 1
