"""Interactive session loop.

The session is a small state machine over ``SessionEvent``.  ``run``
emits the current event on the ``EventBus``; the first handler result that
is a ``SessionEvent`` becomes the next state, and anything else falls back
to the main menu (``START_SESSION``).  Menu handlers never call each other
directly, so the loop never grows the call stack.

The session ends when a handler raises ``SessionExit``; ``run`` returns its
exit code to the caller, which is responsible for flushing the session log
before the process exits.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any, NoReturn

import anyio
import click
from loguru import logger

from firebase_env.runtime.errors import FirebaseEnvError, PromptCancelledError, SessionExit, report_error
from firebase_env.runtime.events import EventBus
from firebase_env.runtime.models.enums import COMPLETION_EVENTS, SessionEvent

if TYPE_CHECKING:
    from firebase_env.runtime.auth import AuthGuard
    from firebase_env.runtime.managers.config import ConfigManager
    from firebase_env.runtime.managers.env_vars import EnvVarManager
    from firebase_env.runtime.prompts import Prompter
    from firebase_env.runtime.session_log import SessionLogger

MENU_QUESTION = "What operation do you want to perform?"

MENU_CHOICES: dict[str, SessionEvent] = {
    "Set environment variable": SessionEvent.SET_ENV_VAR_PROMPT,
    "Unset environment variable": SessionEvent.UNSET_ENV_VAR_PROMPT,
    "Edit firebase-env-cli config": SessionEvent.EDIT_CONFIG_PROMPT,
    "End session": SessionEvent.END_SESSION,
}

# Operations that change remote config and need a logged-in CLI.
GUARDED_EVENTS: frozenset[SessionEvent] = frozenset(
    {SessionEvent.SET_ENV_VAR_PROMPT, SessionEvent.UNSET_ENV_VAR_PROMPT}
)


class Session:
    """One interactive run, from the authentication check to "End session"."""

    def __init__(
        self,
        prompter: Prompter,
        session_log: SessionLogger,
        guard: AuthGuard,
        env_vars: EnvVarManager,
        config: ConfigManager,
        *,
        bus: EventBus | None = None,
        end_session_delay: float = 0.5,
    ) -> None:
        self.prompter = prompter
        self.session_log = session_log
        self.guard = guard
        self.env_vars = env_vars
        self.config = config
        self.bus = bus or EventBus()
        self.end_session_delay = end_session_delay
        self._started = False
        self._register_handlers()

    def _register_handlers(self) -> None:
        self.bus.on(SessionEvent.START_SESSION, self.start_session)
        self.bus.on(SessionEvent.SET_ENV_VAR_PROMPT, self.env_vars.set_env_var_prompt)
        self.bus.on(SessionEvent.UNSET_ENV_VAR_PROMPT, self.env_vars.unset_env_var_prompt)
        self.bus.on(SessionEvent.EDIT_CONFIG_PROMPT, self.config.edit_config_prompt)
        self.bus.on(SessionEvent.ENABLE_CONFIG_OPTION, self.config.enable_config_option)
        self.bus.on(SessionEvent.DISABLE_CONFIG_OPTION, self.config.disable_config_option)
        self.bus.on(SessionEvent.END_SESSION, self.end_session)
        for event in sorted(COMPLETION_EVENTS):
            self.bus.on(event, partial(self._record_completion, event))

    # -- Handlers --------------------------------------------------------------

    async def start_session(self) -> SessionEvent:
        """Show the main menu and return the chosen operation."""
        if not self._started:
            self._started = True
            await self.session_log.log("Session started")
        try:
            answer = await self.prompter.select(MENU_QUESTION, list(MENU_CHOICES))
        except PromptCancelledError as exc:
            await report_error(exc, self.session_log)
            raise SessionExit(1) from exc
        await self.session_log.log(f"Selected: {answer}")
        return MENU_CHOICES[answer]

    async def end_session(self) -> NoReturn:
        click.echo("Session ended.")
        await self.session_log.log("Session ended")
        await anyio.sleep(self.end_session_delay)
        raise SessionExit(0)

    async def _record_completion(self, event: SessionEvent, payload: str | None = None) -> None:
        await self.session_log.log(f"{event}: {payload}" if payload else str(event))

    # -- Loop ------------------------------------------------------------------

    async def dispatch(self, event: SessionEvent, *args: Any) -> SessionEvent:
        """Emit *event* and return the next state.

        Guarded events re-check authentication first, every time.
        """
        if event in GUARDED_EVENTS:
            await self.guard.check_authentication()
        results = await self.bus.emit(event, *args)
        return next((result for result in results if isinstance(result, SessionEvent)), SessionEvent.START_SESSION)

    async def run(self, *, authenticate: bool = True) -> int:
        """Drive the session until it ends and return the exit code.

        A failed initial authentication check is fatal.  Later failures are
        reported and the loop returns to the main menu.
        """
        try:
            if authenticate:
                try:
                    await self.guard.check_authentication()
                except SessionExit:
                    raise
                except FirebaseEnvError as exc:
                    await report_error(exc, self.session_log)
                    return 1

            event = SessionEvent.START_SESSION
            while True:
                logger.debug("Session state: {}", event)
                try:
                    event = await self.dispatch(event)
                except SessionExit:
                    raise
                except FirebaseEnvError as exc:
                    await report_error(exc, self.session_log)
                    event = SessionEvent.START_SESSION
        except SessionExit as exc:
            logger.debug("Session exit with code {}", exc.exit_code)
            return exc.exit_code
