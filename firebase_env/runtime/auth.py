"""Authentication guard for the firebase CLI.

The guard runs ``firebase login:list`` at session start and whenever a
delegated command reports an authentication error.  When no account is
logged in, the user is offered ``firebase login --reauth``; after a
successful login the check is run again rather than assumed to pass.

Retries are bounded by ``max_attempts``: each ``login:list`` probe counts
as one attempt, and running out raises ``AuthenticationError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from loguru import logger

from firebase_env.runtime.errors import AuthenticationError, SessionExit
from firebase_env.runtime.models.enums import AuthOutcome, AuthStatus
from firebase_env.runtime.tool import NO_ACCOUNTS_MARKER

if TYPE_CHECKING:
    from firebase_env.runtime.prompts import Prompter
    from firebase_env.runtime.session_log import SessionLogger
    from firebase_env.runtime.tool import FirebaseTool, ToolResult

NO_ACCOUNTS_MESSAGE = "Failed to authenticate with Firebase. No authorized accounts found."
CHECK_FAILED_MESSAGE = "Failed to authenticate with Firebase. An error occurred."
CREDENTIALS_EXPIRED_MESSAGE = "Your credentials are no longer valid. Please reauthenticate."
REAUTH_QUESTION = "Do you want to reauthenticate with Firebase?"


def classify_login_list(result: ToolResult) -> AuthOutcome:
    """Map a ``login:list`` result to an outcome.

    Output on stderr is not classified here: it is a hard failure and the
    guard raises before calling this.
    """
    if NO_ACCOUNTS_MARKER in result.output:
        return AuthOutcome.NO_ACCOUNTS
    if not result.ok:
        return AuthOutcome.ERROR
    return AuthOutcome.AUTHENTICATED


class AuthGuard:
    """Gate that makes sure the firebase CLI has a logged-in account."""

    def __init__(
        self,
        tool: FirebaseTool,
        prompter: Prompter,
        session_log: SessionLogger,
        *,
        max_attempts: int = 3,
    ) -> None:
        self.tool = tool
        self.prompter = prompter
        self.session_log = session_log
        self.max_attempts = max(1, max_attempts)
        self.status = AuthStatus.UNCHECKED

    @property
    def is_authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED

    async def check_authentication(self) -> None:
        """Return once the CLI is authenticated.

        Every failed probe offers reauthentication once.  Raises
        ``AuthenticationError`` on a hard failure or once ``max_attempts``
        probes have failed, and ``SessionExit(1)`` if the user declines to
        reauthenticate.
        """
        attempt = 0
        while attempt < self.max_attempts:
            attempt += 1
            self.status = AuthStatus.CHECKING
            click.echo("Checking authentication...")
            outcome = await self._probe(attempt)

            if outcome == AuthOutcome.AUTHENTICATED:
                self.status = AuthStatus.AUTHENTICATED
                await self.session_log.log("Authenticated with Firebase")
                return

            self.status = AuthStatus.FAILED
            message = NO_ACCOUNTS_MESSAGE if outcome == AuthOutcome.NO_ACCOUNTS else CHECK_FAILED_MESSAGE
            await self._reauthenticate(message)

        self.status = AuthStatus.FAILED
        await self.session_log.log(f"Authentication failed after {attempt} attempt(s)")
        msg = f"Could not authenticate with Firebase after {attempt} attempt(s)."
        raise AuthenticationError(msg)

    async def handle_authentication_error(self, message: str) -> None:
        """Offer reauthentication after *message*, then re-check.

        Used by editors when a delegated command fails with an
        authentication error.
        """
        self.status = AuthStatus.FAILED
        await self._reauthenticate(message)
        await self.check_authentication()

    # -- Internals -------------------------------------------------------------

    async def _probe(self, attempt: int) -> AuthOutcome:
        result = await self.tool.login_list()
        if result.stderr.strip():
            self.status = AuthStatus.FAILED
            await self.session_log.log(f"login:list failed: {result.stderr.strip()}")
            raise AuthenticationError(result.stderr.strip())
        outcome = classify_login_list(result)
        logger.debug("Authentication attempt {}/{}: {}", attempt, self.max_attempts, outcome)
        return outcome

    async def _reauthenticate(self, message: str) -> None:
        """Ask to reauthenticate and run the interactive login.

        Raises ``SessionExit(1)`` when declined and ``AuthenticationError``
        when the login command fails.
        """
        click.secho(message, fg="red", err=True)
        await self.session_log.log(message)

        if not await self.prompter.confirm(REAUTH_QUESTION, default=False):
            click.echo("Ending session...")
            await self.session_log.log("Reauthentication declined")
            raise SessionExit(1)

        click.echo("Reauthenticating...")
        returncode = await self.tool.login_reauth()
        if returncode != 0:
            await self.session_log.log(f"firebase login --reauth exited with {returncode}")
            msg = "Firebase reauthentication failed. Please try again."
            raise AuthenticationError(msg)

        click.echo("Firebase reauthentication successful.")
        await self.session_log.log("Reauthenticated with Firebase")
