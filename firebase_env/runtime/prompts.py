"""Interactive prompt provider.

Components only depend on the ``Prompter`` protocol: ask a question, get an
answer, or get ``PromptCancelledError`` when the user aborts (Ctrl-C, Ctrl-D,
closed input).  ``TerminalPrompter`` implements it with prompt_toolkit.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.document import Document
from prompt_toolkit.shortcuts import checkboxlist_dialog, radiolist_dialog
from prompt_toolkit.validation import ValidationError, Validator

from firebase_env.runtime.errors import PromptCancelledError

TextValidator = Callable[[str], str | None]
"""Returns an error message for invalid input, ``None`` when valid."""

SelectionValidator = Callable[[list[str]], str | None]

DIALOG_TITLE = "firebase-env"

_YES = frozenset({"y", "yes"})
_NO = frozenset({"n", "no"})


@runtime_checkable
class Prompter(Protocol):
    """Question/answer capability used by the session components."""

    async def select(self, message: str, choices: Sequence[str]) -> str:
        """Single choice from *choices*."""
        ...

    async def checkbox(
        self,
        message: str,
        choices: Sequence[str],
        validate: SelectionValidator | None = None,
    ) -> list[str]:
        """Multiple choice; re-asks until *validate* accepts the selection."""
        ...

    async def text(
        self,
        message: str,
        default: str | None = None,
        validate: TextValidator | None = None,
    ) -> str:
        """Free text; re-asks until *validate* accepts the input."""
        ...

    async def confirm(self, message: str, default: bool = False) -> bool:
        """Yes/no question."""
        ...


def require_selection(message: str) -> SelectionValidator:
    """Selection validator rejecting an empty selection with *message*."""

    def validate(selected: list[str]) -> str | None:
        return message if not selected else None

    return validate


def _yes_no(answer: str) -> str | None:
    answer = answer.strip().lower()
    if answer and answer not in _YES | _NO:
        return "Please answer yes or no."
    return None


class _CallableValidator(Validator):
    def __init__(self, func: TextValidator) -> None:
        self._func = func

    def validate(self, document: Document) -> None:
        error = self._func(document.text)
        if error:
            raise ValidationError(message=error, cursor_position=len(document.text))


class TerminalPrompter:
    """prompt_toolkit implementation of ``Prompter``."""

    def __init__(self) -> None:
        self._session: PromptSession[str] = PromptSession()

    async def select(self, message: str, choices: Sequence[str]) -> str:
        result = await radiolist_dialog(
            title=DIALOG_TITLE,
            text=message,
            values=[(choice, choice) for choice in choices],
        ).run_async()
        if result is None:
            raise PromptCancelledError(message)
        return result

    async def checkbox(
        self,
        message: str,
        choices: Sequence[str],
        validate: SelectionValidator | None = None,
    ) -> list[str]:
        while True:
            result = await checkboxlist_dialog(
                title=DIALOG_TITLE,
                text=message,
                values=[(choice, choice) for choice in choices],
            ).run_async()
            if result is None:
                raise PromptCancelledError(message)
            error = validate(result) if validate else None
            if not error:
                return result
            click.secho(error, fg="yellow")

    async def text(
        self,
        message: str,
        default: str | None = None,
        validate: TextValidator | None = None,
    ) -> str:
        try:
            return await self._session.prompt_async(
                f"{message} ",
                default=default or "",
                validator=_CallableValidator(validate) if validate else None,
                validate_while_typing=False,
            )
        except (EOFError, KeyboardInterrupt) as exc:
            raise PromptCancelledError(message) from exc

    async def confirm(self, message: str, default: bool = False) -> bool:
        suffix = "(Y/n)" if default else "(y/N)"
        answer = await self.text(f"{message} {suffix}", validate=_yes_no)
        answer = answer.strip().lower()
        if not answer:
            return default
        return answer in _YES
