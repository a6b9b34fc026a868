"""Test doubles: scripted prompter and fake firebase CLI.

No firebase CLI or terminal is required.  ``FakePrompter`` replays queued
answers and applies validators the way the terminal prompter does;
``FakeTool`` answers subcommands from canned ``ToolResult`` values.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from firebase_env.runtime.errors import PromptCancelledError
from firebase_env.runtime.tool import FirebaseTool, ToolResult


def read_log(path: Path) -> list[str]:
    """Messages of a session log file, timestamps stripped."""
    if not path.exists():
        return []
    return [line.split("] ", 1)[1] for line in path.read_text(encoding="utf-8").splitlines()]


# ---------------------------------------------------------------------------
# Prompter
# ---------------------------------------------------------------------------


class FakePrompter:
    """Replays scripted answers.

    Answers are queued per question kind (``select``, ``checkbox``, ``text``,
    ``confirm``).  Queue a ``PromptCancelledError`` to simulate an aborted
    prompt.  Answers rejected by a validator are recorded in ``rejected`` and
    the next queued answer is used, like a re-prompt.
    """

    def __init__(self) -> None:
        self.answers: defaultdict[str, deque[Any]] = defaultdict(deque)
        self.asked: list[tuple[str, str]] = []
        self.rejected: list[tuple[str, Any, str]] = []
        self.choices: list[list[str]] = []

    def queue(self, kind: str, *answers: Any) -> FakePrompter:
        self.answers[kind].extend(answers)
        return self

    def _next(self, kind: str, message: str) -> Any:
        self.asked.append((kind, message))
        if not self.answers[kind]:
            raise PromptCancelledError(f"no scripted {kind} answer for {message!r}")
        answer = self.answers[kind].popleft()
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def _validated(self, kind: str, message: str, validate: Callable[[Any], str | None] | None) -> Any:
        while True:
            answer = self._next(kind, message)
            error = validate(answer) if validate else None
            if not error:
                return answer
            self.rejected.append((kind, answer, error))

    async def select(self, message: str, choices: Sequence[str]) -> str:
        self.choices.append(list(choices))
        answer = self._next("select", message)
        assert answer in choices, f"{answer!r} not offered in {list(choices)}"
        return answer

    async def checkbox(
        self,
        message: str,
        choices: Sequence[str],
        validate: Callable[[list[str]], str | None] | None = None,
    ) -> list[str]:
        self.choices.append(list(choices))
        return self._validated("checkbox", message, validate)

    async def text(
        self,
        message: str,
        default: str | None = None,
        validate: Callable[[str], str | None] | None = None,
    ) -> str:
        answer = self._validated("text", message, validate)
        return answer if answer != "" or default is None else default

    async def confirm(self, message: str, default: bool = False) -> bool:
        return self._next("confirm", message)

    def count(self, kind: str, message: str | None = None) -> int:
        return sum(1 for k, m in self.asked if k == kind and (message is None or m == message))


# ---------------------------------------------------------------------------
# Firebase CLI
# ---------------------------------------------------------------------------


def ok(stdout: str = "") -> ToolResult:
    return ToolResult(args=(), returncode=0, stdout=stdout)


def failed(stderr: str = "", returncode: int = 1, stdout: str = "") -> ToolResult:
    return ToolResult(args=(), returncode=returncode, stdout=stdout, stderr=stderr)


Response = ToolResult | BaseException | Callable[[tuple[str, ...]], Any]


class FakeTool(FirebaseTool):
    """``FirebaseTool`` answering from canned results instead of spawning.

    ``respond(subcommand, *results)`` queues results for a subcommand; the
    last one is reused once the queue runs dry.  A result may be an
    exception (raised) or a callable receiving the full argument tuple.
    """

    def __init__(self) -> None:
        super().__init__("firebase")
        self.calls: list[tuple[str, ...]] = []
        self.responses: dict[str, deque[Response]] = {}
        self.reauth_codes: deque[int] = deque()

    def respond(self, subcommand: str, *results: Response) -> FakeTool:
        self.responses.setdefault(subcommand, deque()).extend(results)
        return self

    def calls_to(self, subcommand: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == subcommand]

    async def run(self, *args: str) -> ToolResult:
        self.calls.append(args)
        queue = self.responses.get(args[0])
        if not queue:
            return ToolResult(args=args, returncode=0)
        response = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = await response(args)
        return ToolResult(args=args, returncode=response.returncode, stdout=response.stdout, stderr=response.stderr)

    async def run_interactive(self, *args: str) -> int:
        self.calls.append(args)
        return self.reauth_codes.popleft() if self.reauth_codes else 0
