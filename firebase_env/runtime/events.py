"""Publish/subscribe dispatcher for session events.

Handlers run one after the other in registration order.  A handler may be a
plain function or a coroutine function; its result is awaited before the
next handler starts, so handlers for one emission never overlap.

The bus keeps no history: an event emitted with no subscribers is dropped.
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from loguru import logger

from firebase_env.runtime.models.enums import SessionEvent

Handler = Callable[..., Any]


class EventBus:
    """Event dispatcher owned by a session."""

    def __init__(self) -> None:
        self._handlers: defaultdict[SessionEvent, list[Handler]] = defaultdict(list)

    def on(self, event: SessionEvent, handler: Handler | None = None) -> Any:
        """Register *handler* for *event*.

        Can be used directly or as a decorator::

            @bus.on(SessionEvent.END_SESSION)
            async def end_session() -> None: ...
        """
        if handler is None:

            def decorator(func: Handler) -> Handler:
                self._handlers[event].append(func)
                return func

            return decorator

        self._handlers[event].append(handler)
        return handler

    def handlers(self, event: SessionEvent) -> list[Handler]:
        return list(self._handlers.get(event, ()))

    async def emit(self, event: SessionEvent, *args: Any) -> list[Any]:
        """Invoke every handler for *event* in order and return their results."""
        handlers = self.handlers(event)
        if not handlers:
            logger.debug("Event {} has no subscribers", event)
            return []

        results: list[Any] = []
        for handler in handlers:
            result = handler(*args)
            if inspect.isawaitable(result):
                result = await result
            results.append(result)
        return results
