from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Union

import discord

from ferod.errors import HandlerError, MissingFieldError


logger = logging.getLogger(__name__)

ListenerHandler = Callable[..., Union[Awaitable[None], None]]


def normalize_event_name(event: str) -> str:
    return event.removeprefix("on_")


class EventListener:
    """
    Pairs a discord.py event name with a handler called as handler(client, *event_args).

    Either pass both to the constructor or use the fluent setters:

        listener = EventListener().set_event("ready").set_handler(on_ready)
    """

    def __init__(self, event: str | None = None, handler: ListenerHandler | None = None) -> None:
        self._event = normalize_event_name(event) if event else None
        self._handler = handler

    def __repr__(self) -> str:
        return f"<EventListener event={self._event!r}>"

    @property
    def event(self) -> str:
        if self._event is None:
            raise MissingFieldError("event", owner="event listener")
        return self._event

    @property
    def handler(self) -> ListenerHandler:
        if self._handler is None:
            raise MissingFieldError("handler", owner="event listener")
        return self._handler

    def set_event(self, event: str) -> EventListener:
        self._event = normalize_event_name(event)
        return self

    def set_handler(self, handler: ListenerHandler) -> EventListener:
        self._handler = handler
        return self

    async def invoke(self, client: discord.Client, *args: Any, **kwargs: Any) -> None:
        """
        Run the handler. Exceptions stop here: they are logged and never
        reach the gateway loop.
        """
        try:
            await discord.utils.maybe_coroutine(self.handler, client, *args, **kwargs)
        except Exception as e:
            error = HandlerError(f"on_{self.event}", e)
            logger.error("%s", error, exc_info=e)
