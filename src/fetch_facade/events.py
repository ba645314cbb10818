"""
Client event bus.

A fixed vocabulary of pipeline events, each with its own payload dataclass,
dispatched through a per-type subscriber table.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .errors import HttpError
from .types import EventHandler, HttpResponse, RequestConfig

logger = logging.getLogger("fetch_facade.events")


class EventType(str, Enum):
    """Events emitted by the request pipeline"""
    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"
    RETRY = "retry"
    CACHE_HIT = "cache-hit"
    CACHE_MISS = "cache-miss"


@dataclass
class RequestEventPayload:
    config: RequestConfig


@dataclass
class ResponseEventPayload:
    config: RequestConfig
    response: HttpResponse[Any]


@dataclass
class ErrorEventPayload:
    config: Optional[RequestConfig]
    error: HttpError


@dataclass
class RetryEventPayload:
    config: RequestConfig
    error: HttpError
    attempt: int
    """Retry number, starting at 1"""
    delay_seconds: float


@dataclass
class CacheEventPayload:
    config: RequestConfig
    key: str
    response: Optional[HttpResponse[Any]] = None
    """The cached response on a hit; None on a miss"""


EventPayload = Union[
    RequestEventPayload,
    ResponseEventPayload,
    ErrorEventPayload,
    RetryEventPayload,
    CacheEventPayload,
]


def to_event_type(event: Union[EventType, str]) -> EventType:
    """Coerce an event name. Unknown names raise ValueError."""
    try:
        return EventType(event)
    except ValueError:
        valid = ", ".join(e.value for e in EventType)
        raise ValueError(f"Unknown event type {event!r}. Expected one of: {valid}") from None


class EventBus:
    """
    Synchronous publish/subscribe for pipeline events.

    Handlers run in subscription order. A handler that raises is logged and
    skipped; it never stops the remaining handlers and never reaches the
    caller of ``emit``.
    """

    def __init__(self) -> None:
        self._handlers: Dict[EventType, List[EventHandler]] = {e: [] for e in EventType}
        # pending once-wrappers per registered handler, oldest first
        self._once_wrappers: Dict[EventType, Dict[EventHandler, List[EventHandler]]] = {
            e: {} for e in EventType
        }

    def on(self, event: Union[EventType, str], handler: EventHandler) -> Callable[[], None]:
        """
        Subscribe ``handler`` to ``event``.

        Returns:
            Function that removes the subscription
        """
        event_type = to_event_type(event)
        self._handlers[event_type].append(handler)
        return lambda: self.off(event_type, handler)

    def off(self, event: Union[EventType, str], handler: EventHandler) -> None:
        """Remove ``handler``. No-op when it is not subscribed."""
        event_type = to_event_type(event)
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)
            return
        wrappers = self._once_wrappers[event_type].get(handler)
        if wrappers:
            self._discard_once(event_type, handler, wrappers[0])

    def _discard_once(self, event_type: EventType, handler: EventHandler, wrapper: EventHandler) -> None:
        handlers = self._handlers[event_type]
        if wrapper in handlers:
            handlers.remove(wrapper)
        wrappers = self._once_wrappers[event_type].get(handler, [])
        if wrapper in wrappers:
            wrappers.remove(wrapper)
        if not wrappers:
            self._once_wrappers[event_type].pop(handler, None)

    def once(self, event: Union[EventType, str], handler: EventHandler) -> Callable[[], None]:
        """Subscribe ``handler`` for the next emission only."""
        event_type = to_event_type(event)

        def wrapper(payload: Any) -> None:
            self._discard_once(event_type, handler, wrapper)
            handler(payload)

        self._once_wrappers[event_type].setdefault(handler, []).append(wrapper)
        self._handlers[event_type].append(wrapper)
        return lambda: self._discard_once(event_type, handler, wrapper)

    def emit(self, event: Union[EventType, str], payload: Any = None) -> None:
        """Call every handler of ``event`` with ``payload``."""
        event_type = to_event_type(event)
        for handler in list(self._handlers[event_type]):
            try:
                handler(payload)
            except Exception:
                logger.exception(f"EventBus: handler for '{event_type.value}' raised")

    def listener_count(self, event: Union[EventType, str]) -> int:
        return len(self._handlers[to_event_type(event)])

    def clear(self, event: Optional[Union[EventType, str]] = None) -> None:
        """Remove all handlers, or only those of ``event``."""
        targets = [to_event_type(event)] if event is not None else list(EventType)
        for event_type in targets:
            self._handlers[event_type].clear()
            self._once_wrappers[event_type].clear()
