"""
Typed event bus for decoupled communication.

Event types are Enum members, never strings. The reveal engine, story
boxes, story pages and the audio layer publish here; renderers, audio
controllers and save logic subscribe.

Usage:
    event_bus.subscribe(RevealEvent.SEQUENCE_COMMITTED, on_committed)
    event_bus.publish(RevealEvent.SEQUENCE_COMMITTED, runs=runs)
"""

from __future__ import annotations

import bisect
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class AudioEvent(Enum):
    """Audio layer events."""
    BGM_STARTED = auto()
    BGM_STOPPED = auto()
    SFX_PLAYED = auto()
    SFX_FAILED = auto()


class UIEvent(Enum):
    """Dialogue box mode changes driven by reader input."""
    BOX_HIDDEN = auto()
    BOX_SHOWN = auto()
    LOG_OPENED = auto()
    LOG_CLOSED = auto()
    SETTINGS_OPENED = auto()
    SETTINGS_CLOSED = auto()
    AUTO_TOGGLED = auto()
    SKIP_TOGGLED = auto()


@dataclass
class Event:
    """
    A published event.

    Attributes:
        type: The event type (Enum member)
        data: Keyword data given to publish
        consumed: Set by a handler to stop lower priority handlers
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]

# Tie breaker keeping equal priorities in subscription order
_order = itertools.count()


@dataclass(order=True)
class _Subscription:
    sort_key: tuple[int, int]
    target: Any = field(compare=False)
    one_shot: bool = field(default=False, compare=False)

    def resolve(self) -> EventHandler | None:
        """The live handler, or None once a weak target was collected."""
        if isinstance(self.target, (ref, WeakMethod)):
            return self.target()
        return self.target


class EventBus:
    """
    Publish/subscribe hub.

    Handlers run highest priority first. Subscriptions are weak by default,
    so a box or page that goes away stops receiving events without having
    to unsubscribe. Events published while a dispatch is running are queued
    and delivered after it.
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[_Subscription]] = {}
        self._pending: list[Event] = []
        self._dispatching = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Register a handler for one event type.

        Args:
            event_type: The event type to listen for
            handler: Callback receiving the Event
            priority: Higher runs earlier (default 0)
            one_shot: Drop the handler after its first call
            weak: Hold the handler weakly (bound methods via WeakMethod)
        """
        if not weak:
            target = handler
        elif hasattr(handler, '__self__'):
            target = WeakMethod(handler)
        else:
            target = ref(handler)

        subscription = _Subscription((-priority, next(_order)), target, one_shot)
        bisect.insort(self._subscriptions.setdefault(event_type, []), subscription)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        subscriptions = self._subscriptions.get(event_type)
        if subscriptions:
            subscriptions[:] = [s for s in subscriptions if s.resolve() != handler]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Returns:
            The Event (check ``consumed`` to see whether a handler took it)
        """
        event = Event(type=event_type, data=data)
        if self._dispatching:
            self._pending.append(event)
            return event

        self._dispatching = True
        try:
            self._dispatch(event)
            while self._pending:
                self._dispatch(self._pending.pop(0))
        finally:
            self._dispatching = False
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Drop the handlers of one event type, or of all types."""
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

    def _dispatch(self, event: Event) -> None:
        subscriptions = self._subscriptions.get(event.type)
        if not subscriptions:
            return

        finished = []
        for subscription in list(subscriptions):
            handler = subscription.resolve()
            if handler is None:
                finished.append(subscription)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception("Error in event handler for %s", event.type)

            if subscription.one_shot:
                finished.append(subscription)
            if event.consumed:
                break

        if finished:
            subscriptions[:] = [s for s in subscriptions if s not in finished]
