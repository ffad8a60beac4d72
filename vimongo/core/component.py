"""Capability object shared by every panel.

Panels do not inherit their identity or messaging from a base widget class.
Each panel owns a ``Component`` (identifier, lifecycle flag, bus handle) and
implements ``ComponentProtocol``, which is all the focus stack and the key
resolver need to know about it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .events import EventBus, EventMessage, EventQueue, EventType

if TYPE_CHECKING:
    from textual.events import Key

logger = logging.getLogger(__name__)


@runtime_checkable
class ComponentProtocol(Protocol):
    component: Component

    @property
    def component_id(self) -> str: ...

    def init_component(self) -> None: ...

    def render_component(self) -> None: ...

    def handle_key(self, event: Key) -> bool: ...


class Component:
    """Identity, lifecycle and messaging handle of a panel."""

    def __init__(self, identifier: str) -> None:
        if not identifier:
            raise ValueError("component identifier cannot be empty")
        self._identifier = identifier
        self._bus: EventBus | None = None
        self._queue: EventQueue | None = None
        self.initialized = False

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def queue(self) -> EventQueue | None:
        return self._queue

    def attach(self, bus: EventBus) -> None:
        """Give the component a bus to send on, without subscribing."""
        self._bus = bus

    def subscribe(self, bus: EventBus, types: Iterable[EventType] | None = None) -> EventQueue:
        self._bus = bus
        if self._queue is None:
            self._queue = bus.subscribe(self._identifier, types)
        return self._queue

    def send(self, target: str, event_type: EventType, payload: Any = None) -> bool:
        if self._bus is None:
            logger.debug("%s is not attached to a bus, dropping %s", self._identifier, event_type.value)
            return False
        return self._bus.send(target, EventMessage(event_type, self._identifier, payload))

    def broadcast(self, event_type: EventType, payload: Any = None) -> int:
        if self._bus is None:
            return 0
        return self._bus.broadcast(EventMessage(event_type, self._identifier, payload))

    def drain(
        self,
        handler: Callable[[EventMessage], None],
        should_stop: Callable[[], bool],
        poll_interval: float = 0.25,
    ) -> None:
        """Deliver queued messages to ``handler`` until ``should_stop()``.

        Runs on the component's own worker thread; the handler is expected to
        marshal UI changes back to the UI task.
        """
        if self._queue is None:
            raise RuntimeError(f"{self._identifier} is not subscribed")
        while not should_stop():
            message = self._queue.get(timeout=poll_interval)
            if message is None:
                continue
            try:
                handler(message)
            except Exception:
                logger.exception("Error handling %s in %s", message.type.value, self._identifier)
