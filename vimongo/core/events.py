"""Publish/subscribe messaging between components.

Every component owns one bounded inbound queue, drained by its own worker.
Sending never blocks: when a queue is full the oldest unread message is
dropped and the drop is logged.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


class EventType(Enum):
    """Kinds of messages exchanged over the bus."""

    FOCUS_CHANGED = "focus_changed"
    STYLE_CHANGED = "style_changed"
    HISTORY_SELECTED = "history_selected"
    HISTORY_CLOSED = "history_closed"
    DOCUMENT_CHANGED = "document_changed"
    CONNECTION_STATUS = "connection_status"


@dataclass(frozen=True)
class EventMessage:
    type: EventType
    sender: str
    payload: Any = None


class EventQueue:
    """Bounded FIFO queue that drops its oldest entry when full."""

    def __init__(self, owner: str, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.owner = owner
        self.maxsize = maxsize
        self._items: deque[EventMessage] = deque()
        self._cond = threading.Condition()
        self.dropped = 0

    def put(self, message: EventMessage) -> None:
        with self._cond:
            if len(self._items) >= self.maxsize:
                lost = self._items.popleft()
                self.dropped += 1
                logger.warning(
                    "Event queue of %s is full, dropping %s from %s",
                    self.owner,
                    lost.type.value,
                    lost.sender,
                )
            self._items.append(message)
            self._cond.notify()

    def get(self, timeout: float | None = None) -> EventMessage | None:
        """Wait for the next message; None if the timeout expires first."""
        with self._cond:
            if not self._cond.wait_for(lambda: bool(self._items), timeout=timeout):
                return None
            return self._items.popleft()

    def get_nowait(self) -> EventMessage | None:
        with self._cond:
            return self._items.popleft() if self._items else None

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)


class EventBus:
    """Routes messages to subscribed components."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._queues: dict[str, EventQueue] = {}
        self._types: dict[str, frozenset[EventType] | None] = {}
        self._lock = threading.Lock()

    def subscribe(self, component_id: str, types: Iterable[EventType] | None = None) -> EventQueue:
        """Create the inbound queue of a component.

        Args:
            component_id: Identity of the subscribing component.
            types: Broadcast types the component wants; None means all of them.
                Messages sent directly to the component are always delivered.

        Raises:
            ValueError: If the component already subscribed.
        """
        with self._lock:
            if component_id in self._queues:
                raise ValueError(f"{component_id} is already subscribed")
            queue = EventQueue(component_id, self._queue_size)
            self._queues[component_id] = queue
            self._types[component_id] = frozenset(types) if types is not None else None
            return queue

    def send(self, target_id: str, message: EventMessage) -> bool:
        """Deliver a message to one component. Returns False if nobody listens."""
        with self._lock:
            queue = self._queues.get(target_id)
        if queue is None:
            logger.debug("No subscriber %s for %s from %s", target_id, message.type.value, message.sender)
            return False
        queue.put(message)
        return True

    def broadcast(self, message: EventMessage) -> int:
        """Deliver a message to every component interested in its type.

        The sender does not receive its own broadcast. Returns the number of
        receivers.
        """
        with self._lock:
            targets = [
                queue
                for component_id, queue in self._queues.items()
                if component_id != message.sender
                and (self._types[component_id] is None or message.type in self._types[component_id])
            ]
        for queue in targets:
            queue.put(message)
        return len(targets)
