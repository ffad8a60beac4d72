"""Stack of overlay pages currently shown above the main view."""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class FocusStack:
    """Ordered component identities, topmost is the one receiving keys.

    The base view is never pushed, so the stack is empty at startup. The UI
    task and background workers may both push and pop, hence the lock.
    """

    def __init__(self) -> None:
        self._stack: list[str] = []
        self._lock = threading.Lock()

    def push(self, component_id: str) -> None:
        with self._lock:
            self._stack.append(component_id)
            logger.debug("Pushed %s, stack: %s", component_id, self._stack)

    def pop(self) -> str | None:
        """Remove and return the top component. No-op on an empty stack."""
        with self._lock:
            if not self._stack:
                return None
            component_id = self._stack.pop()
            logger.debug("Popped %s, stack: %s", component_id, self._stack)
            return component_id

    def current(self) -> str | None:
        with self._lock:
            if not self._stack:
                return None
            return self._stack[-1]

    def remove(self, component_id: str) -> bool:
        """Remove the topmost occurrence of a component, wherever it sits."""
        with self._lock:
            for index in range(len(self._stack) - 1, -1, -1):
                if self._stack[index] == component_id:
                    del self._stack[index]
                    return True
            return False

    def snapshot(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._stack)

    def __len__(self) -> int:
        with self._lock:
            return len(self._stack)

    def __contains__(self, component_id: object) -> bool:
        with self._lock:
            return component_id in self._stack
