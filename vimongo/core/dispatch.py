"""Component-scoped key dispatch.

A key press is resolved against the active component's own bindings first,
then against the component's fallback groups (the main-view panels fall back
to the "Root" group), and finally against the global group, unless the
component opted out of global fallthrough (text inputs do, so typing "?"
inserts a character instead of opening help).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .keymap import GLOBAL, KeyBindings

logger = logging.getLogger(__name__)

Handler = Callable[[], object]


@dataclass(frozen=True)
class DispatchPolicy:
    fallbacks: tuple[str, ...] = ()
    global_fallthrough: bool = True


class KeyResolver:
    """Maps ``(component, key)`` to the handler registered for the bound action."""

    def __init__(self, keybindings: KeyBindings) -> None:
        self._keybindings = keybindings
        self._handlers: dict[str, dict[str, Handler]] = {}
        self._policies: dict[str, DispatchPolicy] = {}

    @property
    def keybindings(self) -> KeyBindings:
        return self._keybindings

    def set_keybindings(self, keybindings: KeyBindings) -> None:
        self._keybindings = keybindings

    def configure(
        self,
        component_id: str,
        *,
        fallbacks: tuple[str, ...] = (),
        global_fallthrough: bool = True,
    ) -> None:
        """Set where unmatched keys of a component go next."""
        self._policies[component_id] = DispatchPolicy(fallbacks, global_fallthrough)

    def register(self, component_id: str, action: str, handler: Handler) -> None:
        """Register the handler run when ``action`` fires in ``component_id``."""
        self._handlers.setdefault(component_id, {})[action] = handler

    def register_many(self, component_id: str, handlers: dict[str, Handler]) -> None:
        for action, handler in handlers.items():
            self.register(component_id, action, handler)

    def chain(self, component_id: str) -> list[str]:
        """Components consulted, in order, for a key pressed in ``component_id``."""
        policy = self._policies.get(component_id, DispatchPolicy())
        chain = [component_id, *policy.fallbacks]
        if policy.global_fallthrough and component_id != GLOBAL:
            chain.append(GLOBAL)
        return chain

    def resolve(self, component_id: str, key: str | None, character: str | None = None) -> Handler | None:
        """Return the handler for a key press, or None if the key is unhandled."""
        for target in self.chain(component_id):
            action = self._keybindings.match(target, key, character)
            if action is None:
                continue
            handler = self._handlers.get(target, {}).get(action)
            if handler is not None:
                logger.debug("Key %s in %s -> %s.%s", key, component_id, target, action)
                return handler
        return None
