"""Glue between Textual widgets and the component core."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, ClassVar

from textual.events import Key
from textual.worker import get_current_worker

from ...core.component import Component
from ...core.events import EventMessage, EventType

if TYPE_CHECKING:
    from ...app import VimongoApp


class ComponentMixin:
    """Gives a widget or screen a ``Component`` and routes its keys.

    Subclasses set ``COMPONENT_ID`` and, when they live on an overlay page,
    ``PAGE`` (the identity pushed on the focus stack for that page). Keys
    pressed while the widget has focus go through ``VimongoApp.dispatch_key``;
    a resolved key is consumed, anything else continues to the widget.
    """

    COMPONENT_ID: ClassVar[str] = ""
    PAGE: ClassVar[str | None] = None
    DISPATCH_KEYS: ClassVar[bool] = True
    # () for no inbound queue, None for every event type
    SUBSCRIBE: ClassVar[Iterable[EventType] | None] = ()

    app: VimongoApp

    @property
    def component(self) -> Component:
        component = getattr(self, "_component", None)
        if component is None:
            component = Component(self.COMPONENT_ID)
            self._component = component
        return component

    @property
    def component_id(self) -> str:
        return self.component.identifier

    def init_component(self) -> None:
        """Attach to the bus and register key handlers, once per instance."""
        if self.component.initialized:
            return
        bus = self.app.bus
        if self.SUBSCRIBE == ():
            self.component.attach(bus)
        else:
            self.component.subscribe(bus, self.SUBSCRIBE)
            self.run_worker(self._drain_events, name=f"events-{self.component_id}", thread=True)
        self.app.resolver.register_many(self.component_id, self.key_handlers())
        self.component.initialized = True

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        """Action name -> handler for this component's keybinding group."""
        return {}

    def render_component(self) -> None:
        """Redraw from current state."""

    def handle_event(self, message: EventMessage) -> None:
        """Called on the UI task for every message in the component's queue."""

    def handle_key(self, event: Key) -> bool:
        return self.app.dispatch_key(event, self.component_id, self.PAGE)

    def on_key(self, event: Key) -> None:
        if not self.DISPATCH_KEYS:
            return
        if self.handle_key(event):
            event.prevent_default()
            event.stop()

    def _drain_events(self) -> None:
        worker = get_current_worker()
        self.component.drain(
            lambda message: self.app.call_from_thread(self.handle_event, message),
            lambda: worker.is_cancelled,
        )
