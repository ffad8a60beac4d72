"""Query and sort input bars."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from textual.binding import Binding
from textual.message import Message
from textual.widgets import Input

from ...autocomplete import MongoSuggester, current_word, describe_operator
from ...core.events import EventMessage, EventType
from ..mixins import ComponentMixin
from ..screens import HistoryScreen

logger = logging.getLogger(__name__)


class InputBar(ComponentMixin, Input):
    """Single line input with history and operator/field autocomplete.

    Enter posts ``Input.Submitted`` as usual and saves the text to history;
    Escape posts ``InputBar.Cancelled``.
    """

    SUBSCRIBE = (EventType.HISTORY_SELECTED, EventType.HISTORY_CLOSED)

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    class Cancelled(Message):
        def __init__(self, bar: InputBar) -> None:
            super().__init__()
            self.bar = bar

    def __init__(self, placeholder: str = "", **kwargs) -> None:
        super().__init__(placeholder=placeholder, suggester=MongoSuggester(), **kwargs)

    def on_mount(self) -> None:
        self.init_component()

    def on_focus(self) -> None:
        self.component.broadcast(EventType.FOCUS_CHANGED, self.component_id)

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        return {
            "showHistory": self.show_history,
            "clearInput": self.clear_input,
        }

    def on_input_changed(self, event: Input.Changed) -> None:
        # Describe the operator being typed
        self.border_subtitle = describe_operator(current_word(event.value)) or ""

    def load_field_names(self, names: list[str]) -> None:
        if isinstance(self.suggester, MongoSuggester):
            self.suggester.load_field_names(names)

    def show_history(self) -> None:
        entries = self.app.history.newest_first()
        if not entries:
            self.notify("History is empty", timeout=2)
            return
        self.app.push_screen(HistoryScreen(entries, self.component_id))

    def clear_input(self) -> None:
        self.value = ""

    def save_to_history(self) -> None:
        try:
            self.app.history.save(self.value)
        except OSError as exc:
            logger.error("Error saving query to history: %s", exc)

    def handle_event(self, message: EventMessage) -> None:
        if message.type is EventType.HISTORY_SELECTED and isinstance(message.payload, str):
            self.value = message.payload
            self.cursor_position = len(self.value)
        self.focus()

    def action_cancel(self) -> None:
        self.post_message(self.Cancelled(self))


class QueryBar(InputBar):
    COMPONENT_ID = "QueryBar"

    def __init__(self, **kwargs) -> None:
        super().__init__(placeholder='{ name: "value", age: { $gt: 30 } }', **kwargs)


class SortBar(InputBar):
    COMPONENT_ID = "SortBar"

    def __init__(self, **kwargs) -> None:
        super().__init__(placeholder="{ createdAt: -1 }", **kwargs)
