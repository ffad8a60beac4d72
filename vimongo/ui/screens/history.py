"""Query history picker for the query and sort bars."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from textual.app import ComposeResult
from textual.screen import ModalScreen
from textual.widgets import OptionList
from textual.widgets.option_list import Option

from ...core.events import EventType
from ..mixins import ComponentMixin


class HistoryScreen(ComponentMixin, ModalScreen):
    """Lists saved queries, newest first.

    The choice is not returned through ``dismiss``; it is sent to the input
    bar that opened the history as a HISTORY_SELECTED message.
    """

    COMPONENT_ID = "HistoryModal"
    PAGE = "HistoryModal"

    CSS = """
    HistoryScreen {
        align: center middle;
        background: transparent;
    }

    #history-list {
        width: 80;
        max-width: 90%;
        height: auto;
        max-height: 14;
        border: solid $primary;
        border-subtitle-color: $primary;
        background: $surface;
    }
    """

    def __init__(self, entries: list[str], target_id: str):
        super().__init__()
        self.entries = entries
        self.target_id = target_id

    def compose(self) -> ComposeResult:
        options = OptionList(*[Option(entry) for entry in self.entries], id="history-list")
        options.border_title = "History"
        options.border_subtitle = "Use: <enter>  Close: <esc>"
        yield options

    def on_mount(self) -> None:
        self.init_component()
        option_list = self.query_one("#history-list", OptionList)
        if self.entries:
            option_list.highlighted = 0
        option_list.focus()

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        return {
            "acceptEntry": self.accept_entry,
            "closeHistory": self.close_history,
        }

    def selected_entry(self) -> str | None:
        index = self.query_one("#history-list", OptionList).highlighted
        if index is None or not 0 <= index < len(self.entries):
            return None
        return self.entries[index].strip()

    def accept_entry(self) -> None:
        entry = self.selected_entry()
        if entry is None:
            self.close_history()
            return
        self.component.send(self.target_id, EventType.HISTORY_SELECTED, entry)
        self.dismiss(None)

    def close_history(self) -> None:
        self.component.send(self.target_id, EventType.HISTORY_CLOSED)
        self.dismiss(None)
