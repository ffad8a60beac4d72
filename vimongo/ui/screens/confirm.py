"""Yes/no confirmation dialog."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Static

from ..mixins import ComponentMixin


class ConfirmScreen(ComponentMixin, ModalScreen[bool]):
    """Asks before destructive actions. Dismisses with True or False."""

    COMPONENT_ID = "Confirm"
    DISPATCH_KEYS = False

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("enter", "confirm", "Yes", show=False),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    CSS = """
    ConfirmScreen {
        align: center middle;
        background: transparent;
    }

    #confirm-dialog {
        width: 60;
        max-width: 80%;
        height: auto;
        border: solid $warning;
        border-subtitle-color: $warning;
        background: $surface;
    }

    #confirm-message {
        padding: 1;
    }
    """

    def __init__(self, title: str, message: str = ""):
        super().__init__()
        self._title = title
        self._message = message

    def compose(self) -> ComposeResult:
        dialog = Vertical(id="confirm-dialog")
        dialog.border_title = self._title
        dialog.border_subtitle = "Yes: y  No: n"
        with dialog:
            yield Static(self._message or self._title, id="confirm-message", markup=False)

    def on_mount(self) -> None:
        self.init_component()

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
