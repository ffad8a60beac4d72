"""Modal message and error screens (no buttons)."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Static

from ..mixins import ComponentMixin

LOGS_HINT = "For more information check the logs"


class MessageScreen(ComponentMixin, ModalScreen):
    """Modal screen that shows a message and closes via keyboard."""

    COMPONENT_ID = "Message"
    DISPATCH_KEYS = False

    BINDINGS = [
        Binding("enter", "close", "Continue"),
        Binding("escape", "close", "Close", show=False),
    ]

    CSS = """
    MessageScreen {
        align: center middle;
        background: transparent;
    }

    #message-dialog {
        width: 60;
        max-width: 80%;
        height: auto;
        border: solid $primary;
        border-subtitle-color: $primary;
        background: $surface;
    }

    #message-content {
        padding: 1;
    }
    """

    def __init__(self, title: str, message: str):
        super().__init__()
        self._title = title
        self.message = message

    def compose(self) -> ComposeResult:
        dialog = Vertical(id="message-dialog")
        dialog.border_title = self._title
        dialog.border_subtitle = "Continue: <enter>"
        with dialog:
            yield Static(self.message, id="message-content", markup=False)

    def on_mount(self) -> None:
        self.init_component()

    def action_close(self) -> None:
        self.dismiss()

    def check_action(self, action: str, parameters: tuple) -> bool | None:
        # Prevent underlying screens from receiving actions when another modal is on top.
        if self.app.screen is not self:
            return False
        return super().check_action(action, parameters)


class ErrorScreen(MessageScreen):
    """Dismissible error notice."""

    COMPONENT_ID = "Error"

    DEFAULT_CSS = """
    ErrorScreen #message-dialog {
        border: solid $error;
        border-subtitle-color: $error;
    }
    """

    def __init__(self, title: str, error: BaseException | str | None = None):
        lines = [title]
        if error is not None and str(error):
            lines.append(str(error))
        lines.append(LOGS_HINT)
        super().__init__("Error", "\n\n".join(lines))
        self.error = error
