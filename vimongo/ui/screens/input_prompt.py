"""Single line text prompt."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input

from ..mixins import ComponentMixin


class InputPromptScreen(ComponentMixin, ModalScreen[str | None]):
    """Asks for one value. Dismisses with the stripped text, or None."""

    COMPONENT_ID = "Prompt"
    DISPATCH_KEYS = False

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    CSS = """
    InputPromptScreen {
        align: center middle;
        background: transparent;
    }

    #prompt-dialog {
        width: 60;
        max-width: 80%;
        height: auto;
        border: solid $primary;
        border-subtitle-color: $primary;
        background: $surface;
        padding: 0 1;
    }
    """

    def __init__(self, title: str, placeholder: str = ""):
        super().__init__()
        self._title = title
        self._placeholder = placeholder

    def compose(self) -> ComposeResult:
        dialog = Vertical(id="prompt-dialog")
        dialog.border_title = self._title
        dialog.border_subtitle = "Save: <enter>  Cancel: <esc>"
        with dialog:
            yield Input(placeholder=self._placeholder, id="prompt-input")

    def on_mount(self) -> None:
        self.init_component()
        self.query_one("#prompt-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        value = event.value.strip()
        self.dismiss(value or None)

    def action_cancel(self) -> None:
        self.dismiss(None)
