"""Read-only view of a whole document."""

from __future__ import annotations

import json

from rich.syntax import Syntax
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

from ..mixins import ComponentMixin


def syntax_theme(dark: bool) -> str:
    return "ansi_dark" if dark else "ansi_light"


class DocumentViewScreen(ComponentMixin, ModalScreen):
    """Modal screen showing a document as highlighted JSON."""

    COMPONENT_ID = "DocumentView"
    DISPATCH_KEYS = False

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("enter", "dismiss", "Close"),
        Binding("q", "dismiss", "Close"),
        Binding("y", "copy", "Copy"),
    ]

    CSS = """
    DocumentViewScreen {
        align: center middle;
        background: transparent;
    }

    #view-dialog {
        width: 90;
        height: 70%;
        border: solid $primary;
        border-subtitle-color: $primary;
        background: $surface;
    }

    #view-scroll {
        height: 1fr;
        padding: 0 1;
    }

    #view-text {
        width: auto;
        height: auto;
    }
    """

    def __init__(self, document_text: str, title: str = "Document"):
        super().__init__()
        self._raw_value = document_text
        self.title = title

    @property
    def value(self) -> str:
        return self._raw_value

    def _format_value(self) -> str | Syntax:
        try:
            formatted = json.dumps(json.loads(self._raw_value), indent=2, ensure_ascii=False)
        except json.JSONDecodeError:
            return self._raw_value
        return Syntax(formatted, "json", theme=syntax_theme(self.app.current_theme.dark), word_wrap=True)

    def compose(self) -> ComposeResult:
        dialog = Vertical(id="view-dialog")
        dialog.border_title = self.title
        dialog.border_subtitle = "Copy: y  Close: <enter>"
        with dialog, VerticalScroll(id="view-scroll"):
            yield Static(self._format_value(), id="view-text", markup=False)

    def on_mount(self) -> None:
        self.init_component()
        self.query_one("#view-scroll").focus()

    def action_dismiss(self) -> None:  # type: ignore[override]
        self.dismiss(None)

    def action_copy(self) -> None:
        if self.app._copy_text(self.value):
            self.notify("Document copied", timeout=2)
        else:
            self.notify("Copy unavailable", severity="warning", timeout=2)
