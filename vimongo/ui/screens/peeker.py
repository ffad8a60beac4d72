"""Peeker: line-oriented view of one document with copy and edit."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import TextArea

from ...db.documents import ID_FIELD, indent_json, line_value, parse_document, stringify_document
from ...exceptions import BackendError, DocumentError
from ..mixins import ComponentMixin


class PeekerScreen(ComponentMixin, ModalScreen):
    COMPONENT_ID = "Peeker"
    PAGE = "Peeker"

    CSS = """
    PeekerScreen {
        align: center middle;
        background: transparent;
    }

    #peeker-dialog {
        width: 90%;
        height: 80%;
        border: solid $primary;
        border-subtitle-color: $primary;
        background: $surface;
    }

    #peeker-text {
        height: 1fr;
        border: none;
    }
    """

    def __init__(self, document_text: str):
        super().__init__()
        self.document_text = document_text

    def compose(self) -> ComposeResult:
        dialog = Vertical(id="peeker-dialog")
        dialog.border_title = "Document"
        dialog.border_subtitle = "Edit: e  Copy line: c  Copy value: v  Close: <esc>"
        with dialog:
            yield TextArea(self._pretty(), id="peeker-text", read_only=True, show_line_numbers=True)

    def on_mount(self) -> None:
        self.init_component()
        self.text_area.focus()

    @property
    def text_area(self) -> TextArea:
        return self.query_one("#peeker-text", TextArea)

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        return {
            "moveToTop": self.move_to_top,
            "moveToBottom": self.move_to_bottom,
            "copyFullObj": self.copy_full_line,
            "copyValue": self.copy_value,
            "editDocument": self.edit_document,
            "refresh": self.refresh_document,
            "close": self.close_peeker,
        }

    def _pretty(self) -> str:
        try:
            return indent_json(self.document_text)
        except DocumentError:
            return self.document_text

    def render_component(self) -> None:
        self.text_area.load_text(self._pretty())

    def _current_line(self) -> str:
        row, _ = self.text_area.cursor_location
        return self.text_area.document.get_line(row)

    def move_to_top(self) -> None:
        self.text_area.move_cursor((0, 0))

    def move_to_bottom(self) -> None:
        self.text_area.move_cursor((self.text_area.document.line_count - 1, 0))

    def copy_full_line(self) -> None:
        self._copy(self._current_line().strip().rstrip(","))

    def copy_value(self) -> None:
        self._copy(line_value(self._current_line()))

    def _copy(self, text: str) -> None:
        if self.app._copy_text(text):
            self.notify("Copied to clipboard", timeout=2)
        else:
            self.notify("Copy unavailable", severity="warning", timeout=2)

    def edit_document(self) -> None:
        outcome = self.app.edit_document(self.document_text)
        if outcome is not None and outcome.committed and outcome.document is not None:
            self.document_text = stringify_document(outcome.document)
            self.render_component()

    def refresh_document(self) -> None:
        browser = self.app.browser
        if browser is None:
            return
        try:
            document_id = parse_document(self.document_text)[ID_FIELD]
            document = browser.dao.get_document(browser.state.db, browser.state.coll, document_id)
        except (BackendError, DocumentError, KeyError) as exc:
            self.app.show_error("Error refreshing document", exc)
            return
        self.document_text = stringify_document(document)
        self.render_component()

    def close_peeker(self) -> None:
        self.dismiss(None)
