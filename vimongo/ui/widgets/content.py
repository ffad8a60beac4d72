"""Content panel: document table with query and sort bars."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from textual import events
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import DataTable, Input, Static

from ...core.events import EventMessage, EventType
from ...db.documents import ID_FIELD, format_id, stringify_document
from ...exceptions import BackendError, QueryParseError
from ..mixins import ComponentMixin
from ..screens import ConfirmScreen, DocumentViewScreen, PeekerScreen
from .input_bar import InputBar, QueryBar, SortBar

if TYPE_CHECKING:
    from ...browse import CollectionBrowser

logger = logging.getLogger(__name__)

# Rows taken by the table header and the panel border
TABLE_CHROME = 4


class ContentPanel(ComponentMixin, Vertical):
    COMPONENT_ID = "Content"
    SUBSCRIBE = (EventType.DOCUMENT_CHANGED,)

    DEFAULT_CSS = """
    ContentPanel {
        width: 1fr;
    }

    ContentPanel InputBar {
        display: none;
    }

    ContentPanel InputBar.visible {
        display: block;
    }

    #content-info {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    #documents {
        height: 1fr;
    }
    """

    def compose(self) -> ComposeResult:
        yield QueryBar(id="query-bar")
        yield SortBar(id="sort-bar")
        yield Static("No collection selected", id="content-info", markup=False)
        table: DataTable = DataTable(id="documents", cursor_type="row", zebra_stripes=True)
        table.add_column("Document", key="document")
        yield table

    def on_mount(self) -> None:
        self.init_component()

    @property
    def browser(self) -> CollectionBrowser | None:
        return self.app.browser

    @property
    def table(self) -> DataTable:
        return self.query_one("#documents", DataTable)

    @property
    def query_bar(self) -> QueryBar:
        return self.query_one(QueryBar)

    @property
    def sort_bar(self) -> SortBar:
        return self.query_one(SortBar)

    def on_key(self, event: events.Key) -> None:
        # The bars dispatch their own keys
        if self.app.focused is not self.table:
            return
        super().on_key(event)

    def on_descendant_focus(self, event: events.DescendantFocus) -> None:
        if event.widget is self.table:
            self.component.broadcast(EventType.FOCUS_CHANGED, self.component_id)

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        return {
            "peekDocument": self.peek_document,
            "viewDocument": self.view_document,
            "addDocument": self.add_document,
            "editDocument": self.edit_document,
            "duplicateDocument": self.duplicate_document,
            "deleteDocument": self.delete_document,
            "copyDocument": self.copy_document,
            "refresh": self.refresh_documents,
            "toggleQuery": lambda: self.toggle_bar(self.query_bar),
            "toggleSort": lambda: self.toggle_bar(self.sort_bar),
            "nextPage": self.next_page,
            "previousPage": self.previous_page,
        }

    def handle_event(self, message: EventMessage) -> None:
        if message.type is EventType.DOCUMENT_CHANGED:
            self.render_component()

    def render_component(self) -> None:
        browser = self.browser
        table = self.table
        table.clear()
        if browser is None or not browser.state.is_open:
            self.query_one("#content-info", Static).update("No collection selected")
            return
        info = f"{browser.state.db}.{browser.state.coll}  {browser.state.describe()}"
        self.query_one("#content-info", Static).update(info)
        for index, document in enumerate(browser.documents):
            table.add_row(stringify_document(document), key=str(index))
        if not browser.documents:
            table.add_row("No documents found", key="empty")
        for bar in (self.query_bar, self.sort_bar):
            bar.load_field_names(browser.field_names)

    def _run(self, title: str, operation: Callable[[], Any]) -> bool:
        """Run a browse operation, then re-render. Errors open an error screen."""
        try:
            operation()
        except BackendError as exc:
            logger.error("%s: %s", title, exc)
            self.app.show_error(title, exc)
            return False
        finally:
            self.render_component()
        return True

    def open_collection(self, db: str, coll: str) -> None:
        browser = self.browser
        if browser is None:
            return
        self._fit_limit(self.size.height)
        self.query_bar.value = ""
        self.sort_bar.value = ""
        if self._run("Error listing documents", lambda: browser.open(db, coll)):
            self.table.focus()

    def on_resize(self, event: events.Resize) -> None:
        browser = self.browser
        if self._fit_limit(event.size.height) and browser is not None and browser.state.is_open:
            self._run("Error listing documents", browser.refresh)

    def _fit_limit(self, height: int) -> bool:
        """Size pages to the visible rows. Returns True if the limit changed."""
        browser = self.browser
        limit = max(1, height - TABLE_CHROME)
        if browser is None or height <= 0 or browser.state.limit == limit:
            return False
        browser.set_limit(limit)
        return True

    def selected_document(self) -> dict[str, Any] | None:
        browser = self.browser
        if browser is None or not browser.documents:
            return None
        row = self.table.cursor_row
        if not 0 <= row < len(browser.documents):
            return None
        return browser.documents[row]

    def selected_text(self) -> str | None:
        document = self.selected_document()
        return stringify_document(document) if document is not None else None

    def peek_document(self) -> None:
        text = self.selected_text()
        if text is not None:
            self.app.push_screen(PeekerScreen(text), lambda _: self.render_component())

    def view_document(self) -> None:
        text = self.selected_text()
        if text is not None:
            self.app.push_screen(DocumentViewScreen(text))

    def add_document(self) -> None:
        browser = self.browser
        if browser is not None and browser.state.is_open:
            self.app.run_edit(browser.insert)

    def edit_document(self) -> None:
        text = self.selected_text()
        if text is not None:
            self.app.edit_document(text)

    def duplicate_document(self) -> None:
        browser = self.browser
        text = self.selected_text()
        if browser is not None and text is not None:
            self.app.run_edit(browser.duplicate, text)

    def delete_document(self) -> None:
        browser = self.browser
        document = self.selected_document()
        if browser is None or document is None or ID_FIELD not in document:
            return
        document_id = document[ID_FIELD]

        def on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self._run("Error deleting document", lambda: browser.delete(document_id))

        self.app.push_screen(
            ConfirmScreen("Delete document", f"Delete document {format_id(document_id)}?"),
            on_confirm,
        )

    def copy_document(self) -> None:
        text = self.selected_text()
        if text is None:
            return
        if self.app._copy_text(text):
            self.notify("Document copied", timeout=2)
        else:
            self.notify("Copy unavailable", severity="warning", timeout=2)

    def refresh_documents(self) -> None:
        browser = self.browser
        if browser is not None and browser.state.is_open:
            self._run("Error refreshing documents", browser.refresh)

    def next_page(self) -> None:
        browser = self.browser
        if browser is not None and browser.state.is_open:
            self._run("Error listing documents", browser.next_page)

    def previous_page(self) -> None:
        browser = self.browser
        if browser is not None and browser.state.is_open:
            self._run("Error listing documents", browser.prev_page)

    def toggle_bar(self, bar: InputBar) -> None:
        if bar.has_class("visible") and not bar.value:
            bar.remove_class("visible")
            self.table.focus()
            return
        bar.add_class("visible")
        bar.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        bar = event.input
        if not isinstance(bar, InputBar):
            return
        event.stop()
        browser = self.browser
        if browser is None or not browser.state.is_open:
            return
        apply = browser.apply_filter_text if isinstance(bar, QueryBar) else browser.apply_sort_text
        try:
            parsed_ok = self._run("Error listing documents", lambda: apply(bar.value))
        except QueryParseError as exc:
            what = "query" if isinstance(bar, QueryBar) else "sort"
            self.app.show_error(f"Error parsing {what}\nPlease check the {what} syntax", exc)
            self.app.call_after_refresh(bar.focus)
            return
        bar.save_to_history()
        if not bar.value:
            bar.remove_class("visible")
        if parsed_ok:
            self.table.focus()

    def on_input_bar_cancelled(self, event: InputBar.Cancelled) -> None:
        event.stop()
        if not event.bar.value:
            event.bar.remove_class("visible")
        self.table.focus()
