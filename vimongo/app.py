"""Main Textual application for vimongo."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any

from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.containers import Horizontal, Vertical
from textual.screen import Screen

from .browse import CollectionBrowser
from .config import DEFAULT_THEME, AppConfig, MongoConfig
from .core.dispatch import KeyResolver
from .core.events import EventBus, EventMessage, EventType
from .core.focus_stack import FocusStack
from .core.keymap import GLOBAL, KeyBindings
from .core.keymap_manager import KeymapManager
from .db.dao import Dao, MongoDao
from .editing.editor import ExternalEditor
from .editing.pipeline import DocumentEditPipeline, EditOutcome
from .exceptions import BackendError, EditorError
from .history import HistoryStore
from .ui.mixins import ClipboardMixin
from .ui.screens import ConnectorScreen, ErrorScreen, HelpScreen
from .ui.widgets import ContentPanel, DatabaseTree, Header, Sidebar

logger = logging.getLogger(__name__)

APP_COMPONENT = "Root"

DaoFactory = Callable[[MongoConfig], Dao]


class VimongoApp(ClipboardMixin, App):
    """Terminal UI for browsing and editing MongoDB collections."""

    TITLE = "vimongo"

    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        width: 100%;
        height: 100%;
    }

    #main {
        height: 1fr;
    }

    Screen.databases-hidden Sidebar {
        display: none;
    }
    """

    def __init__(
        self,
        config: AppConfig,
        keymap_manager: KeymapManager | None = None,
        dao_factory: DaoFactory = MongoDao.connect,
        history: HistoryStore | None = None,
        initial_connection: MongoConfig | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.initial_connection = initial_connection
        self._saved_theme = config.theme or DEFAULT_THEME
        self.keymap_manager = keymap_manager or KeymapManager()
        self.keybindings: KeyBindings = self.keymap_manager.initialize()
        self.bus = EventBus()
        self.focus_stack = FocusStack()
        self.resolver = KeyResolver(self.keybindings)
        self.history = history or HistoryStore()
        self.dao_factory = dao_factory
        self.dao: Dao | None = None
        self.browser: CollectionBrowser | None = None
        self.editor = ExternalEditor(config.get_editor_cmd(), suspend=self.suspend_for_editor)
        self._configure_dispatch()

    def _configure_dispatch(self) -> None:
        resolver = self.resolver
        resolver.configure("DatabaseTree", fallbacks=(APP_COMPONENT,))
        resolver.configure("Content", fallbacks=(APP_COMPONENT,))
        resolver.configure("QueryBar", global_fallthrough=False)
        resolver.configure("SortBar", global_fallthrough=False)
        resolver.configure("ConnectorForm", global_fallthrough=False)
        resolver.register_many(
            GLOBAL,
            {
                "toggleFullScreenHelp": self.toggle_help,
                "toggleHelpBar": lambda: self.header.toggle_keys(),
                "quit": self.exit,
            },
        )
        resolver.register_many(
            APP_COMPONENT,
            {
                "focusNext": self.action_focus_next,
                "focusPrevious": self.action_focus_previous,
                "hideDatabases": self.toggle_databases,
                "openConnector": self.open_connector,
            },
        )

    @property
    def header(self) -> Header:
        return self.query_one(Header)

    @property
    def database_tree(self) -> DatabaseTree:
        return self.query_one(DatabaseTree)

    @property
    def content(self) -> ContentPanel:
        return self.query_one(ContentPanel)

    def compose(self) -> ComposeResult:
        with Vertical(id="main-container"):
            yield Header(id="header")
            with Horizontal(id="main"):
                yield Sidebar(id="sidebar")
                yield ContentPanel(id="content")

    def on_mount(self) -> None:
        """Initialize the app."""
        self._apply_saved_theme()
        self.database_tree.focus()
        current = self.initial_connection or self.config.get_current_connection()
        if current is None or (self.initial_connection is None and self.config.show_connection_page):
            self.open_connector(closable=False)
        else:
            self.connect(current)

    def _apply_saved_theme(self) -> None:
        try:
            self.theme = self._saved_theme
        except Exception as exc:
            logger.warning("Unknown theme %r, using %s: %s", self._saved_theme, DEFAULT_THEME, exc)
            self.theme = DEFAULT_THEME

    def watch_theme(self, old_theme: str, new_theme: str) -> None:
        """Save theme whenever it changes and tell the components."""
        if self.config.theme != new_theme:
            self.config.theme = new_theme
            try:
                self.config.save()
            except OSError as exc:
                logger.error("Failed to save theme: %s", exc)
        self.bus.broadcast(EventMessage(EventType.STYLE_CHANGED, APP_COMPONENT, new_theme))

    # Screens and focus stack

    def push_screen(
        self,
        screen: Any,
        callback: Callable[[Any], None] | Callable[[Any], Awaitable[None]] | None = None,
        wait_for_dismiss: bool = False,
    ) -> Any:
        """Track component screens on the focus stack."""
        component_id = getattr(screen, "component_id", None) if isinstance(screen, Screen) else None
        if component_id:
            self.focus_stack.push(component_id)
            self._broadcast_focus(component_id)
        if wait_for_dismiss:
            return super().push_screen(screen, callback, wait_for_dismiss=True)
        return super().push_screen(screen, callback, wait_for_dismiss=False)

    def pop_screen(self) -> Any:
        component_id = getattr(self.screen, "component_id", None)
        result = super().pop_screen()
        if component_id:
            self.focus_stack.remove(component_id)
            self._broadcast_focus(self.focus_stack.current() or self._focused_panel())
        return result

    def _focused_panel(self) -> str:
        focused = self.focused
        while focused is not None:
            component_id = getattr(focused, "component_id", None)
            if component_id:
                return component_id
            focused = focused.parent  # type: ignore[assignment]
        return APP_COMPONENT

    def _broadcast_focus(self, component_id: str) -> None:
        self.bus.broadcast(EventMessage(EventType.FOCUS_CHANGED, APP_COMPONENT, component_id))

    def dispatch_key(self, event: events.Key, component_id: str, page: str | None = None) -> bool:
        """Run the handler bound to a key press, if any.

        The key belongs to the topmost page on the focus stack; a component
        living on that page (or on the main view when the stack is empty)
        resolves it against its own group first.
        """
        top = self.focus_stack.current()
        target = component_id if top == page else top
        if target is None:
            return False
        handler = self.resolver.resolve(target, event.key, event.character)
        if handler is None:
            return False
        handler()
        return True

    # Actions bound through the keymap

    def toggle_help(self) -> None:
        if self.focus_stack.current() == "Help":
            self.screen.dismiss(None)
            return
        self.push_screen(HelpScreen())

    def toggle_databases(self) -> None:
        self.screen.toggle_class("databases-hidden")
        if self.screen.has_class("databases-hidden"):
            self.content.table.focus()

    def open_connector(self, closable: bool = True) -> None:
        if "Connector" in self.focus_stack:
            return
        self.push_screen(ConnectorScreen(closable=closable), self._on_connector_result)

    def _on_connector_result(self, connection: MongoConfig | None) -> None:
        if connection is not None:
            self.connect(connection)

    # Connection

    def connect(self, connection: MongoConfig) -> None:
        """Connect on a worker thread; the UI stays usable meanwhile."""

        def work() -> Dao:
            dao = self.dao_factory(connection)
            dao.ping()
            return dao

        def on_success(dao: Dao) -> None:
            self._set_dao(dao, connection)
            self.notify(f"Connected to {connection.name}", timeout=2)

        def on_error(error: Exception) -> None:
            logger.error("Failed to connect to %s: %s", connection.get_safe_uri(), error)
            self.show_error(f"Failed to connect to {connection.name}", error)

        def do_work() -> None:
            try:
                dao = work()
                self.call_from_thread(on_success, dao)
            except BackendError as e:
                self.call_from_thread(on_error, e)

        self.run_worker(do_work, name=f"connect-{connection.name}", thread=True, exclusive=True)

    def _set_dao(self, dao: Dao, connection: MongoConfig) -> None:
        previous = self.dao
        if previous is not None and previous is not dao and isinstance(previous, MongoDao):
            previous.close()
        self.dao = dao
        pipeline = DocumentEditPipeline(dao, self.bus, self.editor)
        self.browser = CollectionBrowser(dao, pipeline)
        self.header.start_polling(dao, connection.name)
        self.content.render_component()
        self.database_tree.load()

    # Collaboration between panels

    def on_database_tree_collection_selected(self, event: DatabaseTree.CollectionSelected) -> None:
        self.content.open_collection(event.db, event.coll)

    def run_edit(self, operation: Callable[..., EditOutcome], *args: Any) -> EditOutcome | None:
        """Run an edit pipeline operation and report its outcome."""
        try:
            outcome = operation(*args)
        except BackendError as exc:
            self.show_error("Error refreshing documents", exc)
            return None
        if outcome.error is not None:
            self.show_error("Error saving document", outcome.error)
        elif outcome.committed:
            self.notify("Document saved", timeout=2)
        self.content.render_component()
        return outcome

    def edit_document(self, document_text: str) -> EditOutcome | None:
        if self.browser is None:
            return None
        return self.run_edit(self.browser.edit, document_text)

    @contextmanager
    def suspend_for_editor(self) -> Iterator[None]:
        """Hand the terminal to a child process for the duration of the block."""
        try:
            with self.suspend():
                yield
        except SuspendNotSupported as exc:
            raise EditorError("This terminal cannot be handed over to an external editor") from exc

    def show_error(self, title: str, error: BaseException | str | None = None) -> None:
        self.push_screen(ErrorScreen(title, error))
