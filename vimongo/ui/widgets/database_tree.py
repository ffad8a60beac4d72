"""Sidebar tree of databases and their collections."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Input, Tree
from textual.widgets.tree import TreeNode

from ...core.events import EventType
from ...db.dao import DatabaseInfo
from ...exceptions import BackendError
from ..mixins import ComponentMixin
from ..screens import ConfirmScreen, InputPromptScreen

logger = logging.getLogger(__name__)


@dataclass
class NodeData:
    db: str
    coll: str | None = None


class DatabaseTree(ComponentMixin, Tree[NodeData]):
    COMPONENT_ID = "DatabaseTree"

    class CollectionSelected(Message):
        def __init__(self, db: str, coll: str) -> None:
            super().__init__()
            self.db = db
            self.coll = coll

    def __init__(self, **kwargs) -> None:
        super().__init__("Databases", **kwargs)
        self.show_root = False
        self.guide_depth = 2
        self.name_filter = ""

    def on_mount(self) -> None:
        self.init_component()

    def on_focus(self) -> None:
        self.component.broadcast(EventType.FOCUS_CHANGED, self.component_id)

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        return {
            "filterBar": self.show_filter,
            "expandAll": self.expand_all,
            "collapseAll": self.collapse_all,
            "toggleExpand": self.toggle_expand,
            "addCollection": self.add_collection,
            "deleteCollection": self.delete_collection,
        }

    def load(self, name_filter: str | None = None) -> None:
        """List databases on a worker thread and rebuild the tree."""
        if name_filter is not None:
            self.name_filter = name_filter
        dao = self.app.dao
        if dao is None:
            return
        name_filter = self.name_filter

        def work() -> None:
            try:
                databases = dao.list_dbs_with_collections(name_filter)
            except BackendError as exc:
                logger.error("Error listing databases: %s", exc)
                self.app.call_from_thread(self.app.show_error, "Error listing databases", exc)
                return
            self.app.call_from_thread(self.render_databases, databases)

        self.run_worker(work, name="list-databases", group="databases", thread=True, exclusive=True)

    def render_databases(self, databases: list[DatabaseInfo]) -> None:
        expanded = {node.data.db for node in self.root.children if node.data is not None and node.is_expanded}
        self.clear()
        for info in databases:
            db_node = self.root.add(info.name, data=NodeData(info.name))
            for coll in info.collections:
                db_node.add_leaf(coll, data=NodeData(info.name, coll))
            if info.name in expanded or self.name_filter:
                db_node.expand()

    def on_tree_node_selected(self, event: Tree.NodeSelected[NodeData]) -> None:
        data = event.node.data
        if data is None or data.coll is None:
            return
        event.stop()
        self.post_message(self.CollectionSelected(data.db, data.coll))

    def _cursor_data(self) -> NodeData | None:
        node: TreeNode[NodeData] | None = self.cursor_node
        return node.data if node is not None else None

    def show_filter(self) -> None:
        sidebar = self.parent
        if isinstance(sidebar, Sidebar):
            sidebar.show_filter()

    def expand_all(self) -> None:
        self.root.expand_all()

    def collapse_all(self) -> None:
        for node in self.root.children:
            node.collapse_all()

    def toggle_expand(self) -> None:
        node = self.cursor_node
        if node is None:
            return
        if node.allow_expand:
            node.toggle()
        elif node.parent is not None:
            node.parent.collapse()

    def add_collection(self) -> None:
        data = self._cursor_data()
        if data is None or self.app.dao is None:
            return
        db = data.db

        def on_name(name: str | None) -> None:
            if not name:
                return
            try:
                self.app.dao.add_collection(db, name)
            except BackendError as exc:
                self.app.show_error("Error adding collection", exc)
                return
            self.notify(f"Collection {db}.{name} created", timeout=2)
            self.load()

        self.app.push_screen(InputPromptScreen(f"New collection in {db}", "collection name"), on_name)

    def delete_collection(self) -> None:
        data = self._cursor_data()
        if data is None or data.coll is None or self.app.dao is None:
            return
        db, coll = data.db, data.coll

        def on_confirm(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                self.app.dao.delete_collection(db, coll)
            except BackendError as exc:
                self.app.show_error("Error deleting collection", exc)
                return
            self.notify(f"Collection {db}.{coll} deleted", timeout=2)
            self.load()

        self.app.push_screen(ConfirmScreen("Delete collection", f"Drop collection {db}.{coll}?"), on_confirm)


class FilterInput(Input):
    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    class Cancelled(Message):
        pass

    def action_cancel(self) -> None:
        self.post_message(self.Cancelled())


class Sidebar(Vertical):
    """Filter input above the database tree."""

    DEFAULT_CSS = """
    Sidebar {
        width: 35;
        border-right: solid $primary;
    }

    Sidebar #db-filter {
        display: none;
    }

    Sidebar.filtering #db-filter {
        display: block;
    }

    Sidebar DatabaseTree {
        height: 1fr;
    }
    """

    def compose(self) -> ComposeResult:
        yield FilterInput(placeholder="filter collections", id="db-filter")
        yield DatabaseTree(id="database-tree")

    @property
    def tree(self) -> DatabaseTree:
        return self.query_one(DatabaseTree)

    def show_filter(self) -> None:
        self.add_class("filtering")
        self.query_one("#db-filter", FilterInput).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.remove_class("filtering")
        self.tree.load(event.value.strip())
        self.tree.focus()

    def on_filter_input_cancelled(self, event: FilterInput.Cancelled) -> None:
        event.stop()
        self.remove_class("filtering")
        self.tree.focus()
