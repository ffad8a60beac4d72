"""Connector: pick a saved connection or add a new one."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, OptionList, Static
from textual.widgets.option_list import Option

from ...config import MongoConfig
from ..mixins import ComponentMixin
from .confirm import ConfirmScreen

URI_SCHEMES = ("mongodb://", "mongodb+srv://")
DEFAULT_TIMEOUT = 5


def build_connection(name: str, uri: str, timeout: str) -> MongoConfig:
    """Validate the form fields and build a connection.

    Raises:
        ValueError: With a message fit for the form's error line.
    """
    name = name.strip()
    uri = uri.strip()
    if not name:
        raise ValueError("Name is required")
    if not uri.startswith(URI_SCHEMES):
        raise ValueError("Url must start with mongodb:// or mongodb+srv://")
    timeout = timeout.strip()
    if not timeout:
        seconds = DEFAULT_TIMEOUT
    else:
        try:
            seconds = int(timeout)
        except ValueError:
            raise ValueError("Timeout must be a number of seconds") from None
        if seconds < 1:
            raise ValueError("Timeout must be at least 1 second")
    return MongoConfig(name=name, uri=uri, timeout=seconds)


class ConnectorList(ComponentMixin, OptionList):
    COMPONENT_ID = "ConnectorList"
    PAGE = "Connector"

    def on_mount(self) -> None:
        self.init_component()

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        screen = self.screen
        assert isinstance(screen, ConnectorScreen)
        return {
            "focusForm": screen.focus_form,
            "deleteConnection": screen.delete_selected,
            "setConnection": screen.set_selected,
        }


class ConnectorForm(ComponentMixin, Vertical):
    COMPONENT_ID = "ConnectorForm"
    PAGE = "Connector"

    def compose(self) -> ComposeResult:
        yield Label("Name")
        yield Input(placeholder="local", id="form-name")
        yield Label("Url")
        yield Input(placeholder="mongodb://localhost:27017", id="form-url")
        yield Label("Timeout")
        yield Input(str(DEFAULT_TIMEOUT), id="form-timeout", type="integer")
        yield Static("", id="form-error")

    def on_mount(self) -> None:
        self.init_component()

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        screen = self.screen
        assert isinstance(screen, ConnectorScreen)
        return {
            "saveConnection": screen.save_connection,
            "focusList": screen.focus_list,
        }

    def values(self) -> tuple[str, str, str]:
        return (
            self.query_one("#form-name", Input).value,
            self.query_one("#form-url", Input).value,
            self.query_one("#form-timeout", Input).value,
        )

    def clear(self) -> None:
        self.query_one("#form-name", Input).value = ""
        self.query_one("#form-url", Input).value = ""
        self.query_one("#form-timeout", Input).value = str(DEFAULT_TIMEOUT)
        self.show_error("")

    def show_error(self, message: str) -> None:
        self.query_one("#form-error", Static).update(message)


class ConnectorScreen(ComponentMixin, ModalScreen[MongoConfig | None]):
    """Saved connections on the left, new connection form on the right.

    Dismisses with the chosen connection, or None when closed without one.
    """

    COMPONENT_ID = "Connector"
    PAGE = "Connector"
    DISPATCH_KEYS = False

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
    ]

    CSS = """
    ConnectorScreen {
        align: center middle;
    }

    #connector {
        width: 100;
        max-width: 95%;
        height: 24;
        border: solid $primary;
        border-subtitle-color: $primary;
        background: $surface;
    }

    #connector-list {
        width: 1fr;
        height: 1fr;
        border: solid $primary-darken-2;
    }

    #connector-form {
        width: 1fr;
        height: 1fr;
        padding: 0 1;
    }

    #form-error {
        color: $error;
        height: auto;
    }
    """

    def __init__(self, closable: bool = True):
        super().__init__()
        self.closable = closable

    def compose(self) -> ComposeResult:
        container = Horizontal(id="connector")
        container.border_title = "Connections"
        container.border_subtitle = "Connect: <enter>  New: ^a  Delete: ^d  Save: ^s"
        with container:
            yield ConnectorList(id="connector-list")
            yield ConnectorForm(id="connector-form")

    def on_mount(self) -> None:
        self.init_component()
        self.render_component()
        if self.app.config.connections:
            self.focus_list()
        else:
            self.focus_form()

    @property
    def connection_list(self) -> ConnectorList:
        return self.query_one("#connector-list", ConnectorList)

    @property
    def form(self) -> ConnectorForm:
        return self.query_one("#connector-form", ConnectorForm)

    def render_component(self) -> None:
        option_list = self.connection_list
        option_list.clear_options()
        current = self.app.config.current_connection
        for conn in self.app.config.connections:
            marker = "* " if conn.name == current else "  "
            option_list.add_option(Option(marker + conn.get_display_info(), id=conn.name))
        if option_list.option_count:
            option_list.highlighted = 0

    def selected_name(self) -> str | None:
        option_list = self.connection_list
        if option_list.highlighted is None:
            return None
        return option_list.get_option_at_index(option_list.highlighted).id

    def focus_form(self) -> None:
        self.query_one("#form-name", Input).focus()

    def focus_list(self) -> None:
        self.connection_list.focus()

    def save_connection(self) -> None:
        try:
            config = build_connection(*self.form.values())
            self.app.config.add_connection(config)
        except ValueError as exc:
            self.form.show_error(str(exc))
            return
        except OSError as exc:
            self.app.show_error("Error saving connection", exc)
            return
        self.form.clear()
        self.render_component()
        self.focus_list()

    def delete_selected(self) -> None:
        name = self.selected_name()
        if name is None:
            return

        def on_confirm(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                self.app.config.delete_connection(name)
            except OSError as exc:
                self.app.show_error("Error deleting connection", exc)
                return
            self.render_component()

        self.app.push_screen(ConfirmScreen("Delete connection", f"Delete connection '{name}'?"), on_confirm)

    def set_selected(self) -> None:
        name = self.selected_name()
        if name is None:
            return
        try:
            self.app.config.set_current_connection(name)
        except (ValueError, OSError) as exc:
            self.app.show_error("Error setting connection", exc)
            return
        self.dismiss(self.app.config.get_current_connection())

    def action_close(self) -> None:
        if self.closable:
            self.dismiss(None)
