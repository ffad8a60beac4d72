"""Header: connection status and the keys of the focused component."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from rich.markup import escape
from textual.widgets import Static

from ...core.events import EventMessage, EventType
from ...exceptions import BackendError, PingError
from ..mixins import ComponentMixin

if TYPE_CHECKING:
    from ...db.dao import Dao, ServerStatus

logger = logging.getLogger(__name__)

PING_INTERVAL = 10.0
PING_BACKOFF = 5.0

STATUS_DISCONNECTED = "disconnected"
STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUS_UNAUTHORIZED = "unauthorized"


def next_ping_interval(current: float, ok: bool) -> float:
    """Delay before the next ping: reset on success, longer after each failure."""
    if ok:
        return PING_INTERVAL
    return current + PING_BACKOFF


def check_connection(dao: Dao) -> tuple[str, ServerStatus | None]:
    """Ping the server and read its status.

    A server that answers pings but refuses ``serverStatus`` is still active.
    """
    try:
        dao.ping()
    except PingError as exc:
        logger.warning("Ping failed: %s", exc)
        return (STATUS_UNAUTHORIZED if exc.unauthorized else STATUS_INACTIVE), None
    try:
        return STATUS_ACTIVE, dao.get_server_status()
    except BackendError as exc:
        logger.debug("Server status unavailable: %s", exc)
        return STATUS_ACTIVE, None


class Header(ComponentMixin, Static):
    COMPONENT_ID = "Header"
    DISPATCH_KEYS = False
    SUBSCRIBE = (EventType.FOCUS_CHANGED, EventType.STYLE_CHANGED)

    DEFAULT_CSS = """
    Header {
        height: 4;
        padding: 0 1;
        border-bottom: solid $primary-darken-2;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self.status = STATUS_DISCONNECTED
        self.server: ServerStatus | None = None
        self.connection_name = ""
        self.focused_component = "Root"
        self.show_keys = False
        self._stop_polling: threading.Event | None = None

    def on_mount(self) -> None:
        self.init_component()
        self.render_component()

    def on_unmount(self) -> None:
        self.stop_polling()

    def handle_event(self, message: EventMessage) -> None:
        if message.type is EventType.FOCUS_CHANGED and message.payload:
            self.focused_component = message.payload
        self.render_component()

    def toggle_keys(self) -> None:
        self.show_keys = not self.show_keys
        self.render_component()

    def start_polling(self, dao: Dao, connection_name: str) -> None:
        """Ping ``dao`` on a worker thread until stopped or replaced."""
        self.stop_polling()
        self.connection_name = connection_name
        stop = threading.Event()
        self._stop_polling = stop
        last_status = self.status
        self.run_worker(
            lambda: self._poll(dao, stop, last_status), name="ping", group="ping", thread=True, exclusive=True
        )

    def stop_polling(self) -> None:
        if self._stop_polling is not None:
            self._stop_polling.set()
            self._stop_polling = None

    def _poll(self, dao: Dao, stop: threading.Event, last_status: str) -> None:
        interval = PING_INTERVAL
        while not stop.is_set():
            status, server = check_connection(dao)
            interval = next_ping_interval(interval, status == STATUS_ACTIVE)
            if stop.is_set():
                break
            if status != last_status:
                self.component.broadcast(EventType.CONNECTION_STATUS, status)
                last_status = status
            self.app.call_from_thread(self.set_status, status, server)
            stop.wait(interval)

    def set_status(self, status: str, server: ServerStatus | None = None) -> None:
        self.status = status
        if server is not None or status != STATUS_ACTIVE:
            self.server = server
        self.render_component()

    def _status_markup(self) -> str:
        theme = self.app.current_theme
        colors = {
            STATUS_ACTIVE: theme.success,
            STATUS_INACTIVE: theme.error,
            STATUS_UNAUTHORIZED: theme.warning,
        }
        color = colors.get(self.status) or theme.secondary or "grey50"
        return f"[bold {color}]{self.status.capitalize()}[/]"

    def _server_lines(self) -> list[str]:
        primary = self.app.current_theme.primary
        name = escape(self.connection_name) if self.connection_name else "-"
        lines = [f"[{primary}]Connection:[/] {name}  [{primary}]Status:[/] {self._status_markup()}"]
        if self.server is not None:
            lines.append(
                f"[{primary}]Host:[/] {escape(self.server.host)}  "
                f"[{primary}]Version:[/] {escape(self.server.version)}  "
                f"[{primary}]Uptime:[/] {self.server.uptime}s  "
                f"[{primary}]Connections:[/] {self.server.current_connections}"
            )
        return lines

    def _key_lines(self) -> list[str]:
        try:
            groups = self.app.keybindings.get_actions_for_component(self.focused_component)
        except KeyError:
            return [f"No keys for {escape(self.focused_component)}"]
        accent = self.app.current_theme.accent or self.app.current_theme.primary
        parts = [f"[bold {accent}]{escape(key.display())}[/] {escape(key.description)}" for key in groups[0].keys]
        return ["  ".join(parts[i : i + 4]) for i in range(0, len(parts), 4)][:3]

    def render_component(self) -> None:
        lines = self._key_lines() if self.show_keys else self._server_lines()
        self.update("\n".join(lines))
