"""Full screen help listing every keybinding group."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

from ...core.keymap import GLOBAL, KeyBindings, OrderedKeys
from ..mixins import ComponentMixin

logger = logging.getLogger(__name__)

# Top-level components, in the order they are listed
HELP_SECTIONS = (GLOBAL, "Root", "Peeker", "HistoryModal", "Connector", "Help")


def help_groups(keybindings: KeyBindings) -> list[OrderedKeys]:
    """Every keybinding group in declaration order, nested groups after their parent."""
    groups: list[OrderedKeys] = []
    for component_id in HELP_SECTIONS:
        try:
            groups.extend(keybindings.get_actions_for_component(component_id))
        except KeyError:
            logger.debug("No keybindings to list for %s", component_id)
    return groups


class HelpScreen(ComponentMixin, ModalScreen):
    COMPONENT_ID = "Help"
    PAGE = "Help"

    CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-scroll {
        width: 80%;
        height: 90%;
        border: solid $primary;
        border-subtitle-color: $primary;
        background: $surface;
        padding: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        scroll = VerticalScroll(id="help-scroll")
        scroll.border_title = "Keybindings"
        custom_path = self.app.keymap_manager.get_custom_keymap_path()
        if custom_path is not None:
            scroll.border_title = f"Keybindings ({escape(str(custom_path))})"
        scroll.border_subtitle = "Close: <esc>"
        with scroll:
            yield Static(self._render_help(), id="help-text")

    def on_mount(self) -> None:
        self.init_component()
        self.query_one("#help-scroll").focus()

    def key_handlers(self) -> dict[str, Callable[[], Any]]:
        return {"close": self.close_help}

    def _render_help(self) -> str:
        lines: list[str] = []
        for group in help_groups(self.app.keybindings):
            lines.append(f"[bold $text-muted]{escape(group.component)}[/]")
            for action, key in group.bindings:
                lines.append(f"  [bold $warning]{escape(key.display()):<16}[/] {escape(key.description or action)}")
            lines.append("")
        return "\n".join(lines)

    def close_help(self) -> None:
        self.dismiss(None)
