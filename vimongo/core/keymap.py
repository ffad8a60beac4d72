"""Keybinding tree for vimongo.

Bindings are declared once, as a flat table of ``(group path, action, Key)``
rows. The table order is the declaration order used by the help overlay and
the header, so groups are listed depth-first: a group is always followed by
its nested groups.

A user override document has the same nested shape as the tree, e.g.::

    {"root": {"content": {"refresh": {"keys": ["F5"]}}}}

Only non-empty ``keys``/``runes`` lists replace the defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

logger = logging.getLogger(__name__)

GLOBAL = "Global"

# Component identity -> group path in the tree
COMPONENT_PATHS: dict[str, str] = {
    GLOBAL: "global",
    "Root": "root",
    "DatabaseTree": "root.databases",
    "Content": "root.content",
    "QueryBar": "root.content.inputBar",
    "SortBar": "root.content.inputBar",
    "Peeker": "peeker",
    "HistoryModal": "history",
    "Connector": "connector",
    "ConnectorForm": "connector.connectorForm",
    "ConnectorList": "connector.connectorList",
    "Help": "help",
}

_KEY_ALIASES = {
    "esc": "escape",
    "return": "enter",
    "del": "delete",
    "pgup": "pageup",
    "pgdn": "pagedown",
    "backtab": "shift+tab",
    "spacebar": "space",
}


def normalize_key(name: str) -> str:
    """Normalize a key name to Textual's spelling ("Ctrl+R" -> "ctrl+r")."""
    parts = [part.strip().lower() for part in name.split("+")]
    return "+".join(_KEY_ALIASES.get(part, part) for part in parts if part)


@dataclass(frozen=True)
class Key:
    """Keys and runes that trigger one action, plus its help text."""

    keys: tuple[str, ...] = ()
    runes: tuple[str, ...] = ()
    description: str = ""

    def matches(self, key: str | None, character: str | None = None) -> bool:
        """Check whether a pressed key (or typed character) triggers this binding."""
        if character and character.isprintable() and character in self.runes:
            return True
        if not key:
            return False
        pressed = normalize_key(key)
        return any(normalize_key(k) == pressed for k in self.keys)

    def display(self) -> str:
        """Human readable list of the keys, e.g. "Ctrl+R, p"."""
        return ", ".join([*self.keys, *self.runes])

    def merged(self, override: Mapping[str, Any]) -> Key:
        """Return a copy with non-empty override lists applied."""
        keys = _string_list(override.get("keys"))
        runes = _string_list(override.get("runes"))
        result = self
        if keys:
            result = replace(result, keys=keys)
        if runes:
            result = replace(result, runes=runes)
        return result

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"description": self.description}
        if self.keys:
            data["keys"] = list(self.keys)
        if self.runes:
            data["runes"] = list(self.runes)
        return data


def _string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(v for v in value if isinstance(v, str) and v)


def _k(*keys: str, runes: tuple[str, ...] = (), description: str) -> Key:
    return Key(keys=tuple(keys), runes=runes, description=description)


DEFAULT_BINDINGS: tuple[tuple[str, str, Key], ...] = (
    ("global", "toggleFullScreenHelp", _k(runes=("?",), description="Toggle help")),
    ("global", "toggleHelpBar", _k("Ctrl+Y", description="Show help in header")),
    ("global", "quit", _k("Ctrl+Q", description="Quit")),
    ("root", "focusNext", _k("Tab", description="Focus next component")),
    ("root", "focusPrevious", _k("Shift+Tab", description="Focus previous component")),
    ("root", "hideDatabases", _k("Ctrl+S", description="Hide databases")),
    ("root", "openConnector", _k("Ctrl+O", description="Open connector")),
    ("root.databases", "filterBar", _k(runes=("/",), description="Focus filter bar")),
    ("root.databases", "expandAll", _k(runes=("E",), description="Expand all")),
    ("root.databases", "collapseAll", _k(runes=("W",), description="Collapse all")),
    ("root.databases", "toggleExpand", _k(runes=("T",), description="Toggle expand")),
    ("root.databases", "addCollection", _k(runes=("A",), description="Add collection")),
    ("root.databases", "deleteCollection", _k("Ctrl+D", description="Delete collection")),
    ("root.content", "peekDocument", _k("Enter", runes=("p",), description="Peek document")),
    ("root.content", "viewDocument", _k(runes=("v",), description="View document")),
    ("root.content", "addDocument", _k(runes=("a",), description="Add document")),
    ("root.content", "editDocument", _k(runes=("e",), description="Edit document")),
    ("root.content", "duplicateDocument", _k(runes=("d",), description="Duplicate document")),
    ("root.content", "deleteDocument", _k("Ctrl+D", description="Delete document")),
    ("root.content", "copyDocument", _k(runes=("c",), description="Copy document")),
    ("root.content", "refresh", _k("Ctrl+R", description="Refresh")),
    ("root.content", "toggleQuery", _k(runes=("/",), description="Toggle query")),
    ("root.content", "toggleSort", _k(runes=("s",), description="Toggle sort")),
    ("root.content", "nextPage", _k("Ctrl+N", description="Next page")),
    ("root.content", "previousPage", _k("Ctrl+B", description="Previous page")),
    ("root.content.inputBar", "showHistory", _k("Ctrl+Y", description="Show history")),
    ("root.content.inputBar", "clearInput", _k("Ctrl+D", description="Clear input")),
    ("peeker", "moveToTop", _k(runes=("g",), description="Move to top")),
    ("peeker", "moveToBottom", _k(runes=("G",), description="Move to bottom")),
    ("peeker", "copyFullObj", _k(runes=("c",), description="Copy full line")),
    ("peeker", "copyValue", _k(runes=("v",), description="Copy value")),
    ("peeker", "editDocument", _k(runes=("e",), description="Edit document")),
    ("peeker", "refresh", _k("Ctrl+R", description="Refresh document")),
    ("peeker", "close", _k("Esc", runes=("q",), description="Close peeker")),
    ("history", "acceptEntry", _k("Enter", description="Use selected query")),
    ("history", "closeHistory", _k("Esc", "Ctrl+Y", description="Close history")),
    ("connector.connectorForm", "saveConnection", _k("Ctrl+S", description="Save connection")),
    ("connector.connectorForm", "focusList", _k("Esc", description="Focus connection list")),
    ("connector.connectorList", "focusForm", _k("Ctrl+A", description="Move focus to form")),
    ("connector.connectorList", "deleteConnection", _k("Ctrl+D", description="Delete selected connection")),
    ("connector.connectorList", "setConnection", _k("Enter", "Space", description="Set selected connection")),
    ("help", "close", _k("Esc", description="Close help")),
)


@dataclass
class OrderedKeys:
    """Bindings of one group, in declaration order."""

    component: str
    bindings: list[tuple[str, Key]] = field(default_factory=list)

    @property
    def keys(self) -> list[Key]:
        return [key for _, key in self.bindings]


class KeyBindings:
    """Ordered tree of ``group path -> action -> Key``."""

    def __init__(self, rows: tuple[tuple[str, str, Key], ...] = DEFAULT_BINDINGS):
        self._groups: dict[str, dict[str, Key]] = {}
        for path, action, key in rows:
            self._groups.setdefault(path, {})[action] = key

    @classmethod
    def default(cls) -> KeyBindings:
        return cls(DEFAULT_BINDINGS)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyBindings):
            return NotImplemented
        return self._groups == other._groups

    def iter_bindings(self) -> Iterator[tuple[str, str, Key]]:
        """Yield ``(path, action, key)`` rows in declaration order."""
        for path, actions in self._groups.items():
            for action, key in actions.items():
                yield path, action, key

    def get(self, path: str, action: str) -> Key:
        return self._groups[path][action]

    def group(self, path: str) -> dict[str, Key]:
        return dict(self._groups.get(path, {}))

    def merge(self, override: Mapping[str, Any] | None) -> None:
        """Fold a user override document over the current bindings."""
        if not override:
            return
        for path, action, key in list(self.iter_bindings()):
            node: Any = override
            for part in path.split("."):
                node = node.get(part) if isinstance(node, Mapping) else None
            leaf = node.get(action) if isinstance(node, Mapping) else None
            if isinstance(leaf, Mapping):
                self._groups[path][action] = key.merged(leaf)

        for path, key_name, actions in self.find_conflicts():
            logger.warning("Key %s is bound to several actions in %s: %s", key_name, path, ", ".join(actions))

    def find_conflicts(self) -> list[tuple[str, str, list[str]]]:
        """List keys or runes claimed by more than one action within a group."""
        conflicts = []
        for path, actions in self._groups.items():
            claims: dict[str, list[str]] = {}
            for action, key in actions.items():
                for name in key.keys:
                    claims.setdefault(normalize_key(name), []).append(action)
                for rune in key.runes:
                    claims.setdefault(f"rune:{rune}", []).append(action)
            for name, owners in claims.items():
                if len(owners) > 1:
                    conflicts.append((path, name, owners))
        return conflicts

    def contains(self, binding: Key, key: str | None, character: str | None = None) -> bool:
        """Check whether a key press is one of a binding's keys or runes."""
        return binding.matches(key, character)

    def match(self, component_id: str, key: str | None, character: str | None = None) -> str | None:
        """Return the action a key triggers within one component's own group.

        When several actions claim the key the last declared one wins.
        """
        path = COMPONENT_PATHS.get(component_id)
        if path is None:
            return None
        for action, binding in reversed(list(self._groups.get(path, {}).items())):
            if binding.matches(key, character):
                return action
        return None

    def get_actions_for_component(self, component_id: str) -> list[OrderedKeys]:
        """Return a component's bindings followed by its nested groups.

        Raises:
            KeyError: If the component has no keybinding group.
        """
        if not component_id:
            raise KeyError("component is empty")
        path = COMPONENT_PATHS.get(component_id)
        if path is None:
            raise KeyError(f"unknown component {component_id}")

        result = []
        for group_path, actions in self._groups.items():
            if group_path == path or group_path.startswith(path + "."):
                name = group_path.rsplit(".", 1)[-1]
                result.append(OrderedKeys(component=name, bindings=list(actions.items())))
        if not result:
            raise KeyError(f"no keybindings for component {component_id}")
        return result

    def to_dict(self) -> dict[str, Any]:
        """Nested document with the same shape as the override file."""
        tree: dict[str, Any] = {}
        for path, action, key in self.iter_bindings():
            node = tree
            for part in path.split("."):
                node = node.setdefault(part, {})
            node[action] = key.to_dict()
        return tree
