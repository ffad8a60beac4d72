"""Keymap management utilities for vimongo."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .keymap import KeyBindings

logger = logging.getLogger(__name__)


class KeymapManager:
    """Builds the keybinding tree from defaults plus the user override file."""

    def __init__(self, path: Path | None = None) -> None:
        from ..config import KEYBINDINGS_PATH

        self._path = path or KEYBINDINGS_PATH
        self._custom_keymap_path: Path | None = None
        self._keybindings = KeyBindings.default()

    @property
    def keybindings(self) -> KeyBindings:
        return self._keybindings

    def initialize(self) -> KeyBindings:
        """Load defaults and apply the override file if it can be read.

        Returns:
            The resolved keybinding tree.
        """
        self.reset_to_default()
        try:
            override = self._load_override(self._path)
        except FileNotFoundError:
            logger.debug("No custom keybindings at %s", self._path)
            return self._keybindings
        except ValueError as exc:
            logger.warning("Failed to load custom keybindings from %s: %s", self._path, exc)
            return self._keybindings

        self._keybindings.merge(override)
        self._custom_keymap_path = self._path.resolve()
        logger.info("Loaded custom keybindings from %s", self._path)
        return self._keybindings

    def load(self, path: Path) -> KeyBindings:
        """Point the manager at another override file and reload."""
        self._path = path
        self._custom_keymap_path = None
        return self.initialize()

    def _load_override(self, path: Path) -> dict[str, Any]:
        """Read the override document.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file cannot be read or is not a JSON object.
        """
        path = path.expanduser()
        if not path.exists():
            raise FileNotFoundError(path)

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"Failed to read keybindings JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise ValueError("Keybindings file must contain a JSON object.")

        return payload

    def get_custom_keymap_path(self) -> Path | None:
        """Get the path of the applied override file.

        Returns:
            Path to the override file or None if only defaults are in use.
        """
        return self._custom_keymap_path

    def reset_to_default(self) -> KeyBindings:
        """Drop any override and return to the default tree."""
        self._keybindings = KeyBindings.default()
        self._custom_keymap_path = None
        return self._keybindings
