"""Clipboard support for the application."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ClipboardMixin:
    """Copy text to the terminal or system clipboard."""

    _internal_clipboard: str = ""

    def _copy_text(self, text: str) -> bool:
        """Copy text to clipboard if possible, otherwise store internally."""
        self._internal_clipboard = text

        # Textual's clipboard support (OSC52 where the terminal allows it)
        try:
            self.copy_to_clipboard(text)  # type: ignore[attr-defined]
            return True
        except Exception as exc:
            logger.debug("Terminal clipboard unavailable: %s", exc)

        # System clipboard via pyperclip, needs platform support
        try:
            import pyperclip

            pyperclip.copy(text)
            return True
        except Exception as exc:
            logger.warning("Failed to copy to clipboard: %s", exc)
            return False
