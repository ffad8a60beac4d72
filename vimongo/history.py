"""Query history shared by the query and sort bars."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_HISTORY = 10


class HistoryStore:
    """Most recent queries, one per line, oldest first.

    Saving an entry that is already present moves it to the end, and only
    the last ``max_entries`` entries are kept.
    """

    def __init__(self, path: Path | None = None, max_entries: int = MAX_HISTORY) -> None:
        from .config import HISTORY_PATH

        self.path = path or HISTORY_PATH
        self.max_entries = max_entries

    def load(self) -> list[str]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        return [line for line in content.splitlines() if line.strip()]

    def save(self, text: str) -> list[str]:
        """Append a query and persist the trimmed history.

        Raises:
            OSError: If the history file cannot be written.
        """
        entry = " ".join(text.split())
        if not entry:
            return self.load()

        history = [line for line in self.load() if line != entry]
        history.append(entry)
        history = history[-self.max_entries :]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("".join(line + "\n" for line in history), encoding="utf-8")
        logger.debug("Saved query to history: %s", entry)
        return history

    def newest_first(self) -> list[str]:
        return list(reversed(self.load()))
