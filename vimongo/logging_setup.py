"""Log file setup for vimongo.

The terminal belongs to the UI, so log records always go to a file.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(path: str | Path, debug: bool = False) -> logging.Handler:
    """Attach a file handler to the vimongo logger and return it."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logger = logging.getLogger("vimongo")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.propagate = False

    if debug:
        logger.info("Debug mode enabled")
    return handler
