"""External editor process.

The editor takes over the terminal, so the UI is suspended for the whole
lifetime of the child process.
"""

from __future__ import annotations

import contextlib
import logging
import shlex
import shutil
import subprocess
from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path

from ..exceptions import EditorError

logger = logging.getLogger(__name__)

SuspendFactory = Callable[[], AbstractContextManager[object]]


class ExternalEditor:
    """Runs the user's editor on a file and waits for it to exit.

    Args:
        command: Editor command line, e.g. "nvim" or "code --wait".
        suspend: Factory for the context that hands the terminal over to the
            child, typically ``App.suspend``. Defaults to a no-op context.
    """

    def __init__(self, command: str, suspend: SuspendFactory | None = None) -> None:
        self.command = command
        self._suspend: SuspendFactory = suspend or contextlib.nullcontext

    def resolve(self) -> list[str]:
        """Split the command and locate the executable.

        Raises:
            EditorError: If no editor is configured or it is not on PATH.
        """
        argv = shlex.split(self.command)
        if not argv:
            raise EditorError("No editor configured, set $EDITOR or the editor option")
        executable = shutil.which(argv[0])
        if executable is None:
            raise EditorError(f"Editor '{argv[0]}' not found")
        return [executable, *argv[1:]]

    def run(self, path: Path) -> None:
        """Open ``path`` in the editor and block until it exits.

        Raises:
            EditorError: If the editor cannot be started or exits non-zero.
        """
        argv = [*self.resolve(), str(path)]
        logger.debug("Running editor: %s", argv)
        with self._suspend():
            try:
                completed = subprocess.run(argv, check=False)
            except OSError as exc:
                raise EditorError(f"Failed to start editor: {exc}") from exc
        if completed.returncode != 0:
            raise EditorError(f"Editor exited with status {completed.returncode}")
