"""Tests for launching the external editor."""

from __future__ import annotations

import contextlib
import shutil
from pathlib import Path

import pytest

from vimongo.editing.editor import ExternalEditor
from vimongo.exceptions import EditorError

needs_posix_tools = pytest.mark.skipif(
    shutil.which("true") is None or shutil.which("false") is None,
    reason="true/false not available",
)


def test_empty_command():
    with pytest.raises(EditorError):
        ExternalEditor("").resolve()


def test_missing_executable():
    with pytest.raises(EditorError) as info:
        ExternalEditor("definitely-not-an-editor-5f2c").resolve()
    assert "not found" in str(info.value)


@needs_posix_tools
def test_resolve_keeps_arguments():
    argv = ExternalEditor("true --wait").resolve()
    assert argv[0] == shutil.which("true")
    assert argv[1:] == ["--wait"]


@needs_posix_tools
def test_run_inside_suspend_context(tmp_path: Path):
    events: list[str] = []

    @contextlib.contextmanager
    def suspend():
        events.append("suspend")
        yield
        events.append("resume")

    path = tmp_path / "doc.json"
    path.write_text("{}", encoding="utf-8")
    ExternalEditor("true", suspend=suspend).run(path)

    assert events == ["suspend", "resume"]


@needs_posix_tools
def test_non_zero_exit(tmp_path: Path):
    with pytest.raises(EditorError) as info:
        ExternalEditor("false").run(tmp_path / "doc.json")
    assert "status 1" in str(info.value)
