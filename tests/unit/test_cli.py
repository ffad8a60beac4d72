"""Tests for the command line entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from vimongo.cli import main
from vimongo.logging_setup import setup_logging


def _write_config(path: Path) -> None:
    path.write_text(
        json.dumps(
            {
                "current_connection": "local",
                "connections": [
                    {"name": "local", "uri": "mongodb://localhost:27017"},
                    {"name": "prod", "host": "db.example.com", "username": "ada", "password": "secret"},
                ],
            }
        ),
        encoding="utf-8",
    )


def test_connection_list(tmp_path: Path, capsys):
    config_path = tmp_path / "config.json"
    _write_config(config_path)

    assert main(["--config", str(config_path), "connection", "list"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "* local (mongodb://localhost:27017)"
    assert out[1].startswith("  prod (")
    assert "secret" not in out[1]


def test_connection_list_empty(tmp_path: Path, capsys):
    assert main(["--config", str(tmp_path / "missing.json"), "connection", "list"]) == 0
    assert "No saved connections." in capsys.readouterr().out


def test_invalid_config_fails(tmp_path: Path, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text("{ nope", encoding="utf-8")

    assert main(["--config", str(config_path)]) == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_setup_logging_writes_to_file(tmp_path: Path):
    log_path = tmp_path / "logs" / "vimongo.log"
    logger = logging.getLogger("vimongo")
    previous_level = logger.level
    handler = setup_logging(log_path, debug=True)
    try:
        logging.getLogger("vimongo.test").debug("hello from the test")
        handler.flush()
        content = log_path.read_text(encoding="utf-8")
    finally:
        logger.removeHandler(handler)
        handler.close()
        logger.propagate = True
        logger.setLevel(previous_level)

    assert "Debug mode enabled" in content
    assert "vimongo.test - DEBUG - hello from the test" in content
