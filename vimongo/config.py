"""Configuration management for vimongo.

This module contains the connection type (MongoConfig), the application
settings (AppConfig) and the JSON persistence helpers for both.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

from .exceptions import ConfigError


def _default_config_dir() -> Path:
    override = os.environ.get("VIMONGO_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "vimongo"


CONFIG_DIR = _default_config_dir()
CONFIG_PATH = CONFIG_DIR / "config.json"
KEYBINDINGS_PATH = CONFIG_DIR / "keybindings.json"
HISTORY_PATH = CONFIG_DIR / "history.txt"
LOG_PATH = CONFIG_DIR / "vimongo.log"

DEFAULT_THEME = "tokyo-night"


@dataclass
class MongoConfig:
    """MongoDB connection configuration."""

    name: str
    uri: str = ""
    # Used when no uri is given
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = ""
    timeout: int = 5  # seconds

    def get_uri(self) -> str:
        """Get the connection uri, building it from parts if needed."""
        if self.uri:
            return self.uri

        credentials = ""
        if self.username:
            credentials = quote_plus(self.username)
            if self.password:
                credentials += ":" + quote_plus(self.password)
            credentials += "@"

        db_part = f"/{self.database}" if self.database else ""
        return f"mongodb://{credentials}{self.host}:{self.port}{db_part}"

    def get_safe_uri(self) -> str:
        """Get the uri with the password masked, for display."""
        uri = self.get_uri()
        if self.password:
            uri = uri.replace(quote_plus(self.password), "********")
        return uri

    def get_display_info(self) -> str:
        """Get a display string for the connection."""
        return f"{self.name} ({self.get_safe_uri()})"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MongoConfig:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class AppConfig:
    """Application settings stored in config.json."""

    editor: str = ""
    debug: bool = False
    log_path: str = str(LOG_PATH)
    theme: str = DEFAULT_THEME
    show_connection_page: bool = False
    current_connection: str = ""
    connections: list[MongoConfig] = field(default_factory=list)
    path: Path = field(default=CONFIG_PATH, repr=False, compare=False)

    def get_editor_cmd(self) -> str:
        """Get the editor command from config or the environment."""
        if self.editor:
            return self.editor
        for env in ("VISUAL", "EDITOR"):
            value = os.environ.get(env)
            if value:
                return value
        return "vi"

    def get_current_connection(self) -> MongoConfig | None:
        """Return the selected connection, if any."""
        for conn in self.connections:
            if conn.name == self.current_connection:
                return conn
        return None

    def set_current_connection(self, name: str) -> None:
        if not any(c.name == name for c in self.connections):
            raise ValueError(f"Connection '{name}' not found")
        self.current_connection = name
        self.save()

    def add_connection(self, config: MongoConfig) -> None:
        """Add a connection, refusing duplicate names."""
        if not config.name:
            raise ValueError("Connection name cannot be empty")
        if any(c.name == config.name for c in self.connections):
            raise ValueError(f"Connection '{config.name}' already exists")
        self.connections.append(config)
        self.save()

    def delete_connection(self, name: str) -> None:
        self.connections = [c for c in self.connections if c.name != name]
        if self.current_connection == name:
            self.current_connection = ""
        self.save()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("path", None)
        return data

    def save(self) -> None:
        """Persist settings to disk."""
        save_config(self)


def load_config(path: Path | None = None) -> AppConfig:
    """Load settings from disk.

    A missing file yields the defaults. A file that exists but cannot be
    parsed is a startup failure and raises ConfigError.
    """
    path = path or CONFIG_PATH
    if not path.exists():
        return AppConfig(path=path)

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(path, str(exc)) from exc

    if not isinstance(payload, dict):
        raise ConfigError(path, "top level must be a JSON object")

    raw_connections = payload.pop("connections", [])
    if not isinstance(raw_connections, list):
        raise ConfigError(path, '"connections" must be a list')

    try:
        connections = [MongoConfig.from_dict(c) for c in raw_connections]
    except TypeError as exc:
        raise ConfigError(path, f"invalid connection: {exc}") from exc

    known = {f.name for f in fields(AppConfig)} - {"connections", "path"}
    settings = {k: v for k, v in payload.items() if k in known}
    return AppConfig(connections=connections, path=path, **settings)


def save_config(config: AppConfig) -> None:
    """Write settings to disk, creating the config directory if needed."""
    config.path.parent.mkdir(parents=True, exist_ok=True)
    config.path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
