#!/usr/bin/env python3
"""vimongo - A terminal UI for MongoDB."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import MongoConfig, load_config
from .exceptions import ConfigError
from .logging_setup import setup_logging


def cmd_connection_list(config_path: Path | None) -> int:
    """Print saved connections, marking the current one."""
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not config.connections:
        print("No saved connections.")
        return 0

    for conn in config.connections:
        marker = "*" if conn.name == config.current_connection else " "
        print(f"{marker} {conn.get_display_info()}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="vimongo",
        description="A terminal UI for MongoDB",
    )

    parser.add_argument("--config", type=Path, metavar="PATH", help="Path to config.json")
    parser.add_argument("--debug", action="store_true", help="Log debug messages")
    parser.add_argument(
        "--connection-page",
        action="store_true",
        help="Start on the connection page instead of the last used connection",
    )
    parser.add_argument("--uri", help="Connect to this MongoDB uri without saving it")
    parser.add_argument(
        "--keybindings",
        type=Path,
        metavar="PATH",
        help="Path to a keybindings override file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    conn_parser = subparsers.add_parser("connection", help="Manage connections")
    conn_subparsers = conn_parser.add_subparsers(dest="conn_command", help="Connection commands")
    conn_subparsers.add_parser("list", help="List all saved connections")

    args = parser.parse_args(argv)

    if args.command == "connection":
        if args.conn_command == "list":
            return cmd_connection_list(args.config)
        conn_parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    debug = args.debug or config.debug
    setup_logging(config.log_path, debug=debug)

    if args.connection_page:
        config.show_connection_page = True

    initial_connection = None
    if args.uri:
        initial_connection = MongoConfig(name="uri", uri=args.uri)

    from .app import VimongoApp
    from .core.keymap_manager import KeymapManager

    keymap_manager = KeymapManager(args.keybindings) if args.keybindings else None
    app = VimongoApp(config, keymap_manager=keymap_manager, initial_connection=initial_connection)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
