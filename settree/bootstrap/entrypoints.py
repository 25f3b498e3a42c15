"""
bootstrap/entrypoints.py - Application entry points

Provides logging setup and the command-line entry point.
"""

from __future__ import annotations
from typing import List, Optional, Tuple
import argparse
import json
import logging
import sys

logger = logging.getLogger("bootstrap.entrypoints")


DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUE_WORDS = ("on", "true", "1", "yes", "enable", "enabled")
_FALSE_WORDS = ("off", "false", "0", "no", "disable", "disabled")


def setup_logging(
    level: str = "INFO",
    log_file: str = None,
    json_format: bool = False,
    log_format: str = DEFAULT_LOG_FORMAT,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON format for logs
        log_format: Format string for plain text logs
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if json_format:

        class JSONFormatter(logging.Formatter):
            def format(self, record):
                return json.dumps({
                    "timestamp": self.formatTime(record),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                }, ensure_ascii=False)

        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(log_format)

    # Logs go to stderr so stdout stays clean for dumps and JSON output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)


def parse_assignment(text: str) -> Tuple[str, bool]:
    """Parse an ``ID=on|off`` toggle argument."""
    node_id, sep, value = text.partition("=")
    node_id = node_id.strip()
    value = value.strip().lower()
    if not sep or not node_id:
        raise argparse.ArgumentTypeError(f"expected ID=on|off, got '{text}'")
    if value in _TRUE_WORDS:
        return node_id, True
    if value in _FALSE_WORDS:
        return node_id, False
    raise argparse.ArgumentTypeError(f"invalid state '{value}' for {node_id}")


def cli_main(args: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="Hierarchical settings tree inspector",
        prog="settree",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-d", "--definitions",
        help="Path to JSON node definitions (default: built-in tree)",
        default=None,
    )
    parser.add_argument(
        "-s", "--set",
        dest="assignments",
        action="append",
        type=parse_assignment,
        default=[],
        metavar="ID=on|off",
        help="Toggle a node; may be repeated, applied in order",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level",
    )
    parser.add_argument(
        "--log-file",
        help="Log file path",
        default=None,
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output flat state as JSON instead of the structure dump",
    )

    parsed = parser.parse_args(args)

    from .config import load_config
    from settree.definitions import (
        DefinitionError,
        build_tree,
        export_flat,
        load_definitions,
    )

    config = load_config(parsed.config)

    log_level = "DEBUG" if parsed.verbose else (parsed.log_level or config.logging.level)
    setup_logging(
        level=log_level,
        log_file=parsed.log_file or config.logging.log_file,
        json_format=config.logging.json_logs,
        log_format=config.logging.format,
    )

    definitions_file = parsed.definitions or config.tree.definitions_file
    try:
        definitions = load_definitions(definitions_file) if definitions_file else None
        tree = build_tree(definitions, config=config.tree)
    except DefinitionError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for node_id, enabled in parsed.assignments:
        affected = tree.set_enabled(node_id, enabled)
        event = tree.last_event if affected else None
        changed = len(event.changed) if event else 0
        logger.info(f"{node_id} -> {'on' if enabled else 'off'}: {changed} changed")

    if parsed.json:
        print(json.dumps(export_flat(tree, definitions), indent=2, sort_keys=True))
    else:
        print(tree.dump_structure())

    return 0


if __name__ == "__main__":
    sys.exit(cli_main())
