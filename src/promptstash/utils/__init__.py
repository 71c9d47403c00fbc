"""Shared utilities."""

from ._database import (
    SQLValue,
    connect,
    fetch_all,
    fetch_one,
    insert,
    safe_identifier,
)
from ._json import dump_json, load_json
from ._logging import DEFAULT_CLI_LOG_FILE, create_cli_logger, create_logger

__all__ = [
    "DEFAULT_CLI_LOG_FILE",
    "SQLValue",
    "connect",
    "create_cli_logger",
    "create_logger",
    "dump_json",
    "fetch_all",
    "fetch_one",
    "insert",
    "load_json",
    "safe_identifier",
]
