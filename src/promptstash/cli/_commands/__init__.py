"""PromptStash CLI commands."""

from typing import TYPE_CHECKING

from ._shared import ExitCode, OutputFormat, exit_with_error, storage_errors
from ._store import (
    check_command,
    commit_command,
    create_command,
    history_command,
    open_service,
    revert_command,
)
from ._validate import validate_command

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "ExitCode",
    "OutputFormat",
    "exit_with_error",
    "open_service",
    "register_commands",
    "storage_errors",
]


def register_commands(app: App) -> None:
    """Register all commands with the given app.

    Args:
        app: The cyclopts App to register commands with.
    """
    _ = app.command(validate_command, name="validate")
    _ = app.command(create_command, name="create")
    _ = app.command(commit_command, name="commit")
    _ = app.command(revert_command, name="revert")
    _ = app.command(history_command, name="history")
    _ = app.command(check_command, name="check")
