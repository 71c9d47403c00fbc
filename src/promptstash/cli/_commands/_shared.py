"""Shared CLI utilities for commands."""

from contextlib import contextmanager
from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING, Never

from rich.console import Console
from rich.markup import escape

from promptstash.exceptions import (
    ArtifactNotFoundError,
    ArtifactValidationError,
    StorageUnavailableError,
    VersionConflictError,
    VersionNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


class ExitCode(IntEnum):
    """Exit codes for PromptStash CLI commands."""

    SUCCESS = 0
    FAILURE = 1
    VALIDATION_FAILED = 2
    NOT_FOUND = 3
    CONFLICT = 4
    STORAGE_UNAVAILABLE = 5


class OutputFormat(StrEnum):
    """Supported output formats for commands."""

    TEXT = "text"
    TABLE = "table"
    JSON = "json"


def get_console() -> Console:
    """Get a Rich console writing to stdout."""
    return Console(highlight=False)


def get_error_console() -> Console:
    """Get a Rich console configured for error output to stderr."""
    return Console(stderr=True, highlight=False)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.FAILURE,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {escape(message)}")
    raise SystemExit(code)


@contextmanager
def storage_errors(console: Console | None = None) -> Iterator[None]:
    """Translate version store errors into CLI exits.

    Raises:
        SystemExit: With the exit code matching the storage error.
    """
    try:
        yield
    except ArtifactValidationError as e:
        exit_with_error(str(e), ExitCode.VALIDATION_FAILED, console=console)
    except (ArtifactNotFoundError, VersionNotFoundError) as e:
        exit_with_error(str(e), ExitCode.NOT_FOUND, console=console)
    except VersionConflictError as e:
        exit_with_error(
            f"{e} (re-read the history and retry)", ExitCode.CONFLICT, console=console
        )
    except StorageUnavailableError as e:
        exit_with_error(str(e), ExitCode.STORAGE_UNAVAILABLE, console=console)
