# ruff: noqa: A002, D415
"""Version store commands: create, commit, revert, history and check."""

from pathlib import Path
from typing import Annotated

from cyclopts import Parameter

from promptstash.cli._context import CLIContext
from promptstash.enums import ArtifactKind
from promptstash.exceptions import ClassificationError
from promptstash.service import ArtifactService
from promptstash.validation import (
    LocalFileSystemView,
    classify,
    read_artifact,
    validate_path,
)
from promptstash.versioning import SQLiteVersionStore

from ._formatters import history_json, history_table, print_problems, print_report
from ._shared import ExitCode, OutputFormat, exit_with_error, get_console, storage_errors


def open_service(ctx: CLIContext) -> ArtifactService:
    """Create an artifact service over the configured SQLite database."""
    storage = ctx.config.storage
    db_path = Path(storage.database)
    if not db_path.is_absolute():
        db_path = ctx.root / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    store = SQLiteVersionStore(db_path, timeout=storage.timeout, logger=ctx.logger)
    return ArtifactService(store, ctx.config.validation, logger=ctx.logger)


def create_command(
    artifact_id: str,
    path: str,
    /,
    *,
    author: Annotated[str, Parameter(help="Who is creating the artifact")],
    kind: Annotated[
        ArtifactKind | None,
        Parameter(help="Artifact kind (detected from the path if omitted)"),
    ] = None,
) -> None:
    """Validate an artifact and store it as version 1

    Args:
        artifact_id: Identifier for the new artifact
        path: Path of the artifact to store
        author: Who is creating the artifact
        kind: Artifact kind (detected from the path if omitted)
    """
    ctx = CLIContext.get_current()
    settings = ctx.config.validation
    view = LocalFileSystemView(ctx.root)
    console = get_console()

    if kind is None:
        try:
            kind = classify(path, view, settings)
        except ClassificationError as e:
            exit_with_error(str(e), ExitCode.VALIDATION_FAILED)

    raw_content = read_artifact(kind, path, view, settings)
    if raw_content is None:
        print_report(console, validate_path(path, view, kind=kind, settings=settings), path)
        raise SystemExit(ExitCode.VALIDATION_FAILED)

    with storage_errors():
        result = open_service(ctx).validate_and_create(
            artifact_id, kind, path, raw_content, author, view
        )

    print_report(console, result.report, path)
    if result.version is None:
        raise SystemExit(ExitCode.VALIDATION_FAILED)
    console.print(f"Created {artifact_id} ({kind}) at version {result.version.number}")


def commit_command(
    artifact_id: str,
    path: str | None = None,
    /,
    *,
    author: Annotated[str, Parameter(help="Who is committing the change")],
    base: Annotated[int, Parameter(help="Version the change is based on")],
) -> None:
    """Validate new content for an artifact and commit it

    Args:
        artifact_id: Identifier of the artifact
        path: Where to read the new content (defaults to the stored path)
        author: Who is committing the change
        base: Version the change is based on
    """
    ctx = CLIContext.get_current()
    settings = ctx.config.validation
    view = LocalFileSystemView(ctx.root)
    console = get_console()

    with storage_errors():
        service = open_service(ctx)
        artifact = service.store.get_artifact(artifact_id)

    source = path if path is not None else artifact.path
    raw_content = read_artifact(artifact.kind, source, view, settings)
    if raw_content is None:
        report = validate_path(source, view, kind=artifact.kind, settings=settings)
        print_report(console, report, source)
        raise SystemExit(ExitCode.VALIDATION_FAILED)

    # Structural checks only apply when the content sits at the stored path
    fs_view = view if source == artifact.path else None
    with storage_errors():
        result = service.validate_and_commit(
            artifact_id, raw_content, author, base, fs_view
        )

    print_report(console, result.report, source)
    if result.version is None:
        raise SystemExit(ExitCode.VALIDATION_FAILED)
    console.print(f"Committed {artifact_id} version {result.version.number}")


def revert_command(
    artifact_id: str,
    version: int,
    /,
    *,
    author: Annotated[str, Parameter(help="Who is reverting")],
    base: Annotated[int, Parameter(help="Version currently believed to be latest")],
) -> None:
    """Restore an earlier version's content as a new version

    Args:
        artifact_id: Identifier of the artifact
        version: Version whose content to restore
        author: Who is reverting
        base: Version currently believed to be latest
    """
    ctx = CLIContext.get_current()
    with storage_errors():
        created = open_service(ctx).revert(artifact_id, version, author, base)
    get_console().print(
        f"Reverted {artifact_id} to the content of version {version} "
        f"as version {created.number}"
    )


def history_command(
    artifact_id: str,
    /,
    *,
    format: Annotated[
        OutputFormat, Parameter(help="Output format (table or json)")
    ] = OutputFormat.TABLE,
) -> None:
    """Show the version history of an artifact

    Args:
        artifact_id: Identifier of the artifact
        format: Output format
    """
    ctx = CLIContext.get_current()
    with storage_errors():
        service = open_service(ctx)
        _ = service.store.get_artifact(artifact_id)
        versions = service.get_history(artifact_id)

    console = get_console()
    if format is OutputFormat.JSON:
        console.print_json(history_json(versions))
    else:
        console.print(history_table(versions))


def check_command() -> None:
    """Check the version ledger for gaps, duplicates and stale pointers"""
    ctx = CLIContext.get_current()
    with storage_errors():
        problems = open_service(ctx).store.check_integrity()

    print_problems(get_console(), problems)
    if problems:
        raise SystemExit(ExitCode.FAILURE)
