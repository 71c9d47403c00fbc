# ruff: noqa: A002, D415
"""Validate command."""

from typing import Annotated

from cyclopts import Parameter

from promptstash.cli._context import CLIContext
from promptstash.enums import ArtifactKind
from promptstash.utils import dump_json
from promptstash.validation import FrontmatterCache, LocalFileSystemView, validate_path

from ._formatters import print_report
from ._shared import ExitCode, OutputFormat, exit_with_error, get_console


def validate_command(
    *paths: str,
    kind: Annotated[
        ArtifactKind | None,
        Parameter(help="Validate as this kind instead of detecting it"),
    ] = None,
    format: Annotated[
        OutputFormat, Parameter(help="Output format (text or json)")
    ] = OutputFormat.TEXT,
) -> None:
    """Validate one or more artifacts

    Detects each artifact's kind from its location and runs the structural,
    header, content and hook checks for it. Nothing is stored.

    Args:
        paths: Artifact paths (skill directories, agent or command files,
            tool manifests, hook configurations)
        kind: Validate as this kind instead of detecting it
        format: Output format
    """
    if not paths:
        exit_with_error("No paths given", ExitCode.FAILURE)

    ctx = CLIContext.get_current()
    view = LocalFileSystemView(ctx.root)
    cache = FrontmatterCache()
    console = get_console()

    reports = [
        validate_path(
            path,
            view,
            kind=kind,
            settings=ctx.config.validation,
            cache=cache,
            logger=ctx.logger,
        )
        for path in paths
    ]

    if format is OutputFormat.JSON:
        payload = [
            {"path": path, **report.to_dict()}
            for path, report in zip(paths, reports, strict=True)
        ]
        console.print_json(dump_json(payload))
    else:
        for path, report in zip(paths, reports, strict=True):
            print_report(console, report, path)

    if ctx.logger:
        ctx.logger.info(
            "validate_command",
            paths=list(paths),
            blocking=[r.is_blocking for r in reports],
        )

    if any(report.is_blocking for report in reports):
        raise SystemExit(ExitCode.VALIDATION_FAILED)
