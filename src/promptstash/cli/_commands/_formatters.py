"""Output formatters for reports and version history."""

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

from promptstash.utils import dump_json
from promptstash.validation import Severity

if TYPE_CHECKING:
    from rich.console import Console

    from promptstash.validation import ValidationReport
    from promptstash.versioning import IntegrityProblem, Version

_SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}


def print_report(console: Console, report: ValidationReport, path: str) -> None:
    """Print a validation report as human-readable text."""
    if not report.issues:
        console.print(f"[green]✓[/green] {escape(path)}: no issues")
        return

    for issue in report.issues:
        style = _SEVERITY_STYLES[issue.severity]
        location = escape(issue.path or path)
        console.print(
            f"{location}: [{style}]{issue.severity.upper()}[/{style}] "
            f"\\[{issue.code}] {escape(issue.message)}"
        )
        if issue.suggestion:
            console.print(f"  [dim]→ {escape(issue.suggestion)}[/dim]")

    status = "[red]invalid[/red]" if report.is_blocking else "[green]valid[/green]"
    console.print(
        f"{escape(path)}: {status} "
        f"({report.error_count} error(s), {report.warning_count} warning(s))"
    )


def version_to_dict(version: Version) -> dict[str, object]:
    return version.model_dump(exclude={"content"}) | {"size": len(version.content)}


def history_table(versions: list[Version]) -> Table:
    """Build a table summarizing an artifact's versions."""
    table = Table(title="Version history")
    table.add_column("Version", justify="right")
    table.add_column("Created", no_wrap=True)
    table.add_column("Author")
    table.add_column("Size", justify="right")
    table.add_column("Note")

    for version in versions:
        note = f"revert of v{version.reverted_from}" if version.reverted_from else ""
        table.add_row(
            str(version.number),
            version.created_at,
            escape(version.created_by),
            str(len(version.content)),
            note,
        )
    return table


def history_json(versions: list[Version]) -> str:
    """Format version metadata as JSON (content omitted)."""
    return dump_json([version_to_dict(v) for v in versions], indent=True)


def print_problems(console: Console, problems: list[IntegrityProblem]) -> None:
    """Print ledger integrity problems."""
    if not problems:
        console.print("[green]✓[/green] Version ledger is consistent")
        return
    for problem in problems:
        console.print(f"[red]{problem.kind}[/red] {escape(problem.message)}")
