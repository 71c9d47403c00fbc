"""Validation engine.

Runs the stages for one artifact and merges their issues into a single
:class:`ValidationReport`::

    classify -> structure -> parse -> schema -> content -> hooks/manifest

Validation never raises for content problems and has no side effects.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from promptstash.config import ValidationSettings
from promptstash.enums import ArtifactKind
from promptstash.exceptions import ClassificationError, FrontmatterParseError

from ._classifier import classify, find_entry_files
from ._content import validate_content
from ._frontmatter import FrontmatterCache
from ._fs import MemoryFileSystemView, join_path, normalize_path
from ._hooks import validate_hook_set
from ._manifest import validate_manifest
from ._schema import validate_header
from ._structure import parse_structured, validate_structure
from ._types import IssueCollector, ValidationReport, ValidationStage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from structlog.typing import FilteringBoundLogger

    from ._fs import FileSystemView
    from ._types import ValidationIssue

MARKDOWN_KINDS = frozenset(
    {ArtifactKind.AGENT, ArtifactKind.COMMAND, ArtifactKind.SKILL}
)
"""Kinds whose content is a markdown document with a frontmatter header."""

_PARSE_SUGGESTIONS = {
    "NO_FRONTMATTER": "Start the file with a '---' block holding name and description",
    "INVALID_SYNTAX": "Fix the YAML between the '---' delimiters",
}


@dataclass(slots=True, frozen=True)
class ValidationRequest:
    """One artifact to validate in a batch.

    Attributes:
        kind: The artifact kind.
        raw_content: Raw bytes (or text) of the artifact.
        path: Artifact path (the directory for skills).
        fs_view: View used for structural checks. If None, a view holding
            only this artifact is used.
    """

    kind: ArtifactKind
    raw_content: bytes | str
    path: str
    fs_view: FileSystemView | None = None


def content_view(
    kind: ArtifactKind,
    path: str,
    raw_content: bytes | str,
    settings: ValidationSettings | None = None,
) -> MemoryFileSystemView:
    """Build a file system view that holds a single artifact.

    Skills are placed at ``<path>/<entry file>``; other kinds at ``path``.
    """
    settings = settings or ValidationSettings()
    data = raw_content.encode("utf-8") if isinstance(raw_content, str) else raw_content
    if kind is ArtifactKind.SKILL:
        return MemoryFileSystemView({join_path(path, settings.skill_entry_file): data})
    return MemoryFileSystemView({path: data})


def _decode(
    raw_content: bytes | str, path: str
) -> tuple[str | None, list[ValidationIssue]]:
    if isinstance(raw_content, str):
        return raw_content, []
    collector = IssueCollector(ValidationStage.PARSE)
    try:
        return raw_content.decode("utf-8"), []
    except UnicodeDecodeError as e:
        collector.add_error(
            "INVALID_ENCODING",
            f"Content is not valid UTF-8 (byte {e.start})",
            path=path,
            suggestion="Save the file as UTF-8",
        )
        return None, collector.issues


def _validate_markdown(
    kind: ArtifactKind,
    text: str,
    path: str,
    settings: ValidationSettings,
    cache: FrontmatterCache,
) -> list[ValidationIssue]:
    collector = IssueCollector(ValidationStage.PARSE)
    issues: list[ValidationIssue] = []
    try:
        document = cache.parse(text)
    except FrontmatterParseError as e:
        location = f"{path}:{e.line}" if e.line else path
        collector.add_error(
            e.code, str(e), path=location, suggestion=_PARSE_SUGGESTIONS.get(e.code)
        )
        body = e.body if e.body is not None else text
    else:
        name = PurePosixPath(normalize_path(path)).name
        issues.extend(
            validate_header(
                kind,
                document.header,
                settings,
                artifact_name=name if kind is ArtifactKind.SKILL else None,
            )
        )
        body = document.body

    issues.extend(validate_content(body, settings, path=path))
    return [*collector.issues, *issues]


def _validate_structured(
    kind: ArtifactKind, text: str, path: str, settings: ValidationSettings
) -> list[ValidationIssue]:
    document, issues = parse_structured(text, path)
    if issues:
        return issues
    if kind is ArtifactKind.HOOK_SET:
        return validate_hook_set(document, settings)
    return validate_manifest(document)


def validate(  # noqa: PLR0913
    kind: ArtifactKind,
    raw_content: bytes | str,
    path: str,
    fs_view: FileSystemView | None = None,
    *,
    settings: ValidationSettings | None = None,
    cache: FrontmatterCache | None = None,
    logger: FilteringBoundLogger | None = None,
) -> ValidationReport:
    """Validate one artifact.

    Args:
        kind: The artifact kind.
        raw_content: Raw bytes of the artifact (the entry file for skills).
        path: Artifact path (the directory for skills).
        fs_view: View used for structural checks. If None, a view holding
            only this artifact is used.
        settings: Validation settings. Defaults are used if omitted.
        cache: Parse cache shared with other calls in the same batch.
        logger: Optional logger for debug-level logging.

    Returns:
        The merged report. Identical inputs always produce identical reports.
    """
    settings = settings or ValidationSettings()
    cache = cache if cache is not None else FrontmatterCache()
    view = fs_view
    if view is None:
        view = content_view(kind, path, raw_content, settings)

    issues = validate_structure(kind, path, view, settings)
    text, decode_issues = _decode(raw_content, path)
    issues.extend(decode_issues)

    if text is not None:
        if kind in MARKDOWN_KINDS:
            issues.extend(_validate_markdown(kind, text, path, settings, cache))
        else:
            issues.extend(_validate_structured(kind, text, path, settings))

    report = ValidationReport.from_issues(issues)
    if logger:
        logger.debug(
            "validation_completed",
            kind=str(kind),
            path=path,
            errors=report.error_count,
            warnings=report.warning_count,
            codes=report.codes(),
        )
    return report


def read_artifact(
    kind: ArtifactKind,
    path: str,
    fs_view: FileSystemView,
    settings: ValidationSettings | None = None,
) -> bytes | None:
    """Read the raw content of an artifact through a view.

    For a skill directory this is its single entry file.

    Returns:
        The raw bytes, or None if there is no single readable file.
    """
    settings = settings or ValidationSettings()
    entry = fs_view.stat(path)
    if entry is None:
        return None
    if not entry.is_dir:
        return fs_view.read_bytes(path)
    if kind is not ArtifactKind.SKILL:
        return None
    entries = find_entry_files(path, fs_view, settings)
    if len(entries) != 1:
        return None
    return fs_view.read_bytes(join_path(path, entries[0]))


def validate_path(  # noqa: PLR0913
    path: str,
    fs_view: FileSystemView,
    *,
    kind: ArtifactKind | None = None,
    settings: ValidationSettings | None = None,
    cache: FrontmatterCache | None = None,
    logger: FilteringBoundLogger | None = None,
) -> ValidationReport:
    """Classify a path, read it through the view and validate it.

    Args:
        path: Candidate artifact path.
        fs_view: View used to inspect and read the path.
        kind: Skip classification and validate as this kind.
        settings: Validation settings. Defaults are used if omitted.
        cache: Parse cache shared with other calls in the same batch.
        logger: Optional logger for debug-level logging.

    Returns:
        The merged report. A path that cannot be classified yields a report
        holding a single ``NOT_RECOGNIZED`` error.
    """
    settings = settings or ValidationSettings()
    if kind is None:
        try:
            kind = classify(path, fs_view, settings)
        except ClassificationError as e:
            collector = IssueCollector(ValidationStage.CLASSIFICATION)
            collector.add_error(e.code, str(e), path=path)
            if logger:
                logger.debug("validation_unclassified", path=path)
            return ValidationReport.from_issues(collector.issues)

    raw_content = read_artifact(kind, path, fs_view, settings)
    if raw_content is None:
        return ValidationReport.from_issues(
            validate_structure(kind, path, fs_view, settings)
        )
    return validate(
        kind,
        raw_content,
        path,
        fs_view,
        settings=settings,
        cache=cache,
        logger=logger,
    )


def validate_many(
    requests: Sequence[ValidationRequest],
    *,
    settings: ValidationSettings | None = None,
    max_workers: int | None = None,
    logger: FilteringBoundLogger | None = None,
) -> list[ValidationReport]:
    """Validate several artifacts with one shared parse cache.

    Args:
        requests: Artifacts to validate.
        settings: Validation settings. Defaults are used if omitted.
        max_workers: Run on a thread pool of this size. Sequential if None.
        logger: Optional logger for debug-level logging.

    Returns:
        One report per request, in input order.
    """
    cache = FrontmatterCache()

    def run(request: ValidationRequest) -> ValidationReport:
        return validate(
            request.kind,
            request.raw_content,
            request.path,
            request.fs_view,
            settings=settings,
            cache=cache,
            logger=logger,
        )

    if max_workers is None:
        reports = [run(request) for request in requests]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            reports = list(executor.map(run, requests))

    if logger:
        logger.debug(
            "validation_batch_completed",
            count=len(reports),
            cache_hits=cache.hits,
            cache_misses=cache.misses,
        )
    return reports
