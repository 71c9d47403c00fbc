"""Directory and file shape rules per artifact kind."""

import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import orjson

from promptstash.config import ValidationSettings
from promptstash.enums import ArtifactKind
from promptstash.utils import load_json

from ._classifier import find_entry_files, location_root
from ._fs import join_path, normalize_path
from ._types import IssueCollector, ValidationStage

if TYPE_CHECKING:
    from ._fs import FileSystemView
    from ._types import ValidationIssue


def _validate_skill_shape(
    path: str,
    fs_view: FileSystemView,
    settings: ValidationSettings,
    collector: IssueCollector,
) -> None:
    entry = fs_view.stat(path)
    if entry is None:
        collector.add_error("PATH_NOT_FOUND", f"Path does not exist: {path}", path=path)
        return
    if not entry.is_dir:
        collector.add_error(
            "NOT_DIRECTORY",
            "A skill must be a directory",
            path=path,
            suggestion=(
                f"Create a directory named after the skill containing "
                f"{settings.skill_entry_file}"
            ),
        )
        return

    dir_name = PurePosixPath(normalize_path(path)).name
    if not re.fullmatch(settings.name_pattern, dir_name):
        collector.add_error(
            "INVALID_NAME_FORMAT",
            f"Skill directory name {dir_name!r} must be lowercase words "
            "separated by hyphens",
            path=path,
            suggestion="Rename the directory, e.g. 'my-skill'",
        )

    entries = find_entry_files(path, fs_view, settings)
    if not entries:
        collector.add_error(
            "MISSING_ENTRY_FILE",
            f"Skill directory has no {settings.skill_entry_file}",
            path=path,
            suggestion=f"Add a {settings.skill_entry_file} file to the directory",
        )
    elif len(entries) > 1:
        collector.add_error(
            "MULTIPLE_ENTRY_DEFINITIONS",
            f"Skill directory defines {len(entries)} entry files: {', '.join(entries)}",
            path=path,
            suggestion=f"Keep a single {settings.skill_entry_file}",
        )

    extension = settings.metadata_extension.lower()
    for name in fs_view.list_dir(path):
        if name in entries or not name.lower().endswith(extension):
            continue
        member = join_path(path, name)
        stat = fs_view.stat(member)
        if stat is not None and not stat.is_dir:
            collector.add_warning(
                "MARKDOWN_IN_ROOT",
                f"{name} sits next to {settings.skill_entry_file}",
                path=member,
                suggestion="Move reference material into a references/ folder",
            )


def _validate_single_file_shape(
    kind: ArtifactKind,
    path: str,
    fs_view: FileSystemView,
    settings: ValidationSettings,
    collector: IssueCollector,
) -> None:
    entry = fs_view.stat(path)
    if entry is None:
        collector.add_error("PATH_NOT_FOUND", f"Path does not exist: {path}", path=path)
        return
    if entry.is_dir:
        collector.add_error(
            "NOT_A_FILE",
            f"A {kind} must be a single file, not a directory",
            path=path,
        )
        return
    if kind not in (ArtifactKind.AGENT, ArtifactKind.COMMAND):
        return

    file_path = PurePosixPath(normalize_path(path))
    if not file_path.name.lower().endswith(settings.metadata_extension.lower()):
        collector.add_error(
            "INVALID_EXTENSION",
            f"A {kind} file must use the {settings.metadata_extension} extension",
            path=path,
        )

    expected_root = (
        settings.agents_root if kind is ArtifactKind.AGENT else settings.commands_root
    )
    root = location_root(path, settings, roots=(expected_root,))
    if root is not None and root[1] != len(file_path.parts) - 2:
        collector.add_error(
            "FILE_IN_SUBDIRECTORY",
            f"A {kind} file must sit directly in its {expected_root}/ directory",
            path=path,
            suggestion=f"Move the file to {expected_root}/{file_path.name}",
        )

    if not re.fullmatch(settings.name_pattern, file_path.stem):
        collector.add_warning(
            "INVALID_NAME_FORMAT",
            f"File name {file_path.name!r} should be lowercase words "
            "separated by hyphens",
            path=path,
        )


def validate_structure(
    kind: ArtifactKind,
    path: str,
    fs_view: FileSystemView,
    settings: ValidationSettings | None = None,
) -> list[ValidationIssue]:
    """Check the on-disk shape of an artifact.

    Args:
        kind: The artifact kind.
        path: Path of the artifact (the directory for skills).
        fs_view: View used to inspect the path.
        settings: Naming conventions. Defaults are used if omitted.

    Returns:
        Structure-stage issues. Never raises for shape problems.
    """
    settings = settings or ValidationSettings()
    collector = IssueCollector(ValidationStage.STRUCTURE)
    if kind is ArtifactKind.SKILL:
        _validate_skill_shape(path, fs_view, settings, collector)
    else:
        _validate_single_file_shape(kind, path, fs_view, settings, collector)
    return collector.issues


def parse_structured(
    text: str, path: str | None = None
) -> tuple[object, list[ValidationIssue]]:
    """Parse a JSON artifact document.

    Returns:
        The parsed document (None on failure) and structure-stage issues.
    """
    collector = IssueCollector(ValidationStage.STRUCTURE)
    try:
        return load_json(text), collector.issues
    except orjson.JSONDecodeError as e:
        collector.add_error(
            "INVALID_SYNTAX",
            f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}",
            path=path,
        )
        return None, collector.issues
