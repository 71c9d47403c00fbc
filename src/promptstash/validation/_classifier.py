"""Artifact kind classification."""

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from promptstash.config import ValidationSettings
from promptstash.enums import ArtifactKind
from promptstash.exceptions import ClassificationError

from ._fs import join_path, normalize_path

if TYPE_CHECKING:
    from ._fs import FileSystemView


def find_entry_files(
    path: str, fs_view: FileSystemView, settings: ValidationSettings
) -> list[str]:
    """Return the names of files in a directory that match the entry file name.

    Matching is case-insensitive, so ``SKILL.md`` and ``skill.md`` both count.
    """
    wanted = settings.skill_entry_file.lower()
    matches: list[str] = []
    for name in fs_view.list_dir(path):
        if name.lower() != wanted:
            continue
        entry = fs_view.stat(join_path(path, name))
        if entry is not None and not entry.is_dir:
            matches.append(name)
    return matches


def location_root(
    path: str,
    settings: ValidationSettings,
    *,
    roots: tuple[str, ...] | None = None,
) -> tuple[str, int] | None:
    """Find the innermost agents/commands root segment above a path.

    Args:
        path: Candidate artifact path.
        settings: Validation settings naming the roots.
        roots: Only look for these segments. Defaults to both roots.

    Returns:
        The root name and its index among the path's parent segments, or
        None if the path does not sit under any of the roots.
    """
    parents = PurePosixPath(normalize_path(path)).parts[:-1]
    if roots is None:
        roots = (settings.agents_root, settings.commands_root)
    for index in range(len(parents) - 1, -1, -1):
        if parents[index] in roots:
            return parents[index], index
    return None


def classify(
    path: str,
    fs_view: FileSystemView,
    settings: ValidationSettings | None = None,
) -> ArtifactKind:
    """Decide which artifact kind a path represents.

    Rules are applied in order and the first match wins:

    1. A directory holding one or more entry files is a skill.
    2. Any other directory is not recognized.
    3. A metadata file under an agents or commands root is an agent or command.
    4. A file with a tool manifest name is a tool manifest.
    5. A file with a hooks configuration name is a hook set.

    Args:
        path: Candidate path.
        fs_view: View used to inspect the path.
        settings: Naming conventions. Defaults are used if omitted.

    Returns:
        The artifact kind.

    Raises:
        ClassificationError: If the path matches none of the rules.
    """
    settings = settings or ValidationSettings()
    entry = fs_view.stat(path)
    if entry is None:
        msg = f"Path does not exist: {path}"
        raise ClassificationError(msg, path=path)

    if entry.is_dir:
        if find_entry_files(path, fs_view, settings):
            return ArtifactKind.SKILL
        msg = f"Directory {path} has no {settings.skill_entry_file} entry file"
        raise ClassificationError(msg, path=path)

    name = PurePosixPath(normalize_path(path)).name
    if name.lower().endswith(settings.metadata_extension.lower()):
        root = location_root(path, settings)
        if root is not None:
            root_name, _ = root
            if root_name == settings.agents_root:
                return ArtifactKind.AGENT
            return ArtifactKind.COMMAND

    if name in settings.tool_manifest_names:
        return ArtifactKind.TOOL_MANIFEST
    if name in settings.hook_config_names:
        return ArtifactKind.HOOK_SET

    msg = f"Cannot determine artifact kind of {path}"
    raise ClassificationError(msg, path=path)
