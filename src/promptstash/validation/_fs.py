"""Read-only file system views used by the classifier and validators.

Validators never touch storage directly. They inspect a candidate artifact
through a :class:`FileSystemView`, which is either backed by a local
directory or by an in-memory mapping of paths to bytes.
"""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class EntryStat:
    """Minimal stat information about a path.

    Attributes:
        is_dir: True if the path is a directory.
        size: Size in bytes (0 for directories).
    """

    is_dir: bool
    size: int = 0


class FileSystemView(Protocol):
    """Read-only access to the shape and bytes of candidate artifacts."""

    def stat(self, path: str) -> EntryStat | None:
        """Return stat information, or None if nothing exists at the path."""
        ...

    def list_dir(self, path: str) -> list[str]:
        """Return the sorted entry names of a directory (empty if not a directory)."""
        ...

    def read_bytes(self, path: str) -> bytes:
        """Return the bytes of a file.

        Raises:
            FileNotFoundError: If the path is not a file.
        """
        ...


def normalize_path(path: str) -> str:
    """Normalize a path to POSIX form without a leading ``./``."""
    return PurePosixPath(path.replace("\\", "/")).as_posix()


def join_path(parent: str, name: str) -> str:
    """Join a directory path and an entry name."""
    return (PurePosixPath(normalize_path(parent)) / name).as_posix()


class LocalFileSystemView:
    """File system view over a local directory tree.

    Relative paths are resolved against ``root``; absolute paths are used
    as given.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root: Path = root if root is not None else Path.cwd()

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate

    def stat(self, path: str) -> EntryStat | None:
        target = self._resolve(path)
        if target.is_dir():
            return EntryStat(is_dir=True)
        if target.is_file():
            return EntryStat(is_dir=False, size=target.stat().st_size)
        return None

    def list_dir(self, path: str) -> list[str]:
        target = self._resolve(path)
        if not target.is_dir():
            return []
        return sorted(child.name for child in target.iterdir())

    def read_bytes(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()


class MemoryFileSystemView:
    """File system view over an in-memory mapping of file paths to bytes.

    Directories are implied by the file paths. Empty directories can be
    declared explicitly.

    Example:
        >>> view = MemoryFileSystemView({"my-skill/SKILL.md": b"---\\n---\\n"})
        >>> view.list_dir("my-skill")
        ['SKILL.md']
    """

    def __init__(
        self,
        files: Mapping[str, bytes] | None = None,
        *,
        directories: tuple[str, ...] = (),
    ) -> None:
        self._files: dict[str, bytes] = {
            normalize_path(path): data for path, data in (files or {}).items()
        }
        self._dirs: set[str] = {normalize_path(path) for path in directories}
        for path in [*self._files, *self._dirs]:
            self._dirs.update(parent.as_posix() for parent in PurePosixPath(path).parents)

    def stat(self, path: str) -> EntryStat | None:
        key = normalize_path(path)
        if key in self._files:
            return EntryStat(is_dir=False, size=len(self._files[key]))
        if key in self._dirs:
            return EntryStat(is_dir=True)
        return None

    def list_dir(self, path: str) -> list[str]:
        key = normalize_path(path)
        if key not in self._dirs:
            return []
        names = {
            PurePosixPath(candidate).name
            for candidate in [*self._files, *self._dirs]
            if candidate != key and PurePosixPath(candidate).parent.as_posix() == key
        }
        return sorted(names)

    def read_bytes(self, path: str) -> bytes:
        key = normalize_path(path)
        try:
            return self._files[key]
        except KeyError:
            msg = f"No such file: {path}"
            raise FileNotFoundError(msg) from None
