"""Version store protocol."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from promptstash.enums import ArtifactKind

    from ._integrity import IntegrityProblem
    from ._models import Artifact, Version


@runtime_checkable
class VersionStore(Protocol):
    """Append-only ledger of content snapshots per artifact.

    Version numbers of an artifact are contiguous from 1. Every write is
    optimistic: it names the version it expects to be current and is
    rejected with :class:`~promptstash.exceptions.VersionConflictError`
    when another writer got there first. Versions are never modified or
    deleted.
    """

    def create(
        self,
        artifact_id: str,
        kind: ArtifactKind,
        path: str,
        content: str,
        author: str,
    ) -> Version:
        """Register a new artifact with its first version.

        Raises:
            VersionConflictError: If the artifact already exists.
            StorageUnavailableError: If the store does not respond in time.
        """
        ...

    def commit(
        self,
        artifact_id: str,
        content: str,
        author: str,
        expected_base_version: int,
    ) -> Version:
        """Append a version on top of ``expected_base_version``.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist.
            VersionConflictError: If the current version is not the expected one.
            StorageUnavailableError: If the store does not respond in time.
        """
        ...

    def revert(
        self,
        artifact_id: str,
        target_version: int,
        author: str,
        expected_base_version: int,
    ) -> Version:
        """Append a copy of an earlier version's content.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist.
            VersionNotFoundError: If the target version does not exist.
            VersionConflictError: If the current version is not the expected one.
            StorageUnavailableError: If the store does not respond in time.
        """
        ...

    def get_history(self, artifact_id: str) -> list[Version]:
        """Return all versions of an artifact, oldest first.

        Unknown artifacts have an empty history.
        """
        ...

    def get_version(self, artifact_id: str, number: int) -> Version:
        """Return a single version.

        Raises:
            VersionNotFoundError: If the version does not exist.
        """
        ...

    def get_artifact(self, artifact_id: str) -> Artifact:
        """Return an artifact at its current version.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist.
        """
        ...

    def list_artifacts(self) -> list[Artifact]:
        """Return all artifacts, ordered by identifier."""
        ...

    def check_integrity(self) -> list[IntegrityProblem]:
        """Scan the ledger for gaps, duplicates and stale pointers."""
        ...
