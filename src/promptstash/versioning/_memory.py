"""In-memory version store."""

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from promptstash.exceptions import (
    ArtifactNotFoundError,
    StorageUnavailableError,
    VersionConflictError,
    VersionNotFoundError,
)

from ._integrity import check_history
from ._models import Artifact, ArtifactRecord, Version, utc_now

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import FilteringBoundLogger

    from promptstash.enums import ArtifactKind

    from ._integrity import IntegrityProblem


class InMemoryVersionStore:
    """In-memory implementation of the version store.

    Useful for testing and development. Data is not persisted. All
    operations serialize on one lock; waiting longer than ``timeout``
    seconds for it raises :class:`StorageUnavailableError`.
    """

    _records: dict[str, ArtifactRecord]
    _versions: dict[str, list[Version]]
    _lock: threading.Lock
    _timeout: float
    _logger: FilteringBoundLogger | None

    def __init__(
        self,
        *,
        timeout: float = 5.0,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize an empty in-memory store.

        Args:
            timeout: Seconds to wait for the store lock.
            logger: Optional logger for debug-level operation logging.
                If None, no logging is performed.
        """
        self._records = {}
        self._versions = {}
        self._lock = threading.Lock()
        self._timeout = timeout
        self._logger = logger

    @contextmanager
    def _locked(self, operation: str) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._timeout):
            msg = f"Timed out after {self._timeout}s waiting for the version store"
            raise StorageUnavailableError(
                msg, operation=operation, timeout=self._timeout
            )
        try:
            yield
        finally:
            self._lock.release()

    def _record(self, artifact_id: str) -> ArtifactRecord:
        try:
            return self._records[artifact_id]
        except KeyError:
            msg = f"Artifact not found: {artifact_id}"
            raise ArtifactNotFoundError(msg, artifact_id=artifact_id) from None

    def _append(
        self,
        artifact_id: str,
        content: str,
        author: str,
        expected_base_version: int,
        reverted_from: int | None = None,
    ) -> Version:
        """Append a version. The caller must hold the lock."""
        record = self._record(artifact_id)
        if record.current_version != expected_base_version:
            if self._logger:
                self._logger.debug(
                    "store_conflict",
                    artifact_id=artifact_id,
                    expected=expected_base_version,
                    actual=record.current_version,
                )
            msg = (
                f"Artifact {artifact_id} is at version {record.current_version}, "
                f"not {expected_base_version}"
            )
            raise VersionConflictError(
                msg,
                artifact_id=artifact_id,
                expected=expected_base_version,
                actual=record.current_version,
            )

        now = utc_now()
        version = Version(
            artifact_id=artifact_id,
            number=expected_base_version + 1,
            content=content,
            created_at=now,
            created_by=author,
            reverted_from=reverted_from,
        )
        self._versions[artifact_id].append(version)
        self._records[artifact_id] = record.model_copy(
            update={"current_version": version.number, "updated_at": now}
        )
        return version

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
            StorageUnavailableError: If the lock is not acquired in time.
        """
        with self._locked("create"):
            existing = self._records.get(artifact_id)
            if existing is not None:
                msg = f"Artifact {artifact_id} already exists"
                raise VersionConflictError(
                    msg,
                    artifact_id=artifact_id,
                    expected=0,
                    actual=existing.current_version,
                )
            now = utc_now()
            version = Version(
                artifact_id=artifact_id,
                number=1,
                content=content,
                created_at=now,
                created_by=author,
            )
            self._records[artifact_id] = ArtifactRecord(
                id=artifact_id,
                kind=kind,
                path=path,
                current_version=1,
                created_at=now,
                updated_at=now,
            )
            self._versions[artifact_id] = [version]

        if self._logger:
            self._logger.debug(
                "store_create", artifact_id=artifact_id, kind=str(kind), author=author
            )
        return version

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
            StorageUnavailableError: If the lock is not acquired in time.
        """
        with self._locked("commit"):
            version = self._append(artifact_id, content, author, expected_base_version)
        if self._logger:
            self._logger.debug(
                "store_commit",
                artifact_id=artifact_id,
                number=version.number,
                author=author,
            )
        return version

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
            StorageUnavailableError: If the lock is not acquired in time.
        """
        with self._locked("revert"):
            _ = self._record(artifact_id)
            target = self._find(artifact_id, target_version)
            version = self._append(
                artifact_id,
                target.content,
                author,
                expected_base_version,
                reverted_from=target_version,
            )
        if self._logger:
            self._logger.debug(
                "store_revert",
                artifact_id=artifact_id,
                number=version.number,
                reverted_from=target_version,
                author=author,
            )
        return version

    def _find(self, artifact_id: str, number: int) -> Version:
        versions = self._versions.get(artifact_id, [])
        if 1 <= number <= len(versions):
            return versions[number - 1]
        msg = f"Version {number} of {artifact_id} not found"
        raise VersionNotFoundError(msg, artifact_id=artifact_id, number=number)

    def get_history(self, artifact_id: str) -> list[Version]:
        with self._locked("get_history"):
            return list(self._versions.get(artifact_id, []))

    def get_version(self, artifact_id: str, number: int) -> Version:
        with self._locked("get_version"):
            return self._find(artifact_id, number)

    def get_artifact(self, artifact_id: str) -> Artifact:
        with self._locked("get_artifact"):
            record = self._record(artifact_id)
            content = self._versions[artifact_id][-1].content
        return Artifact.from_record(record, content)

    def list_artifacts(self) -> list[Artifact]:
        with self._locked("list_artifacts"):
            snapshot = [
                (record, self._versions[artifact_id][-1].content)
                for artifact_id, record in sorted(self._records.items())
            ]
        return [Artifact.from_record(record, content) for record, content in snapshot]

    def check_integrity(self) -> list[IntegrityProblem]:
        with self._locked("check_integrity"):
            return [
                problem
                for artifact_id, record in sorted(self._records.items())
                for problem in check_history(
                    artifact_id,
                    (v.number for v in self._versions[artifact_id]),
                    record.current_version,
                )
            ]
