"""Validate-then-persist orchestration.

:class:`ArtifactService` is the entry point collaborators such as the CLI
use. It guarantees that nothing reaches the version store unless its
validation report is free of errors.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from promptstash.config import ValidationSettings
from promptstash.exceptions import ArtifactValidationError
from promptstash.validation import validate

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from promptstash.enums import ArtifactKind
    from promptstash.validation import FileSystemView, ValidationReport
    from promptstash.versioning import Version, VersionStore


@dataclass(slots=True, frozen=True)
class SaveResult:
    """Outcome of a validate-then-persist call.

    Attributes:
        report: The validation report.
        version: The new version, or None if the report was blocking.
    """

    report: ValidationReport
    version: Version | None = None

    @property
    def saved(self) -> bool:
        return self.version is not None


def _as_text(raw_content: bytes | str) -> str:
    return raw_content if isinstance(raw_content, str) else raw_content.decode("utf-8")


class ArtifactService:
    """Validation and versioning behind one interface.

    Storage errors (conflict, not found, unavailable) propagate as
    exceptions. Validation problems are returned as reports.
    """

    def __init__(
        self,
        store: VersionStore,
        settings: ValidationSettings | None = None,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Version store that receives accepted content.
            settings: Validation settings. Defaults are used if omitted.
            logger: Optional logger for operation logging.
        """
        self.store: VersionStore = store
        self.settings: ValidationSettings = settings or ValidationSettings()
        self._logger: FilteringBoundLogger | None = logger

    def validate(
        self,
        kind: ArtifactKind,
        raw_content: bytes | str,
        path: str,
        fs_view: FileSystemView | None = None,
    ) -> ValidationReport:
        """Validate an artifact without persisting anything."""
        return validate(
            kind,
            raw_content,
            path,
            fs_view,
            settings=self.settings,
            logger=self._logger,
        )

    def commit(
        self,
        artifact_id: str,
        content: str,
        author: str,
        expected_base_version: int,
    ) -> Version:
        """Validate content against the artifact's kind and commit it.

        Raises:
            ArtifactValidationError: If the content has blocking issues.
            ArtifactNotFoundError: If the artifact does not exist.
            VersionConflictError: If the base version is stale.
            StorageUnavailableError: If the store does not respond in time.
        """
        result = self.validate_and_commit(
            artifact_id, content, author, expected_base_version
        )
        if result.version is None:
            msg = (
                f"Content for {artifact_id} has {result.report.error_count} "
                "blocking issue(s)"
            )
            raise ArtifactValidationError(
                msg, artifact_id=artifact_id, report=result.report
            )
        return result.version

    def revert(
        self,
        artifact_id: str,
        target_version: int,
        author: str,
        expected_base_version: int,
    ) -> Version:
        """Append a copy of an earlier version's content.

        The copied content was accepted when it was first committed and is
        not validated again.
        """
        version = self.store.revert(
            artifact_id, target_version, author, expected_base_version
        )
        if self._logger:
            self._logger.info(
                "artifact_reverted",
                artifact_id=artifact_id,
                number=version.number,
                reverted_from=target_version,
            )
        return version

    def get_history(self, artifact_id: str) -> list[Version]:
        """Return all versions of an artifact, oldest first."""
        return self.store.get_history(artifact_id)

    def validate_and_create(  # noqa: PLR0913
        self,
        artifact_id: str,
        kind: ArtifactKind,
        path: str,
        raw_content: bytes | str,
        author: str,
        fs_view: FileSystemView | None = None,
    ) -> SaveResult:
        """Validate a new artifact and, if acceptable, store it as version 1."""
        report = self.validate(kind, raw_content, path, fs_view)
        if report.is_blocking:
            self._log_rejected(artifact_id, report)
            return SaveResult(report)

        version = self.store.create(
            artifact_id, kind, path, _as_text(raw_content), author
        )
        if self._logger:
            self._logger.info("artifact_created", artifact_id=artifact_id, kind=str(kind))
        return SaveResult(report, version)

    def validate_and_commit(
        self,
        artifact_id: str,
        raw_content: bytes | str,
        author: str,
        expected_base_version: int,
        fs_view: FileSystemView | None = None,
    ) -> SaveResult:
        """Validate new content for an artifact and, if acceptable, commit it.

        The artifact's stored kind and path determine the rules applied.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist.
            VersionConflictError: If the base version is stale.
            StorageUnavailableError: If the store does not respond in time.
        """
        artifact = self.store.get_artifact(artifact_id)
        report = self.validate(artifact.kind, raw_content, artifact.path, fs_view)
        if report.is_blocking:
            self._log_rejected(artifact_id, report)
            return SaveResult(report)

        version = self.store.commit(
            artifact_id, _as_text(raw_content), author, expected_base_version
        )
        if self._logger:
            self._logger.info(
                "artifact_committed", artifact_id=artifact_id, number=version.number
            )
        return SaveResult(report, version)

    def _log_rejected(self, artifact_id: str, report: ValidationReport) -> None:
        if self._logger:
            self._logger.info(
                "artifact_rejected",
                artifact_id=artifact_id,
                codes=report.codes(),
                errors=report.error_count,
            )
