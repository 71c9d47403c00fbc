"""PromptStash exceptions."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from promptstash.validation import ValidationReport


class PromptStashError(Exception):
    """Base exception for PromptStash errors."""


# =============================================================================
# Validation Exceptions
# =============================================================================


class ValidationStageError(PromptStashError):
    """Base exception for failures raised by individual validation stages.

    The validation engine converts these into report issues; they never
    escape ``validate``.
    """

    def __init__(self, message: str, *, code: str) -> None:
        """Initialize with error message and issue code.

        Args:
            message: Human-readable error message.
            code: Stable issue code (e.g., "NOT_RECOGNIZED").
        """
        super().__init__(message)
        self.code: str = code


class ClassificationError(ValidationStageError):
    """Raised when a path does not represent any known artifact kind.

    Attributes:
        code: Always "NOT_RECOGNIZED".
        path: The path that could not be classified.
    """

    def __init__(self, message: str, *, path: str) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The path that could not be classified.
        """
        super().__init__(message, code="NOT_RECOGNIZED")
        self.path: str = path


class FrontmatterParseError(ValidationStageError):
    """Raised when a metadata header cannot be extracted from text.

    Attributes:
        code: "NO_FRONTMATTER" or "INVALID_SYNTAX".
        body: The body text following the header block, when the block
            boundaries were found but its content could not be parsed.
        line: One-based line of the syntax error inside the document, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str,
        body: str | None = None,
        line: int | None = None,
    ) -> None:
        """Initialize with error message and parse context."""
        super().__init__(message, code=code)
        self.body: str | None = body
        self.line: int | None = line


class ArtifactValidationError(PromptStashError):
    """Raised when content submitted for a commit has blocking issues.

    Attributes:
        artifact_id: The artifact the content was submitted for.
        report: The validation report holding the blocking issues.
    """

    def __init__(
        self, message: str, *, artifact_id: str, report: ValidationReport
    ) -> None:
        """Initialize with error message and the failing report."""
        super().__init__(message)
        self.artifact_id: str = artifact_id
        self.report: ValidationReport = report


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(PromptStashError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: object,
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: object = value
        self.expected: str = expected
        self.source: str | None = source


# =============================================================================
# Storage Exceptions
# =============================================================================


class StorageError(PromptStashError):
    """Base exception for version store operations."""


class VersionConflictError(StorageError):
    """Raised when a commit presents a stale base version.

    The caller must re-read the artifact and retry with the current version.

    Attributes:
        artifact_id: The artifact whose commit was rejected.
        expected: The base version the caller presented.
        actual: The version that is actually current (None if unknown).
    """

    def __init__(
        self,
        message: str,
        *,
        artifact_id: str,
        expected: int,
        actual: int | None = None,
    ) -> None:
        """Initialize with error message and concurrency context.

        Args:
            message: Human-readable error message.
            artifact_id: The artifact whose commit was rejected.
            expected: The base version the caller presented.
            actual: The version that is actually current.
        """
        super().__init__(message)
        self.artifact_id: str = artifact_id
        self.expected: int = expected
        self.actual: int | None = actual


class ArtifactNotFoundError(StorageError, KeyError):
    """Raised when an artifact does not exist in the store.

    Attributes:
        artifact_id: The ID of the artifact that was not found.
    """

    def __init__(self, message: str, *, artifact_id: str) -> None:
        """Initialize with error message and artifact context.

        Args:
            message: Human-readable error message.
            artifact_id: The ID of the artifact that was not found.
        """
        super().__init__(message)
        self.artifact_id: str = artifact_id

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class VersionNotFoundError(StorageError, KeyError):
    """Raised when a requested version number does not exist.

    Attributes:
        artifact_id: The artifact that was searched.
        number: The missing version number.
    """

    def __init__(self, message: str, *, artifact_id: str, number: int) -> None:
        """Initialize with error message and version context."""
        super().__init__(message)
        self.artifact_id: str = artifact_id
        self.number: int = number

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class StorageUnavailableError(StorageError, TimeoutError):
    """Raised when the backing store cannot be reached within the timeout.

    Attributes:
        operation: The store operation that timed out ("commit", "revert", ...).
        timeout: The timeout in seconds that elapsed, if known.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        timeout: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and operation context."""
        super().__init__(message)
        self.operation: str = operation
        self.timeout: float | None = timeout
        self.cause: Exception | None = cause
