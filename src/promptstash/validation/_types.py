"""Issue and report types shared by all validators."""

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING

from promptstash.utils import dump_json

if TYPE_CHECKING:
    from collections.abc import Iterable


class Severity(StrEnum):
    """Severity level for validation issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationStage(IntEnum):
    """Validation stages, in the order the engine runs them."""

    CLASSIFICATION = 0
    STRUCTURE = 1
    PARSE = 2
    SCHEMA = 3
    CONTENT = 4
    HOOKS = 5
    MANIFEST = 6


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    """A single validation issue.

    Attributes:
        code: A stable code identifying the issue type.
        message: A human-readable description of the issue.
        severity: The severity level of the issue.
        stage: The stage that produced the issue. Used only for ordering.
        path: Optional location of the issue (file path or dotted field path).
        suggestion: Optional hint on how to fix the issue.
    """

    code: str
    message: str
    severity: Severity
    stage: ValidationStage
    path: str | None = None
    suggestion: str | None = None

    @property
    def is_blocking(self) -> bool:
        """Whether this issue prevents a commit."""
        return self.severity is Severity.ERROR

    def format(self) -> str:
        """Format the issue for display.

        Returns:
            Formatted string representation of the issue.
        """
        location = f"{self.path}: " if self.path else ""
        text = f"{location}{self.severity.upper()}: [{self.code}] {self.message}"
        if self.suggestion:
            text += f" ({self.suggestion})"
        return text

    def to_dict(self) -> dict[str, str]:
        """Return the wire representation, omitting unset optional fields."""
        data = {
            "code": self.code,
            "message": self.message,
            "severity": str(self.severity),
        }
        if self.path is not None:
            data["path"] = self.path
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


def _sort_key(issue: ValidationIssue) -> tuple[int, str]:
    return (issue.stage, issue.code)


@dataclass(slots=True, frozen=True)
class ValidationReport:
    """Ordered, immutable collection of validation issues.

    Issues are kept sorted by ``(stage, code)``. The sort is stable, so
    issues with equal keys keep the order the validators produced them in.

    Attributes:
        issues: The issues, in report order.
    """

    issues: tuple[ValidationIssue, ...] = ()

    @classmethod
    def from_issues(cls, *groups: Iterable[ValidationIssue]) -> ValidationReport:
        """Build a sorted report from one or more issue sequences."""
        merged = [issue for group in groups for issue in group]
        return cls(tuple(sorted(merged, key=_sort_key)))

    def merge(self, *others: ValidationReport) -> ValidationReport:
        """Return a new report holding this report's issues and the others'."""
        return ValidationReport.from_issues(
            self.issues, *(other.issues for other in others)
        )

    @property
    def is_blocking(self) -> bool:
        """Check whether any error-severity issue is present."""
        return any(issue.severity is Severity.ERROR for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        """Check if validation passed (no errors)."""
        return not self.is_blocking

    @property
    def errors(self) -> tuple[ValidationIssue, ...]:
        return self._with_severity(Severity.ERROR)

    @property
    def warnings(self) -> tuple[ValidationIssue, ...]:
        return self._with_severity(Severity.WARNING)

    @property
    def infos(self) -> tuple[ValidationIssue, ...]:
        return self._with_severity(Severity.INFO)

    @property
    def error_count(self) -> int:
        """Count the number of error-level issues."""
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        """Count the number of warning-level issues."""
        return len(self.warnings)

    def codes(self, severity: Severity | None = None) -> list[str]:
        """List issue codes in report order, optionally filtered by severity."""
        return [
            issue.code
            for issue in self.issues
            if severity is None or issue.severity is severity
        ]

    def _with_severity(self, severity: Severity) -> tuple[ValidationIssue, ...]:
        return tuple(issue for issue in self.issues if issue.severity is severity)

    def __len__(self) -> int:
        return len(self.issues)

    def to_dict(self) -> dict[str, object]:
        """Return the wire representation of the report."""
        return {
            "valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "issues": [issue.to_dict() for issue in self.issues],
        }

    def to_json(self, *, indent: bool = False) -> str:
        """Serialize the wire representation to JSON."""
        return dump_json(self.to_dict(), indent=indent)


@dataclass(slots=True)
class IssueCollector:
    """Accumulates issues for a single validation stage.

    Attributes:
        stage: The stage attached to every collected issue.
        issues: Issues collected so far.
    """

    stage: ValidationStage
    issues: list[ValidationIssue] = field(default_factory=list)

    def add(
        self,
        severity: Severity,
        code: str,
        message: str,
        *,
        path: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Add an issue with an explicit severity."""
        self.issues.append(
            ValidationIssue(
                code=code,
                message=message,
                severity=severity,
                stage=self.stage,
                path=path,
                suggestion=suggestion,
            )
        )

    def add_error(
        self,
        code: str,
        message: str,
        *,
        path: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Add an error-level issue."""
        self.add(Severity.ERROR, code, message, path=path, suggestion=suggestion)

    def add_warning(
        self,
        code: str,
        message: str,
        *,
        path: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Add a warning-level issue."""
        self.add(Severity.WARNING, code, message, path=path, suggestion=suggestion)

    def add_info(
        self,
        code: str,
        message: str,
        *,
        path: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Add an info-level issue."""
        self.add(Severity.INFO, code, message, path=path, suggestion=suggestion)
