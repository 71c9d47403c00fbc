"""Declarative header schemas and the schema validator."""

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from promptstash.config import ValidationSettings
from promptstash.enums import ArtifactKind

from ._types import IssueCollector, ValidationStage

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._types import ValidationIssue

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 500
SKILL_DESCRIPTION_RECOMMENDED_LENGTH = 10
MAX_TAGS = 20


class FieldType(StrEnum):
    """Value types a header field may declare."""

    STRING = "string"
    STRING_LIST = "list of strings"
    STRING_OR_LIST = "string or list of strings"
    VERSION = "string or number"


@dataclass(slots=True, frozen=True)
class FieldSpec:
    """Schema entry for a single header field.

    Attributes:
        name: Header key.
        type: Expected value type.
        required: Whether the field must be present.
        min_length: Hard minimum length; shorter values are errors.
        recommended_length: Soft minimum length; shorter values are warnings.
        max_length: Soft maximum length; longer values are warnings.
        max_items: Soft maximum item count for list fields.
        choices: Accepted values, if the field is an enumeration.
    """

    name: str
    type: FieldType
    required: bool = False
    min_length: int | None = None
    recommended_length: int | None = None
    max_length: int | None = None
    max_items: int | None = None
    choices: tuple[str, ...] | None = None


def schema_for(
    kind: ArtifactKind, settings: ValidationSettings | None = None
) -> tuple[FieldSpec, ...]:
    """Return the header schema of an artifact kind.

    Kinds without a metadata header (tool manifests and hook sets) have an
    empty schema.
    """
    settings = settings or ValidationSettings()
    name = FieldSpec(
        "name",
        FieldType.STRING,
        required=True,
        min_length=NAME_MIN_LENGTH,
        max_length=NAME_MAX_LENGTH,
    )
    tags = FieldSpec("tags", FieldType.STRING_LIST, max_items=MAX_TAGS)
    allowed_tools = FieldSpec("allowed-tools", FieldType.STRING_OR_LIST)

    match kind:
        case ArtifactKind.AGENT | ArtifactKind.COMMAND:
            return (
                name,
                FieldSpec(
                    "description",
                    FieldType.STRING,
                    required=True,
                    min_length=1,
                    max_length=DESCRIPTION_MAX_LENGTH,
                ),
                tags,
                FieldSpec("model", FieldType.STRING, choices=settings.model_options),
                FieldSpec("tools", FieldType.STRING_OR_LIST),
                allowed_tools,
                FieldSpec("argument-hint", FieldType.STRING),
                FieldSpec("color", FieldType.STRING),
            )
        case ArtifactKind.SKILL:
            return (
                name,
                FieldSpec(
                    "description",
                    FieldType.STRING,
                    required=True,
                    min_length=1,
                    recommended_length=SKILL_DESCRIPTION_RECOMMENDED_LENGTH,
                    max_length=DESCRIPTION_MAX_LENGTH,
                ),
                FieldSpec("category", FieldType.STRING),
                tags,
                FieldSpec("version", FieldType.VERSION),
                FieldSpec("dependencies", FieldType.STRING_LIST),
                allowed_tools,
            )
        case ArtifactKind.TOOL_MANIFEST | ArtifactKind.HOOK_SET:
            return ()


def _is_string_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _matches_type(value: object, field_type: FieldType) -> bool:
    match field_type:
        case FieldType.STRING:
            return isinstance(value, str)
        case FieldType.STRING_LIST:
            return _is_string_list(value)
        case FieldType.STRING_OR_LIST:
            return isinstance(value, str) or _is_string_list(value)
        case FieldType.VERSION:
            return isinstance(value, str | int | float) and not isinstance(value, bool)


def _check_bounds(spec: FieldSpec, value: object, collector: IssueCollector) -> None:
    if isinstance(value, str):
        length = len(value.strip())
        if spec.min_length is not None and length < spec.min_length:
            collector.add_error(
                "FIELD_TOO_SHORT",
                f"'{spec.name}' must be at least {spec.min_length} characters",
                path=spec.name,
            )
        elif spec.recommended_length is not None and length < spec.recommended_length:
            collector.add_warning(
                "FIELD_BELOW_RECOMMENDED_LENGTH",
                f"'{spec.name}' is shorter than the recommended "
                f"{spec.recommended_length} characters",
                path=spec.name,
                suggestion=f"Expand '{spec.name}' so it explains when to use it",
            )
        if spec.max_length is not None and len(value) > spec.max_length:
            collector.add_warning(
                "FIELD_TOO_LONG",
                f"'{spec.name}' is {len(value)} characters, "
                f"more than the recommended {spec.max_length}",
                path=spec.name,
            )
    elif isinstance(value, list) and spec.max_items is not None:
        if len(value) > spec.max_items:
            collector.add_warning(
                "TOO_MANY_ITEMS",
                f"'{spec.name}' has {len(value)} items, "
                f"more than the recommended {spec.max_items}",
                path=spec.name,
            )


def normalize_name(name: str) -> str:
    """Normalize a name for comparison.

    Converts spaces and underscores to hyphens and lowercases, so that
    "Skill Development" matches "skill-development".
    """
    return name.strip().lower().replace(" ", "-").replace("_", "-")


def validate_header(
    kind: ArtifactKind,
    header: Mapping[str, object],
    settings: ValidationSettings | None = None,
    *,
    artifact_name: str | None = None,
) -> list[ValidationIssue]:
    """Check a parsed header against the kind's schema.

    Fields outside the schema are accepted without checks.

    Args:
        kind: The artifact kind.
        header: Parsed header fields.
        settings: Settings providing enumerations such as model options.
        artifact_name: Name derived from the artifact's location. For skills
            the header ``name`` is compared against it.

    Returns:
        Schema-stage issues, empty if the header conforms.
    """
    collector = IssueCollector(ValidationStage.SCHEMA)

    for spec in schema_for(kind, settings):
        value = header.get(spec.name)
        if value is None:
            if spec.required:
                collector.add_error(
                    "MISSING_REQUIRED_FIELD",
                    f"Missing required field '{spec.name}'",
                    path=spec.name,
                    suggestion=f"Add '{spec.name}:' to the frontmatter",
                )
            continue

        if not _matches_type(value, spec.type):
            collector.add_error(
                "INVALID_FIELD_TYPE",
                f"'{spec.name}' must be a {spec.type}, got {type(value).__name__}",
                path=spec.name,
            )
            continue

        if spec.choices is not None and value not in spec.choices:
            collector.add_error(
                "INVALID_FIELD_VALUE",
                f"'{spec.name}' must be one of {', '.join(spec.choices)}, got {value!r}",
                path=spec.name,
            )
            continue

        _check_bounds(spec, value, collector)

    if kind in (ArtifactKind.AGENT, ArtifactKind.COMMAND):
        if "tools" in header and "allowed-tools" in header:
            collector.add_error(
                "CONFLICTING_FIELDS",
                "Both 'tools' and 'allowed-tools' are set",
                path="tools",
                suggestion="Keep only one of 'tools' and 'allowed-tools'",
            )

    name = header.get("name")
    if kind is ArtifactKind.SKILL and artifact_name and isinstance(name, str):
        if normalize_name(name) != normalize_name(artifact_name):
            collector.add_warning(
                "NAME_MISMATCH",
                f"'name' in frontmatter ({name}) differs from directory ({artifact_name})",
                path="name",
            )

    return collector.issues
