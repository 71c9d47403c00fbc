"""Artifact validation.

Validators return issues rather than raising, and the engine merges them
into a single :class:`ValidationReport`.

Example:
    >>> from promptstash.enums import ArtifactKind
    >>> from promptstash.validation import Severity, validate
    >>> report = validate(ArtifactKind.AGENT, b"no header", "agents/reviewer.md")
    >>> report.codes(Severity.ERROR)
    ['NO_FRONTMATTER']
"""

from ._classifier import classify, find_entry_files, location_root
from ._content import validate_content
from ._engine import (
    MARKDOWN_KINDS,
    ValidationRequest,
    content_view,
    read_artifact,
    validate,
    validate_many,
    validate_path,
)
from ._frontmatter import (
    Frontmatter,
    FrontmatterCache,
    YAMLFrontmatter,
    YAMLValue,
    content_hash,
    parse_frontmatter,
)
from ._fs import (
    EntryStat,
    FileSystemView,
    LocalFileSystemView,
    MemoryFileSystemView,
    join_path,
    normalize_path,
)
from ._hooks import (
    CommandPayload,
    HookDefinition,
    HookPayload,
    Matcher,
    MatcherKind,
    PromptPayload,
    parse_hook_set,
    validate_hook_definition,
    validate_hook_output,
    validate_hook_set,
)
from ._manifest import RemoteServer, ServerConfig, StdioServer, validate_manifest
from ._schema import FieldSpec, FieldType, normalize_name, schema_for, validate_header
from ._structure import parse_structured, validate_structure
from ._types import (
    IssueCollector,
    Severity,
    ValidationIssue,
    ValidationReport,
    ValidationStage,
)

__all__ = [
    "MARKDOWN_KINDS",
    "CommandPayload",
    "EntryStat",
    "FieldSpec",
    "FieldType",
    "FileSystemView",
    "Frontmatter",
    "FrontmatterCache",
    "HookDefinition",
    "HookPayload",
    "IssueCollector",
    "LocalFileSystemView",
    "Matcher",
    "MatcherKind",
    "MemoryFileSystemView",
    "PromptPayload",
    "RemoteServer",
    "ServerConfig",
    "Severity",
    "StdioServer",
    "ValidationIssue",
    "ValidationReport",
    "ValidationRequest",
    "ValidationStage",
    "YAMLFrontmatter",
    "YAMLValue",
    "classify",
    "content_hash",
    "content_view",
    "find_entry_files",
    "join_path",
    "location_root",
    "normalize_name",
    "normalize_path",
    "parse_frontmatter",
    "parse_hook_set",
    "parse_structured",
    "read_artifact",
    "schema_for",
    "validate",
    "validate_content",
    "validate_header",
    "validate_hook_definition",
    "validate_hook_output",
    "validate_hook_set",
    "validate_many",
    "validate_manifest",
    "validate_path",
    "validate_structure",
]
