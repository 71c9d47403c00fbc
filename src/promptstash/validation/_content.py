"""Body text quality rules."""

import re

from promptstash.config import ValidationSettings

from ._types import IssueCollector, ValidationIssue, ValidationStage

_HEADING_RE = re.compile(r"^#{1,6}\s", re.MULTILINE)
_SCRIPT_TAG_RE = re.compile(r"<script\b", re.IGNORECASE)
_FENCE_RE = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})(.*)$")


def _fences_without_language(body: str) -> list[int]:
    """Return the 1-based line numbers of opening fences with no info string."""
    missing: list[int] = []
    open_fence: str | None = None
    for number, line in enumerate(body.splitlines(), start=1):
        match = _FENCE_RE.match(line)
        if match is None:
            continue
        fence, info = match.groups()
        if open_fence is None:
            open_fence = fence
            if not info.strip():
                missing.append(number)
        elif (
            fence[0] == open_fence[0]
            and len(fence) >= len(open_fence)
            and not info.strip()
        ):
            open_fence = None
    return missing


def validate_content(
    body: str,
    settings: ValidationSettings | None = None,
    *,
    path: str | None = None,
) -> list[ValidationIssue]:
    """Check body text for minimal quality rules.

    Each rule is independent. An empty body reports only ``EMPTY_CONTENT``.

    Args:
        body: The body text (without frontmatter).
        settings: Thresholds. Defaults are used if omitted.
        path: Location attached to the issues.

    Returns:
        Content-stage issues.
    """
    settings = settings or ValidationSettings()
    collector = IssueCollector(ValidationStage.CONTENT)
    stripped = body.strip()

    if not stripped:
        collector.add_error(
            "EMPTY_CONTENT",
            "Content is empty",
            path=path,
            suggestion="Add instructions below the frontmatter",
        )
        return collector.issues

    if len(stripped) < settings.min_content_length:
        collector.add_warning(
            "CONTENT_TOO_SHORT",
            f"Content is {len(stripped)} characters, "
            f"less than the recommended {settings.min_content_length}",
            path=path,
        )

    if not _HEADING_RE.search(body):
        collector.add_warning(
            "NO_HEADINGS",
            "Content has no markdown headings",
            path=path,
            suggestion="Structure the content with '#' headings",
        )

    if _SCRIPT_TAG_RE.search(body):
        collector.add_error(
            "SCRIPT_TAG_FOUND",
            "Content contains a <script> tag",
            path=path,
            suggestion="Remove embedded scripts",
        )

    for line in _fences_without_language(body):
        collector.add_warning(
            "CODE_BLOCK_NO_LANGUAGE",
            f"Code block at line {line} does not declare a language",
            path=path,
            suggestion="Add a language after the opening fence, e.g. ```python",
        )

    return collector.issues
