"""Enumeration types for PromptStash."""

from enum import StrEnum


class ArtifactKind(StrEnum):
    """Kinds of assistant configuration artifacts."""

    AGENT = "agent"
    COMMAND = "command"
    SKILL = "skill"
    TOOL_MANIFEST = "tool_manifest"
    HOOK_SET = "hook_set"


class HookEventType(StrEnum):
    """Lifecycle events a hook can be attached to."""

    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    POST_CUSTOM_TOOL_CALL = "PostCustomToolCall"
    PERMISSION_REQUEST = "PermissionRequest"
    USER_PROMPT_SUBMIT = "UserPromptSubmit"
    NOTIFICATION = "Notification"
    STOP = "Stop"
    SUBAGENT_STOP = "SubagentStop"
    PRE_COMPACT = "PreCompact"
    SESSION_START = "SessionStart"
    SESSION_END = "SessionEnd"


class HookRuntime(StrEnum):
    """Execution environments that run hook scripts."""

    TYPESCRIPT = "typescript"
    PYTHON = "python"
