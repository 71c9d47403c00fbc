"""Validation settings model.

Every constant the validators consult lives here so that a project can
adjust naming conventions and thresholds without touching validator code.
"""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from promptstash.enums import HookEventType, HookRuntime

_ALL_EVENTS: tuple[HookEventType, ...] = tuple(HookEventType)

_PYTHON_EVENTS: tuple[HookEventType, ...] = (
    HookEventType.PRE_TOOL_USE,
    HookEventType.POST_TOOL_USE,
    HookEventType.POST_CUSTOM_TOOL_CALL,
    HookEventType.USER_PROMPT_SUBMIT,
    HookEventType.STOP,
    HookEventType.SUBAGENT_STOP,
    HookEventType.PRE_COMPACT,
)


def _default_runtime_events() -> dict[HookRuntime, tuple[HookEventType, ...]]:
    return {
        HookRuntime.TYPESCRIPT: _ALL_EVENTS,
        HookRuntime.PYTHON: _PYTHON_EVENTS,
    }


class ValidationSettings(BaseModel):
    """Settings consulted by the validation engine.

    Attributes:
        skill_entry_file: Canonical entry file name inside a skill directory.
        metadata_extension: Extension of files carrying a metadata header.
        agents_root: Path segment under which agent files live.
        commands_root: Path segment under which command files live.
        tool_manifest_names: File names recognized as tool manifests.
        hook_config_names: File names recognized as hook configurations.
        name_pattern: Pattern for skill directory and agent file names.
        min_content_length: Body length (after trim) below which a warning
            is emitted.
        timeout_min_ms: Lower bound of the recommended hook timeout band.
        timeout_max_ms: Upper bound of the recommended hook timeout band.
        default_timeout_ms: Timeout assumed for hooks that declare none.
        default_runtime: Runtime assumed for hooks that declare none.
        runtime_events: Events each runtime can execute hooks for.
        matcher_required_events: Events whose hook entries need a matcher.
        model_options: Accepted values of the ``model`` header field.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    skill_entry_file: str = "SKILL.md"
    metadata_extension: str = ".md"
    agents_root: str = "agents"
    commands_root: str = "commands"
    tool_manifest_names: tuple[str, ...] = (".mcp.json",)
    hook_config_names: tuple[str, ...] = ("hooks.json",)
    name_pattern: str = r"^[a-z0-9]+(-[a-z0-9]+)*$"
    min_content_length: int = Field(default=50, ge=0)
    timeout_min_ms: int = Field(default=100, ge=0)
    timeout_max_ms: int = Field(default=30_000, ge=0)
    default_timeout_ms: int = Field(default=5_000, gt=0)
    default_runtime: HookRuntime = HookRuntime.TYPESCRIPT
    runtime_events: dict[HookRuntime, tuple[HookEventType, ...]] = Field(
        default_factory=_default_runtime_events
    )
    matcher_required_events: tuple[HookEventType, ...] = (
        HookEventType.PRE_TOOL_USE,
        HookEventType.POST_TOOL_USE,
        HookEventType.POST_CUSTOM_TOOL_CALL,
        HookEventType.PRE_COMPACT,
    )
    model_options: tuple[str, ...] = ("sonnet", "opus", "haiku", "inherit")
