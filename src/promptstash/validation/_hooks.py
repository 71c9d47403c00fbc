"""Lifecycle hook rules.

A hook set is a JSON document mapping lifecycle event names to lists of
entries. Each entry pairs a matcher with one or more hook handlers::

    {
      "hooks": {
        "PreToolUse": [
          {"matcher": "Edit|Write",
           "hooks": [{"type": "command", "command": "./lint.sh", "timeout": 5000}]}
        ]
      }
    }

The matcher may also be given as ``{"type": "regex", "pattern": "^foo.*"}``.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, cast

from promptstash.config import ValidationSettings
from promptstash.enums import HookEventType, HookRuntime

from ._types import IssueCollector, ValidationStage

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._types import ValidationIssue

_REGEX_METACHARACTERS = frozenset("|^$()[]{}+?\\")
_TOOL_NAME_RE = re.compile(r"^(?:[\w-]+::[\w-]+|mcp__[\w-]+?__[\w-]+)$")
_RESERVED_TOP_LEVEL_KEYS = frozenset({"runtime", "$schema"})
_HOOK_DECISIONS = ("approve", "block", "ask")


class MatcherKind(StrEnum):
    """Matcher variants."""

    EXACT = "exact"
    REGEX = "regex"
    WILDCARD = "wildcard"
    TOOL = "tool"


@dataclass(slots=True, frozen=True)
class Matcher:
    """Pattern deciding which tool invocations a hook fires for.

    Attributes:
        kind: The matcher variant.
        pattern: The raw pattern text.
    """

    kind: MatcherKind
    pattern: str

    @classmethod
    def from_string(cls, pattern: str) -> Matcher:
        """Infer the matcher variant of a plain string pattern.

        ``::`` or a leading ``mcp__`` makes a qualified tool name, then any
        ``*`` makes a wildcard (e.g. ``Bash(**)``), then regex metacharacters
        make a regex. Anything else is an exact string.
        """
        if "::" in pattern or pattern.startswith("mcp__"):
            return cls(MatcherKind.TOOL, pattern)
        if "*" in pattern:
            return cls(MatcherKind.WILDCARD, pattern)
        if any(char in _REGEX_METACHARACTERS for char in pattern):
            return cls(MatcherKind.REGEX, pattern)
        return cls(MatcherKind.EXACT, pattern)

    @property
    def is_empty(self) -> bool:
        return not self.pattern.strip()


@dataclass(slots=True, frozen=True)
class CommandPayload:
    """Hook handler that runs a shell command."""

    command: str


@dataclass(slots=True, frozen=True)
class PromptPayload:
    """Hook handler that sends a prompt to the assistant."""

    prompt: str


type HookPayload = CommandPayload | PromptPayload


@dataclass(slots=True, frozen=True)
class HookDefinition:
    """A single hook handler bound to an event and a matcher.

    Attributes:
        event_type: Lifecycle event name as written in the document.
        matcher: The entry's matcher, or None if the entry has none.
        payload: What the hook does.
        timeout_ms: Timeout in milliseconds.
        runtime: Execution environment of the hook.
        output_schema: Optional JSON schema of the hook's reply.
        path: Location of the entry (e.g. ``hooks.PreToolUse[0]``).
        index: Position of the handler within the entry.
    """

    event_type: str
    matcher: Matcher | None
    payload: HookPayload
    timeout_ms: int = 5_000
    runtime: HookRuntime = HookRuntime.TYPESCRIPT
    output_schema: dict[str, object] | None = None
    path: str = ""
    index: int = 0

    @property
    def handler_path(self) -> str:
        prefix = f"{self.path}." if self.path else ""
        return f"{prefix}hooks[{self.index}]"


def _check_matcher(
    definition: HookDefinition,
    settings: ValidationSettings,
    collector: IssueCollector,
) -> None:
    path = f"{definition.path}.matcher" if definition.path else "matcher"
    matcher = definition.matcher

    if matcher is None or matcher.is_empty:
        if definition.event_type in settings.matcher_required_events:
            collector.add_error(
                "MISSING_MATCHER",
                f"{definition.event_type} hooks require a matcher",
                path=path,
                suggestion="Use '*' to match every tool",
            )
        return

    match matcher.kind:
        case MatcherKind.REGEX:
            try:
                _ = re.compile(matcher.pattern)
            except re.error as e:
                collector.add_error(
                    "INVALID_MATCHER_PATTERN",
                    f"Matcher {matcher.pattern!r} is not a valid regular expression: {e}",
                    path=path,
                )
        case MatcherKind.TOOL:
            if not _TOOL_NAME_RE.match(matcher.pattern):
                collector.add_error(
                    "INVALID_MATCHER_PATTERN",
                    f"Matcher {matcher.pattern!r} is not a qualified tool name",
                    path=path,
                    suggestion="Use 'namespace::tool' or 'mcp__namespace__tool'",
                )
        case MatcherKind.EXACT | MatcherKind.WILDCARD:
            pass


def validate_hook_definition(
    definition: HookDefinition,
    settings: ValidationSettings | None = None,
) -> list[ValidationIssue]:
    """Check one hook against the lifecycle rules.

    Args:
        definition: The hook to check.
        settings: Event catalogue, runtimes and timeout band.

    Returns:
        Hooks-stage issues.
    """
    settings = settings or ValidationSettings()
    collector = IssueCollector(ValidationStage.HOOKS)

    if definition.event_type not in HookEventType:
        collector.add_error(
            "UNKNOWN_EVENT_TYPE",
            f"Unknown hook event {definition.event_type!r}",
            path=definition.path or None,
            suggestion=f"Use one of: {', '.join(HookEventType)}",
        )
        return collector.issues

    _check_matcher(definition, settings, collector)

    timeout = definition.timeout_ms
    if not settings.timeout_min_ms <= timeout <= settings.timeout_max_ms:
        collector.add_warning(
            "TIMEOUT_OUT_OF_RANGE",
            f"Timeout of {timeout} ms is outside the recommended "
            f"{settings.timeout_min_ms}-{settings.timeout_max_ms} ms range",
            path=f"{definition.handler_path}.timeout",
        )

    supported = settings.runtime_events.get(definition.runtime, ())
    if definition.event_type not in supported:
        collector.add_warning(
            "INCOMPATIBLE_RUNTIME",
            f"The {definition.runtime} runtime does not support "
            f"{definition.event_type} hooks",
            path=definition.handler_path,
        )

    return collector.issues


def _parse_matcher(
    raw: object, path: str, schema: IssueCollector
) -> tuple[Matcher | None, bool]:
    """Parse an entry matcher. Returns the matcher and whether it was well-formed."""
    if raw is None:
        return None, True
    if isinstance(raw, str):
        return Matcher.from_string(raw), True
    if isinstance(raw, dict):
        data = cast("dict[str, object]", raw)
        kind = data.get("type")
        pattern = data.get("pattern")
        if kind not in tuple(MatcherKind):
            schema.add_error(
                "INVALID_FIELD_VALUE",
                f"Matcher type must be one of {', '.join(MatcherKind)}, got {kind!r}",
                path=f"{path}.type",
            )
            return None, False
        if not isinstance(pattern, str):
            schema.add_error(
                "INVALID_FIELD_TYPE",
                "Matcher pattern must be a string",
                path=f"{path}.pattern",
            )
            return None, False
        return Matcher(MatcherKind(kind), pattern), True
    schema.add_error(
        "INVALID_FIELD_TYPE",
        f"Matcher must be a string or an object, got {type(raw).__name__}",
        path=path,
    )
    return None, False


def _parse_runtime(
    raw: object, default: HookRuntime, path: str, schema: IssueCollector
) -> HookRuntime:
    if raw is None:
        return default
    if isinstance(raw, str) and raw in tuple(HookRuntime):
        return HookRuntime(raw)
    schema.add_error(
        "INVALID_FIELD_VALUE",
        f"Runtime must be one of {', '.join(HookRuntime)}, got {raw!r}",
        path=path,
    )
    return default


def _parse_handler(  # noqa: PLR0913
    raw: object,
    *,
    event: str,
    matcher: Matcher | None,
    entry_path: str,
    index: int,
    runtime: HookRuntime,
    settings: ValidationSettings,
    schema: IssueCollector,
    hooks: IssueCollector,
) -> HookDefinition | None:
    path = f"{entry_path}.hooks[{index}]"
    if not isinstance(raw, dict):
        schema.add_error(
            "INVALID_FIELD_TYPE",
            f"Hook must be an object, got {type(raw).__name__}",
            path=path,
        )
        return None
    data = cast("dict[str, object]", raw)

    payload: HookPayload | None = None
    hook_type = data.get("type")
    if hook_type == "command":
        command = data.get("command")
        if isinstance(command, str) and command.strip():
            payload = CommandPayload(command)
        else:
            hooks.add_error(
                "MISSING_HOOK_PAYLOAD",
                "Command hooks need a non-empty 'command'",
                path=f"{path}.command",
            )
    elif hook_type == "prompt":
        prompt = data.get("prompt")
        if isinstance(prompt, str) and prompt.strip():
            payload = PromptPayload(prompt)
        else:
            hooks.add_error(
                "MISSING_HOOK_PAYLOAD",
                "Prompt hooks need a non-empty 'prompt'",
                path=f"{path}.prompt",
            )
    else:
        hooks.add_error(
            "INVALID_HOOK_TYPE",
            f"Hook type must be 'command' or 'prompt', got {hook_type!r}",
            path=f"{path}.type",
        )

    timeout = data.get("timeout", settings.default_timeout_ms)
    if isinstance(timeout, bool) or not isinstance(timeout, int):
        schema.add_error(
            "INVALID_FIELD_TYPE",
            f"Timeout must be an integer number of milliseconds, got {timeout!r}",
            path=f"{path}.timeout",
        )
        timeout = settings.default_timeout_ms

    output_schema = data.get("outputSchema")
    if output_schema is not None and not isinstance(output_schema, dict):
        schema.add_error(
            "INVALID_FIELD_TYPE",
            "outputSchema must be a JSON object",
            path=f"{path}.outputSchema",
        )
        output_schema = None

    hook_runtime = _parse_runtime(data.get("runtime"), runtime, f"{path}.runtime", schema)

    if payload is None:
        return None
    return HookDefinition(
        event_type=event,
        matcher=matcher,
        payload=payload,
        timeout_ms=timeout,
        runtime=hook_runtime,
        output_schema=cast("dict[str, object] | None", output_schema),
        path=entry_path,
        index=index,
    )


def parse_hook_set(
    document: object,
    settings: ValidationSettings | None = None,
) -> tuple[list[HookDefinition], list[ValidationIssue]]:
    """Extract hook definitions from a parsed hooks document.

    Accepts either ``{"hooks": {event: [...]}}`` or a bare event mapping.
    Entries under unknown events are reported and skipped.

    Returns:
        The well-formed definitions and the issues found while reading them.
    """
    settings = settings or ValidationSettings()
    schema = IssueCollector(ValidationStage.SCHEMA)
    hooks = IssueCollector(ValidationStage.HOOKS)
    definitions: list[HookDefinition] = []

    if not isinstance(document, dict):
        schema.add_error(
            "INVALID_FIELD_TYPE",
            f"Hooks configuration must be a JSON object, got {type(document).__name__}",
        )
        return definitions, schema.issues

    top = cast("dict[str, object]", document)
    prefix = "hooks"
    events: object = top.get("hooks")
    if events is None:
        prefix = ""
        events = {k: v for k, v in top.items() if k not in _RESERVED_TOP_LEVEL_KEYS}
    if not isinstance(events, dict):
        schema.add_error(
            "INVALID_FIELD_TYPE", "'hooks' must be an object", path="hooks"
        )
        return definitions, schema.issues

    runtime = _parse_runtime(top.get("runtime"), settings.default_runtime, "runtime", schema)

    for event, entries in cast("Mapping[str, object]", events).items():
        event_path = f"{prefix}.{event}" if prefix else event
        if event not in HookEventType:
            hooks.add_error(
                "UNKNOWN_EVENT_TYPE",
                f"Unknown hook event {event!r}",
                path=event_path,
                suggestion=f"Use one of: {', '.join(HookEventType)}",
            )
            continue
        if not isinstance(entries, list):
            schema.add_error(
                "INVALID_FIELD_TYPE",
                f"Hooks for {event} must be a list of entries",
                path=event_path,
            )
            continue

        for position, entry in enumerate(cast("list[object]", entries)):
            entry_path = f"{event_path}[{position}]"
            if not isinstance(entry, dict):
                schema.add_error(
                    "INVALID_FIELD_TYPE",
                    f"Hook entry must be an object, got {type(entry).__name__}",
                    path=entry_path,
                )
                continue
            data = cast("dict[str, object]", entry)
            matcher, ok = _parse_matcher(data.get("matcher"), f"{entry_path}.matcher", schema)
            if not ok:
                continue

            handlers = data.get("hooks")
            if not isinstance(handlers, list) or not handlers:
                hooks.add_error(
                    "MISSING_HOOK_PAYLOAD",
                    "Hook entry must list at least one hook",
                    path=f"{entry_path}.hooks",
                )
                continue

            for index, handler in enumerate(cast("list[object]", handlers)):
                definition = _parse_handler(
                    handler,
                    event=event,
                    matcher=matcher,
                    entry_path=entry_path,
                    index=index,
                    runtime=runtime,
                    settings=settings,
                    schema=schema,
                    hooks=hooks,
                )
                if definition is not None:
                    definitions.append(definition)

    return definitions, [*schema.issues, *hooks.issues]


def validate_hook_set(
    document: object,
    settings: ValidationSettings | None = None,
) -> list[ValidationIssue]:
    """Validate a parsed hooks document.

    Returns:
        Schema- and hooks-stage issues. Issues shared by several handlers of
        one entry (such as a bad matcher) are reported once.
    """
    definitions, issues = parse_hook_set(document, settings)
    for definition in definitions:
        issues.extend(validate_hook_definition(definition, settings))
    return list(dict.fromkeys(issues))


def validate_hook_output(output: object) -> list[ValidationIssue]:
    """Check a hook's runtime reply.

    Args:
        output: The decoded JSON reply of a hook.

    Returns:
        Hooks-stage issues.
    """
    collector = IssueCollector(ValidationStage.HOOKS)
    if not isinstance(output, dict):
        collector.add_error(
            "INVALID_FIELD_TYPE",
            f"Hook output must be a JSON object, got {type(output).__name__}",
        )
        return collector.issues
    data = cast("dict[str, object]", output)

    should_continue = data.get("continue")
    stop_reason = data.get("stopReason")
    if should_continue is not None and not isinstance(should_continue, bool):
        collector.add_error(
            "INVALID_FIELD_TYPE", "'continue' must be a boolean", path="continue"
        )
    if stop_reason is not None and not isinstance(stop_reason, str):
        collector.add_error(
            "INVALID_FIELD_TYPE", "'stopReason' must be a string", path="stopReason"
        )

    if should_continue is False and not stop_reason:
        collector.add_error(
            "MISSING_STOP_REASON",
            "'stopReason' is required when 'continue' is false",
            path="stopReason",
        )
    elif should_continue is True and stop_reason:
        collector.add_warning(
            "STOP_REASON_IGNORED",
            "'stopReason' has no effect when 'continue' is true",
            path="stopReason",
        )

    decision = data.get("decision")
    if decision is not None and decision not in _HOOK_DECISIONS:
        collector.add_error(
            "INVALID_FIELD_VALUE",
            f"'decision' must be one of {', '.join(_HOOK_DECISIONS)}, got {decision!r}",
            path="decision",
        )

    return collector.issues
