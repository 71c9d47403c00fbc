import pytest

from promptstash.config import ValidationSettings
from promptstash.enums import HookRuntime
from promptstash.validation import (
    CommandPayload,
    HookDefinition,
    Matcher,
    MatcherKind,
    PromptPayload,
    Severity,
    ValidationStage,
    parse_hook_set,
    validate_hook_definition,
    validate_hook_output,
    validate_hook_set,
)
from tests.conftest import hook_document


def _codes(issues: list) -> list[str]:
    return [issue.code for issue in issues]


def _definition(
    matcher: Matcher | None = Matcher(MatcherKind.EXACT, "Bash"),
    *,
    event: str = "PreToolUse",
    timeout_ms: int = 5000,
    runtime: HookRuntime = HookRuntime.TYPESCRIPT,
) -> HookDefinition:
    return HookDefinition(
        event_type=event,
        matcher=matcher,
        payload=CommandPayload("./lint.sh"),
        timeout_ms=timeout_ms,
        runtime=runtime,
        path=f"hooks.{event}[0]",
    )


class TestMatcherFromString:
    @pytest.mark.parametrize(
        ("pattern", "kind"),
        [
            ("Bash", MatcherKind.EXACT),
            ("Edit|Write", MatcherKind.REGEX),
            ("^foo$", MatcherKind.REGEX),
            ("foo((", MatcherKind.REGEX),
            ("^foo.*", MatcherKind.WILDCARD),
            ("Bash(**)", MatcherKind.WILDCARD),
            ("*", MatcherKind.WILDCARD),
            ("Edit*", MatcherKind.WILDCARD),
            ("github::create_issue", MatcherKind.TOOL),
            ("mcp__github__create_issue", MatcherKind.TOOL),
            ("mcp__github__*", MatcherKind.TOOL),
            ("github::*", MatcherKind.TOOL),
        ],
    )
    def test_inferred_kind(self, pattern: str, kind: MatcherKind) -> None:
        assert Matcher.from_string(pattern) == Matcher(kind, pattern)

    def test_blank_pattern_is_empty(self) -> None:
        assert Matcher.from_string("  ").is_empty is True


class TestValidateHookDefinition:
    def test_valid_definition(self) -> None:
        assert validate_hook_definition(_definition()) == []

    def test_invalid_regex(self) -> None:
        issues = validate_hook_definition(_definition(Matcher(MatcherKind.REGEX, "foo((")))

        assert _codes(issues) == ["INVALID_MATCHER_PATTERN"]
        assert issues[0].severity is Severity.ERROR
        assert issues[0].stage is ValidationStage.HOOKS
        assert issues[0].path == "hooks.PreToolUse[0].matcher"

    def test_valid_regex(self) -> None:
        assert validate_hook_definition(_definition(Matcher(MatcherKind.REGEX, "^foo.*"))) == []

    @pytest.mark.parametrize("pattern", ["ns::tool", "mcp__github__create_issue"])
    def test_valid_tool_names(self, pattern: str) -> None:
        assert validate_hook_definition(_definition(Matcher(MatcherKind.TOOL, pattern))) == []

    @pytest.mark.parametrize("pattern", ["a::b::c", "mcp__bad"])
    def test_malformed_tool_names(self, pattern: str) -> None:
        issues = validate_hook_definition(_definition(Matcher(MatcherKind.TOOL, pattern)))

        assert _codes(issues) == ["INVALID_MATCHER_PATTERN"]

    def test_missing_matcher_on_tool_event(self) -> None:
        issues = validate_hook_definition(_definition(None))

        assert _codes(issues) == ["MISSING_MATCHER"]

    def test_empty_matcher_on_tool_event(self) -> None:
        issues = validate_hook_definition(_definition(Matcher(MatcherKind.EXACT, "")))

        assert _codes(issues) == ["MISSING_MATCHER"]

    def test_matcher_optional_for_other_events(self) -> None:
        assert validate_hook_definition(_definition(None, event="Stop")) == []

    def test_unknown_event(self) -> None:
        issues = validate_hook_definition(_definition(None, event="OnSave"))

        assert _codes(issues) == ["UNKNOWN_EVENT_TYPE"]

    @pytest.mark.parametrize("timeout_ms", [50, 30_001])
    def test_timeout_outside_band(self, timeout_ms: int) -> None:
        issues = validate_hook_definition(_definition(timeout_ms=timeout_ms))

        assert _codes(issues) == ["TIMEOUT_OUT_OF_RANGE"]
        assert issues[0].severity is Severity.WARNING
        assert issues[0].path == "hooks.PreToolUse[0].hooks[0].timeout"

    @pytest.mark.parametrize("timeout_ms", [100, 30_000])
    def test_timeout_band_is_inclusive(self, timeout_ms: int) -> None:
        assert validate_hook_definition(_definition(timeout_ms=timeout_ms)) == []

    def test_runtime_without_event_support(self) -> None:
        issues = validate_hook_definition(
            _definition(None, event="Notification", runtime=HookRuntime.PYTHON)
        )

        assert _codes(issues) == ["INCOMPATIBLE_RUNTIME"]
        assert issues[0].severity is Severity.WARNING

    def test_runtime_events_follow_settings(self) -> None:
        settings = ValidationSettings(runtime_events={HookRuntime.TYPESCRIPT: ()})

        issues = validate_hook_definition(_definition(), settings)

        assert _codes(issues) == ["INCOMPATIBLE_RUNTIME"]


class TestParseHookSet:
    def test_wrapped_document(self) -> None:
        definitions, issues = parse_hook_set(hook_document())

        assert issues == []
        assert len(definitions) == 1
        definition = definitions[0]
        assert definition.event_type == "PreToolUse"
        assert definition.matcher == Matcher(MatcherKind.REGEX, "Edit|Write")
        assert definition.payload == CommandPayload("./scripts/lint.sh")
        assert definition.handler_path == "hooks.PreToolUse[0].hooks[0]"

    def test_bare_mapping_with_top_level_runtime(self) -> None:
        document = {
            "$schema": "https://example.invalid/hooks.json",
            "runtime": "python",
            "Stop": [{"hooks": [{"type": "prompt", "prompt": "Summarize"}]}],
        }

        definitions, issues = parse_hook_set(document)

        assert issues == []
        assert definitions[0].runtime is HookRuntime.PYTHON
        assert definitions[0].payload == PromptPayload("Summarize")
        assert definitions[0].matcher is None
        assert definitions[0].path == "Stop[0]"

    def test_default_timeout_applied(self) -> None:
        document = {"hooks": {"Stop": [{"hooks": [{"type": "command", "command": "x"}]}]}}

        definitions, _ = parse_hook_set(document)

        assert definitions[0].timeout_ms == 5000

    def test_object_matcher(self) -> None:
        document = hook_document({"type": "regex", "pattern": "^foo.*"})

        definitions, issues = parse_hook_set(document)

        assert issues == []
        assert definitions[0].matcher == Matcher(MatcherKind.REGEX, "^foo.*")

    def test_object_matcher_with_unknown_type(self) -> None:
        definitions, issues = parse_hook_set(hook_document({"type": "glob", "pattern": "x"}))

        assert definitions == []
        assert _codes(issues) == ["INVALID_FIELD_VALUE"]
        assert issues[0].path == "hooks.PreToolUse[0].matcher.type"

    def test_unknown_event_is_skipped(self) -> None:
        definitions, issues = parse_hook_set(hook_document(event="OnSave"))

        assert definitions == []
        assert _codes(issues) == ["UNKNOWN_EVENT_TYPE"]
        assert issues[0].path == "hooks.OnSave"

    @pytest.mark.parametrize("document", [[], "hooks", {"hooks": []}])
    def test_document_shape(self, document: object) -> None:
        definitions, issues = parse_hook_set(document)

        assert definitions == []
        assert _codes(issues) == ["INVALID_FIELD_TYPE"]
        assert issues[0].stage is ValidationStage.SCHEMA

    def test_entries_must_be_a_list(self) -> None:
        _, issues = parse_hook_set({"hooks": {"Stop": {"hooks": []}}})

        assert _codes(issues) == ["INVALID_FIELD_TYPE"]
        assert issues[0].path == "hooks.Stop"

    def test_entry_without_handlers(self) -> None:
        _, issues = parse_hook_set({"hooks": {"Stop": [{"hooks": []}]}})

        assert _codes(issues) == ["MISSING_HOOK_PAYLOAD"]
        assert issues[0].path == "hooks.Stop[0].hooks"

    def test_unknown_handler_type(self) -> None:
        definitions, issues = parse_hook_set(hook_document(type="script"))

        assert definitions == []
        assert _codes(issues) == ["INVALID_HOOK_TYPE"]
        assert issues[0].path == "hooks.PreToolUse[0].hooks[0].type"

    def test_blank_command(self) -> None:
        _, issues = parse_hook_set(hook_document(command="   "))

        assert _codes(issues) == ["MISSING_HOOK_PAYLOAD"]
        assert issues[0].path == "hooks.PreToolUse[0].hooks[0].command"

    def test_non_integer_timeout(self) -> None:
        definitions, issues = parse_hook_set(hook_document(timeout="5s"))  # type: ignore[arg-type]

        assert _codes(issues) == ["INVALID_FIELD_TYPE"]
        assert issues[0].path == "hooks.PreToolUse[0].hooks[0].timeout"
        assert definitions[0].timeout_ms == 5000

    def test_output_schema_must_be_an_object(self) -> None:
        definitions, issues = parse_hook_set(hook_document(outputSchema=["x"]))

        assert _codes(issues) == ["INVALID_FIELD_TYPE"]
        assert definitions[0].output_schema is None

    def test_output_schema_is_kept(self) -> None:
        schema = {"type": "object"}

        definitions, _ = parse_hook_set(hook_document(outputSchema=schema))

        assert definitions[0].output_schema == schema

    def test_unknown_runtime(self) -> None:
        _, issues = parse_hook_set(hook_document(runtime="ruby"))

        assert _codes(issues) == ["INVALID_FIELD_VALUE"]
        assert issues[0].path == "hooks.PreToolUse[0].hooks[0].runtime"


class TestValidateHookSet:
    def test_valid_document(self) -> None:
        assert validate_hook_set(hook_document()) == []

    def test_bad_matcher_is_reported_once_per_entry(self) -> None:
        document = hook_document({"type": "regex", "pattern": "foo(("})
        handlers = document["hooks"]["PreToolUse"][0]["hooks"]  # type: ignore[index]
        handlers.append({"type": "command", "command": "./other.sh"})

        issues = validate_hook_set(document)

        assert _codes(issues) == ["INVALID_MATCHER_PATTERN"]

    def test_combines_parse_and_rule_issues(self) -> None:
        document = hook_document(matcher=None, timeout=10)

        issues = validate_hook_set(document)

        assert sorted(_codes(issues)) == ["MISSING_MATCHER", "TIMEOUT_OUT_OF_RANGE"]

    @pytest.mark.parametrize("matcher", ["Bash(**)", "Bash(*)", "*", "^foo.*"])
    def test_wildcard_strings_are_accepted(self, matcher: str) -> None:
        assert validate_hook_set(hook_document(matcher)) == []

    @pytest.mark.parametrize("matcher", ["mcp__github__*", "github::*"])
    def test_tool_names_reject_wildcards(self, matcher: str) -> None:
        issues = validate_hook_set(hook_document(matcher))

        assert _codes(issues) == ["INVALID_MATCHER_PATTERN"]
        assert issues[0].path == "hooks.PreToolUse[0].matcher"

    def test_unbalanced_regex_string_is_rejected(self) -> None:
        assert _codes(validate_hook_set(hook_document("foo(("))) == [
            "INVALID_MATCHER_PATTERN"
        ]


class TestValidateHookOutput:
    def test_valid_output(self) -> None:
        assert validate_hook_output({"continue": True, "decision": "approve"}) == []

    def test_stop_without_reason(self) -> None:
        issues = validate_hook_output({"continue": False})

        assert _codes(issues) == ["MISSING_STOP_REASON"]

    def test_stop_with_reason(self) -> None:
        assert validate_hook_output({"continue": False, "stopReason": "Tests fail"}) == []

    def test_reason_ignored_when_continuing(self) -> None:
        issues = validate_hook_output({"continue": True, "stopReason": "unused"})

        assert _codes(issues) == ["STOP_REASON_IGNORED"]
        assert issues[0].severity is Severity.WARNING

    def test_unknown_decision(self) -> None:
        issues = validate_hook_output({"decision": "maybe"})

        assert _codes(issues) == ["INVALID_FIELD_VALUE"]
        assert issues[0].path == "decision"

    def test_field_types(self) -> None:
        issues = validate_hook_output({"continue": "yes", "stopReason": 1})

        assert _codes(issues) == ["INVALID_FIELD_TYPE", "INVALID_FIELD_TYPE"]

    def test_non_object(self) -> None:
        assert _codes(validate_hook_output([])) == ["INVALID_FIELD_TYPE"]
