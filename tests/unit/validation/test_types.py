import orjson
import pytest

from promptstash.validation import (
    IssueCollector,
    Severity,
    ValidationIssue,
    ValidationReport,
    ValidationStage,
)


def _issue(
    code: str,
    stage: ValidationStage = ValidationStage.SCHEMA,
    severity: Severity = Severity.ERROR,
    **kwargs: str,
) -> ValidationIssue:
    return ValidationIssue(
        code=code, message=f"{code} message", severity=severity, stage=stage, **kwargs
    )


class TestValidationIssue:
    def test_error_is_blocking(self) -> None:
        assert _issue("X").is_blocking is True

    @pytest.mark.parametrize("severity", [Severity.WARNING, Severity.INFO])
    def test_non_error_is_not_blocking(self, severity: Severity) -> None:
        assert _issue("X", severity=severity).is_blocking is False

    def test_to_dict_omits_unset_optional_fields(self) -> None:
        data = _issue("MISSING_REQUIRED_FIELD").to_dict()

        assert data == {
            "code": "MISSING_REQUIRED_FIELD",
            "message": "MISSING_REQUIRED_FIELD message",
            "severity": "error",
        }

    def test_to_dict_includes_path_and_suggestion(self) -> None:
        data = _issue("X", path="name", suggestion="Add a name").to_dict()

        assert data["path"] == "name"
        assert data["suggestion"] == "Add a name"
        assert "stage" not in data

    def test_format_includes_location_and_suggestion(self) -> None:
        text = _issue("X", path="agents/a.md", suggestion="Fix it").format()

        assert text == "agents/a.md: ERROR: [X] X message (Fix it)"


class TestValidationReport:
    def test_from_issues_orders_by_stage_then_code(self) -> None:
        report = ValidationReport.from_issues(
            [
                _issue("B", ValidationStage.CONTENT),
                _issue("Z", ValidationStage.STRUCTURE),
            ],
            [_issue("A", ValidationStage.CONTENT)],
        )

        assert report.codes() == ["Z", "A", "B"]

    def test_from_issues_keeps_production_order_for_equal_keys(self) -> None:
        first = _issue("SAME", path="first")
        second = _issue("SAME", path="second")

        report = ValidationReport.from_issues([first, second])

        assert report.issues == (first, second)

    def test_empty_report_is_valid(self) -> None:
        report = ValidationReport()

        assert report.is_valid is True
        assert report.is_blocking is False
        assert len(report) == 0

    def test_warnings_do_not_block(self) -> None:
        report = ValidationReport.from_issues(
            [_issue("W", severity=Severity.WARNING), _issue("I", severity=Severity.INFO)]
        )

        assert report.is_blocking is False
        assert report.warning_count == 1
        assert len(report.infos) == 1

    def test_severity_filters(self) -> None:
        report = ValidationReport.from_issues(
            [
                _issue("E1"),
                _issue("W1", severity=Severity.WARNING),
                _issue("E2"),
            ]
        )

        assert report.error_count == 2
        assert report.codes(Severity.ERROR) == ["E1", "E2"]
        assert report.codes(Severity.WARNING) == ["W1"]

    def test_merge_resorts_issues(self) -> None:
        late = ValidationReport.from_issues([_issue("A", ValidationStage.MANIFEST)])
        early = ValidationReport.from_issues([_issue("B", ValidationStage.PARSE)])

        merged = late.merge(early)

        assert merged.codes() == ["B", "A"]

    def test_to_dict_wire_shape(self) -> None:
        report = ValidationReport.from_issues(
            [_issue("E"), _issue("W", severity=Severity.WARNING)]
        )

        data = report.to_dict()

        assert data["valid"] is False
        assert data["error_count"] == 1
        assert data["warning_count"] == 1
        assert [issue["code"] for issue in data["issues"]] == ["E", "W"]

    def test_to_json_parses_back_to_dict(self) -> None:
        report = ValidationReport.from_issues([_issue("E", path="name")])

        assert orjson.loads(report.to_json()) == report.to_dict()


class TestIssueCollector:
    def test_attaches_stage_and_severity(self) -> None:
        collector = IssueCollector(ValidationStage.CONTENT)

        collector.add_error("E", "error")
        collector.add_warning("W", "warning", path="body")
        collector.add_info("I", "info", suggestion="hint")

        assert [issue.severity for issue in collector.issues] == [
            Severity.ERROR,
            Severity.WARNING,
            Severity.INFO,
        ]
        assert {issue.stage for issue in collector.issues} == {ValidationStage.CONTENT}
        assert collector.issues[1].path == "body"
        assert collector.issues[2].suggestion == "hint"
