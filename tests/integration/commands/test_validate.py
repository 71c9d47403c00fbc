from collections.abc import Callable

import orjson
import pytest

from promptstash.cli._commands import ExitCode
from tests.conftest import StashProject, agent_markdown, create_agent, create_skill


class TestValidateCommand:
    def test_valid_skill_exits_zero(
        self,
        stash_project: StashProject,
        promptstash_cli_with_exit_code: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = create_skill(stash_project.skills_dir, "my-skill")

        exit_code = promptstash_cli_with_exit_code("validate", ".claude/skills/my-skill")

        assert exit_code == ExitCode.SUCCESS
        output = capsys.readouterr().out
        assert "FIELD_BELOW_RECOMMENDED_LENGTH" in output
        assert "valid" in output

    def test_clean_agent_reports_no_issues(
        self,
        stash_project: StashProject,
        promptstash_cli_with_exit_code: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = create_agent(stash_project.agents_dir, "reviewer")

        exit_code = promptstash_cli_with_exit_code("validate", ".claude/agents/reviewer.md")

        assert exit_code == ExitCode.SUCCESS
        assert "no issues" in capsys.readouterr().out

    def test_blocking_issue_exits_with_validation_failed(
        self,
        stash_project: StashProject,
        promptstash_cli_with_exit_code: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = create_agent(
            stash_project.agents_dir, "reviewer", content=agent_markdown(description=None)
        )

        exit_code = promptstash_cli_with_exit_code("validate", ".claude/agents/reviewer.md")

        assert exit_code == ExitCode.VALIDATION_FAILED
        output = capsys.readouterr().out
        assert "[MISSING_REQUIRED_FIELD]" in output
        assert "invalid" in output

    def test_unrecognized_path(
        self,
        stash_project: StashProject,
        promptstash_cli_with_exit_code: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (stash_project.root / "notes.txt").write_text("hello")

        exit_code = promptstash_cli_with_exit_code("validate", "notes.txt")

        assert exit_code == ExitCode.VALIDATION_FAILED
        assert "NOT_RECOGNIZED" in capsys.readouterr().out

    def test_explicit_kind(
        self,
        stash_project: StashProject,
        promptstash_cli_with_exit_code: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = create_agent(stash_project.root, "my-skill")

        exit_code = promptstash_cli_with_exit_code("validate", "my-skill.md", "--kind", "skill")

        assert exit_code == ExitCode.VALIDATION_FAILED
        assert "NOT_DIRECTORY" in capsys.readouterr().out

    def test_json_output(
        self,
        stash_project: StashProject,
        promptstash_cli_with_exit_code: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = create_agent(stash_project.agents_dir, "reviewer")
        _ = create_agent(
            stash_project.agents_dir, "broken", content=agent_markdown(description=None)
        )

        exit_code = promptstash_cli_with_exit_code(
            "validate",
            ".claude/agents/reviewer.md",
            ".claude/agents/broken.md",
            "--format",
            "json",
        )

        assert exit_code == ExitCode.VALIDATION_FAILED
        payload = orjson.loads(capsys.readouterr().out)
        assert [entry["path"] for entry in payload] == [
            ".claude/agents/reviewer.md",
            ".claude/agents/broken.md",
        ]
        assert payload[0]["valid"] is True
        assert payload[1]["valid"] is False
        assert payload[1]["issues"][0] == {
            "code": "MISSING_REQUIRED_FIELD",
            "message": "Missing required field 'description'",
            "severity": "error",
            "path": "description",
            "suggestion": "Add 'description:' to the frontmatter",
        }

    def test_requires_paths(
        self,
        stash_project: StashProject,
        promptstash_cli_with_exit_code: Callable[..., int],
    ) -> None:
        assert promptstash_cli_with_exit_code("validate") == ExitCode.FAILURE
