"""Shared test fixtures for PromptStash tests."""

from dataclasses import dataclass
from pathlib import Path

import orjson
import pytest
from rich.console import Console

SKILL_BODY = """
# My Skill

Use this skill to turn a rough idea into a reviewed implementation plan.

```python
print("hello")
```
"""

AGENT_BODY = """
# Reviewer

Review the diff for correctness, naming and missing tests before approving it.
"""


@dataclass(frozen=True, slots=True)
class StashProject:
    """Paths for a PromptStash test project."""

    root: Path
    agents_dir: Path
    commands_dir: Path
    skills_dir: Path


@pytest.fixture
def stash_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> StashProject:
    """Create a project tree and make it the working directory.

    Structure:
        tmp_path/project/
            .claude/
                agents/
                commands/
                skills/
    """
    root = tmp_path / "project"
    claude_dir = root / ".claude"
    agents_dir = claude_dir / "agents"
    commands_dir = claude_dir / "commands"
    skills_dir = claude_dir / "skills"
    for directory in (agents_dir, commands_dir, skills_dir):
        directory.mkdir(parents=True)

    monkeypatch.chdir(root)
    for name in ("PROMPTSTASH_DEBUG", "PROMPTSTASH_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    return StashProject(
        root=root,
        agents_dir=agents_dir,
        commands_dir=commands_dir,
        skills_dir=skills_dir,
    )


# ---------------------------------------------------------------------------
# Helper functions for creating test artifacts
# ---------------------------------------------------------------------------


def skill_markdown(
    name: str = "My Skill",
    description: str = "Does X",
    body: str = SKILL_BODY,
) -> str:
    """Return a SKILL.md document."""
    return f"---\nname: {name}\ndescription: {description}\n---\n{body}"


def agent_markdown(
    name: str = "reviewer",
    description: str | None = "Reviews pull requests",
    body: str = AGENT_BODY,
    **extra: str,
) -> str:
    """Return an agent or command document. A None description is omitted."""
    lines = ["---", f"name: {name}"]
    if description is not None:
        lines.append(f"description: {description}")
    lines.extend(f"{key}: {value}" for key, value in extra.items())
    lines.append("---")
    return "\n".join(lines) + "\n" + body


def create_skill(
    base_dir: Path,
    name: str,
    *,
    content: str | None = None,
    extra_files: dict[str, str] | None = None,
) -> Path:
    """Create a skill directory with SKILL.md.

    Args:
        base_dir: Directory to create the skill in.
        name: Directory name.
        content: SKILL.md content. A valid document is used if omitted.
        extra_files: Additional files, keyed by path relative to the skill.

    Returns:
        Path to the created skill directory.
    """
    skill_dir = base_dir / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(content or skill_markdown())
    for relative, text in (extra_files or {}).items():
        target = skill_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text)
    return skill_dir


def create_agent(base_dir: Path, name: str, *, content: str | None = None) -> Path:
    """Create an agent markdown file.

    Returns:
        Path to the created agent file.
    """
    base_dir.mkdir(parents=True, exist_ok=True)
    agent_path = base_dir / f"{name}.md"
    agent_path.write_text(content or agent_markdown(name=name))
    return agent_path


def hook_document(
    matcher: object = "Edit|Write",
    *,
    event: str = "PreToolUse",
    timeout: int = 5000,
    **hook: object,
) -> dict[str, object]:
    """Return a hooks.json document with a single command hook."""
    handler: dict[str, object] = {
        "type": "command",
        "command": "./scripts/lint.sh",
        "timeout": timeout,
    }
    handler.update(hook)
    return {"hooks": {event: [{"matcher": matcher, "hooks": [handler]}]}}


def hook_bytes(document: object) -> bytes:
    return orjson.dumps(document)


@pytest.fixture
def console() -> Console:
    return Console(
        width=100,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
