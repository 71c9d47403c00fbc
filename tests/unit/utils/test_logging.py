"""Unit tests for logging utilities."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
import pytest

from promptstash.utils import DEFAULT_CLI_LOG_FILE, create_cli_logger, create_logger
from promptstash.utils._logging import _get_log_level, _log_level_from_string

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROMPTSTASH_DEBUG", raising=False)
    monkeypatch.delenv("PROMPTSTASH_LOG_LEVEL", raising=False)


class TestCreateLogger:
    def test_creates_log_directory_if_missing(self, fs: FakeFilesystem) -> None:
        log_path = Path("/logs/test.log")
        assert not log_path.parent.exists()

        _ = create_logger(log_path)

        assert log_path.parent.exists()

    def test_default_format_is_json(self, fs: FakeFilesystem) -> None:
        logger = create_logger("/logs/test.log")

        logger.info("store_commit", artifact_id="reviewer")

        entry = orjson.loads(Path("/logs/test.log").read_text().splitlines()[0])
        assert entry["event"] == "store_commit"
        assert entry["artifact_id"] == "reviewer"
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_text_format(self, fs: FakeFilesystem) -> None:
        logger = create_logger("/logs/test.log", log_format="text")

        logger.info("store_commit", artifact_id="reviewer")

        log_content = Path("/logs/test.log").read_text()
        assert "store_commit" in log_content
        assert "artifact_id=reviewer" in log_content

    def test_appends_to_existing_file(self, fs: FakeFilesystem) -> None:
        fs.create_file("/logs/test.log", contents="earlier\n")
        logger = create_logger("/logs/test.log")

        logger.info("later")

        assert Path("/logs/test.log").read_text().startswith("earlier\n")

    def test_explicit_level_filters(self, fs: FakeFilesystem) -> None:
        logger = create_logger("/logs/test.log", log_level=logging.WARNING)

        logger.info("hidden")
        logger.warning("shown")

        log_content = Path("/logs/test.log").read_text()
        assert "hidden" not in log_content
        assert "shown" in log_content


class TestLogLevels:
    def test_default_is_info(self) -> None:
        assert _get_log_level() == logging.INFO

    def test_debug_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROMPTSTASH_DEBUG", "1")

        assert _get_log_level() == logging.DEBUG

    def test_level_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROMPTSTASH_LOG_LEVEL", "error")

        assert _get_log_level() == logging.ERROR

    def test_unknown_level_falls_back_to_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROMPTSTASH_LOG_LEVEL", "chatty")

        assert _get_log_level() == logging.INFO

    @pytest.mark.parametrize(
        ("level", "expected"),
        [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("nope", logging.INFO)],
    )
    def test_from_string(self, level: str, expected: int) -> None:
        assert _log_level_from_string(level) == expected

    def test_debug_flag_overrides_string_when_respected(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PROMPTSTASH_DEBUG", "1")

        assert _log_level_from_string("error") == logging.ERROR
        assert _log_level_from_string("error", respect_env=True) == logging.DEBUG


class TestCreateCliLogger:
    def test_writes_to_default_file(self, fs: FakeFilesystem) -> None:
        logger = create_cli_logger()
        logger.info("cli_started")

        assert DEFAULT_CLI_LOG_FILE.read_text().count("cli_started") == 1

    def test_default_file_resolves_against_project_root(self, fs: FakeFilesystem) -> None:
        logger = create_cli_logger(project_root=Path("/work/project"))
        logger.info("cli_started")

        log_file = Path("/work/project") / DEFAULT_CLI_LOG_FILE
        assert log_file.read_text().count("cli_started") == 1
        assert not DEFAULT_CLI_LOG_FILE.exists()

    def test_relative_log_file_resolves_against_project_root(
        self, fs: FakeFilesystem
    ) -> None:
        logger = create_cli_logger(log_file="logs/run.log", project_root=Path("/work"))
        logger.info("cli_started")

        assert Path("/work/logs/run.log").is_file()

    def test_absolute_log_file_ignores_project_root(self, fs: FakeFilesystem) -> None:
        logger = create_cli_logger(log_file="/logs/cli.log", project_root=Path("/work"))
        logger.info("cli_started")

        assert Path("/logs/cli.log").is_file()
        assert not Path("/work/logs").exists()

    def test_binds_command(self, fs: FakeFilesystem) -> None:
        logger = create_cli_logger(log_file="/logs/cli.log", command="commit")

        logger.info("cli_started")

        entry = orjson.loads(Path("/logs/cli.log").read_text())
        assert entry["command"] == "commit"

    def test_level_threshold(self, fs: FakeFilesystem) -> None:
        logger = create_cli_logger(level="error", log_file="/logs/cli.log")

        logger.warning("ignored")

        assert Path("/logs/cli.log").read_text() == ""
