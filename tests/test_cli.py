"""Tests for the uploadctl command line interface."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner
from conftest import ScriptedBackend

from uploadctl import __version__
from uploadctl.cli.main import cli
from uploadctl.uploaders.backends import SimulatedBackend


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Point every command at a config file inside tmp_path."""
    path = tmp_path / "config" / "config.yaml"
    with patch("uploadctl.core.config.CONFIG_FILE", path), patch(
        "uploadctl.cli.config_cmd.CONFIG_FILE", path
    ):
        yield path


@pytest.fixture
def instant_backend() -> Generator[MagicMock, None, None]:
    """Replace the simulated backend's delays with zero."""
    with patch(
        "uploadctl.cli.common.SimulatedBackend",
        side_effect=lambda **kwargs: SimulatedBackend.instant(**kwargs),
    ) as mock_cls:
        yield mock_cls


@pytest.fixture
def files(tmp_path: Path) -> list[Path]:
    paths = []
    for name, content in (("a.txt", b"alpha"), ("b.txt", b"bravo!"), ("tool.exe", b"MZ")):
        path = tmp_path / name
        path.write_bytes(content)
        paths.append(path)
    return paths


class TestMain:
    """Tests for the top-level group."""

    def test_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])

        for command in ("upload", "check", "filters", "config"):
            assert command in result.output


class TestFiltersCommand:
    """Tests for the filters command."""

    def test_json(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["filters", "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["images"] == ["jpg", "jpeg", "png", "gif", "webp"]
        assert data["all"] == []

    def test_quiet_lists_names(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["filters", "-q"])

        assert result.output.split() == ["all", "images", "documents", "media"]


class TestCheckCommand:
    """Tests for the check command."""

    def test_rejected_file_exits_nonzero(self, runner: CliRunner, config_file: Path, files):
        result = runner.invoke(cli, ["check", *map(str, files), "-t", "txt", "-o", "json"])

        assert result.exit_code == 1
        rows = {row["name"]: row for row in json.loads(result.output)}
        assert rows["a.txt"]["accepted"] is True
        assert rows["tool.exe"]["accepted"] is False
        assert rows["tool.exe"]["reason"] == "File type .exe is not allowed"

    def test_all_accepted(self, runner: CliRunner, config_file: Path, files):
        result = runner.invoke(cli, ["check", str(files[0]), "--filter", "documents"])

        assert result.exit_code == 0
        assert "a.txt" in result.output

    def test_unknown_filter(self, runner: CliRunner, config_file: Path, files):
        result = runner.invoke(cli, ["check", str(files[0]), "--filter", "nope"])

        assert result.exit_code == 1
        assert "Unknown filter" in result.output


class TestUploadCommand:
    """Tests for the upload command."""

    def test_upload_json(self, runner: CliRunner, config_file: Path, instant_backend, files):
        result = runner.invoke(cli, ["upload", str(files[0]), str(files[1]), "-o", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["succeeded"] == 2
        assert data["success_rate"] == 100.0
        assert data["total_size"] == 11
        assert [f["name"] for f in data["files"]] == ["a.txt", "b.txt"]
        assert all(f["status"] == "completed" and f["progress"] == 100 for f in data["files"])
        assert "thumbnail" not in data["files"][0]

    def test_upload_table(self, runner: CliRunner, config_file: Path, instant_backend, files):
        result = runner.invoke(cli, ["upload", str(files[0])])

        assert result.exit_code == 0, result.output
        assert "Upload Results" in result.output
        assert "a.txt" in result.output

    def test_rejected_files_are_skipped(
        self, runner: CliRunner, config_file: Path, instant_backend, files
    ):
        result = runner.invoke(cli, ["upload", *map(str, files), "-t", "txt", "-q"])

        assert result.exit_code == 0
        assert "File type .exe is not allowed" in result.output
        assert "a.txt" in result.output
        assert "b.txt" in result.output

    def test_nothing_accepted(self, runner: CliRunner, config_file: Path, instant_backend, files):
        result = runner.invoke(cli, ["upload", str(files[2]), "-t", "txt"])

        assert result.exit_code == 1
        assert "No files to upload" in result.output

    def test_failed_session_exits_nonzero(
        self, runner: CliRunner, config_file: Path, instant_backend, files
    ):
        result = runner.invoke(cli, ["upload", str(files[0]), "--fail-rate", "1.0", "-o", "json"])

        assert result.exit_code == 1
        assert '"success": false' in result.output
        assert '"success_rate": 0.0' in result.output
        instant_backend.assert_called_once_with(failure_probability=1.0)

    def test_http_profile_builds_http_backend(
        self, runner: CliRunner, config_file: Path, files
    ):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(
            yaml.dump(
                {
                    "default_profile": "remote",
                    "profiles": {
                        "remote": {"backend": "http", "url": "https://up.example.org/files"}
                    },
                }
            )
        )

        with patch(
            "uploadctl.cli.common.HttpBackend", return_value=ScriptedBackend()
        ) as mock_http:
            result = runner.invoke(cli, ["upload", str(files[0]), "-o", "json"])

        assert result.exit_code == 0, result.output
        mock_http.assert_called_once_with(
            "https://up.example.org/files", timeout=30, verify_ssl=True
        )

    def test_malformed_config_is_reported(self, runner: CliRunner, config_file: Path, files):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("profiles:\n  prod: http://x\n")

        result = runner.invoke(cli, ["upload", str(files[0])])

        assert result.exit_code == 1
        assert "Profile must be a mapping" in result.output
        assert not isinstance(result.exception, AttributeError)

    def test_unknown_profile(self, runner: CliRunner, config_file: Path, files):
        result = runner.invoke(cli, ["upload", str(files[0]), "--profile", "ghost"])

        assert result.exit_code == 1
        assert "ghost" in result.output


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_init_and_current_context(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["config", "init"])

        assert result.exit_code == 0, result.output
        assert config_file.exists()

        result = runner.invoke(cli, ["config", "current-context"])
        assert result.output.strip() == "default"

    def test_init_http_prompts_for_url(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            cli,
            ["config", "init", "--backend", "http", "--profile", "remote"],
            input="https://up.example.org/files\n",
        )

        assert result.exit_code == 0, result.output
        data = yaml.safe_load(config_file.read_text())
        assert data["default_profile"] == "remote"
        assert data["profiles"]["remote"]["url"] == "https://up.example.org/files"

    def test_init_existing_profile_needs_force(self, runner: CliRunner, config_file: Path):
        runner.invoke(cli, ["config", "init"])

        result = runner.invoke(cli, ["config", "init"])
        assert result.exit_code == 1

        result = runner.invoke(cli, ["config", "init", "--force"])
        assert result.exit_code == 0

    def test_add_use_and_remove_profile(self, runner: CliRunner, config_file: Path):
        runner.invoke(cli, ["config", "init"])

        result = runner.invoke(
            cli, ["config", "add-profile", "staging", "--url", "https://staging.example.org/up"]
        )
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["config", "use-context", "staging"])
        assert result.exit_code == 0
        assert runner.invoke(cli, ["config", "current-context"]).output.strip() == "staging"

        result = runner.invoke(cli, ["config", "remove-profile", "staging", "-y"])
        assert result.exit_code == 1

        result = runner.invoke(cli, ["config", "remove-profile", "default", "-y"])
        assert result.exit_code == 0
        assert "default" not in yaml.safe_load(config_file.read_text())["profiles"]

    def test_add_profile_invalid_url(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["config", "add-profile", "bad", "--url", "not-a-url"])

        assert result.exit_code == 1

    def test_use_unknown_context(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["config", "use-context", "ghost"])

        assert result.exit_code == 1
        assert "Available profiles: default" in result.output

    def test_show_json(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["config", "show", "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["default_profile"] == "default"
        assert data["profile_details"]["default"]["backend"] == "simulated"
        assert "images" in data["filters"]
