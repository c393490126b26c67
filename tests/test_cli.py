"""Tests for the CLI and configuration defaults."""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from claude_session_viewer import config
from claude_session_viewer.cli import main


class TestConfig:
    def test_projects_path_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CLAUDE_VIEWER_PROJECTS_PATH", str(tmp_path))
        assert config.get_projects_path() == tmp_path

    def test_projects_path_default(self, monkeypatch):
        monkeypatch.delenv("CLAUDE_VIEWER_PROJECTS_PATH", raising=False)
        assert config.get_projects_path() == Path.home() / ".claude" / "projects"

    def test_port(self, monkeypatch):
        monkeypatch.setenv("CLAUDE_VIEWER_PORT", "9000")
        assert config.get_port() == 9000
        monkeypatch.setenv("CLAUDE_VIEWER_PORT", "not-a-port")
        assert config.get_port() == config.DEFAULT_PORT


class TestCli:
    def test_projects_command(self, tmp_projects_dir):
        result = CliRunner().invoke(main, ["projects", "--projects-path", str(tmp_projects_dir)])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines == [
            "other\t1\t/Users/testuser/dev/other",
            "myapp\t3\t/Users/testuser/dev/myapp",
        ]

    def test_projects_command_empty(self, tmp_path):
        result = CliRunner().invoke(main, ["projects", "--projects-path", str(tmp_path)])
        assert result.exit_code == 0
        assert "No sessions found" in result.output

    def test_serve_passes_configured_app_to_uvicorn(self, tmp_projects_dir):
        with patch("claude_session_viewer.cli.uvicorn.run") as run:
            result = CliRunner().invoke(main, [
                "--log-level", "debug",
                "serve", "--port", "4000", "--projects-path", str(tmp_projects_dir),
            ])
        assert result.exit_code == 0, result.output
        app = run.call_args.args[0]
        assert app.state.provider.get_base_path() == tmp_projects_dir
        assert run.call_args.kwargs["port"] == 4000
        assert run.call_args.kwargs["host"] == config.DEFAULT_HOST


class TestPackaging:
    def test_long_description_is_not_the_design_ledger(self):
        tomllib = pytest.importorskip("tomllib")
        pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
        project = tomllib.loads(pyproject.read_text(encoding="utf-8"))["project"]
        assert project.get("readme") != "DESIGN.md"
        assert "claude_session_viewer.cli:main" in project["scripts"].values()
