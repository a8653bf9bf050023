"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner

from gitrieve.cli import cli
from gitrieve.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    # Keep structlog off the runner's short-lived output streams
    monkeypatch.setattr("gitrieve.cli.configure_logging", lambda **kwargs: None)
    monkeypatch.setenv("GITRIEVE_WORK_DIR", str(tmp_path / ".gitrieve"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.unit
class TestCli:
    """Tests for the click commands."""

    def test_help_lists_commands(self):
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("code", "release", "issue", "wiki", "discussion", "rip", "daemon"):
            assert command in result.output

    def test_missing_config(self, tmp_path):
        result = CliRunner().invoke(cli, ["-c", str(tmp_path / "missing.yaml"), "code"])

        assert result.exit_code == 1
        assert "Cannot read config file" in result.output

    def test_reports_failed_repositories(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text(
            "repository:\n"
            "  - name: broken\n"
            "    url: github.com/octo\n"
            "storage:\n"
            "  - name: local\n"
            "    type: file\n"
            "    path: backup\n"
        )

        result = CliRunner().invoke(cli, ["-c", str(config), "code", "broken"])

        assert result.exit_code == 0
        assert "Done: 0 succeeded, 1 failed" in result.output
