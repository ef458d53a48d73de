"""Tests for the CLI layer."""

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from cli import app
from utils.io import ToolUnavailableError
from utils.search import Match

runner = CliRunner()


def test_read_command(repo_env, write_lines):
    target = write_lines(repo_env / "a.txt", 5)

    result = runner.invoke(app, ["read", str(target), "2", "3"])

    assert result.exit_code == 0
    assert "line 2\nline 3" in result.stdout
    assert "lines 2-3 of 5" in result.stdout


def test_read_command_outside_roots_fails(repo_env):
    result = runner.invoke(app, ["read", "/etc/passwd", "1", "2"])

    assert result.exit_code == 1


def test_info_command(repo_env, write_lines):
    target = write_lines(repo_env / "a.txt", 5)

    result = runner.invoke(app, ["info", str(target)])

    assert result.exit_code == 0
    assert "exists: True" in result.stdout
    assert "lines: 5" in result.stdout


def test_search_command(repo_env):
    found = [Match(path="/r/a.ts", line=10, text="function getUserInfo()")]
    with patch("cli.search_code", return_value=found) as mock_search:
        result = runner.invoke(app, ["search", "getUserInfo", "-n", "5"])

    assert result.exit_code == 0
    assert "getUserInfo" in result.stdout
    assert mock_search.call_args.kwargs["max_results"] == 5


def test_search_command_no_results(repo_env):
    with patch("cli.search_code", return_value=[]):
        result = runner.invoke(app, ["search", "nothing"])

    assert result.exit_code == 0
    assert "No results found" in result.stdout


def test_search_command_without_ripgrep(repo_env):
    with patch("cli.search_code", side_effect=ToolUnavailableError("rg missing")):
        result = runner.invoke(app, ["search", "needle"])

    assert result.exit_code == 1


def test_commands_require_roots(monkeypatch):
    monkeypatch.delenv("REPO_ROOTS", raising=False)
    monkeypatch.delenv("LOCALSEARCH_REPO_ROOTS", raising=False)

    result = runner.invoke(app, ["info", "a.txt"])

    assert result.exit_code == 1


def test_serve_command(repo_env):
    with (
        patch("cli.check_ripgrep_installed", return_value=True),
        patch("uvicorn.run") as mock_run,
    ):
        result = runner.invoke(app, ["serve", "--port", "4010"])

    assert result.exit_code == 0
    mock_run.assert_called_once()
    assert mock_run.call_args.kwargs["port"] == 4010
    assert mock_run.call_args.kwargs["host"] == "0.0.0.0"


def test_serve_without_roots_exits(monkeypatch):
    monkeypatch.delenv("REPO_ROOTS", raising=False)
    monkeypatch.delenv("LOCALSEARCH_REPO_ROOTS", raising=False)

    with patch("uvicorn.run") as mock_run:
        result = runner.invoke(app, ["serve"])

    assert result.exit_code == 1
    mock_run.assert_not_called()


def test_mcp_command_uses_profile(repo_env):
    server = MagicMock()
    with patch("mcp_servers.localsearch_server.build_server", return_value=server) as mock_build:
        result = runner.invoke(app, ["mcp", "--profile", "local-search"])

    assert result.exit_code == 0
    mock_build.assert_called_once_with("local-search")
    server.run.assert_called_once()


def test_status_command(repo_env):
    with patch("cli.check_ripgrep_installed", return_value=False):
        result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "System Diagnostics" in result.stdout
    assert "NOT FOUND" in result.stdout
