"""
Tests for the tokensync CLI.

The GitHub client is replaced with the in-memory fake and the store is
pointed at a temporary file, so commands run end to end without network
access.
"""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from tokensync import __version__
from tokensync.cli import app
from tokensync.cli.errors import ExitCode, exit_code_for_status

runner = CliRunner()


@pytest.fixture
def cli_store(tmp_path, monkeypatch):
    """Point the key-value store at a temp file and keep .env lookups local."""
    path = tmp_path / "state" / "store.json"
    monkeypatch.setenv("TOKENSYNC_STORE_PATH", str(path))
    monkeypatch.chdir(tmp_path)
    return path


@pytest.fixture
def fake_github(fake_client, cli_store):
    with patch("tokensync.cli.context.create_client", return_value=fake_client):
        yield fake_client


@pytest.fixture
def authed(fake_github, monkeypatch):
    monkeypatch.setenv("TOKENSYNC_GITHUB_TOKEN", "tok")
    return fake_github


def _stored(path):
    return json.loads(path.read_text()) if path.exists() else {}


def _select_target():
    assert runner.invoke(app, ["repos", "select", "acme/design"]).exit_code == 0
    assert runner.invoke(app, ["branches", "select", "main"]).exit_code == 0


class TestExitCodes:
    @pytest.mark.parametrize(
        ("ok", "status", "expected"),
        [
            (True, 201, ExitCode.SUCCESS),
            (False, 304, ExitCode.NOT_MODIFIED),
            (False, 400, ExitCode.USER_ERROR),
            (False, 409, ExitCode.USER_ERROR),
            (False, 412, ExitCode.USER_ERROR),
            (False, 422, ExitCode.GENERAL_ERROR),
            (False, 0, ExitCode.GENERAL_ERROR),
        ],
    )
    def test_exit_code_for_status(self, ok, status, expected):
        assert exit_code_for_status(ok, status) == expected


class TestMain:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "push" in result.output

    def test_client_closed_after_command(self, authed):
        assert runner.invoke(app, ["repos", "list"]).exit_code == 0
        assert authed.closed

    def test_client_closed_after_failed_command(self, fake_github):
        assert runner.invoke(app, ["auth", "status"]).exit_code == ExitCode.USER_ERROR
        assert fake_github.closed


class TestAuth:
    """Tests for the auth commands."""

    def test_login_remember(self, fake_github, cli_store):
        result = runner.invoke(app, ["auth", "login", "--with-token", "tok", "--remember"])
        assert result.exit_code == 0
        assert "octocat" in result.output
        assert "github_token_b64" in _stored(cli_store)

    def test_login_prompts(self, fake_github):
        result = runner.invoke(app, ["auth", "login"], input="tok\n")
        assert result.exit_code == 0
        assert "octocat" in result.output

    def test_login_rejected(self, fake_github, cli_store):
        result = runner.invoke(app, ["auth", "login", "--with-token", "nope"])
        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "rejected" in result.output

    def test_remembered_token_used(self, fake_github):
        runner.invoke(app, ["auth", "login", "--with-token", "tok", "--remember"])
        result = runner.invoke(app, ["auth", "status"])
        assert result.exit_code == 0
        assert "octocat" in result.output

    def test_logout(self, fake_github, cli_store):
        runner.invoke(app, ["auth", "login", "--with-token", "tok", "--remember"])
        assert runner.invoke(app, ["auth", "logout"]).exit_code == 0
        assert "github_token_b64" not in _stored(cli_store)
        assert runner.invoke(app, ["auth", "status"]).exit_code == ExitCode.USER_ERROR

    def test_status_without_token(self, fake_github):
        result = runner.invoke(app, ["auth", "status"])
        assert result.exit_code == ExitCode.USER_ERROR
        assert "Not authenticated" in result.output

    def test_global_token_option(self, fake_github):
        result = runner.invoke(app, ["--token", "tok", "auth", "status"])
        assert result.exit_code == 0


class TestRepos:
    def test_list(self, authed):
        result = runner.invoke(app, ["repos", "list"])
        assert result.exit_code == 0
        assert "acme/design" in result.output

    def test_select(self, fake_github, cli_store):
        result = runner.invoke(app, ["repos", "select", "acme/design"])
        assert result.exit_code == 0
        assert _stored(cli_store)["gh.selected"] == {"owner": "acme", "repo": "design"}

    @pytest.mark.parametrize("name", ["acme", "acme/", "a/b/c"])
    def test_select_invalid(self, fake_github, name):
        assert runner.invoke(app, ["repos", "select", name]).exit_code == ExitCode.USER_ERROR


class TestBranches:
    def test_list_selects_default(self, authed, cli_store):
        runner.invoke(app, ["repos", "select", "acme/design"])
        result = runner.invoke(app, ["branches", "list"])
        assert result.exit_code == 0
        assert "* main" in result.output
        assert _stored(cli_store)["gh.selected"]["branch"] == "main"

    def test_list_without_repo(self, authed):
        result = runner.invoke(app, ["branches", "list"])
        assert result.exit_code == ExitCode.USER_ERROR
        assert "No owner selected" in result.output

    def test_create(self, authed, cli_store):
        _select_target()
        result = runner.invoke(app, ["branches", "create", "tokens/update"])
        assert result.exit_code == 0
        assert "tokens/update" in authed.branches
        assert _stored(cli_store)["gh.selected"]["branch"] == "tokens/update"


class TestFolders:
    def test_set(self, fake_github, cli_store):
        result = runner.invoke(app, ["folders", "set", "tokens//web/"])
        assert result.exit_code == 0
        assert _stored(cli_store)["gh.selected"]["folder"] == "tokens/web"

    def test_set_root(self, fake_github):
        result = runner.invoke(app, ["folders", "set", "/"])
        assert "repo root" in result.output

    def test_set_invalid(self, fake_github):
        result = runner.invoke(app, ["folders", "set", "../x"])
        assert result.exit_code == ExitCode.USER_ERROR

    def test_list_and_create(self, authed):
        _select_target()
        assert runner.invoke(app, ["folders", "create", "tokens"]).exit_code == 0
        result = runner.invoke(app, ["folders", "list"])
        assert result.exit_code == 0
        assert "tokens/" in result.output


class TestPush:
    """Tests for push and preview."""

    def test_push_then_no_changes(self, authed, export_dir, cli_store):
        _select_target()
        first = runner.invoke(app, ["push", str(export_dir), "--scope", "all", "--folder", "tokens"])
        assert first.exit_code == 0, first.output
        assert "Committed" in first.output
        assert ("main", "tokens/tokens.json") in authed.files

        second = runner.invoke(app, ["push", str(export_dir), "--scope", "all"])
        assert second.exit_code == ExitCode.NOT_MODIFIED
        assert "No changes" in second.output
        assert len(authed.calls_to("commit_files")) == 1

    def test_push_selected_needs_collection(self, authed, export_dir):
        _select_target()
        result = runner.invoke(app, ["push", str(export_dir)])
        assert result.exit_code == ExitCode.USER_ERROR
        assert "Pick a collection" in result.output

    def test_push_selected_with_pr(self, authed, export_dir):
        _select_target()
        authed.branches["dev"] = "sha"
        result = runner.invoke(
            app,
            [
                "push", str(export_dir),
                "--branch", "dev",
                "--collection", "Brand", "--mode", "Light",
                "--pr", "--pr-base", "main",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "pull request" in result.output
        assert authed.calls_to("create_pull_request")[0]["base"] == "main"

    def test_push_requires_token(self, fake_github, export_dir):
        _select_target()
        result = runner.invoke(app, ["push", str(export_dir), "--scope", "all"])
        assert result.exit_code == ExitCode.USER_ERROR

    def test_push_requires_repo(self, authed, export_dir):
        result = runner.invoke(app, ["push", str(export_dir), "--scope", "all"])
        assert result.exit_code == ExitCode.USER_ERROR

    def test_push_missing_directory(self, authed, tmp_path):
        result = runner.invoke(app, ["push", str(tmp_path / "missing")])
        assert result.exit_code != 0

    def test_preview(self, fake_github, export_dir):
        result = runner.invoke(app, ["preview", str(export_dir), "--scope", "all", "--show"])
        assert result.exit_code == 0
        assert "tokens.json" in result.output
        assert "Brand" in result.output

    def test_preview_selected_needs_collection(self, fake_github, export_dir):
        result = runner.invoke(app, ["preview", str(export_dir)])
        assert result.exit_code == ExitCode.USER_ERROR


class TestPull:
    def test_pull(self, authed, tmp_path):
        _select_target()
        authed.put("main", "tokens/tokens.json", {"a": {"$value": 1}})
        output = tmp_path / "pulled.json"
        result = runner.invoke(app, ["pull", "tokens/tokens.json", "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text()) == {"a": {"$value": 1}}

    def test_pull_missing_file(self, authed, tmp_path):
        _select_target()
        result = runner.invoke(app, ["pull", "nope.json", "-o", str(tmp_path / "x.json")])
        assert result.exit_code == ExitCode.USER_ERROR


class TestState:
    def test_show_and_clear_signature(self, authed, export_dir, cli_store):
        _select_target()
        runner.invoke(app, ["push", str(export_dir), "--scope", "all"])

        shown = runner.invoke(app, ["state", "show"])
        assert shown.exit_code == 0
        assert "Last commit: tokens.json on main" in shown.output

        assert runner.invoke(app, ["state", "clear-signature"]).exit_code == 0
        assert "gh.lastCommitSignature" not in _stored(cli_store)

    def test_reset(self, fake_github, cli_store):
        runner.invoke(app, ["repos", "select", "acme/design"])
        assert runner.invoke(app, ["state", "reset"]).exit_code == 0
        assert "gh.selected" not in _stored(cli_store)
