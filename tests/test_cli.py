"""Tests for mediactl CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from conftest import BACKEND_URL, BUCKET, STORAGE_URL, FakeBackend, FakeStore
from mediactl.cli.common import Context
from mediactl.cli.main import cli
from mediactl.core.auth import AuthManager
from mediactl.core.config import Config


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and token cache at a temp dir."""
    path = tmp_path / "config.yaml"
    monkeypatch.setattr("mediactl.core.config.CONFIG_FILE", path)
    monkeypatch.setattr("mediactl.cli.config_cmd.CONFIG_FILE", path)
    monkeypatch.setattr("mediactl.core.auth.SESSION_CACHE_FILE", tmp_path / ".session")
    return path


@pytest.fixture
def logged_in(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEDIACTL_URL", BACKEND_URL)
    monkeypatch.setenv("MEDIACTL_UID", "user-1")
    monkeypatch.setenv("MEDIACTL_TOKEN", "tok-1")


def _context(backend: FakeBackend, store: FakeStore | None = None) -> Context:
    ctx = Context()
    ctx.transport = backend.transport
    if store is not None:
        ctx.storage_transport = store.transport
    return ctx


def _image(tmp_path: Path, name: str = "photo.png", size: int = 64) -> Path:
    path = tmp_path / name
    path.write_bytes(b"\x89" * size)
    return path


# =============================================================================
# Basic CLI Tests
# =============================================================================


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_cli_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "mediactl" in result.output
        assert "upload" in result.output
        assert "resolve" in result.output

    def test_cli_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "mediactl" in result.output
        assert "0.1.0" in result.output

    def test_upload_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["upload", "--help"])
        assert result.exit_code == 0
        assert "--parent" in result.output
        assert "--workers" in result.output


# =============================================================================
# Upload Command Tests
# =============================================================================


class TestUploadCommand:
    """Tests for the upload command."""

    def test_upload_json(self, runner: CliRunner, logged_in: None, tmp_path: Path):
        backend = FakeBackend()

        result = runner.invoke(
            cli,
            ["upload", str(_image(tmp_path)), "--parent", "f-1", "-o", "json"],
            obj=_context(backend),
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["results"] == [
            {"fileId": "file-sess-1", "url": "https://cdn.example.com/file-sess-1?sig=abc"}
        ]
        assert data["errors"] == []
        assert json.loads(backend.calls("presign")[0].content)["parentId"] == "f-1"

    def test_upload_quiet_prints_file_ids(
        self, runner: CliRunner, logged_in: None, tmp_path: Path
    ):
        files = [str(_image(tmp_path, "a.png")), str(_image(tmp_path, "b.png"))]

        result = runner.invoke(cli, ["upload", *files, "-q"], obj=_context(FakeBackend()))

        assert result.exit_code == 0, result.output
        assert "file-sess-1" in result.output
        assert "file-sess-2" in result.output

    def test_upload_falls_back_to_store(
        self,
        runner: CliRunner,
        logged_in: None,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setenv("MEDIACTL_STORAGE_URL", STORAGE_URL)
        monkeypatch.setenv("MEDIACTL_STORAGE_BUCKET", BUCKET)
        backend = FakeBackend()
        backend.fail["presign"] = 503
        store = FakeStore()

        result = runner.invoke(
            cli, ["upload", str(_image(tmp_path)), "-q"], obj=_context(backend, store)
        )

        assert result.exit_code == 0, result.output
        assert f"{STORAGE_URL}/v0/b/{BUCKET}/o/" in result.output
        assert len(store.objects) == 1

    def test_upload_failure_exits_nonzero(
        self, runner: CliRunner, logged_in: None, tmp_path: Path
    ):
        backend = FakeBackend()
        backend.fail["presign"] = 503

        result = runner.invoke(cli, ["upload", str(_image(tmp_path))], obj=_context(backend))

        assert result.exit_code == 1
        assert "photo.png" in result.output
        assert "Uploaded 0/1 file(s) (0%)" in result.output

    def test_upload_table_prints_summary(
        self, runner: CliRunner, logged_in: None, tmp_path: Path
    ):
        files = [str(_image(tmp_path, "a.png")), str(_image(tmp_path, "b.png"))]

        result = runner.invoke(cli, ["upload", *files], obj=_context(FakeBackend()))

        assert result.exit_code == 0, result.output
        assert "Uploaded 2/2 file(s) (100%)" in result.output

    def test_upload_only_rejected_exits_nonzero(
        self, runner: CliRunner, logged_in: None, tmp_path: Path
    ):
        backend = FakeBackend()
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        result = runner.invoke(cli, ["upload", str(notes)], obj=_context(backend))

        assert result.exit_code == 1
        assert "Skipped" in result.output
        assert backend.requests == []

    def test_upload_requires_token(
        self,
        runner: CliRunner,
        config_file: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setenv("MEDIACTL_URL", BACKEND_URL)
        ctx = _context(FakeBackend())
        ctx.auth_manager = AuthManager(cache_file=tmp_path / "empty-session")

        result = runner.invoke(cli, ["upload", str(_image(tmp_path))], obj=ctx)

        assert result.exit_code == 1
        assert "Not authenticated" in result.output

    def test_upload_without_profile(
        self, runner: CliRunner, config_file: Path, tmp_path: Path
    ):
        result = runner.invoke(
            cli, ["upload", str(_image(tmp_path))], obj=_context(FakeBackend())
        )

        assert result.exit_code == 1
        assert "config init" in result.output

    def test_invalid_workers(self, runner: CliRunner, logged_in: None, tmp_path: Path):
        result = runner.invoke(
            cli, ["upload", str(_image(tmp_path)), "--workers", "0"], obj=_context(FakeBackend())
        )

        assert result.exit_code == 1


# =============================================================================
# Resolve Command Tests
# =============================================================================


class TestResolveCommand:
    """Tests for the resolve command."""

    def test_resolve(self, runner: CliRunner, logged_in: None):
        result = runner.invoke(cli, ["resolve", "file-9"], obj=_context(FakeBackend()))

        assert result.exit_code == 0, result.output
        assert "https://cdn.example.com/file-9?sig=abc" in result.output

    def test_resolve_json(self, runner: CliRunner, logged_in: None):
        result = runner.invoke(
            cli, ["resolve", "file-9", "-o", "json"], obj=_context(FakeBackend())
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {
            "fileId": "file-9",
            "url": "https://cdn.example.com/file-9?sig=abc",
        }

    def test_resolve_failure(self, runner: CliRunner, logged_in: None):
        backend = FakeBackend()
        backend.fail["resolve"] = 404

        result = runner.invoke(cli, ["resolve", "file-9"], obj=_context(backend))

        assert result.exit_code == 1
        assert "file-9" in result.output


# =============================================================================
# Config Command Tests
# =============================================================================


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_config_init(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            cli,
            [
                "config",
                "init",
                "--url",
                BACKEND_URL,
                "--storage-url",
                STORAGE_URL,
                "--storage-bucket",
                BUCKET,
            ],
        )

        assert result.exit_code == 0, result.output
        data = yaml.safe_load(config_file.read_text())
        assert data["default_profile"] == "default"
        assert data["profiles"]["default"]["url"] == BACKEND_URL
        assert data["profiles"]["default"]["storage_bucket"] == BUCKET

    def test_config_init_existing_profile_no_force(self, runner: CliRunner, config_file: Path):
        runner.invoke(cli, ["config", "init", "--url", BACKEND_URL])

        result = runner.invoke(cli, ["config", "init", "--url", "https://other.example.com"])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert Config.load(config_file).get_profile().url == BACKEND_URL

    def test_config_init_invalid_url(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["config", "init", "--url", "not-a-url"])

        assert result.exit_code == 1
        assert not config_file.exists()

    def test_add_use_and_remove_profile(self, runner: CliRunner, config_file: Path):
        runner.invoke(cli, ["config", "init", "--url", BACKEND_URL])

        added = runner.invoke(
            cli,
            [
                "config",
                "add-profile",
                "staging",
                "--url",
                "https://staging.example.com",
                "--max-files",
                "6",
            ],
        )
        assert added.exit_code == 0, added.output
        assert Config.load(config_file).get_profile("staging").max_files == 6

        switched = runner.invoke(cli, ["config", "use-context", "staging"])
        assert switched.exit_code == 0
        assert Config.load(config_file).default_profile == "staging"

        runner.invoke(cli, ["config", "use-context", "default"])
        removed = runner.invoke(cli, ["config", "remove-profile", "staging", "--yes"])
        assert removed.exit_code == 0
        assert not Config.load(config_file).has_profile("staging")

    def test_show_json(self, runner: CliRunner, config_file: Path):
        runner.invoke(cli, ["config", "init", "--url", BACKEND_URL])

        result = runner.invoke(cli, ["config", "show", "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["profiles"] == ["default"]
        assert data["profile_details"]["default"]["url"] == BACKEND_URL

    def test_show_without_config(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 1


# =============================================================================
# Auth Command Tests
# =============================================================================


class TestAuthCommands:
    """Tests for auth subcommands."""

    def test_login_status_logout(
        self, runner: CliRunner, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("MEDIACTL_URL", BACKEND_URL)

        login = runner.invoke(
            cli, ["auth", "login", "--uid", "user-1", "--token", "secret-token"]
        )
        assert login.exit_code == 0, login.output
        assert "user-1" in login.output

        status = runner.invoke(cli, ["auth", "status", "-o", "json"])
        assert status.exit_code == 0
        data = json.loads(status.output)
        assert data["session_cached"] is True
        assert data["session_uid"] == "user-1"
        assert "secret-token" not in status.output

        logout = runner.invoke(cli, ["auth", "logout"])
        assert logout.exit_code == 0
        assert AuthManager().load_session(BACKEND_URL) is None

    def test_login_prompts_for_token(
        self, runner: CliRunner, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("MEDIACTL_URL", BACKEND_URL)

        result = runner.invoke(cli, ["auth", "login", "--uid", "user-1"], input="typed-token\n")

        assert result.exit_code == 0, result.output
        assert AuthManager().load_session(BACKEND_URL).token == "typed-token"

    def test_cached_token_is_used_for_upload(
        self,
        runner: CliRunner,
        config_file: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setenv("MEDIACTL_URL", BACKEND_URL)
        runner.invoke(cli, ["auth", "login", "--uid", "user-1", "--token", "cached-tok"])
        backend = FakeBackend()

        result = runner.invoke(cli, ["upload", str(_image(tmp_path)), "-q"], obj=_context(backend))

        assert result.exit_code == 0, result.output
        assert all(r.headers["Authorization"] == "Bearer cached-tok" for r in backend.requests)

    def test_login_unknown_profile(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            cli, ["auth", "login", "--profile", "nope", "--uid", "u", "--token", "t"]
        )
        assert result.exit_code == 1
