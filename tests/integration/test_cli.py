"""
Integration tests for the sf-import command line.
"""

import subprocess
import sys
from pathlib import Path
from unittest.mock import ANY, patch

import pytest
import yaml
from click.testing import CliRunner

from sf_import.cli.main import cli, main
from sf_import.importer.database import init_database
from sf_import.importer.lock import LockManager
from sf_import.importer.migrations import MigrationRegistry, MigrationStatus
from tests.helpers import make_batch, set_mtime

ENGINE_RUN = "sf_import.importer.engine.subprocess.run"


def _completed(returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout="", stderr="")


@pytest.fixture
def workspace(tmp_path: Path) -> dict[str, Path]:
    return {
        "source": tmp_path / "json",
        "staging": tmp_path / "staging",
        "backup": tmp_path / "backup",
        "db": tmp_path / "state.db",
        "log": tmp_path / "logs" / "sf_import.log",
    }


@pytest.fixture
def write_config(tmp_path: Path, workspace):
    """Write a configuration file pointing at the temp workspace."""

    def _write(enabled: bool = True, backup_json: bool = False, backup_limit: int = 15) -> Path:
        data = {
            "import": {
                "enabled": enabled,
                "backup_json": backup_json,
                "backup_limit": backup_limit,
            },
            "paths": {
                "source_dir": str(workspace["source"]),
                "staging_dir": str(workspace["staging"]),
                "backup_dir": str(workspace["backup"]),
            },
            "engine": {"command": ["import-tool", "--group={group}"]},
            "state": {"db_path": str(workspace["db"])},
            "logging": {"file": str(workspace["log"])},
        }
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(data))
        return path

    return _write


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _db_url(workspace) -> str:
    url = f"sqlite:///{workspace['db']}"
    init_database(url)
    return url


class TestRun:
    """Tests for the run command."""

    def test_imports_waiting_batches(self, runner, write_config, workspace):
        config = write_config()
        batch = make_batch(workspace["source"], "b1", {"sessions.json": "[]"})

        with patch(ENGINE_RUN, return_value=_completed()) as engine_run:
            result = runner.invoke(cli, ["--config", str(config), "run"])

        assert result.exit_code == 0, result.output
        assert "Processed 1 batches" in result.output
        engine_run.assert_called_once()
        assert (workspace["staging"] / "sessions.json").exists()
        assert not batch.exists()

    def test_nothing_waiting(self, runner, write_config):
        result = runner.invoke(cli, ["--config", str(write_config()), "run"])

        assert result.exit_code == 0, result.output
        assert "No batch directories waiting" in result.output

    def test_failed_batch_exit_code_only_when_strict(self, runner, write_config, workspace):
        config = write_config()
        make_batch(workspace["source"], "b1", {"sessions.json": "[]"})

        with patch(ENGINE_RUN, return_value=_completed(returncode=1)):
            lenient = runner.invoke(cli, ["--config", str(config), "run"])
            strict = runner.invoke(cli, ["--config", str(config), "run", "--strict"])

        assert lenient.exit_code == 0, lenient.output
        assert "1 of 1 batches failed" in lenient.output
        assert strict.exit_code == 1

    def test_lock_held_is_reported(self, runner, write_config, workspace):
        config = write_config()
        LockManager(_db_url(workspace)).acquire()

        result = runner.invoke(cli, ["--config", str(config), "run", "--strict"])

        assert result.exit_code == 1
        assert "Another import is running" in result.output

    def test_busy_migration_is_reported(self, runner, write_config, workspace):
        config = write_config()
        registry = MigrationRegistry(_db_url(workspace))
        registry.register("sf_sessions", "sf_import")
        registry.set_status("sf_sessions", MigrationStatus.IMPORTING)
        batch = make_batch(workspace["source"], "b1", {"sessions.json": "[]"})

        result = runner.invoke(cli, ["--config", str(config), "run"])

        assert result.exit_code == 0
        assert "not idle" in result.output
        assert batch.exists()

    def test_disabled_warns(self, runner, write_config):
        result = runner.invoke(cli, ["--config", str(write_config(enabled=False)), "run"])

        assert result.exit_code == 0
        assert "Import is disabled" in result.output

    def test_missing_config_exits_2(self, runner, monkeypatch):
        monkeypatch.delenv("SF_IMPORT_CONFIG", raising=False)

        result = runner.invoke(cli, ["run"])

        assert result.exit_code == 2


class TestImportDir:
    """Tests for the import-dir command."""

    def test_imports_one_directory(self, runner, write_config, workspace):
        config = write_config()
        target = make_batch(workspace["source"], "b1", {"sessions.json": "[]"})
        other = make_batch(workspace["source"], "b2", {"speakers.json": "[]"})

        with patch(ENGINE_RUN, return_value=_completed()):
            result = runner.invoke(cli, ["--config", str(config), "import-dir", str(target)])

        assert result.exit_code == 0, result.output
        assert not target.exists()
        assert other.exists()


class TestStatus:
    """Tests for the status and history commands."""

    def test_status(self, runner, write_config, workspace):
        config = write_config()
        MigrationRegistry(_db_url(workspace)).register("sf_sessions", "sf_import")
        make_batch(workspace["source"], "b1")

        result = runner.invoke(cli, ["--config", str(config), "status"])

        assert result.exit_code == 0, result.output
        assert "sf_sessions" in result.output
        assert "Idle" in result.output
        assert "b1" in result.output

    def test_history_empty(self, runner, write_config):
        result = runner.invoke(cli, ["--config", str(write_config()), "history"])

        assert result.exit_code == 0
        assert "No imports recorded yet" in result.output


class TestMigrations:
    """Tests for the migrations command group."""

    def test_register_and_reset(self, runner, write_config, workspace):
        config = str(write_config())

        registered = runner.invoke(cli, ["--config", config, "migrations", "register", "sf_x"])
        MigrationRegistry(_db_url(workspace)).set_status("sf_x", MigrationStatus.STOPPING)
        reset = runner.invoke(cli, ["--config", config, "migrations", "reset", "sf_x"])

        assert registered.exit_code == 0, registered.output
        assert reset.exit_code == 0, reset.output
        assert MigrationRegistry(_db_url(workspace)).get("sf_x").is_idle

    def test_reset_unknown(self, runner, write_config):
        result = runner.invoke(
            cli, ["--config", str(write_config()), "migrations", "reset", "missing"]
        )

        assert result.exit_code == 1


class TestLock:
    """Tests for the lock command group."""

    def test_release_with_yes(self, runner, write_config, workspace):
        config = write_config()
        holder = LockManager(_db_url(workspace))
        holder.acquire()

        result = runner.invoke(cli, ["--config", str(config), "lock", "release", "--yes"])

        assert result.exit_code == 0, result.output
        assert holder.is_locked() is False

    def test_release_declined(self, runner, write_config, workspace):
        config = write_config()
        holder = LockManager(_db_url(workspace))
        holder.acquire()

        result = runner.invoke(cli, ["--config", str(config), "lock", "release"], input="n\n")

        assert result.exit_code == 0
        assert holder.is_locked() is True


class TestBackups:
    """Tests for the backups command group."""

    def test_prune(self, runner, write_config, workspace):
        config = write_config(backup_json=True, backup_limit=1)
        workspace["backup"].mkdir(parents=True)
        for name, mtime in (("old", 1_000), ("new", 2_000)):
            (workspace["backup"] / name).mkdir()
            set_mtime(workspace["backup"] / name, mtime)

        result = runner.invoke(cli, ["--config", str(config), "backups", "prune"])

        assert result.exit_code == 0, result.output
        assert [p.name for p in workspace["backup"].iterdir()] == ["new"]

    def test_list_empty(self, runner, write_config):
        result = runner.invoke(cli, ["--config", str(write_config()), "backups", "list"])

        assert result.exit_code == 0
        assert "No backups" in result.output


class TestConfig:
    """Tests for the config command group."""

    def test_validate(self, runner, write_config, workspace):
        result = runner.invoke(cli, ["--config", str(write_config()), "config", "validate"])

        assert result.exit_code == 0, result.output
        assert "Configuration is valid" in result.output
        assert workspace["source"].is_dir()

    def test_init_writes_loadable_defaults(self, runner, tmp_path):
        output = tmp_path / "generated.yaml"

        created = runner.invoke(cli, ["config", "init", str(output)])
        again = runner.invoke(cli, ["config", "init", str(output)])

        assert created.exit_code == 0, created.output
        assert again.exit_code == 1
        assert yaml.safe_load(output.read_text())["import"]["enabled"] is False

    def test_invalid_config_exits_2(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"import": {"backup_limit": -1}}))

        result = runner.invoke(cli, ["--config", str(path), "status"])

        assert result.exit_code == 2


class TestMain:
    """Tests for the console-script entry point and its exit status."""

    def test_success_returns_0(self, write_config, workspace, monkeypatch):
        config = write_config()
        make_batch(workspace["source"], "b1", {"sessions.json": "[]"})
        monkeypatch.setattr(sys, "argv", ["sf-import", "--config", str(config), "run"])

        with patch(ENGINE_RUN, return_value=_completed()):
            assert main() == 0

    def test_missing_config_returns_2(self, monkeypatch):
        monkeypatch.delenv("SF_IMPORT_CONFIG", raising=False)
        monkeypatch.setattr(sys, "argv", ["sf-import", "status"])

        assert main() == 2

    def test_unknown_migration_returns_1(self, write_config, monkeypatch):
        config = write_config()
        monkeypatch.setattr(
            sys, "argv", ["sf-import", "--config", str(config), "migrations", "reset", "nope"]
        )

        assert main() == 1

    def test_strict_refusal_returns_1(self, write_config, workspace, monkeypatch):
        config = write_config()
        LockManager(_db_url(workspace)).acquire()
        monkeypatch.setattr(sys, "argv", ["sf-import", "--config", str(config), "run", "--strict"])

        assert main() == 1

    def test_invalid_config_returns_2_and_is_logged(self, tmp_path, monkeypatch):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"import": {"backup_limit": -1}}))
        monkeypatch.setattr(sys, "argv", ["sf-import", "--config", str(path), "status"])

        with patch("sf_import.cli.main.logger") as logger:
            assert main() == 2

        logger.debug.assert_any_call("Configuration not loaded for logging setup", error=ANY)

    def test_usage_error_returns_2(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["sf-import", "no-such-command"])

        assert main() == 2
