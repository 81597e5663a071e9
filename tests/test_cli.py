"""Unit tests for the pysavesync CLI commands."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pysavesync.cli import main
from pysavesync.config import Config
from pysavesync.exceptions import SaveSyncAccessError


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_config(tmp_path, monkeypatch):
    """Point the CLI at a temporary config and data directory."""
    for key in ("PYSAVESYNC_SAVE_STORAGE_FOLDER", "PYSAVESYNC_EXTERNAL_FOLDER"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PYSAVESYNC_DATA_DIR", str(tmp_path / "data"))
    cfg = Config(config_dir=tmp_path / "cfg")
    with patch("pysavesync.cli.config", cfg):
        yield cfg


@pytest.fixture
def saves_dir(tmp_path):
    path = tmp_path / "data" / "external" / "saves"
    path.mkdir(parents=True)
    return path


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "PySaveSync" in result.output
        for command in ("init", "status", "dirs", "push", "pull", "reset"):
            assert command in result.output


class TestInitCommand:
    """Tests for the init command."""

    def test_init_with_valid_folder(self, runner, cli_config, external_dir):
        result = runner.invoke(main, ["init", str(external_dir)])

        assert result.exit_code == 0
        assert cli_config.get_save_storage_folder() == str(external_dir)

    def test_init_with_scan_dir(self, runner, cli_config, external_dir, tmp_path):
        result = runner.invoke(
            main, ["init", str(external_dir), "--scan-dir", str(tmp_path / "roms")]
        )

        assert result.exit_code == 0
        assert cli_config.get_external_folder() == str(tmp_path / "roms")

    def test_init_missing_folder_declined(self, runner, cli_config, tmp_path):
        result = runner.invoke(main, ["init", str(tmp_path / "missing")], input="n\n")

        assert result.exit_code == 1
        assert cli_config.get_save_storage_folder() is None

    def test_init_missing_folder_confirmed(self, runner, cli_config, tmp_path):
        folder = str(tmp_path / "missing")
        result = runner.invoke(main, ["init", folder], input="y\n")

        assert result.exit_code == 0
        assert cli_config.get_save_storage_folder() == folder


class TestResetCommand:
    """Tests for the reset command."""

    def test_reset_clears_folder(self, runner, cli_config, external_dir):
        cli_config.save_save_storage_folder(str(external_dir))

        result = runner.invoke(main, ["reset"])

        assert result.exit_code == 0
        assert cli_config.get_save_storage_folder() is None


class TestStatusCommand:
    """Tests for the status command."""

    def test_status_unconfigured(self, runner, cli_config):
        result = runner.invoke(main, ["--json", "status"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["External folder"] == "(not configured)"
        assert data["Sync supported"] is False

    def test_status_configured(self, runner, cli_config, external_dir):
        cli_config.save_save_storage_folder(str(external_dir))

        result = runner.invoke(main, ["--json", "status"])

        data = json.loads(result.output)
        assert data["External folder"] == str(external_dir)
        assert data["Sync supported"] is True


class TestDirsCommand:
    """Tests for the dirs command."""

    def test_dirs_creates_roots(self, runner, cli_config, tmp_path):
        result = runner.invoke(main, ["--json", "dirs"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["saves"] == str(tmp_path / "data" / "external" / "saves")
        assert (tmp_path / "data" / "files" / "cores").is_dir()


class TestSyncCommands:
    """Tests for the push and pull commands."""

    def test_push_without_config_is_noop(self, runner, cli_config):
        result = runner.invoke(main, ["push"])

        assert result.exit_code == 0
        assert "No external folder configured" in result.output

    def test_push_copies_files(self, runner, cli_config, external_dir, saves_dir):
        cli_config.save_save_storage_folder(str(external_dir))
        (saves_dir / "game1.sav").write_bytes(b"AA")

        result = runner.invoke(main, ["--json", "push"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["direction"] == "push"
        assert data["copied"] == 1
        assert (external_dir / "saves" / "game1.sav").read_bytes() == b"AA"

    def test_pull_copies_files(self, runner, cli_config, external_dir, saves_dir):
        cli_config.save_save_storage_folder(str(external_dir))
        (external_dir / "saves").mkdir()
        (external_dir / "saves" / "game1.sav").write_bytes(b"AA")

        result = runner.invoke(main, ["pull", "--chunk-size", "1"])

        assert result.exit_code == 0
        assert "Copied" in result.output
        assert (saves_dir / "game1.sav").read_bytes() == b"AA"

    def test_push_missing_folder_fails(self, runner, cli_config, tmp_path):
        cli_config.save_save_storage_folder(str(tmp_path / "unplugged"))

        result = runner.invoke(main, ["push"])

        assert result.exit_code == 1
        assert "could not access folder" in result.output

    def test_push_reports_skipped_files(
        self, runner, cli_config, external_dir, saves_dir
    ):
        cli_config.save_save_storage_folder(str(external_dir))
        (external_dir / "states").write_bytes(b"file")
        states_dir = saves_dir.parent / "states"
        states_dir.mkdir()
        (states_dir / "game.state").write_bytes(b"S")

        result = runner.invoke(main, ["push"])

        assert result.exit_code == 0
        assert "states/game.state" in result.output

    def test_invalid_chunk_size(self, runner, cli_config):
        result = runner.invoke(main, ["push", "--chunk-size", "0"])
        assert result.exit_code == 1

    @patch("pysavesync.cli.SaveStorageManager")
    def test_access_error_exit_code(self, mock_manager_class, runner, cli_config):
        mock_manager = mock_manager_class.from_config.return_value
        mock_manager.engine.sync.side_effect = SaveSyncAccessError("revoked")

        result = runner.invoke(main, ["pull"])

        assert result.exit_code == 1
        assert "revoked" in result.output

    @patch("pysavesync.cli.SaveStorageManager")
    def test_keyboard_interrupt(self, mock_manager_class, runner, cli_config):
        mock_manager = mock_manager_class.from_config.return_value
        mock_manager.engine.sync.side_effect = KeyboardInterrupt()

        result = runner.invoke(main, ["push"])

        assert result.exit_code == 130
        mock_manager.engine.cancel.assert_called_once()
