"""Unit tests for the pyincsync CLI commands."""

import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pyincsync.cli import main
from pyincsync.exceptions import FilesystemError


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def roots(tmp_path):
    """Create source and destination roots with one new file."""
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    (src / "inbox").mkdir(parents=True)
    (src / "inbox" / "a.txt").write_bytes(b"x" * 12)
    (src / "inbox" / "b.log").write_bytes(b"x" * 5)
    (src / "inbox" / "c.txt").write_bytes(b"")
    return src, dst


@pytest.fixture
def config_file(tmp_path, roots):
    """Write a configuration file pointing at the test roots."""
    src, dst = roots
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {"SRC_DIR": str(src), "DIST_DIR": str(dst), "EXCLUDED_EXT": [".LOG"]}
        )
    )
    return path


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands and options."""
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "PyIncSync" in result.output
        assert "--config" in result.output
        assert "sync" in result.output
        assert "status" in result.output

    def test_no_command_runs_sync(self, runner, config_file, roots):
        """Test that invoking without a command performs a sync."""
        _, dst = roots

        result = runner.invoke(main, ["-c", str(config_file)])

        assert result.exit_code == 0
        assert "Sync completed." in result.output
        assert (dst / "inbox" / "a.txt").exists()

    def test_config_from_environment(self, runner, config_file, roots):
        """Test that the config path can come from the environment."""
        _, dst = roots

        result = runner.invoke(
            main, ["sync"], env={"PYINCSYNC_CONFIG": str(config_file)}
        )

        assert result.exit_code == 0
        assert (dst / "inbox" / "last_copied.txt").read_text() == "a.txt"


class TestSyncCommand:
    """Tests for the sync command."""

    def test_sync_copies_new_files(self, runner, config_file, roots):
        """Test a sync prints one line per copied file and a completion line."""
        src, dst = roots

        result = runner.invoke(main, ["-c", str(config_file), "sync"])

        assert result.exit_code == 0
        expected = f"Copied: {src / 'inbox' / 'a.txt'} -> {dst / 'inbox' / 'a.txt'}"
        assert expected in result.output
        assert "b.log" not in result.output
        assert "c.txt" not in result.output
        assert result.output.rstrip().endswith("Sync completed.")
        assert (dst / "inbox" / "last_copied.txt").read_text() == "a.txt"

    @pytest.mark.skipif(
        sys.platform != "linux", reason="needs arbitrary bytes in filenames"
    )
    def test_sync_non_utf8_filename(self, runner, tmp_path):
        """Test that a filename that is not valid UTF-8 is copied and reported."""
        src = tmp_path / "src"
        dst = tmp_path / "dst"
        (src / "d").mkdir(parents=True)
        raw_name = os.path.join(os.fsencode(src / "d"), b"bad\xff.txt")
        with open(raw_name, "wb") as f:
            f.write(b"payload")
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"SRC_DIR": str(src), "DIST_DIR": str(dst)}))

        result = runner.invoke(main, ["-c", str(path), "sync"])

        assert result.exit_code == 0
        assert "bad\\xff.txt" in result.output
        assert "Sync completed." in result.output
        assert (dst / "d" / "last_copied.txt").read_bytes() == b"bad\xff.txt"
        copied = os.path.join(os.fsencode(dst / "d"), b"bad\xff.txt")
        with open(copied, "rb") as f:
            assert f.read() == b"payload"

    def test_second_sync_copies_nothing(self, runner, config_file):
        """Test idempotence through the CLI."""
        runner.invoke(main, ["-c", str(config_file), "sync"])

        result = runner.invoke(main, ["-c", str(config_file), "sync"])

        assert result.exit_code == 0
        assert "Copied:" not in result.output
        assert "everything is in sync" in result.output
        assert "Sync completed." in result.output

    def test_sync_dry_run(self, runner, config_file, roots):
        """Test that --dry-run lists copies without performing them."""
        _, dst = roots

        result = runner.invoke(main, ["-c", str(config_file), "sync", "--dry-run"])

        assert result.exit_code == 0
        assert "Would copy:" in result.output
        assert "Dry run completed." in result.output
        assert not dst.exists()

    def test_sync_json(self, runner, config_file):
        """Test that --json prints the statistics object only."""
        result = runner.invoke(main, ["-c", str(config_file), "--json", "sync"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["dry_run"] is False
        assert data["files_copied"] == 1
        assert data["bytes_copied"] == 12
        assert data["excluded"] == 1
        assert data["empty"] == 1

    def test_sync_quiet(self, runner, config_file):
        """Test that --quiet keeps only the completion line."""
        result = runner.invoke(main, ["-c", str(config_file), "-q", "sync"])

        assert result.exit_code == 0
        assert "Copied:" not in result.output
        assert result.output.strip() == "Sync completed."

    def test_missing_config(self, runner, tmp_path):
        """Test that a missing config file is a config load error."""
        result = runner.invoke(main, ["-c", str(tmp_path / "absent.json"), "sync"])

        assert result.exit_code == 1
        assert "Config load error" in result.output
        assert "not found" in result.output

    def test_malformed_config(self, runner, tmp_path):
        """Test that a malformed config file is a config load error."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"SRC_DIR": "/in"}))

        result = runner.invoke(main, ["-c", str(path), "sync"])

        assert result.exit_code == 1
        assert "Config load error: Missing required fields: DIST_DIR" in result.output

    def test_missing_source_root(self, runner, tmp_path):
        """Test that a missing source directory is a sync error."""
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {"SRC_DIR": str(tmp_path / "nope"), "DIST_DIR": str(tmp_path / "out")}
            )
        )

        result = runner.invoke(main, ["-c", str(path), "sync"])

        assert result.exit_code == 1
        assert "Sync error: Source directory does not exist" in result.output
        assert "Sync completed." not in result.output

    @patch("pyincsync.cli.SyncEngine")
    def test_filesystem_error_exit_code(self, mock_engine_class, runner, config_file):
        """Test that a FilesystemError during sync exits with status 1."""
        mock_engine_class.return_value.sync.side_effect = FilesystemError(
            "Failed to copy", path=Path("/dst/x")
        )

        result = runner.invoke(main, ["-c", str(config_file), "sync"])

        assert result.exit_code == 1
        assert "Sync error: Failed to copy (/dst/x)" in result.output

    @patch("pyincsync.cli.SyncEngine")
    def test_keyboard_interrupt(self, mock_engine_class, runner, config_file):
        """Test that an interrupt exits with status 130."""
        mock_engine_class.return_value.sync.side_effect = KeyboardInterrupt()

        result = runner.invoke(main, ["-c", str(config_file), "sync"])

        assert result.exit_code == 130
        assert "cancelled" in result.output


class TestStatusCommand:
    """Tests for the status command."""

    def test_status_json(self, runner, config_file, roots):
        """Test status output as JSON before and after a sync."""
        _, dst = roots

        result = runner.invoke(main, ["-c", str(config_file), "--json", "status"])

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {
                "directory": "inbox",
                "watermark": "",
                "pending": ["a.txt"],
                "pending_bytes": 12,
                "up_to_date": 0,
            }
        ]
        assert not dst.exists()

        runner.invoke(main, ["-c", str(config_file), "sync"])
        result = runner.invoke(main, ["-c", str(config_file), "--json", "status"])

        [entry] = json.loads(result.output)
        assert entry["watermark"] == "a.txt"
        assert entry["pending"] == []
        assert entry["up_to_date"] == 1

    def test_status_table(self, runner, config_file):
        """Test the human-readable status table."""
        result = runner.invoke(main, ["-c", str(config_file), "status"])

        assert result.exit_code == 0
        assert "inbox" in result.output
        assert "1 file(s) pending" in result.output

    def test_status_nothing_eligible(self, runner, tmp_path):
        """Test status when the source tree has no eligible files."""
        (tmp_path / "src" / "empty").mkdir(parents=True)
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {"SRC_DIR": str(tmp_path / "src"), "DIST_DIR": str(tmp_path / "out")}
            )
        )

        result = runner.invoke(main, ["-c", str(path), "status"])

        assert result.exit_code == 0
        assert "No eligible files found." in result.output

    @patch("pyincsync.cli.SyncEngine")
    def test_status_keyboard_interrupt(self, mock_engine_class, runner, config_file):
        """Test that an interrupt during status exits with status 130."""
        mock_engine_class.return_value.plan.side_effect = KeyboardInterrupt()

        result = runner.invoke(main, ["-c", str(config_file), "status"])

        assert result.exit_code == 130
        assert "cancelled" in result.output
