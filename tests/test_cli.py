"""Tests for CLI interface."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from persistent_cache.cli import app
from persistent_cache.consts import ENV_STORAGE_DETAILS

runner = CliRunner()


@pytest.fixture
def store(temp_dir: Path) -> list[str]:
    """Global options selecting a directory store in a temp dir."""
    return ["--storage-details", str(temp_dir / "store"), "--storage", "directory"]


class TestCLI:
    """Tests for the pcache commands."""

    def test_help(self) -> None:
        """Test the help text lists the commands."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "get" in result.stdout
        assert "clear" in result.stdout

    def test_set_and_get(self, store: list[str]) -> None:
        """Test a value set from the CLI can be read back."""
        result = runner.invoke(app, [*store, "set", "greeting", "hello world"])
        assert result.exit_code == 0
        assert "Stored" in result.stdout

        result = runner.invoke(app, [*store, "get", "greeting"])
        assert result.exit_code == 0
        assert "hello world" in result.stdout

    def test_get_missing(self, store: list[str]) -> None:
        """Test reading a missing key exits with 1."""
        result = runner.invoke(app, [*store, "get", "nothing"])
        assert result.exit_code == 1
        assert "No fresh value" in result.stdout

    def test_get_stale_evicts(self, store: list[str]) -> None:
        """Test a stale value is not printed and is removed."""
        old = (datetime.now(UTC) - timedelta(hours=1)).isoformat()
        runner.invoke(app, [*store, "set", "k", "v", "--timestamp", old])

        result = runner.invoke(app, [*store, "--fresh", "60", "get", "k"])
        assert result.exit_code == 1

        result = runner.invoke(app, [*store, "size"])
        assert result.stdout.strip() == "0"

    def test_never_expire(self, store: list[str]) -> None:
        """Test --never-expire returns old values."""
        old = (datetime.now(UTC) - timedelta(days=400)).isoformat()
        runner.invoke(app, [*store, "set", "k", "v", "--timestamp", old])
        result = runner.invoke(app, [*store, "--never-expire", "get", "k"])
        assert result.exit_code == 0
        assert "v" in result.stdout

    def test_age(self, store: list[str]) -> None:
        """Test age reports staleness without evicting."""
        old = (datetime.now(UTC) - timedelta(hours=2)).isoformat()
        runner.invoke(app, [*store, "set", "k", "v", "--timestamp", old])

        result = runner.invoke(app, [*store, "--fresh", "60", "age", "k"])
        assert result.exit_code == 0
        assert "stale" in result.stdout

        result = runner.invoke(app, [*store, "size"])
        assert result.stdout.strip() == "1"

    def test_age_missing(self, store: list[str]) -> None:
        """Test age of a missing key exits with 1."""
        result = runner.invoke(app, [*store, "age", "nothing"])
        assert result.exit_code == 1

    def test_invalid_timestamp(self, store: list[str]) -> None:
        """Test a malformed timestamp is rejected."""
        result = runner.invoke(app, [*store, "set", "k", "v", "--timestamp", "yesterday"])
        assert result.exit_code == 1
        assert "Invalid timestamp" in result.stdout

    def test_keys_and_size(self, store: list[str]) -> None:
        """Test keys lists entries and size counts them."""
        for key in ("one", "two", "three"):
            runner.invoke(app, [*store, "set", key, f"value {key}"])

        result = runner.invoke(app, [*store, "keys"])
        assert result.exit_code == 0
        assert result.stdout.index("one") < result.stdout.index("three") < result.stdout.index("two")

        result = runner.invoke(app, [*store, "size"])
        assert result.stdout.strip() == "3"

    def test_keys_empty(self, store: list[str]) -> None:
        """Test keys on an empty cache."""
        result = runner.invoke(app, [*store, "keys"])
        assert result.exit_code == 0
        assert "empty" in result.stdout

    def test_delete(self, store: list[str]) -> None:
        """Test delete removes a key."""
        runner.invoke(app, [*store, "set", "k", "v"])
        result = runner.invoke(app, [*store, "delete", "k"])
        assert result.exit_code == 0
        assert runner.invoke(app, [*store, "get", "k"]).exit_code == 1

    def test_clear(self, store: list[str]) -> None:
        """Test clear with --yes empties the cache."""
        runner.invoke(app, [*store, "set", "k", "v"])
        result = runner.invoke(app, [*store, "clear", "--yes"])
        assert result.exit_code == 0
        assert runner.invoke(app, [*store, "size"]).stdout.strip() == "0"

    def test_clear_aborted(self, store: list[str]) -> None:
        """Test clear asks for confirmation."""
        runner.invoke(app, [*store, "set", "k", "v"])
        result = runner.invoke(app, [*store, "clear"], input="n\n")
        assert result.exit_code != 0
        assert runner.invoke(app, [*store, "size"]).stdout.strip() == "1"

    def test_unsafe_key(self, store: list[str]) -> None:
        """Test a traversal key is reported as an error."""
        result = runner.invoke(app, [*store, "set", "../escape", "v"])
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_invalid_storage(self, temp_dir: Path) -> None:
        """Test an unknown backend is rejected."""
        result = runner.invoke(app, ["-d", str(temp_dir / "x"), "-s", "cloud", "size"])
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_sqlite_from_env(self, temp_dir: Path) -> None:
        """Test storage details can come from the environment."""
        env = {ENV_STORAGE_DETAILS: str(temp_dir / "cache.db")}
        assert runner.invoke(app, ["set", "k", "v"], env=env).exit_code == 0
        result = runner.invoke(app, ["get", "k"], env=env)
        assert result.exit_code == 0
        assert "v" in result.stdout
        assert (temp_dir / "cache.db").exists()

    def test_info(self, store: list[str]) -> None:
        """Test info shows the configuration."""
        result = runner.invoke(app, [*store, "--encoding", "utf-8", "info"])
        assert result.exit_code == 0
        assert "directory" in result.stdout
        assert "utf-8" in result.stdout
