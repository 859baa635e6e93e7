"""Tests for the dotenv auto-loader."""

from __future__ import annotations

import os

from filesystem_plus_mcp.dotenv import load_dotenv, parse_dotenv


# ---------------------------------------------------------------------------
# parse_dotenv
# ---------------------------------------------------------------------------


class TestParseDotenv:
    """Unit tests for the .env file parser."""

    def test_basic_key_value(self, tmp_path):
        """GIVEN a simple KEY=VALUE line THEN it is parsed correctly."""
        env = tmp_path / ".env"
        env.write_text("FS_PLUS_LOG_LEVEL=DEBUG\n")
        assert parse_dotenv(env) == {"FS_PLUS_LOG_LEVEL": "DEBUG"}

    def test_quoted_values(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("A=\"/srv/my data\"\nB='/opt/x'\n")
        assert parse_dotenv(env) == {"A": "/srv/my data", "B": "/opt/x"}

    def test_comments_blanks_and_export(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("# comment\n\nexport KEY=val\n  # indented comment\nNO_EQUALS\n")
        assert parse_dotenv(env) == {"KEY": "val"}

    def test_comma_lists_are_kept_verbatim(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("FS_PLUS_READWRITE_DIRS=~/a,~/b\n")
        assert parse_dotenv(env) == {"FS_PLUS_READWRITE_DIRS": "~/a,~/b"}

    def test_missing_file(self, tmp_path):
        assert parse_dotenv(tmp_path / "nonexistent") == {}


# ---------------------------------------------------------------------------
# load_dotenv
# ---------------------------------------------------------------------------


class TestLoadDotenv:
    """Unit tests for env injection."""

    def test_injects_unset_keys(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FS_PLUS_TEST_KEY", "")
        env = tmp_path / ".env"
        env.write_text("FS_PLUS_TEST_KEY=from-file\n")
        injected = load_dotenv(env)
        assert injected == {"FS_PLUS_TEST_KEY": "from-file"}
        assert os.environ["FS_PLUS_TEST_KEY"] == "from-file"

    def test_process_env_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FS_PLUS_TEST_KEY", "from-process")
        env = tmp_path / ".env"
        env.write_text("FS_PLUS_TEST_KEY=from-file\n")
        assert load_dotenv(env) == {}
        assert os.environ["FS_PLUS_TEST_KEY"] == "from-process"

    def test_placeholder_is_replaced(self, tmp_path, monkeypatch):
        """GIVEN an unexpanded ${KEY} placeholder THEN the file value replaces it."""
        monkeypatch.setenv("FS_PLUS_TEST_KEY", "${FS_PLUS_TEST_KEY}")
        env = tmp_path / ".env"
        env.write_text("FS_PLUS_TEST_KEY=real\n")
        assert load_dotenv(env) == {"FS_PLUS_TEST_KEY": "real"}
        assert os.environ["FS_PLUS_TEST_KEY"] == "real"

    def test_default_placeholder_is_replaced(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FS_PLUS_TEST_KEY", "${FS_PLUS_TEST_KEY:-}")
        env = tmp_path / ".env"
        env.write_text("FS_PLUS_TEST_KEY=real\n")
        assert load_dotenv(env) == {"FS_PLUS_TEST_KEY": "real"}

    def test_blank_value_is_replaced(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FS_PLUS_TEST_KEY", "  ")
        env = tmp_path / ".env"
        env.write_text("FS_PLUS_TEST_KEY=real\n")
        assert load_dotenv(env) == {"FS_PLUS_TEST_KEY": "real"}
