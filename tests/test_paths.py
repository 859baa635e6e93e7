"""Tests for path keys, home expansion and lexical normalization."""

from __future__ import annotations

import os
from pathlib import Path, PurePath

import pytest

from filesystem_plus_mcp.paths import (
    CasePolicy,
    absolute,
    expand_home,
    is_platform_root,
    is_within,
    path_key,
)

pytestmark = pytest.mark.unit


class TestPathKey:
    """Component-wise comparison keys."""

    def test_keys_are_component_tuples(self):
        key = path_key("/data/projects/app", CasePolicy.SENSITIVE)
        assert key[-3:] == ("data", "projects", "app")

    def test_insensitive_folds_case(self):
        assert path_key("/Data/Files", CasePolicy.INSENSITIVE) == path_key(
            "/data/files", CasePolicy.INSENSITIVE
        )

    def test_sensitive_preserves_case(self):
        assert path_key("/Data", CasePolicy.SENSITIVE) != path_key("/data", CasePolicy.SENSITIVE)

    @pytest.mark.skipif(os.name == "nt", reason="POSIX normcase is the identity")
    def test_auto_is_exact_on_posix(self):
        assert path_key("/Data", CasePolicy.AUTO) != path_key("/data", CasePolicy.AUTO)


class TestIsWithin:
    """Containment is decided per component, never by string prefix."""

    def test_equal_path_is_within(self):
        key = path_key("/data")
        assert is_within(key, key)

    def test_descendant_is_within(self):
        assert is_within(path_key("/data/a/b.txt"), path_key("/data"))

    def test_sibling_with_shared_prefix_is_not_within(self):
        """GIVEN /data2 and /data-secret THEN neither is inside /data."""
        assert not is_within(path_key("/data2"), path_key("/data"))
        assert not is_within(path_key("/data-secret/x"), path_key("/data"))

    def test_parent_is_not_within_child(self):
        assert not is_within(path_key("/data"), path_key("/data/sub"))


class TestExpandHome:
    """Leading tilde handling."""

    def test_bare_tilde(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_home("~") == str(Path.home())

    def test_tilde_slash(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_home("~/docs/a.txt") == str(Path.home() / "docs/a.txt")

    def test_tilde_user_unchanged(self):
        assert expand_home("~someone/docs") == "~someone/docs"

    def test_plain_path_unchanged(self):
        assert expand_home("/srv/data") == "/srv/data"


class TestAbsolute:
    """Lexical absolutization."""

    def test_relative_is_anchored_at_cwd(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert absolute("notes.txt") == Path(os.getcwd()) / "notes.txt"

    def test_dotdot_is_collapsed(self, tmp_path):
        assert absolute(str(tmp_path / "a" / ".." / "b")) == Path(os.path.abspath(tmp_path / "b"))

    def test_trailing_separator_is_dropped(self, tmp_path):
        assert absolute(str(tmp_path) + os.sep) == Path(os.path.abspath(tmp_path))


class TestIsPlatformRoot:
    def test_root(self):
        assert is_platform_root(PurePath(os.path.abspath(os.sep)))

    def test_non_root(self, tmp_path):
        assert not is_platform_root(PurePath(tmp_path))
