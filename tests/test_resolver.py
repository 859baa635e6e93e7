"""Tests for client path resolution."""

from __future__ import annotations

import os

import pytest

from filesystem_plus_mcp import resolver
from filesystem_plus_mcp.errors import InvalidPathError
from filesystem_plus_mcp.resolver import PathState, realpath_state, resolve_path

pytestmark = pytest.mark.unit

needs_symlinks = pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")


class TestExistingPaths:
    def test_existing_file(self, sandbox):
        rp = resolve_path(str(sandbox.proj / "app.js"))
        assert rp.canonical_path == sandbox.proj / "app.js"
        assert rp.existed is True

    def test_relative_path(self, sandbox, monkeypatch):
        monkeypatch.chdir(sandbox.proj)
        rp = resolve_path("app.js")
        assert rp.canonical_path == sandbox.proj / "app.js"
        assert rp.raw_path == "app.js"

    def test_dotdot_collapses_before_lookup(self, sandbox):
        rp = resolve_path(str(sandbox.vendor / ".." / "app.js"))
        assert rp.canonical_path == sandbox.proj / "app.js"

    def test_tilde(self, sandbox, monkeypatch):
        monkeypatch.setenv("HOME", str(sandbox.proj))
        assert resolve_path("~/app.js").canonical_path == sandbox.proj / "app.js"

    @needs_symlinks
    def test_symlink_resolves_to_target(self, sandbox):
        link = sandbox.proj / "escape"
        link.symlink_to(sandbox.outside / "secret.txt")
        rp = resolve_path(str(link))
        assert rp.canonical_path == sandbox.outside / "secret.txt"
        assert rp.raw_path == str(link)


class TestMissingPaths:
    def test_missing_file_with_existing_parent(self, sandbox):
        rp = resolve_path(str(sandbox.proj / "new.txt"))
        assert rp.canonical_path == sandbox.proj / "new.txt"
        assert rp.existed is False

    def test_missing_parent_is_invalid(self, sandbox):
        """GIVEN /proj/nope/file.txt THEN resolution fails naming the parent."""
        with pytest.raises(InvalidPathError) as exc_info:
            resolve_path(str(sandbox.proj / "nope" / "file.txt"))
        assert exc_info.value.rule == "parent_directory_missing"
        assert "Parent directory does not exist" in str(exc_info.value)

    def test_parent_that_is_a_file_is_invalid(self, sandbox):
        with pytest.raises(InvalidPathError):
            resolve_path(str(sandbox.proj / "app.js" / "child.txt"))

    @needs_symlinks
    def test_symlinked_parent_is_followed(self, sandbox):
        """GIVEN proj/out -> outside THEN proj/out/new.txt lands in outside."""
        (sandbox.proj / "out").symlink_to(sandbox.outside, target_is_directory=True)
        rp = resolve_path(str(sandbox.proj / "out" / "new.txt"))
        assert rp.canonical_path == sandbox.outside / "new.txt"

    @needs_symlinks
    def test_dangling_symlink_resolves_to_its_target(self, sandbox):
        link = sandbox.proj / "dangling"
        link.symlink_to(sandbox.outside / "not-yet.txt")
        rp = resolve_path(str(link))
        assert rp.canonical_path == sandbox.outside / "not-yet.txt"
        assert rp.existed is False


@needs_symlinks
class TestUnfollowedLinks:
    """Resolution of the link itself, used for deletion."""

    def test_link_resolves_to_its_own_location(self, sandbox):
        link = sandbox.proj / "out"
        link.symlink_to(sandbox.outside, target_is_directory=True)
        rp = resolve_path(str(link), follow_symlink=False)
        assert rp.canonical_path == link
        assert rp.existed is True

    def test_dangling_link_is_not_followed(self, sandbox):
        link = sandbox.proj / "dangling"
        link.symlink_to(sandbox.outside / "not-yet.txt")
        assert resolve_path(str(link), follow_symlink=False).canonical_path == link

    def test_plain_file_unaffected(self, sandbox):
        rp = resolve_path(str(sandbox.proj / "app.js"), follow_symlink=False)
        assert rp.canonical_path == sandbox.proj / "app.js"


class TestMalformedInput:
    @pytest.mark.parametrize("raw", ["", "   "])
    def test_empty(self, raw):
        with pytest.raises(InvalidPathError) as exc_info:
            resolve_path(raw)
        assert exc_info.value.rule == "empty_path"

    def test_nul_byte(self, sandbox):
        with pytest.raises(InvalidPathError) as exc_info:
            resolve_path(str(sandbox.proj) + "/a\x00b")
        assert exc_info.value.rule == "malformed_path"


class TestRealpathFailures:
    """Real-path failures other than not-found fall back to an existence check."""

    def test_missing_path_is_classified(self, tmp_path):
        assert realpath_state(tmp_path / "missing") == (PathState.NOT_FOUND, None)

    def test_other_error_on_existing_path_accepts_candidate(self, sandbox, monkeypatch):
        monkeypatch.setattr(resolver, "realpath_state", lambda p: (PathState.OTHER_ERROR, None))
        rp = resolve_path(str(sandbox.proj / "app.js"))
        assert rp.canonical_path == sandbox.proj / "app.js"
        assert rp.existed is True

    def test_other_error_on_missing_path_is_invalid(self, sandbox, monkeypatch):
        monkeypatch.setattr(resolver, "realpath_state", lambda p: (PathState.OTHER_ERROR, None))
        with pytest.raises(InvalidPathError) as exc_info:
            resolve_path(str(sandbox.proj / "ghost.txt"))
        assert exc_info.value.rule == "cannot_access_path"
