"""Shared test fixtures for filesystem-plus-mcp."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from filesystem_plus_mcp.gate import Gate
from filesystem_plus_mcp.registry import DirectoryRegistry, Tier
from filesystem_plus_mcp.tools import FilesystemTools

_ENV_VARS = (
    "FS_PLUS_READWRITE_DIRS",
    "FS_PLUS_READONLY_DIRS",
    "FS_PLUS_CASE_POLICY",
    "FS_PLUS_PROTECTED_PATHS",
    "FS_PLUS_RESOLVE_TIMEOUT",
    "FS_PLUS_TREE_MAX_DEPTH",
    "FS_PLUS_SEARCH_MAX_DEPTH",
    "FS_PLUS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clear_fs_plus_env(monkeypatch):
    """Start every test without FS_PLUS_* settings from the host environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/filesystem-plus-mcp/.env."""
    monkeypatch.setattr(
        "filesystem_plus_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture()
def clean_config():
    """Reset the config singleton between tests."""
    import filesystem_plus_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@dataclass
class Sandbox:
    """A small directory layout with nested tiers.

    ::

        base/
          proj/              read-write
            app.js
            vendor/          read-only (nested inside proj)
              lib.js
          archive/           read-only
            old.txt
          outside/           not configured
            secret.txt
    """

    base: Path
    proj: Path
    vendor: Path
    archive: Path
    outside: Path
    registry: DirectoryRegistry

    def gate(self, **kwargs) -> Gate:
        return Gate(self.registry, **kwargs)

    def tools(self, **kwargs) -> FilesystemTools:
        return FilesystemTools(self.gate(), **kwargs)


@pytest.fixture()
def sandbox(tmp_path) -> Sandbox:
    """Build the :class:`Sandbox` layout under a resolved tmp_path."""
    base = tmp_path.resolve()
    proj = base / "proj"
    vendor = proj / "vendor"
    archive = base / "archive"
    outside = base / "outside"
    for d in (proj, vendor, archive, outside):
        d.mkdir(parents=True)
    (proj / "app.js").write_text("console.log('app');\n")
    (vendor / "lib.js").write_text("export const lib = 1;\n")
    (archive / "old.txt").write_text("old notes\n")
    (outside / "secret.txt").write_text("top secret\n")

    build = DirectoryRegistry.build([
        (str(proj), Tier.READ_WRITE),
        (str(vendor), Tier.READ_ONLY),
        (str(archive), Tier.READ_ONLY),
    ])
    return Sandbox(
        base=base,
        proj=proj,
        vendor=vendor,
        archive=archive,
        outside=outside,
        registry=build.registry,
    )
