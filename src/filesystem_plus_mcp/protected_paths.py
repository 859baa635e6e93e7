"""System-path denylist for deletions.

Runs before containment and independently of tiers: even if an operator
configures ``/`` or ``/usr`` as a read-write root, those paths can never be
deleted. Comparison is always case-insensitive so a root on a
case-insensitive volume cannot slip past with different casing.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path, PurePath

from .paths import CasePolicy, PathKey, absolute, is_platform_root, is_within, path_key

# Protected themselves and everything below them.
SYSTEM_TREES: tuple[str, ...] = (
    "/bin",
    "/boot",
    "/dev",
    "/etc",
    "/lib",
    "/lib32",
    "/lib64",
    "/proc",
    "/sbin",
    "/sys",
    "/usr",
    "/System",
    "/private/etc",
)

# Protected only as exact matches; user data commonly lives below them.
SYSTEM_DIRECTORIES: tuple[str, ...] = (
    "/Applications",
    "/Library",
    "/Users",
    "/home",
    "/opt",
    "/private",
    "/private/tmp",
    "/private/var",
    "/root",
    "/srv",
    "/tmp",
    "/var",
)


def _windows_trees() -> list[str]:
    system_root = os.environ.get("SystemRoot") or os.environ.get("windir")
    return [system_root] if system_root else []


def _windows_directories() -> list[str]:
    names = ("ProgramFiles", "ProgramFiles(x86)", "ProgramData")
    return [os.environ[name] for name in names if os.environ.get(name)]


class SystemPathGuard:
    """Decide whether a canonical path is a protected system location.

    Args:
        extra_paths: Additional operator-configured paths, protected along
            with everything below them.
    """

    def __init__(self, extra_paths: Iterable[str] = ()) -> None:
        trees = [*SYSTEM_TREES, *_windows_trees()]
        trees += [str(absolute(p)) for p in extra_paths if p.strip()]
        exact = [*SYSTEM_DIRECTORIES, *_windows_directories(), str(Path.home())]
        self._trees: tuple[PathKey, ...] = tuple(self._key(p) for p in trees)
        self._exact: frozenset[PathKey] = frozenset(self._key(p) for p in exact)

    @staticmethod
    def _key(path: str | PurePath) -> PathKey:
        return path_key(path, CasePolicy.INSENSITIVE)

    def is_protected(self, path: str | PurePath) -> bool:
        """True when deleting *path* must be refused."""
        pure = PurePath(path)
        if is_platform_root(pure):
            return True
        key = self._key(pure)
        if key in self._exact:
            return True
        return any(is_within(key, tree) for tree in self._trees)
