"""Path normalization shared by the registry, resolver and protected-path guard.

Every trust decision compares *path keys*: the tuple of path components after
OS-level normalization and (depending on :class:`CasePolicy`) case folding.
Keys are compared component by component, so ``/data`` never matches
``/data-secret`` the way a raw string prefix would.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path, PurePath


class CasePolicy(str, Enum):
    """How path components are compared."""

    AUTO = "auto"
    SENSITIVE = "sensitive"
    INSENSITIVE = "insensitive"


PathKey = tuple[str, ...]


def path_key(path: str | PurePath, policy: CasePolicy = CasePolicy.AUTO) -> PathKey:
    """Return the comparison key for an absolute *path*.

    ``AUTO`` defers to ``os.path.normcase``: Windows folds case and unifies
    separators, POSIX compares exactly. ``INSENSITIVE`` additionally
    lower-cases on every platform; ``SENSITIVE`` only unifies separators.
    """
    raw = os.fspath(path)
    if policy is CasePolicy.SENSITIVE:
        normalized = raw.replace(os.altsep, os.sep) if os.altsep else raw
    else:
        normalized = os.path.normcase(raw)
        if policy is CasePolicy.INSENSITIVE:
            normalized = normalized.lower()
    return PurePath(normalized).parts


def is_within(key: PathKey, root_key: PathKey) -> bool:
    """True when *key* equals *root_key* or is a descendant of it."""
    return len(key) >= len(root_key) and key[: len(root_key)] == root_key


def expand_home(raw: str) -> str:
    """Expand a leading ``~`` or ``~/`` to the home directory.

    ``~user`` forms are returned unchanged.
    """
    if raw == "~":
        return str(Path.home())
    if raw.startswith("~/") or (os.sep == "\\" and raw.startswith("~\\")):
        return str(Path.home() / raw[2:])
    return raw


def absolute(raw: str) -> Path:
    """Expand ``~``, anchor at the CWD and collapse ``.``/``..`` lexically."""
    return Path(os.path.abspath(expand_home(raw)))


def is_platform_root(path: PurePath) -> bool:
    """True for ``/`` or a drive root such as ``C:\\``."""
    return path == path.parent
