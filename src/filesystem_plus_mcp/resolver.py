"""Path resolver — client-supplied path string to canonical absolute path.

Resolution order:

1. Expand ``~``, anchor relative paths at the CWD, collapse ``..`` lexically.
2. Look up the real (symlink-resolved) path.
3. Existing path: the real path is canonical.
4. Missing path: the parent must be an existing directory; the canonical
   form is the parent's real path joined with the final name. A dangling
   symlink is followed to its target, so containment is judged on where a
   write would actually land.
5. Any other lookup failure: a plain existence check is enough to accept the
   absolute candidate as-is (e.g. drive roots that cannot be real-path'd).

Deletion resolves with ``follow_symlink=False`` so that removing a symlink
removes the link, never the tree it points to.

All calls here block on filesystem metadata; callers on an event loop run
:func:`resolve_path` in a worker thread.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import InvalidPathError
from .paths import absolute, is_platform_root

logger = logging.getLogger(__name__)


class PathState(str, Enum):
    """Outcome of probing a path's real location."""

    EXISTS = "exists"
    NOT_FOUND = "not_found"
    OTHER_ERROR = "other_error"


@dataclass(frozen=True)
class ResolvedPath:
    """Canonical form of a client path for the current request only."""

    raw_path: str
    canonical_path: Path
    existed: bool


def realpath_state(path: Path) -> tuple[PathState, Path | None]:
    """Resolve *path* strictly and classify the result.

    Returns:
        ``(EXISTS, real_path)``, ``(NOT_FOUND, None)`` or ``(OTHER_ERROR, None)``.
    """
    try:
        return PathState.EXISTS, Path(os.path.realpath(path, strict=True))
    except FileNotFoundError:
        return PathState.NOT_FOUND, None
    except (OSError, RuntimeError, ValueError):
        return PathState.OTHER_ERROR, None


def resolve_path(raw_path: str, *, follow_symlink: bool = True) -> ResolvedPath:
    """Resolve a client-supplied path to its canonical absolute form.

    Args:
        raw_path: Path as sent by the client — relative, ``~``-prefixed,
            a symlink, or a file that does not exist yet.
        follow_symlink: When false and the final component is a symlink,
            the canonical path names the link itself (real parent joined
            with the link's name) instead of its target.

    Returns:
        ResolvedPath with ``existed`` set when the path is already on disk.

    Raises:
        InvalidPathError: Empty input, missing parent directory, or an
            inaccessible path.
    """
    if not raw_path or not raw_path.strip():
        raise InvalidPathError("Path must not be empty", path=raw_path, rule="empty_path")
    if "\x00" in raw_path:
        raise InvalidPathError("Path contains a NUL byte", path=raw_path, rule="malformed_path")

    candidate = absolute(raw_path)
    if not follow_symlink and os.path.islink(candidate):
        return _resolve_link(raw_path, candidate)

    state, real = realpath_state(candidate)

    if state is PathState.EXISTS:
        return ResolvedPath(raw_path=raw_path, canonical_path=real, existed=True)

    if state is PathState.NOT_FOUND:
        return _resolve_missing(raw_path, candidate)

    if os.path.exists(candidate):
        logger.debug("Real path unavailable for %s, accepting existing absolute path", candidate)
        return ResolvedPath(raw_path=raw_path, canonical_path=candidate, existed=True)
    raise InvalidPathError(
        f"Cannot access path: {raw_path}", path=raw_path, rule="cannot_access_path",
    )


def _real_parent(raw_path: str, target: Path) -> Path:
    parent_state, parent_real = realpath_state(target.parent)
    if parent_state is not PathState.EXISTS or not os.path.isdir(parent_real):
        raise InvalidPathError(
            f"Parent directory does not exist: {raw_path}",
            path=raw_path,
            rule="parent_directory_missing",
        )
    return parent_real


def _resolve_link(raw_path: str, candidate: Path) -> ResolvedPath:
    """Canonicalize the symlink *candidate* itself, not what it points to."""
    return ResolvedPath(
        raw_path=raw_path,
        canonical_path=_real_parent(raw_path, candidate) / candidate.name,
        existed=True,
    )


def _resolve_missing(raw_path: str, candidate: Path) -> ResolvedPath:
    """Canonicalize a path that does not exist yet via its parent directory."""
    if is_platform_root(candidate):
        raise InvalidPathError(
            f"Cannot access path: {raw_path}", path=raw_path, rule="cannot_access_path",
        )

    # A dangling symlink: writing through it would create the target.
    target = candidate
    if os.path.islink(candidate):
        target = Path(os.path.realpath(candidate))

    return ResolvedPath(
        raw_path=raw_path,
        canonical_path=_real_parent(raw_path, target) / target.name,
        existed=False,
    )
