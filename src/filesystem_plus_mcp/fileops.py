"""Filesystem executors — blocking I/O on paths the gate has already cleared.

Every function takes canonical ``Path`` objects from a
:class:`~filesystem_plus_mcp.gate.Clearance`; none of them re-derives trust
from client input. Callers on the event loop use ``asyncio.to_thread``.
"""

from __future__ import annotations

import difflib
import logging
import os
import shutil
import stat
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from fnmatch import fnmatchcase
from pathlib import Path, PurePath

from .errors import EditMismatchError
from .models.filesystem import (
    DirectoryEntry,
    EditOperation,
    FileInfo,
    SearchHit,
    TreeNode,
)

logger = logging.getLogger(__name__)

TREE_MAX_DEPTH = 10
SEARCH_MAX_DEPTH = 20


def read_text(path: Path) -> str:
    """Read a UTF-8 text file."""
    return path.read_text(encoding="utf-8")


def write_text(path: Path, content: str) -> bool:
    """Create or overwrite *path*. Returns True when the file is new."""
    created = not path.exists()
    path.write_text(content, encoding="utf-8")
    return created


@dataclass
class EditOutcome:
    """Diff and replacement count produced by :func:`apply_edits`."""

    diff: str
    edits_applied: int


def unified_diff(original: str, modified: str, label: str) -> str:
    """Git-style unified diff between two versions of *label*."""
    lines = difflib.unified_diff(
        original.splitlines(keepends=True),
        modified.splitlines(keepends=True),
        fromfile=f"{label}\tbefore",
        tofile=f"{label}\tafter",
    )
    return "".join(line if line.endswith("\n") else line + "\n" for line in lines)


def apply_edits(
    path: Path,
    edits: Sequence[EditOperation],
    *,
    display_path: str,
    dry_run: bool = False,
) -> EditOutcome:
    """Apply exact-text replacements to *path* in order.

    Each edit replaces the first occurrence of ``old_text``. Nothing is
    written if any edit fails to match, or when *dry_run* is set.

    Raises:
        EditMismatchError: An ``old_text`` does not occur in the (partially
            edited) content.
    """
    original = read_text(path)
    modified = original
    for edit in edits:
        if edit.old_text not in modified:
            raise EditMismatchError(f"Text not found: {edit.old_text!r}")
        modified = modified.replace(edit.old_text, edit.new_text, 1)

    diff = unified_diff(original, modified, display_path)
    if not dry_run:
        path.write_text(modified, encoding="utf-8")
    return EditOutcome(diff=diff, edits_applied=len(edits))


def make_directory(path: Path) -> bool:
    """Create *path* and any missing parents. Returns True when created."""
    created = not path.is_dir()
    path.mkdir(parents=True, exist_ok=True)
    return created


def _entry_type(entry: os.DirEntry) -> str:
    return "directory" if entry.is_dir(follow_symlinks=False) else "file"


def list_directory(path: Path) -> list[DirectoryEntry]:
    """Entries of *path* sorted by name."""
    with os.scandir(path) as it:
        entries = [DirectoryEntry(name=e.name, type=_entry_type(e)) for e in it]
    return sorted(entries, key=lambda e: e.name)


def directory_tree(
    path: Path, *, display_name: str | None = None, max_depth: int = TREE_MAX_DEPTH,
) -> TreeNode:
    """Recursive tree of *path*.

    Symlinked directories appear as entries but are not descended into, so
    the walk cannot leave the directory it started in. Directories deeper
    than *max_depth* are listed with empty children.
    """
    name = display_name or path.name or str(path)
    if not path.is_dir():
        return TreeNode(name=name, type="file")
    return _tree_node(path, name, 0, max_depth)


def _tree_node(path: Path, name: str, depth: int, max_depth: int) -> TreeNode:
    children: list[TreeNode] = []
    if depth < max_depth:
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.warning("Cannot read directory %s: %s", path, exc)
            entries = []
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                children.append(_tree_node(Path(entry.path), entry.name, depth + 1, max_depth))
            else:
                children.append(TreeNode(name=entry.name, type="file"))
    return TreeNode(name=name, type="directory", children=children)


def move_path(source: Path, destination: Path) -> None:
    """Move or rename *source*; refuses to overwrite an existing destination."""
    if os.path.lexists(destination):
        raise FileExistsError(f"Destination already exists: {destination.name}")
    shutil.move(os.fspath(source), os.fspath(destination))


def copy_path(source: Path, destination: Path) -> None:
    """Copy a file or directory tree; refuses to overwrite."""
    if os.path.lexists(destination):
        raise FileExistsError(f"Destination already exists: {destination.name}")
    if source.is_dir():
        shutil.copytree(source, destination, symlinks=True)
    else:
        shutil.copy2(source, destination)


def _matches(name: str, pattern: str) -> bool:
    return fnmatchcase(name.lower(), pattern.lower())


def search_paths(
    root: Path,
    pattern: str,
    exclude_patterns: Sequence[str] = (),
    *,
    display_root: str | None = None,
    max_depth: int = SEARCH_MAX_DEPTH,
) -> list[SearchHit]:
    """Recursively find entries under *root* whose name matches *pattern*.

    Matching is case-insensitive glob on entry names. A pattern without glob
    characters matches names containing it. Exclude patterns are tested
    against both the entry name and its reported path; excluded directories
    are not descended into. Symlinked directories are never followed.

    Hit paths are reported below *display_root* (the path the client asked
    for) rather than below the canonical *root*, so a search through a
    symlinked directory does not reveal where it points.
    """
    if not any(ch in pattern for ch in "*?["):
        pattern = f"*{pattern}*"
    hits: list[SearchHit] = []
    shown = display_root if display_root is not None else str(root)
    _search(root, shown, pattern, tuple(exclude_patterns), 0, max_depth, hits)
    return hits


def _search(
    current: Path,
    shown: str,
    pattern: str,
    exclude: tuple[str, ...],
    depth: int,
    max_depth: int,
    hits: list[SearchHit],
) -> None:
    if depth > max_depth:
        return
    try:
        with os.scandir(current) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        logger.warning("Skipping unreadable directory %s: %s", current, exc)
        return

    for entry in entries:
        entry_shown = os.path.join(shown, entry.name)
        if any(_matches(entry.name, ex) or _matches(entry_shown, ex) for ex in exclude):
            continue
        is_dir = entry.is_dir(follow_symlinks=False)
        if _matches(entry.name, pattern):
            hits.append(SearchHit(type="directory" if is_dir else "file", path=entry_shown))
        if is_dir:
            _search(Path(entry.path), entry_shown, pattern, exclude, depth + 1, max_depth, hits)


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def file_info(path: Path, *, display_path: str) -> FileInfo:
    """Stat *path* and describe it."""
    st = path.stat()
    created = getattr(st, "st_birthtime", st.st_ctime)
    return FileInfo(
        path=display_path,
        name=PurePath(display_path).name or path.name,
        type="directory" if stat.S_ISDIR(st.st_mode) else "file",
        size=st.st_size,
        created=_iso(created),
        modified=_iso(st.st_mtime),
        accessed=_iso(st.st_atime),
        permissions=format(stat.S_IMODE(st.st_mode) & 0o777, "o"),
    )


def delete_path(path: Path) -> str:
    """Delete a file, a symlink, or a directory with all its contents.

    A symlink is unlinked; whatever it points to is left alone.

    Returns:
        ``"directory"``, ``"symlink"`` or ``"file"``.
    """
    if path.is_symlink():
        path.unlink()
        return "symlink"
    if path.is_dir():
        shutil.rmtree(path)
        return "directory"
    path.unlink()
    return "file"
