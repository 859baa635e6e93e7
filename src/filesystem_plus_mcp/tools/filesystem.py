"""Filesystem tools — 13 tools bound to a gate on a mountable FastMCP sub-server.

Each tool authorizes its path arguments through the gate first and only then
hands the canonical paths to :mod:`filesystem_plus_mcp.fileops`. Tools never
raise: denials and I/O failures come back as structured ``ToolError`` dicts.
"""

from __future__ import annotations

import asyncio
import logging

from fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .. import fileops
from ..errors import make_tool_error
from ..gate import Gate
from ..models.filesystem import (
    DirectoryListing,
    EditResult,
    FileContent,
    MultiReadResult,
    RootsListing,
    SearchResult,
    WriteResult,
)
from ..paths import absolute
from ..policy import OperationKind
from ..types import (
    DestinationPath,
    DryRun,
    EditList,
    ExcludePatterns,
    FileContentParam,
    GlobPattern,
    PathList,
    PathParam,
    SourcePath,
)

logger = logging.getLogger(__name__)

_READ_ONLY = ToolAnnotations(readOnlyHint=True, openWorldHint=False)
_ADDITIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=True, openWorldHint=False)
_DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, openWorldHint=False)

_DELETED = {"directory": "directory and all contents", "symlink": "symlink"}


class FilesystemTools:
    """Tool implementations sharing one gate.

    Args:
        gate: Gate built from the startup registry.
        tree_max_depth: Depth limit for ``directory_tree``.
        search_max_depth: Depth limit for ``search_files``.
    """

    def __init__(
        self,
        gate: Gate,
        *,
        tree_max_depth: int = fileops.TREE_MAX_DEPTH,
        search_max_depth: int = fileops.SEARCH_MAX_DEPTH,
    ) -> None:
        self._gate = gate
        self._tree_max_depth = tree_max_depth
        self._search_max_depth = search_max_depth

    async def read_file(self, path: PathParam) -> dict:
        """Read the complete contents of a text file.

        Only works within allowed directories.

        Args:
            path: File to read.

        Returns:
            Dict with path and content.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.READ, path=path)
            content = await asyncio.to_thread(fileops.read_text, clearance.path())
            return FileContent(path=path, content=content).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def _read_one(self, path: str) -> FileContent:
        try:
            clearance = await self._gate.authorize(OperationKind.READ_MULTI, path=path)
            content = await asyncio.to_thread(fileops.read_text, clearance.path())
            return FileContent(path=path, content=content)
        except Exception as exc:
            return FileContent(path=path, error=make_tool_error(exc)["error"])

    async def read_multiple_files(self, paths: PathList) -> dict:
        """Read several files at once.

        Each path is checked independently; a failure on one file is reported
        in its entry and does not stop the others.

        Args:
            paths: Files to read.

        Returns:
            Dict with per-file results, success/failure counts, and a combined text view.
        """
        try:
            files = await asyncio.gather(*(self._read_one(p) for p in paths))
            blocks = [
                f"--- {f.path} (ERROR) ---\nError reading file: {f.error}" if f.error
                else f"--- {f.path} ---\n{f.content}"
                for f in files
            ]
            failed = sum(1 for f in files if f.error)
            return MultiReadResult(
                files=list(files),
                succeeded=len(files) - failed,
                failed=failed,
                text="\n\n".join(blocks),
            ).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def write_file(self, path: PathParam, content: FileContentParam) -> dict:
        """Create a new file or overwrite an existing one.

        Overwrites without warning. Blocked in read-only directories.

        Args:
            path: File to write; its parent directory must exist.
            content: Text to write.

        Returns:
            WriteResult dict.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.WRITE, path=path)
            created = await asyncio.to_thread(fileops.write_text, clearance.path(), content)
            return WriteResult(
                path=path,
                created=created,
                message=f"Successfully wrote to {path}",
            ).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def edit_file(self, path: PathParam, edits: EditList, dry_run: DryRun = False) -> dict:
        """Make exact-text edits to a file and return a git-style diff.

        Blocked in read-only directories.

        Args:
            path: File to edit.
            edits: Replacements, applied in order to the first match of each old_text.
            dry_run: When true, return the diff without writing.

        Returns:
            EditResult dict with the unified diff.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.EDIT, path=path)
            outcome = await asyncio.to_thread(
                fileops.apply_edits, clearance.path(), edits, display_path=path, dry_run=dry_run,
            )
            message = (
                "Dry run - changes that would be made" if dry_run else f"Successfully edited {path}"
            )
            return EditResult(
                path=path,
                diff=outcome.diff,
                dry_run=dry_run,
                edits_applied=outcome.edits_applied,
                message=message,
            ).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def create_directory(self, path: PathParam) -> dict:
        """Create a directory; succeeds silently if it already exists.

        The parent directory must exist. Blocked in read-only directories.

        Args:
            path: Directory to create.

        Returns:
            WriteResult dict.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.CREATE_DIR, path=path)
            created = await asyncio.to_thread(fileops.make_directory, clearance.path())
            return WriteResult(
                path=path,
                created=created,
                message=f"Successfully created directory {path}",
            ).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def list_directory(self, path: PathParam) -> dict:
        """List a directory, marking entries with [DIR] or [FILE].

        Args:
            path: Directory to list.

        Returns:
            DirectoryListing dict.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.LIST_DIR, path=path)
            entries = await asyncio.to_thread(fileops.list_directory, clearance.path())
            text = "\n".join(e.render() for e in entries) or "Directory is empty"
            return DirectoryListing(path=path, entries=entries, text=text).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def directory_tree(self, path: PathParam) -> dict:
        """Recursive tree of files and directories.

        Each node has ``name`` and ``type``; directories always carry a
        ``children`` list, files never do.

        Args:
            path: Directory at the top of the tree.

        Returns:
            Nested dict tree.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.TREE, path=path)
            tree = await asyncio.to_thread(
                fileops.directory_tree,
                clearance.path(),
                display_name=absolute(path).name or None,
                max_depth=self._tree_max_depth,
            )
            return tree.model_dump(exclude_none=True)
        except Exception as exc:
            return make_tool_error(exc)

    async def move_file(self, source: SourcePath, destination: DestinationPath) -> dict:
        """Move or rename a file or directory.

        Fails if the destination exists. Neither the source nor the
        destination may be in a read-only directory.

        Args:
            source: Path to move.
            destination: New path.

        Returns:
            WriteResult dict.
        """
        try:
            clearance = await self._gate.authorize(
                OperationKind.MOVE, source=source, destination=destination,
            )
            await asyncio.to_thread(
                fileops.move_path, clearance.path("source"), clearance.path("destination"),
            )
            return WriteResult(
                path=source,
                destination=destination,
                message=f"Successfully moved {source} to {destination}",
            ).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def copy_file(self, source: SourcePath, destination: DestinationPath) -> dict:
        """Copy a file or directory.

        Fails if the destination exists. Copying out of a read-only directory
        is allowed; copying into one is not.

        Args:
            source: Path to copy.
            destination: Path of the copy.

        Returns:
            WriteResult dict.
        """
        try:
            clearance = await self._gate.authorize(
                OperationKind.COPY, source=source, destination=destination,
            )
            await asyncio.to_thread(
                fileops.copy_path, clearance.path("source"), clearance.path("destination"),
            )
            return WriteResult(
                path=source,
                destination=destination,
                created=True,
                message=f"Successfully copied {source} to {destination}",
            ).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def search_files(
        self,
        path: PathParam,
        pattern: GlobPattern,
        exclude_patterns: ExcludePatterns = None,
    ) -> dict:
        """Recursively search for files and directories by name.

        Case-insensitive; plain text matches partial names.

        Args:
            path: Directory to search from.
            pattern: Glob or substring to match.
            exclude_patterns: Globs for names or paths to skip.

        Returns:
            SearchResult dict.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.SEARCH, path=path)
            hits = await asyncio.to_thread(
                fileops.search_paths,
                clearance.path(),
                pattern,
                exclude_patterns or [],
                display_root=path,
                max_depth=self._search_max_depth,
            )
            text = (
                "\n".join(f"{h.type}: {h.path}" for h in hits)
                if hits else f'No files found matching pattern "{pattern}" in {path}'
            )
            return SearchResult(
                path=path, pattern=pattern, matches=hits, total=len(hits), text=text,
            ).model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def get_file_info(self, path: PathParam) -> dict:
        """Size, timestamps, type and permissions of a file or directory.

        Args:
            path: Path to inspect.

        Returns:
            FileInfo dict.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.GET_INFO, path=path)
            info = await asyncio.to_thread(fileops.file_info, clearance.path(), display_path=path)
            return info.model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def delete_file(self, path: PathParam) -> dict:
        """PERMANENTLY delete a file, or a directory with all its contents.

        Cannot be undone. A symlink is removed itself; its target is left
        untouched. Blocked in read-only directories and for system paths.

        Args:
            path: File or directory to delete.

        Returns:
            WriteResult dict.
        """
        try:
            clearance = await self._gate.authorize(OperationKind.DELETE, path=path)
            kind = await asyncio.to_thread(fileops.delete_path, clearance.path())
            what = _DELETED.get(kind, "file")
            logger.info("Deleted %s %s", kind, clearance.path())
            return WriteResult(path=path, message=f"Successfully deleted {what}: {path}").model_dump()
        except Exception as exc:
            return make_tool_error(exc)

    async def list_allowed_directories(self) -> dict:
        """List the directories this server may access, each with its permission tier.

        Call this first to learn where reads and writes are possible.

        Returns:
            Dict with roots (path + tier) and a text listing.
        """
        registry = self._gate.registry
        roots = [
            {"path": str(r.canonical_path), "tier": r.tier.value}
            for r in registry.roots()
        ]
        return RootsListing(roots=roots, text=self._gate.list_roots()).model_dump()


def build_filesystem_server(tools: FilesystemTools) -> FastMCP:
    """Sub-server carrying every tool of *tools*, ready to mount on the app.

    Built per gate rather than at import time: the registry only exists
    once startup validation has run.
    """
    server = FastMCP("filesystem")
    table = [
        (tools.read_file, _READ_ONLY),
        (tools.read_multiple_files, _READ_ONLY),
        (tools.write_file, _DESTRUCTIVE),
        (tools.edit_file, _DESTRUCTIVE),
        (tools.create_directory, _ADDITIVE),
        (tools.list_directory, _READ_ONLY),
        (tools.directory_tree, _READ_ONLY),
        (tools.move_file, _DESTRUCTIVE),
        (tools.copy_file, _ADDITIVE),
        (tools.search_files, _READ_ONLY),
        (tools.get_file_info, _READ_ONLY),
        (tools.delete_file, _DESTRUCTIVE),
        (tools.list_allowed_directories, _READ_ONLY),
    ]
    for fn, annotations in table:
        server.tool(fn, name=fn.__name__, annotations=annotations)
    return server
